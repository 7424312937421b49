"""
mgmt_access.auth.authorizer

Required-role matcher applied after a client authenticates and its generator runs.
"""

from __future__ import annotations

from dataclasses import dataclass

from mgmt_access.auth.models import Profile


@dataclass(frozen=True, slots=True)
class RequireAnyRole:
    roles: frozenset[str]

    def is_authorized(self, profile: Profile | None) -> bool:
        # Empty required set: nothing can intersect it, so every caller is denied.
        if profile is None or not self.roles:
            return False
        return not self.roles.isdisjoint(profile.roles)

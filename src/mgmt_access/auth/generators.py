"""
mgmt_access.auth.generators

Authorization generators and default-generator selection.

Responsibilities:
- Define the closed set of generator variants that populate `Profile.roles`.
- Select the default generator for a configuration load (first matching rule wins).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from mgmt_access.auth.config import AccessConfig
from mgmt_access.auth.models import CallerContext, Profile
from mgmt_access.auth.properties import load_user_properties
from mgmt_access.observability.logging import get_logger

log = get_logger(__name__)

WILDCARD_ATTRIBUTE = "*"

# Trailing markers in a user-file value; everything else is a role.
_ENABLED = "enabled"
_DISABLED = "disabled"


@dataclass(frozen=True, slots=True)
class StaticRoles:
    """
    Grants a fixed role set to every profile it sees.
    """

    roles: frozenset[str]

    def generate(self, context: CallerContext, profile: Profile) -> Profile:
        profile.add_roles(self.roles)
        return profile


@dataclass(frozen=True, slots=True)
class AttributeDerived:
    """
    Copies the values of the named profile attributes into roles.

    `target_roles` names attributes whose values become permissions; it is
    always empty when selected from configuration.
    """

    source_attributes: tuple[str, ...]
    target_roles: tuple[str, ...] = ()

    def generate(self, context: CallerContext, profile: Profile) -> Profile:
        for name in self.source_attributes:
            profile.add_roles(_attribute_values(profile, name))
        for name in self.target_roles:
            profile.add_permissions(_attribute_values(profile, name))
        return profile


@dataclass(frozen=True, slots=True)
class PropertyFileDerived:
    """
    Looks the profile id up in a `username -> "role1,role2"` mapping.
    """

    # Sorted `(user, value)` pairs; a mapping passed in is converted so the value stays hashable.
    properties: tuple[tuple[str, str], ...] | Mapping[str, str]
    _roles_by_user: Mapping[str, tuple[str, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        items = tuple(sorted(dict(self.properties).items()))
        object.__setattr__(self, "properties", items)
        object.__setattr__(self, "_roles_by_user", MappingProxyType(_roles_by_user(dict(items))))

    def generate(self, context: CallerContext, profile: Profile) -> Profile:
        roles = self._roles_by_user.get(profile.id)
        if roles:
            profile.add_roles(roles)
        return profile

    def roles_for(self, username: str) -> tuple[str, ...]:
        return self._roles_by_user.get(username, ())

    def as_dict(self) -> dict[str, str]:
        return dict(self.properties)


AuthorizationGenerator = StaticRoles | AttributeDerived | PropertyFileDerived


def _attribute_values(profile: Profile, name: str) -> list[str]:
    value = profile.attributes.get(name)
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, Iterable):
        return [str(v) for v in value]
    return [str(value)]


def _roles_by_user(properties: Mapping[str, str]) -> dict[str, tuple[str, ...]]:
    out: dict[str, tuple[str, ...]] = {}
    for user, value in properties.items():
        parts = [p.strip() for p in value.split(",") if p.strip()]
        if not parts or parts[-1] == _DISABLED:
            continue
        if parts[-1] == _ENABLED:
            parts = parts[:-1]
        out[user] = tuple(parts)
    return out


def select_default_generator(config: AccessConfig) -> AuthorizationGenerator:
    attributes = config.authz_attributes
    if attributes:
        if WILDCARD_ATTRIBUTE in attributes:
            return StaticRoles(roles=config.admin_roles)
        return AttributeDerived(source_attributes=tuple(attributes), target_roles=())
    return PropertyFileDerived(properties=load_user_properties(config.user_properties_file))


def describe_generator(generator: AuthorizationGenerator) -> dict[str, Any]:
    # Log-safe summary; never includes property values.
    if isinstance(generator, StaticRoles):
        return {"generator": "static_roles", "roles": sorted(generator.roles)}
    if isinstance(generator, AttributeDerived):
        return {"generator": "attribute_derived", "attributes": list(generator.source_attributes)}
    return {"generator": "property_file_derived", "users": len(generator.properties)}


# --- Module Notes -----------------------------------------------------------
# Generators are frozen values so two selections over the same config compare
# equal; `Profile` is the only thing they mutate.

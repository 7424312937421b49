"""
mgmt_access.auth.models

Auth domain models.

Responsibilities:
- Define the caller context seen by authentication clients and generators.
- Define the mutable `Profile` onto which granted roles are attached.
- Define the authentication-time error hierarchy.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ClientKind(StrEnum):
    DELEGATED_CAS = "delegated_cas"
    IP_MATCH = "ip_match"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True, slots=True)
class CallerContext:
    """
    What an authentication client gets to look at for one request.
    """

    remote_addr: str = ""
    ticket: str | None = None
    service_url: str = ""


@dataclass(slots=True)
class Profile:
    """
    Authenticated caller identity. Generators add to `roles`/`permissions`; nothing removes.
    """

    id: str
    client_name: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    roles: set[str] = field(default_factory=set)
    permissions: set[str] = field(default_factory=set)

    def add_roles(self, roles: Iterable[str]) -> None:
        self.roles.update(_names(roles))

    def add_permissions(self, permissions: Iterable[str]) -> None:
        self.permissions.update(_names(permissions))


def _names(values: Iterable[str]) -> list[str]:
    # A bare string would otherwise be split into characters.
    if isinstance(values, str):
        raise TypeError("expected an iterable of names, not a str")
    return [str(v) for v in values]


class AuthenticationError(Exception):
    pass


class CasConfigurationError(AuthenticationError):
    pass


class CasTicketValidationError(AuthenticationError):
    pass

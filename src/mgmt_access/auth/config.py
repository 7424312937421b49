"""
mgmt_access.auth.config

Read-only configuration view consumed by the selection core.

Responsibilities:
- Define `AccessConfig`, a frozen snapshot of the access-related settings.
- Map `Settings` onto it (the core never reads env or Settings directly).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mgmt_access.settings import Settings


@dataclass(frozen=True, slots=True)
class AccessConfig:
    server_name: str = ""
    login_url: str = ""
    authz_ip_regex: str = ""
    admin_roles: frozenset[str] = frozenset()
    # "*" anywhere in the list means "grant admin roles unconditionally".
    authz_attributes: tuple[str, ...] = ()
    user_properties_file: Path | None = None
    mgmt_server_name: str = ""
    context_path: str = ""
    cas_http_timeout_seconds: float = 5.0

    @property
    def default_service_url(self) -> str:
        return f"{self.mgmt_server_name}{self.context_path}/manage.html"


def access_config_from_settings(settings: Settings) -> AccessConfig:
    return AccessConfig(
        server_name=settings.cas_server_name.strip(),
        login_url=settings.cas_login_url.strip(),
        authz_ip_regex=settings.authz_ip_regex.strip(),
        admin_roles=frozenset(r for r in settings.admin_roles if r),
        authz_attributes=tuple(settings.authz_attributes),
        user_properties_file=settings.user_properties_file,
        mgmt_server_name=settings.mgmt_server_name.rstrip("/"),
        context_path=settings.mgmt_context_path,
        cas_http_timeout_seconds=settings.cas_http_timeout_seconds,
    )


# --- Module Notes -----------------------------------------------------------
# Presence checks in the core use plain truthiness; `.strip()` here keeps a
# whitespace-only env value from counting as "configured".

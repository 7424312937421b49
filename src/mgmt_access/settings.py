"""
mgmt_access.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the access-control bootstrap.
- Offer a cached settings instance; clearing the cache is how a refresh re-reads env.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration for the management console:
    - Which CAS server (if any) delegates authentication
    - Which client addresses are trusted outright
    - How admin roles are granted to an authenticated caller
    """

    model_config = SettingsConfigDict(env_prefix="MGMT_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "mgmt-access"
    log_level: str = "INFO"

    # Delegated CAS authentication; an empty server name disables it.
    cas_server_name: str = ""
    cas_login_url: str = ""
    cas_http_timeout_seconds: float = Field(default=5.0, gt=0)

    # The console itself (used to build the CAS service URL).
    mgmt_server_name: str = "http://localhost:8443"
    mgmt_context_path: str = "/cas-management"

    # Authorization
    admin_roles: list[str] = Field(default_factory=lambda: ["ROLE_ADMIN"])
    authz_attributes: list[str] = Field(default_factory=list)
    authz_ip_regex: str = ""
    user_properties_file: Path | None = Path("user-details.properties")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars on every lookup; `reload_policy` clears it.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# List-valued fields are read from env as JSON, e.g.
# MGMT_ADMIN_ROLES='["ROLE_ADMIN", "ROLE_OPS"]'.

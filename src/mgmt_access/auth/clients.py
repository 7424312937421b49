"""
mgmt_access.auth.clients

Authentication client selection and per-client authentication.

Responsibilities:
- Build the ordered, never-empty client list for a configuration load.
- Authenticate a caller with one client (CAS ticket, IP match, or anonymous).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mgmt_access.auth.cas import CasTicketValidator
from mgmt_access.auth.config import AccessConfig
from mgmt_access.auth.generators import AuthorizationGenerator, StaticRoles
from mgmt_access.auth.models import (
    AuthenticationError,
    CallerContext,
    CasConfigurationError,
    ClientKind,
    Profile,
)
from mgmt_access.observability.logging import get_logger

log = get_logger(__name__)

CAS_CLIENT_NAME = "CasClient"
IP_CLIENT_NAME = "IpClient"
ANONYMOUS_CLIENT_NAME = "AnonymousClient"
ANONYMOUS_PROFILE_ID = "anonymous"


@dataclass(frozen=True, slots=True)
class AuthenticationClient:
    """
    One authentication strategy plus the generator that grants its callers roles.
    """

    name: str
    kind: ClientKind
    generator: AuthorizationGenerator
    login_url: str = ""
    ip_pattern: str = ""


def build_clients(
    config: AccessConfig, default_generator: AuthorizationGenerator
) -> tuple[AuthenticationClient, ...]:
    clients: list[AuthenticationClient] = []
    # IP-matched and anonymous callers get admin roles outright, not the default generator.
    admin_roles = StaticRoles(roles=config.admin_roles)

    if config.server_name:
        log.info("auth_client_cas", server_name=config.server_name, login_url=config.login_url)
        clients.append(
            AuthenticationClient(
                name=CAS_CLIENT_NAME,
                kind=ClientKind.DELEGATED_CAS,
                generator=default_generator,
                login_url=config.login_url,
            )
        )

    if config.authz_ip_regex:
        log.info("auth_client_ip", ip_regex=config.authz_ip_regex)
        clients.append(
            AuthenticationClient(
                name=IP_CLIENT_NAME,
                kind=ClientKind.IP_MATCH,
                generator=admin_roles,
                ip_pattern=config.authz_ip_regex,
            )
        )

    if not clients:
        log.warning(
            "auth_client_anonymous",
            detail=(
                "No authentication strategy is defined; access is granted anonymously. "
                "Configure a CAS server or an authorized IP pattern for production use."
            ),
        )
        clients.append(
            AuthenticationClient(
                name=ANONYMOUS_CLIENT_NAME,
                kind=ClientKind.ANONYMOUS,
                generator=admin_roles,
            )
        )

    return tuple(clients)


async def authenticate(
    client: AuthenticationClient,
    context: CallerContext,
    *,
    cas_validator: CasTicketValidator | None = None,
) -> Profile | None:
    """
    Returns a profile (roles not yet generated) or None when this client
    does not recognize the caller.
    """

    if client.kind is ClientKind.ANONYMOUS:
        return Profile(id=ANONYMOUS_PROFILE_ID, client_name=client.name)

    if client.kind is ClientKind.IP_MATCH:
        try:
            pattern = re.compile(client.ip_pattern)
        except re.error as e:
            raise AuthenticationError(f"Invalid IP pattern {client.ip_pattern!r}: {e}") from e
        if context.remote_addr and pattern.fullmatch(context.remote_addr):
            return Profile(id=context.remote_addr, client_name=client.name)
        return None

    if not client.login_url:
        raise CasConfigurationError(f"{client.name} has no CAS login URL")
    if not context.ticket:
        return None
    if cas_validator is None:
        raise CasConfigurationError(f"{client.name} requires a CAS ticket validator")
    profile = await cas_validator.validate(
        login_url=client.login_url,
        ticket=context.ticket,
        service_url=context.service_url,
    )
    profile.client_name = client.name
    return profile


# --- Module Notes -----------------------------------------------------------
# Neither the login URL nor the IP regex is validated at selection time; both
# fail in `authenticate`, when the client is first exercised.

"""
mgmt_access.auth.policy

Composition root for access control.

Responsibilities:
- Build an immutable `AccessPolicy` snapshot (clients + required role) from config.
- Evaluate a caller against a snapshot.
- Hold the current snapshot behind a single swappable reference for refreshes.
"""

from __future__ import annotations

from dataclasses import dataclass

from mgmt_access.auth.authorizer import RequireAnyRole
from mgmt_access.auth.cas import CasTicketValidator, login_redirect_url
from mgmt_access.auth.clients import AuthenticationClient, authenticate, build_clients
from mgmt_access.auth.config import AccessConfig, access_config_from_settings
from mgmt_access.auth.generators import (
    AuthorizationGenerator,
    describe_generator,
    select_default_generator,
)
from mgmt_access.auth.models import CallerContext, CasTicketValidationError, ClientKind, Profile
from mgmt_access.observability.logging import get_logger
from mgmt_access.settings import get_settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AccessDecision:
    profile: Profile | None
    allowed: bool
    client_name: str | None = None
    # Set when nobody authenticated and a CAS login can be offered.
    redirect_url: str | None = None


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    clients: tuple[AuthenticationClient, ...]
    required_role: RequireAnyRole
    default_generator: AuthorizationGenerator
    default_service_url: str = ""

    def client(self, name: str) -> AuthenticationClient | None:
        return next((c for c in self.clients if c.name == name), None)

    async def evaluate(
        self,
        context: CallerContext,
        *,
        cas_validator: CasTicketValidator | None = None,
    ) -> AccessDecision:
        if not context.service_url:
            context = CallerContext(
                remote_addr=context.remote_addr,
                ticket=context.ticket,
                service_url=self.default_service_url,
            )

        rejected: CasTicketValidationError | None = None
        for client in self.clients:
            try:
                profile = await authenticate(client, context, cas_validator=cas_validator)
            except CasTicketValidationError as e:
                # A stale ticket must not hide a later client (e.g. an allow-listed address).
                log.info("cas_ticket_rejected", client=client.name, error=str(e))
                rejected = e
                continue
            if profile is None:
                continue
            profile = client.generator.generate(context, profile)
            return AccessDecision(
                profile=profile,
                allowed=self.required_role.is_authorized(profile),
                client_name=client.name,
            )

        if rejected is not None:
            raise rejected

        cas = next((c for c in self.clients if c.kind is ClientKind.DELEGATED_CAS), None)
        redirect = None
        if cas is not None and cas.login_url:
            redirect = login_redirect_url(cas.login_url, context.service_url)
        return AccessDecision(profile=None, allowed=False, redirect_url=redirect)


def build_policy(config: AccessConfig) -> AccessPolicy:
    # Generator first: the CAS client is bound to it.
    generator = select_default_generator(config)
    clients = build_clients(config, generator)
    return AccessPolicy(
        clients=clients,
        required_role=RequireAnyRole(roles=config.admin_roles),
        default_generator=generator,
        default_service_url=config.default_service_url,
    )


class PolicyHolder:
    """
    Single reference to the current snapshot. Readers take `current` once per
    request; `refresh` builds the replacement fully before swapping it in.
    """

    def __init__(self, config: AccessConfig) -> None:
        self._policy = build_policy(config)

    @property
    def current(self) -> AccessPolicy:
        return self._policy

    def refresh(self, config: AccessConfig) -> AccessPolicy:
        policy = build_policy(config)
        self._policy = policy
        log.info(
            "access_policy_refreshed",
            clients=[c.name for c in policy.clients],
            admin_roles=sorted(policy.required_role.roles),
            **describe_generator(policy.default_generator),
        )
        return policy


def reload_policy(holder: PolicyHolder) -> AccessPolicy:
    # Re-read env: the cached Settings would otherwise pin the old values.
    get_settings.cache_clear()
    return holder.refresh(access_config_from_settings(get_settings()))


# --- Module Notes -----------------------------------------------------------
# No locking: snapshots are immutable and the swap is one attribute assignment.

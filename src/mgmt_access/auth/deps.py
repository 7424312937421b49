"""
mgmt_access.auth.deps

FastAPI wiring for console access control.

Responsibilities:
- Install the policy holder (and optional CAS HTTP client) on `app.state`.
- Enforce the current policy snapshot via a reusable dependency.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI, HTTPException, Request
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from mgmt_access.auth.cas import CasTicketValidator
from mgmt_access.auth.config import access_config_from_settings
from mgmt_access.auth.models import (
    AuthenticationError,
    CallerContext,
    CasTicketValidationError,
    Profile,
)
from mgmt_access.auth.policy import AccessDecision, AccessPolicy, PolicyHolder
from mgmt_access.observability.logging import get_logger
from mgmt_access.settings import Settings

log = get_logger(__name__)


def install_access_control(
    app: FastAPI,
    *,
    settings: Settings,
    http: httpx.AsyncClient | None = None,
) -> PolicyHolder:
    holder = PolicyHolder(access_config_from_settings(settings))
    app.state.access_policy = holder
    app.state.cas_http_timeout = settings.cas_http_timeout_seconds
    # A caller-owned client is reused; otherwise one is opened per ticket validation.
    app.state.cas_validator = CasTicketValidator(http=http) if http is not None else None
    return holder


def policy_from_app(request: Request) -> AccessPolicy:
    holder: PolicyHolder = request.app.state.access_policy  # type: ignore[attr-defined]
    return holder.current


async def _evaluate(request: Request, policy: AccessPolicy, context: CallerContext) -> AccessDecision:
    validator: CasTicketValidator | None = getattr(request.app.state, "cas_validator", None)
    if validator is not None or not context.ticket:
        return await policy.evaluate(context, cas_validator=validator)
    timeout = getattr(request.app.state, "cas_http_timeout", 5.0)
    async with httpx.AsyncClient(timeout=timeout) as http:
        return await policy.evaluate(context, cas_validator=CasTicketValidator(http=http))


async def require_console_admin(request: Request) -> Profile:
    # Capture the snapshot once; a concurrent refresh does not affect this request.
    policy = policy_from_app(request)
    context = CallerContext(
        remote_addr=request.client.host if request.client else "",
        ticket=request.query_params.get("ticket"),
    )

    try:
        decision = await _evaluate(request, policy, context)
    except CasTicketValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid CAS ticket: {e}") from e
    except AuthenticationError as e:
        log.error("access_control_misconfigured", error=str(e))
        raise HTTPException(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Access control misconfigured"
        ) from e

    if decision.profile is None:
        headers = {"Location": decision.redirect_url} if decision.redirect_url else None
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED, detail="Authentication required", headers=headers
        )
    if not decision.allowed:
        log.info("access_denied", profile_id=decision.profile.id, client=decision.client_name)
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
    return decision.profile


# --- Module Notes -----------------------------------------------------------
# Routes opt in with `Depends(require_console_admin)`; this package defines none.

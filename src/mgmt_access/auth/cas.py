"""
mgmt_access.auth.cas

CAS 3.0 service-ticket validation over HTTP.

Responsibilities:
- Derive the CAS endpoints from the configured login URL.
- Validate a service ticket via `p3/serviceValidate` and turn the response into a `Profile`.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from urllib.parse import urlencode

import httpx

from mgmt_access.auth.models import CasConfigurationError, CasTicketValidationError, Profile

CAS_NS = "{http://www.yale.edu/tp/cas}"


def cas_prefix_url(login_url: str) -> str:
    if not login_url:
        raise CasConfigurationError("CAS login URL is not configured")
    base = login_url.split("?", 1)[0]
    if base.endswith("/login"):
        return base[: -len("login")]
    return base if base.endswith("/") else base + "/"


def login_redirect_url(login_url: str, service_url: str) -> str:
    if not login_url:
        raise CasConfigurationError("CAS login URL is not configured")
    sep = "&" if "?" in login_url else "?"
    return f"{login_url}{sep}{urlencode({'service': service_url})}"


def parse_service_response(body: str) -> tuple[str, dict[str, list[str]]]:
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise CasTicketValidationError(f"Unreadable CAS response: {e}") from e

    failure = root.find(f"{CAS_NS}authenticationFailure")
    if failure is not None:
        code = failure.get("code", "UNKNOWN")
        raise CasTicketValidationError(f"{code}: {(failure.text or '').strip()}")

    success = root.find(f"{CAS_NS}authenticationSuccess")
    user = success.findtext(f"{CAS_NS}user") if success is not None else None
    if not user or not user.strip():
        raise CasTicketValidationError("CAS response has no authenticated user")

    attributes: dict[str, list[str]] = {}
    attrs_el = success.find(f"{CAS_NS}attributes")
    if attrs_el is not None:
        for el in attrs_el:
            # Repeated elements are how CAS encodes multi-valued attributes.
            name = el.tag.removeprefix(CAS_NS)
            attributes.setdefault(name, []).append((el.text or "").strip())
    return user.strip(), attributes


class CasTicketValidator:
    """
    Boundary to the CAS server; the only network call in the access layer.
    """

    def __init__(self, *, http: httpx.AsyncClient) -> None:
        self._http = http

    async def validate(self, *, login_url: str, ticket: str, service_url: str) -> Profile:
        url = cas_prefix_url(login_url) + "p3/serviceValidate"
        try:
            r = await self._http.get(url, params={"ticket": ticket, "service": service_url})
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise CasTicketValidationError(f"CAS validation request failed: {e}") from e

        user, attributes = parse_service_response(r.text)
        # Single values stay scalar so comma-separated values can be split downstream.
        flat = {k: v[0] if len(v) == 1 else v for k, v in attributes.items()}
        return Profile(id=user, attributes=flat)


# --- Module Notes -----------------------------------------------------------
# The httpx client (timeouts, TLS) is owned by the caller; see
# `mgmt_access.auth.deps.install_access_control`.

"""
tests.test_cas

CAS endpoint derivation, response parsing, and ticket validation over httpx.
"""

from __future__ import annotations

import httpx
import pytest

from mgmt_access.auth.cas import (
    CasTicketValidator,
    cas_prefix_url,
    login_redirect_url,
    parse_service_response,
)
from mgmt_access.auth.models import CasConfigurationError, CasTicketValidationError

LOGIN_URL = "https://cas.example.org/cas/login"
SERVICE = "https://mgmt.example.org/cas-management/manage.html"

SUCCESS = """
<cas:serviceResponse xmlns:cas="http://www.yale.edu/tp/cas">
  <cas:authenticationSuccess>
    <cas:user>alice</cas:user>
    <cas:attributes>
      <cas:memberOf>ROLE_ADMIN</cas:memberOf>
      <cas:memberOf>ROLE_OPS</cas:memberOf>
      <cas:dept>ops,dev</cas:dept>
    </cas:attributes>
  </cas:authenticationSuccess>
</cas:serviceResponse>
"""

FAILURE = """
<cas:serviceResponse xmlns:cas="http://www.yale.edu/tp/cas">
  <cas:authenticationFailure code="INVALID_TICKET">Ticket ST-1 not recognized</cas:authenticationFailure>
</cas:serviceResponse>
"""


def test_prefix_url_strips_login() -> None:
    assert cas_prefix_url(LOGIN_URL) == "https://cas.example.org/cas/"
    assert cas_prefix_url("https://cas.example.org/cas/login?renew=true") == "https://cas.example.org/cas/"
    assert cas_prefix_url("https://cas.example.org/cas") == "https://cas.example.org/cas/"


def test_prefix_url_requires_login_url() -> None:
    with pytest.raises(CasConfigurationError):
        cas_prefix_url("")


def test_login_redirect_url_carries_service() -> None:
    url = login_redirect_url(LOGIN_URL, SERVICE)
    assert url == (
        "https://cas.example.org/cas/login?service="
        "https%3A%2F%2Fmgmt.example.org%2Fcas-management%2Fmanage.html"
    )


def test_parse_success() -> None:
    user, attrs = parse_service_response(SUCCESS)
    assert user == "alice"
    assert attrs == {"memberOf": ["ROLE_ADMIN", "ROLE_OPS"], "dept": ["ops,dev"]}


def test_parse_failure_raises_with_code() -> None:
    with pytest.raises(CasTicketValidationError, match="INVALID_TICKET"):
        parse_service_response(FAILURE)


def test_parse_garbage_raises() -> None:
    with pytest.raises(CasTicketValidationError):
        parse_service_response("<html>nope")


@pytest.mark.asyncio
async def test_validator_calls_service_validate() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=SUCCESS)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        profile = await CasTicketValidator(http=http).validate(
            login_url=LOGIN_URL, ticket="ST-1", service_url=SERVICE
        )

    assert seen[0].url.path == "/cas/p3/serviceValidate"
    assert seen[0].url.params["ticket"] == "ST-1"
    assert seen[0].url.params["service"] == SERVICE
    assert profile.id == "alice"
    assert profile.attributes == {"memberOf": ["ROLE_ADMIN", "ROLE_OPS"], "dept": "ops,dev"}


@pytest.mark.asyncio
async def test_validator_wraps_http_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        with pytest.raises(CasTicketValidationError):
            await CasTicketValidator(http=http).validate(
                login_url=LOGIN_URL, ticket="ST-1", service_url=SERVICE
            )

"""
tests.conftest

Shared fixtures for access-control tests.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
import structlog

from mgmt_access.auth.config import AccessConfig


@pytest.fixture
def make_config() -> Callable[..., AccessConfig]:
    def _make(**overrides: Any) -> AccessConfig:
        values: dict[str, Any] = {
            "admin_roles": frozenset({"ROLE_ADMIN"}),
            "mgmt_server_name": "https://mgmt.example.org",
            "context_path": "/cas-management",
        }
        values.update(overrides)
        return AccessConfig(**values)

    return _make


@pytest.fixture(autouse=True)
def _reset_structlog() -> None:
    # `structlog.testing.capture_logs` restores its processors via
    # `structlog.configure`, leaving `is_configured()` True for later tests.
    structlog.reset_defaults()

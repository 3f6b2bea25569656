"""Fixtures for Cumulocity tests: a fake tenant behind httpx.MockTransport."""

from __future__ import annotations

from functools import partial
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from cumulocity.application.client_resolver import ClientResolver
from cumulocity.infrastructure.client import CumulocityClient
from shared_kernel.auth.credentials import BasicCredential
from shared_kernel.execution_mode import ExecutionMode
from shared_kernel.middleware.auth_context import AuthContextScope

TENANT_URL = "https://t1.example.com"


class FakeTenant:
    """In-memory stand-in for a Cumulocity tenant's REST API."""

    def __init__(self):
        self.routes: dict[str, tuple[int, Any]] = {
            "/user/currentUser": (200, {"userName": "jane", "email": "jane@example.com"}),
        }
        self.requests: list[httpx.Request] = []

    def reply(self, path: str, body: Any, status_code: int = 200) -> None:
        self.routes[path] = (status_code, body)

    def params(self, path: str) -> httpx.QueryParams:
        return [r for r in self.requests if r.url.path == path][-1].url.params

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, body = self.routes.get(
            request.url.path, (404, {"message": f"{request.url.path} not found"})
        )
        return httpx.Response(status_code, json=body)


@pytest.fixture
def fake_tenant() -> FakeTenant:
    return FakeTenant()


@pytest.fixture
def single_user_resolver(monkeypatch, credential_store, fake_tenant):
    """Install a single-user resolver whose clients talk to the fake tenant."""
    credential_store.save(
        BasicCredential(user="jane", password="secret", tenant_url=TENANT_URL)
    )
    resolver = ClientResolver(
        mode=ExecutionMode.SINGLE_USER,
        credential_provider=credential_store,
        auth_context=AuthContextScope(),
        authenticator=partial(
            CumulocityClient.authenticate,
            transport=httpx.MockTransport(fake_tenant),
            probe=MagicMock(),
        ),
        probe=MagicMock(),
    )
    monkeypatch.setattr("cumulocity.dependencies._client_resolver", resolver)
    return resolver

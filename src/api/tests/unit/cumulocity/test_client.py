"""Unit tests for the Cumulocity HTTP client against httpx.MockTransport."""

from __future__ import annotations

import base64
from unittest.mock import MagicMock

import httpx
import pytest

from cumulocity.domain.value_objects import AlarmStatus
from cumulocity.infrastructure.client import CumulocityClient
from cumulocity.ports.exceptions import (
    CumulocityAuthenticationError,
    CumulocityRequestError,
)
from shared_kernel.auth.credentials import BasicCredential, BearerCredential

TENANT = "https://t1.example.com"
CURRENT_USER = {"id": "jane", "userName": "jane"}


class Recorder:
    """MockTransport handler that records requests and serves canned routes."""

    def __init__(self, routes: dict[str, httpx.Response] | None = None):
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/user/currentUser" and request.url.path not in self.routes:
            return httpx.Response(200, json=CURRENT_USER)
        return self.routes.get(request.url.path, httpx.Response(404, json={}))

    def last(self, path: str) -> httpx.Request:
        return [r for r in self.requests if r.url.path == path][-1]


async def authenticated(recorder: Recorder, credential=None, probe=None):
    return await CumulocityClient.authenticate(
        credential or BasicCredential(user="jane", password="pw", tenant_url=TENANT),
        transport=httpx.MockTransport(recorder),
        probe=probe or MagicMock(),
    )


class TestAuthenticate:
    """Tests for building and verifying a client."""

    @pytest.mark.asyncio
    async def test_basic_auth_header(self) -> None:
        recorder = Recorder()

        client = await authenticated(recorder)
        await client.aclose()

        expected = base64.b64encode(b"jane:pw").decode()
        request = recorder.last("/user/currentUser")
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.url.host == "t1.example.com"
        assert client.tenant_url == TENANT

    @pytest.mark.asyncio
    async def test_bearer_auth_header(self) -> None:
        recorder = Recorder()

        client = await authenticated(
            recorder, BearerCredential(token="tok", tenant_url=TENANT)
        )
        await client.aclose()

        assert recorder.last("/user/currentUser").headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_reports_success(self) -> None:
        probe = MagicMock()

        client = await authenticated(Recorder(), probe=probe)
        await client.aclose()

        probe.authenticated.assert_called_once_with(tenant_url=TENANT, auth_scheme="basic")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403])
    async def test_rejected_credentials(self, status_code: int) -> None:
        probe = MagicMock()
        recorder = Recorder(
            {"/user/currentUser": httpx.Response(status_code, json={"message": "Bad credentials"})}
        )

        with pytest.raises(CumulocityAuthenticationError) as exc_info:
            await authenticated(recorder, probe=probe)

        assert exc_info.value.status_code == status_code
        assert "Authentication against https://t1.example.com failed" in str(exc_info.value)
        probe.authentication_failed.assert_called_once_with(
            tenant_url=TENANT, auth_scheme="basic", status_code=status_code
        )

    @pytest.mark.asyncio
    async def test_unreachable_tenant(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(CumulocityAuthenticationError, match="connection refused"):
            await CumulocityClient.authenticate(
                BasicCredential(user="u", password="p", tenant_url=TENANT),
                transport=httpx.MockTransport(refuse),
                probe=MagicMock(),
            )

    @pytest.mark.asyncio
    async def test_server_error_is_not_an_auth_error(self) -> None:
        recorder = Recorder({"/user/currentUser": httpx.Response(500, json={})})

        with pytest.raises(CumulocityRequestError) as exc_info:
            await authenticated(recorder)

        assert not isinstance(exc_info.value, CumulocityAuthenticationError)
        assert exc_info.value.status_code == 500


class TestCollections:
    """Tests for collection reads."""

    @pytest.mark.asyncio
    async def test_list_managed_objects_paging(self) -> None:
        recorder = Recorder(
            {
                "/inventory/managedObjects": httpx.Response(
                    200,
                    json={
                        "managedObjects": [{"id": "1"}, {"id": "2"}],
                        "statistics": {"currentPage": 1, "pageSize": 2, "totalPages": 5},
                    },
                )
            }
        )
        async with await authenticated(recorder) as client:
            result = await client.list_managed_objects(
                query="$filter=has(c8y_IsDevice)", page_size=2
            )

        assert [item["id"] for item in result.items] == ["1", "2"]
        assert result.paging.total_pages == 5
        assert result.paging.has_more is True
        params = recorder.last("/inventory/managedObjects").url.params
        assert params["query"] == "$filter=has(c8y_IsDevice)"
        assert params["pageSize"] == "2"
        assert params["currentPage"] == "1"
        assert params["withTotalPages"] == "true"

    @pytest.mark.asyncio
    async def test_unset_filters_are_not_sent(self) -> None:
        recorder = Recorder(
            {"/alarm/alarms": httpx.Response(200, json={"alarms": [], "statistics": {}})}
        )
        async with await authenticated(recorder) as client:
            await client.list_alarms(source="42", status=AlarmStatus.ACTIVE)

        params = recorder.last("/alarm/alarms").url.params
        assert params["source"] == "42"
        assert params["status"] == "ACTIVE"
        assert "severity" not in params
        assert "dateFrom" not in params

    @pytest.mark.asyncio
    async def test_child_references_are_unwrapped(self) -> None:
        recorder = Recorder(
            {
                "/inventory/managedObjects/7/childAdditions": httpx.Response(
                    200,
                    json={
                        "references": [
                            {"managedObject": {"id": "d1", "c8y_Dashboard": {}}},
                            {"self": "no managed object"},
                        ],
                        "statistics": {"currentPage": 1, "pageSize": 50},
                    },
                )
            }
        )
        async with await authenticated(recorder) as client:
            result = await client.list_child_additions("7")

        assert result.items == [{"id": "d1", "c8y_Dashboard": {}}]

    @pytest.mark.asyncio
    async def test_list_users_uses_current_tenant(self) -> None:
        recorder = Recorder(
            {
                "/tenant/currentTenant": httpx.Response(200, json={"name": "t12345"}),
                "/user/t12345/users": httpx.Response(
                    200, json={"users": [{"id": "jane"}], "statistics": {}}
                ),
            }
        )
        async with await authenticated(recorder) as client:
            result = await client.list_users(username="ja")

        assert result.items == [{"id": "jane"}]
        assert recorder.last("/user/t12345/users").url.params["username"] == "ja"

    @pytest.mark.asyncio
    async def test_audit_records_newest_first(self) -> None:
        recorder = Recorder(
            {
                "/audit/auditRecords": httpx.Response(
                    200, json={"auditRecords": [], "statistics": {}}
                )
            }
        )
        async with await authenticated(recorder) as client:
            await client.list_audit_records(
                date_from="2024-01-01", date_to="2024-01-31", type="Alarm"
            )

        params = recorder.last("/audit/auditRecords").url.params
        assert params["revert"] == "true"
        assert params["user"] == ""
        assert params["type"] == "Alarm"


class TestSupportedSeries:
    """Tests for reading the series a device reports."""

    @pytest.mark.asyncio
    async def test_uses_fragment_of_fetched_object(self) -> None:
        recorder = Recorder()
        device = {"id": "7", "c8y_SupportedSeries": ["c8y_Temperature.T"]}

        async with await authenticated(recorder) as client:
            series = await client.get_supported_series("7", device)

        assert series == ["c8y_Temperature.T"]
        assert all("supportedSeries" not in r.url.path for r in recorder.requests)

    @pytest.mark.asyncio
    async def test_falls_back_to_endpoint(self) -> None:
        recorder = Recorder(
            {
                "/inventory/managedObjects/7/supportedSeries": httpx.Response(
                    200, json={"c8y_SupportedSeries": ["c8y_Battery.level"]}
                )
            }
        )

        async with await authenticated(recorder) as client:
            series = await client.get_supported_series("7", {"id": "7"})

        assert series == ["c8y_Battery.level"]


class TestErrors:
    """Tests for error responses."""

    @pytest.mark.asyncio
    async def test_error_status_carries_cumulocity_message(self) -> None:
        probe = MagicMock()
        recorder = Recorder(
            {
                "/inventory/managedObjects/99": httpx.Response(
                    404,
                    json={"error": "inventory/Not Found", "message": "Finding device data from database failed"},
                )
            }
        )
        async with await authenticated(recorder, probe=probe) as client:
            with pytest.raises(CumulocityRequestError) as exc_info:
                await client.get_managed_object("99")

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == (
            "HTTP 404 Not Found: Finding device data from database failed"
        )
        probe.request_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_error_without_json_body(self) -> None:
        recorder = Recorder(
            {"/tenant/currentTenant": httpx.Response(502, text="Bad Gateway upstream")}
        )
        async with await authenticated(recorder) as client:
            with pytest.raises(CumulocityRequestError, match="HTTP 502 Bad Gateway"):
                await client.get_current_tenant()

    @pytest.mark.asyncio
    async def test_invalid_json_body(self) -> None:
        recorder = Recorder(
            {"/tenant/currentTenant": httpx.Response(200, text="<html>")}
        )
        async with await authenticated(recorder) as client:
            with pytest.raises(CumulocityRequestError, match="Invalid JSON"):
                await client.get_current_tenant()

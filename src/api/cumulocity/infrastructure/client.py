"""Async HTTP client for the Cumulocity REST API.

One client instance is bound to one tenant and one identity. Instances are
created per tool call through ``CumulocityClient.authenticate`` and closed
when the call finishes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from cumulocity.domain.value_objects import (
    AlarmSeverity,
    AlarmStatus,
    ApplicationAvailability,
    ApplicationType,
    PagingInfo,
    ResultList,
)
from cumulocity.infrastructure.observability import (
    CumulocityClientProbe,
    DefaultCumulocityClientProbe,
)
from cumulocity.ports.exceptions import (
    CumulocityAuthenticationError,
    CumulocityRequestError,
)
from shared_kernel.auth.credentials import (
    BasicCredential,
    BearerCredential,
    CredentialDescriptor,
)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_PAGE_SIZE = 50

Params = Mapping[str, Any]


class CumulocityClient:
    """Read-only Cumulocity API client over ``httpx.AsyncClient``.

    Collection reads return a ResultList built from the ``statistics``
    fragment of the response. Single-object reads return the decoded JSON.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        tenant_url: str,
        probe: CumulocityClientProbe | None = None,
    ):
        self._http = http
        self.tenant_url = tenant_url
        self._probe = probe or DefaultCumulocityClientProbe()

    @classmethod
    async def authenticate(
        cls,
        credential: CredentialDescriptor,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        probe: CumulocityClientProbe | None = None,
    ) -> CumulocityClient:
        """Create a client for the credential's tenant and verify it.

        The credentials are checked with a request for the current user.

        Args:
            credential: Identity and tenant to act as.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests use MockTransport).
            probe: Domain probe for observability.

        Returns:
            A verified client. The caller owns it and must close it.

        Raises:
            CumulocityAuthenticationError: Credentials rejected or tenant unreachable
        """
        probe = probe or DefaultCumulocityClientProbe()
        headers = {"Accept": "application/json"}
        auth: httpx.Auth | None = None

        match credential:
            case BasicCredential(user=user, password=password):
                auth = httpx.BasicAuth(user, password)
            case BearerCredential(token=token):
                headers["Authorization"] = f"Bearer {token}"

        http = httpx.AsyncClient(
            base_url=credential.tenant_url,
            auth=auth,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        client = cls(http, credential.tenant_url, probe=probe)

        try:
            await client.get_current_user()
        except CumulocityRequestError as e:
            await client.aclose()
            probe.authentication_failed(
                tenant_url=credential.tenant_url,
                auth_scheme=credential.SCHEME,
                status_code=e.status_code,
            )
            if e.status_code in (401, 403):
                raise CumulocityAuthenticationError(
                    credential.tenant_url, status_code=e.status_code, detail=str(e)
                ) from e
            if e.status_code is None:
                raise CumulocityAuthenticationError(
                    credential.tenant_url, detail=e.detail
                ) from e
            raise

        probe.authenticated(
            tenant_url=credential.tenant_url, auth_scheme=credential.SCHEME
        )
        return client

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> CumulocityClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def get(self, path: str, params: Params | None = None) -> Any:
        """GET an arbitrary API path and return the decoded JSON body."""
        return await self._request_json(path, params)

    # Inventory

    async def list_managed_objects(
        self,
        query: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> ResultList:
        return await self._list(
            "/inventory/managedObjects",
            "managedObjects",
            {"query": query},
            page_size=page_size,
            page=page,
        )

    async def get_managed_object(self, object_id: str) -> dict[str, Any]:
        return await self._request_json(f"/inventory/managedObjects/{object_id}")

    async def get_supported_series(
        self, object_id: str, managed_object: dict[str, Any] | None = None
    ) -> list[str]:
        """Return the ``fragment.series`` names a device reports.

        The ``c8y_SupportedSeries`` fragment of an already fetched
        ``managed_object`` is used when present; otherwise the
        ``supportedSeries`` endpoint is asked.
        """
        if managed_object is not None:
            series = managed_object.get("c8y_SupportedSeries")
            if series is not None:
                return list(series)
        listing = await self._request_json(
            f"/inventory/managedObjects/{object_id}/supportedSeries"
        )
        return list(listing.get("c8y_SupportedSeries") or [])

    async def list_child_assets(
        self,
        object_id: str,
        query: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> ResultList:
        return await self._list_references(
            f"/inventory/managedObjects/{object_id}/childAssets",
            {"query": query},
            page_size=page_size,
            page=page,
        )

    async def list_child_additions(
        self,
        object_id: str,
        query: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> ResultList:
        return await self._list_references(
            f"/inventory/managedObjects/{object_id}/childAdditions",
            {"query": query},
            page_size=page_size,
            page=page,
        )

    # Alarms, events, measurements

    async def list_alarms(
        self,
        source: str | None = None,
        status: AlarmStatus | None = None,
        severity: AlarmSeverity | None = None,
        type: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        resolved: bool | None = None,
        with_source_assets: bool | None = None,
        with_source_devices: bool | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> ResultList:
        return await self._list(
            "/alarm/alarms",
            "alarms",
            {
                "source": source,
                "status": status,
                "severity": severity,
                "type": type,
                "dateFrom": date_from,
                "dateTo": date_to,
                "resolved": resolved,
                "withSourceAssets": with_source_assets,
                "withSourceDevices": with_source_devices,
            },
            page_size=page_size,
            page=page,
        )

    async def list_events(
        self,
        source: str | None = None,
        type: str | None = None,
        fragment_type: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        with_source_assets: bool | None = None,
        with_source_devices: bool | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> ResultList:
        return await self._list(
            "/event/events",
            "events",
            {
                "source": source,
                "type": type,
                "fragmentType": fragment_type,
                "dateFrom": date_from,
                "dateTo": date_to,
                "withSourceAssets": with_source_assets,
                "withSourceDevices": with_source_devices,
            },
            page_size=page_size,
            page=page,
        )

    async def list_measurements(
        self,
        source: str | None = None,
        type: str | None = None,
        value_fragment_type: str | None = None,
        value_fragment_series: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        revert: bool | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> ResultList:
        return await self._list(
            "/measurement/measurements",
            "measurements",
            {
                "source": source,
                "type": type,
                "valueFragmentType": value_fragment_type,
                "valueFragmentSeries": value_fragment_series,
                "dateFrom": date_from,
                "dateTo": date_to,
                "revert": revert,
            },
            page_size=page_size,
            page=page,
        )

    # Tenant, users, audit, applications

    async def get_current_tenant(self, with_parent: bool | None = None) -> dict[str, Any]:
        return await self._request_json(
            "/tenant/currentTenant", {"withParent": with_parent}
        )

    async def get_current_user(self) -> dict[str, Any]:
        return await self._request_json("/user/currentUser")

    async def list_users(
        self,
        username: str | None = None,
        groups: str | None = None,
        only_devices: bool | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> ResultList:
        tenant = await self.get_current_tenant()
        return await self._list(
            f"/user/{tenant['name']}/users",
            "users",
            {"username": username, "groups": groups, "onlyDevices": only_devices},
            page_size=page_size,
            page=page,
        )

    async def list_audit_records(
        self,
        date_from: str,
        date_to: str,
        user: str | None = None,
        type: str | None = None,
        application: str | None = None,
        source: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        page: int = 1,
    ) -> ResultList:
        # Newest first. The user filter is always sent, empty when unset.
        return await self._list(
            "/audit/auditRecords",
            "auditRecords",
            {
                "dateFrom": date_from,
                "dateTo": date_to,
                "revert": True,
                "type": type,
                "user": user or "",
                "application": application,
                "source": source,
            },
            page_size=page_size,
            page=page,
        )

    async def list_applications(
        self,
        type: ApplicationType | None = None,
        availability: ApplicationAvailability | None = None,
        page: int | None = None,
        page_size: int = 2000,
    ) -> dict[str, Any]:
        return await self._request_json(
            "/application/applications",
            {
                "availability": availability,
                "type": type,
                "pageSize": page_size,
                "currentPage": page,
            },
        )

    async def _list(
        self,
        path: str,
        collection_key: str,
        params: Params,
        page_size: int,
        page: int,
    ) -> ResultList:
        body = await self._request_json(
            path,
            {
                **params,
                "pageSize": page_size,
                "currentPage": page,
                "withTotalPages": True,
            },
        )
        return ResultList(
            items=body.get(collection_key) or [],
            paging=PagingInfo.from_statistics(body.get("statistics")),
        )

    async def _list_references(
        self, path: str, params: Params, page_size: int, page: int
    ) -> ResultList:
        references = await self._list(
            path, "references", params, page_size=page_size, page=page
        )
        return ResultList(
            items=[ref["managedObject"] for ref in references.items if "managedObject" in ref],
            paging=references.paging,
        )

    async def _request_json(self, path: str, params: Params | None = None) -> Any:
        query = {key: value for key, value in (params or {}).items() if value is not None}
        try:
            response = await self._http.get(path, params=query)
        except httpx.HTTPError as e:
            self._probe.request_failed(path=path, status_code=None, error=str(e))
            raise CumulocityRequestError(f"Request to {path} failed: {e}") from e

        if response.is_error:
            message = _error_message(response)
            self._probe.request_failed(
                path=path, status_code=response.status_code, error=message
            )
            raise CumulocityRequestError(
                message,
                status_code=response.status_code,
                reason=response.reason_phrase,
            )

        self._probe.request_completed(path=path, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise CumulocityRequestError(f"Invalid JSON in response from {path}") from e


def _error_message(response: httpx.Response) -> str:
    """Extract Cumulocity's error message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return response.text or response.reason_phrase

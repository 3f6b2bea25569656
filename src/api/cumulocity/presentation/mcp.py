"""MCP server for the Cumulocity bounded context.

Every tool resolves a fresh authenticated client for the caller, performs
one or two reads and renders the result as text. Failures are reported to
the agent as tool errors carrying ``Error <action>: <detail>``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Annotated, Any

from fastmcp import FastMCP
from fastmcp.dependencies import Depends
from fastmcp.exceptions import ToolError
from pydantic import Field

from cumulocity.application.client_resolver import ClientResolver
from cumulocity.application.formatting import (
    error_message,
    object_response,
    paginated_response,
)
from cumulocity.dependencies import (
    get_client_resolver,
    get_prompt_repository,
    get_tool_probe,
)
from cumulocity.domain.value_objects import (
    AlarmCounts,
    AlarmSeverity,
    AlarmStatus,
    ApplicationAvailability,
    ApplicationType,
    ChildType,
    MeasurementStats,
    SupportedSeries,
)
from cumulocity.ports.exceptions import CumulocityError
from cumulocity.presentation.prompts import register_prompts
from infrastructure.settings import get_settings
from shared_kernel.auth.exceptions import AuthenticationError

settings = get_settings()

mcp = FastMCP(
    name=settings.app_name,
    instructions=get_prompt_repository().get_server_instructions(),
)
register_prompts(mcp)

READ_ONLY = {"readOnlyHint": True, "idempotentHint": True}

MEASUREMENT_STATS_SAMPLE_SIZE = 2000
EVENT_TYPES_SAMPLE_SIZE = 100

TenantUrl = Annotated[
    str | None,
    Field(
        description=(
            "Cumulocity tenant URL the call runs against, e.g. "
            "https://my-tenant.cumulocity.com. Required when credentials come "
            "from the local keyring; ignored when the server authenticates "
            "each HTTP request."
        )
    ),
]
PageSize = Annotated[
    int | None,
    Field(ge=1, le=2000, description="Results per page (default 50, max 2000)"),
]
Page = Annotated[int, Field(ge=1, description="Page number (avoid paging if possible)")]
IsoDate = Annotated[str | None, Field(description="ISO 8601 date or timestamp")]


@asynccontextmanager
async def _reported(tool_name: str, action: str) -> AsyncIterator[None]:
    """Turn domain failures inside the block into a ToolError for the agent."""
    try:
        yield
    except (AuthenticationError, CumulocityError) as e:
        get_tool_probe().tool_failed(tool_name=tool_name, action=action, error=e)
        raise ToolError(error_message(e, action)) from e


def _page_size(page_size: int | None) -> int:
    return page_size or settings.default_page_size


def _series_value(measurement: dict[str, Any], fragment: str, series: str) -> float | None:
    entry = (measurement.get(fragment) or {}).get(series)
    value = entry.get("value") if isinstance(entry, dict) else None
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return value


# Inventory


@mcp.tool(name="query-inventory", annotations=READ_ONLY)
async def query_inventory(
    query: Annotated[
        str, Field(description="OData query (see the inventory-query prompt)")
    ],
    page_size: PageSize = None,
    page: Page = 1,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Query devices, groups and assets with an OData filter."""
    async with (
        _reported("query-inventory", "querying inventory"),
        resolver.client(tenant_url) as client,
    ):
        result = await client.list_managed_objects(
            query=query, page_size=_page_size(page_size), page=page
        )
    return paginated_response(result, "Inventory", "Refine query if too many results")


@mcp.tool(name="get-object", annotations=READ_ONLY)
async def get_object(
    id: Annotated[str, Field(description="Managed object ID")],
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get a device, group, asset or any other managed object by ID."""
    async with (
        _reported("get-object", f"getting object {id}"),
        resolver.client(tenant_url) as client,
    ):
        managed_object = await client.get_managed_object(id)
    return object_response(managed_object, f"Object {id}")


@mcp.tool(name="list-children", annotations=READ_ONLY)
async def list_children(
    id: Annotated[str, Field(description="Parent object ID")],
    type: Annotated[ChildType, Field(description="Child type filter")] = ChildType.ASSET,
    page_size: PageSize = None,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """List children of a group or device.

    ``asset`` lists child assets, ``device`` only the child assets that are
    devices, and ``addition`` the child additions.
    """
    async with (
        _reported("list-children", f"listing children of {id}"),
        resolver.client(tenant_url) as client,
    ):
        match type:
            case ChildType.ADDITION:
                result = await client.list_child_additions(
                    id, page_size=_page_size(page_size)
                )
            case ChildType.DEVICE:
                result = await client.list_child_assets(
                    id, query="$filter=has(c8y_IsDevice)", page_size=_page_size(page_size)
                )
            case _:
                result = await client.list_child_assets(
                    id, page_size=_page_size(page_size)
                )
    return paginated_response(result, f"Children of {id}")


@mcp.tool(name="get-supported-series", annotations=READ_ONLY)
async def get_supported_series(
    device_id: Annotated[str, Field(description="Device ID")],
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get the measurement series a device reports."""
    async with (
        _reported("get-supported-series", f"getting supported series for {device_id}"),
        resolver.client(tenant_url) as client,
    ):
        device = await client.get_managed_object(device_id)
        raw = await client.get_supported_series(device_id, device)

    series = SupportedSeries.parse_all(raw)
    name = device.get("name")
    return object_response(
        {
            "deviceId": device_id,
            "deviceName": name,
            "supportedSeries": [asdict(s) for s in series],
            "raw": raw,
        },
        f"Supported series for {name or device_id}",
    )


# Measurements


@mcp.tool(name="get-measurements", annotations=READ_ONLY)
async def get_measurements(
    device_id: Annotated[str, Field(description="Device ID")],
    type: Annotated[str | None, Field(description="Measurement type filter")] = None,
    value_fragment_type: Annotated[
        str | None, Field(description="Fragment type, e.g. c8y_Temperature")
    ] = None,
    value_fragment_series: Annotated[
        str | None, Field(description="Series, e.g. T")
    ] = None,
    date_from: IsoDate = None,
    date_to: IsoDate = None,
    revert: Annotated[bool | None, Field(description="Newest first if true")] = None,
    page_size: PageSize = None,
    page: Page = 1,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get measurements of a device."""
    async with (
        _reported("get-measurements", f"getting measurements for {device_id}"),
        resolver.client(tenant_url) as client,
    ):
        result = await client.list_measurements(
            source=device_id,
            type=type,
            value_fragment_type=value_fragment_type,
            value_fragment_series=value_fragment_series,
            date_from=date_from,
            date_to=date_to,
            revert=revert,
            page_size=_page_size(page_size),
            page=page,
        )
    return paginated_response(result, f"Measurements for {device_id}")


@mcp.tool(name="get-measurement-stats", annotations=READ_ONLY)
async def get_measurement_stats(
    device_id: Annotated[str, Field(description="Device ID")],
    fragment: Annotated[str, Field(description="Fragment, e.g. c8y_Temperature")],
    series: Annotated[str, Field(description="Series, e.g. T")],
    date_from: Annotated[str, Field(description="ISO 8601 start of range")],
    date_to: Annotated[str, Field(description="ISO 8601 end of range")],
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get count, min, max and average of one series over a date range."""
    async with (
        _reported("get-measurement-stats", "getting measurement stats"),
        resolver.client(tenant_url) as client,
    ):
        result = await client.list_measurements(
            source=device_id,
            value_fragment_type=fragment,
            value_fragment_series=series,
            date_from=date_from,
            date_to=date_to,
            page_size=MEASUREMENT_STATS_SAMPLE_SIZE,
        )

    values = [
        value
        for measurement in result.items
        if (value := _series_value(measurement, fragment, series)) is not None
    ]
    stats = MeasurementStats.from_values(values)
    if stats is None:
        return object_response({"message": "No measurements found in range"}, "Stats")

    return object_response(
        {
            **asdict(stats),
            "fragment": fragment,
            "series": series,
            "dateFrom": date_from,
            "dateTo": date_to,
        },
        f"Stats for {fragment}.{series}",
    )


# Events


@mcp.tool(name="get-events", annotations=READ_ONLY)
async def get_events(
    device_id: Annotated[str, Field(description="Device ID")],
    type: Annotated[str | None, Field(description="Event type filter")] = None,
    fragment_type: Annotated[str | None, Field(description="Fragment type filter")] = None,
    date_from: IsoDate = None,
    date_to: IsoDate = None,
    with_source_assets: Annotated[
        bool | None, Field(description="Include events of child assets")
    ] = None,
    with_source_devices: Annotated[
        bool | None, Field(description="Include events of child devices")
    ] = None,
    page_size: PageSize = None,
    page: Page = 1,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get events of a device."""
    async with (
        _reported("get-events", f"getting events for {device_id}"),
        resolver.client(tenant_url) as client,
    ):
        result = await client.list_events(
            source=device_id,
            type=type,
            fragment_type=fragment_type,
            date_from=date_from,
            date_to=date_to,
            with_source_assets=with_source_assets,
            with_source_devices=with_source_devices,
            page_size=_page_size(page_size),
            page=page,
        )
    return paginated_response(result, f"Events for {device_id}")


@mcp.tool(name="get-event-types", annotations=READ_ONLY)
async def get_event_types(
    device_id: Annotated[str, Field(description="Device ID")],
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Discover the event types a device produced recently."""
    async with (
        _reported("get-event-types", f"getting event types for {device_id}"),
        resolver.client(tenant_url) as client,
    ):
        result = await client.list_events(
            source=device_id, page_size=EVENT_TYPES_SAMPLE_SIZE
        )

    event_types = list(dict.fromkeys(e["type"] for e in result.items if e.get("type")))
    return object_response(
        {
            "deviceId": device_id,
            "eventTypes": event_types,
            "sampleCount": len(result.items),
        },
        f"Event types for {device_id}",
    )


# Alarms


@mcp.tool(name="get-alarms", annotations=READ_ONLY)
async def get_alarms(
    device_id: Annotated[str | None, Field(description="Device ID filter")] = None,
    status: Annotated[
        AlarmStatus, Field(description="Status filter (default: ACTIVE)")
    ] = AlarmStatus.ACTIVE,
    severity: Annotated[
        AlarmSeverity | None, Field(description="Severity filter")
    ] = None,
    type: Annotated[str | None, Field(description="Alarm type filter")] = None,
    date_from: IsoDate = None,
    date_to: IsoDate = None,
    resolved: Annotated[
        bool | None, Field(description="Filter by resolved state")
    ] = None,
    with_source_assets: Annotated[
        bool | None, Field(description="Include alarms of child assets")
    ] = None,
    with_source_devices: Annotated[
        bool | None, Field(description="Include alarms of child devices")
    ] = None,
    page_size: PageSize = None,
    page: Page = 1,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get alarms, active ones by default."""
    async with (
        _reported("get-alarms", "getting alarms"),
        resolver.client(tenant_url) as client,
    ):
        result = await client.list_alarms(
            source=device_id,
            status=status,
            severity=severity,
            type=type,
            date_from=date_from,
            date_to=date_to,
            resolved=resolved,
            with_source_assets=with_source_assets,
            with_source_devices=with_source_devices,
            page_size=_page_size(page_size),
            page=page,
        )
    scope = f"device {device_id}" if device_id else "tenant"
    return paginated_response(result, f"Alarms for {scope}")


@mcp.tool(name="get-alarm-counts", annotations=READ_ONLY)
async def get_alarm_counts(
    device_id: Annotated[
        str, Field(description="Managed object ID (device, asset or group)")
    ],
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Count active alarms by severity from the inventory's alarm status fragment."""
    async with (
        _reported("get-alarm-counts", "getting alarm counts"),
        resolver.client(tenant_url) as client,
    ):
        managed_object = await client.get_managed_object(device_id)

    fragment = managed_object.get("c8y_ActiveAlarmsStatus")
    counts = AlarmCounts.from_fragment(fragment or {})
    payload: dict[str, Any] = {
        "CRITICAL": counts.critical,
        "MAJOR": counts.major,
        "MINOR": counts.minor,
        "WARNING": counts.warning,
        "total": counts.total,
        "deviceId": device_id,
    }
    if fragment is None:
        payload["note"] = "No c8y_ActiveAlarmsStatus fragment found on this managed object"
    return object_response(payload, "Alarm counts")


# Dashboards and audit


@mcp.tool(name="get-dashboards", annotations=READ_ONLY)
async def get_dashboards(
    device_id: Annotated[str, Field(description="Device or group ID")],
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get the dashboards attached to a device or group."""
    async with (
        _reported("get-dashboards", f"getting dashboards for {device_id}"),
        resolver.client(tenant_url) as client,
    ):
        result = await client.list_child_additions(
            device_id, query="$filter=has(c8y_Dashboard)", page_size=50
        )
    return paginated_response(result, f"Dashboards for {device_id}")


@mcp.tool(name="get-audit", annotations=READ_ONLY)
async def get_audit(
    date_from: Annotated[str, Field(description="ISO 8601 start of range")],
    date_to: Annotated[str, Field(description="ISO 8601 end of range")],
    user: Annotated[str | None, Field(description="Filter by username")] = None,
    type: Annotated[
        str | None, Field(description="Audit type, e.g. Operation, Alarm, User")
    ] = None,
    application: Annotated[
        str | None, Field(description="Application name, e.g. cockpit")
    ] = None,
    source: Annotated[str | None, Field(description="Source object ID")] = None,
    page_size: PageSize = None,
    page: Page = 1,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get audit records, newest first."""
    async with (
        _reported("get-audit", "getting audit logs"),
        resolver.client(tenant_url) as client,
    ):
        result = await client.list_audit_records(
            date_from=date_from,
            date_to=date_to,
            user=user,
            type=type,
            application=application,
            source=source,
            page_size=_page_size(page_size),
            page=page,
        )
    return paginated_response(result, "Audit records")


# Tenant and users


@mcp.tool(name="get-current-tenant", annotations=READ_ONLY)
async def get_current_tenant(
    with_parent: Annotated[
        bool | None, Field(description="Include the parent tenant")
    ] = None,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get information about the current tenant."""
    async with (
        _reported("get-current-tenant", "getting current tenant"),
        resolver.client(tenant_url) as client,
    ):
        tenant = await client.get_current_tenant(with_parent=with_parent)

    # Application lists are large and covered by get-applications
    tenant.pop("applications", None)
    tenant.pop("ownedApplications", None)
    return object_response(tenant, "Current tenant")


@mcp.tool(name="get-tenant-stats", annotations=READ_ONLY)
async def get_tenant_stats(
    date_from: IsoDate = None,
    date_to: IsoDate = None,
    page_size: PageSize = None,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get daily tenant usage statistics."""
    async with (
        _reported("get-tenant-stats", "getting tenant statistics"),
        resolver.client(tenant_url) as client,
    ):
        statistics = await client.get(
            "/tenant/statistics",
            {
                "pageSize": _page_size(page_size),
                "withTotalPages": True,
                "dateFrom": date_from,
                "dateTo": date_to,
            },
        )
    return object_response(statistics, "Tenant statistics")


@mcp.tool(name="get-tenant-summary", annotations=READ_ONLY)
async def get_tenant_summary(
    date_from: IsoDate = None,
    date_to: IsoDate = None,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get aggregated tenant usage over a date range."""
    async with (
        _reported("get-tenant-summary", "getting tenant summary"),
        resolver.client(tenant_url) as client,
    ):
        summary = await client.get(
            "/tenant/statistics/summary",
            {"dateFrom": date_from, "dateTo": date_to},
        )
    return object_response(summary, "Tenant summary")


@mcp.tool(name="get-current-user", annotations=READ_ONLY)
async def get_current_user(
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get the user the server acts as."""
    async with (
        _reported("get-current-user", "getting current user"),
        resolver.client(tenant_url) as client,
    ):
        user = await client.get_current_user()
    return object_response(user, "Current user")


@mcp.tool(name="get-users", annotations=READ_ONLY)
async def get_users(
    username: Annotated[
        str | None, Field(description="Filter by username prefix")
    ] = None,
    groups: Annotated[
        str | None, Field(description="Filter by group IDs (comma-separated)")
    ] = None,
    only_devices: Annotated[
        bool | None, Field(description="Only device users")
    ] = None,
    page_size: PageSize = None,
    page: Page = 1,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get users of the current tenant."""
    async with (
        _reported("get-users", "getting users"),
        resolver.client(tenant_url) as client,
    ):
        result = await client.list_users(
            username=username,
            groups=groups,
            only_devices=only_devices,
            page_size=_page_size(page_size),
            page=page,
        )
    return paginated_response(result, "Users for current tenant")


# Applications


@mcp.tool(name="get-applications", annotations=READ_ONLY)
async def get_applications(
    type: Annotated[
        ApplicationType | None,
        Field(description="HOSTED=extensions/plugins, MICROSERVICE=backend services"),
    ] = None,
    availability: Annotated[
        ApplicationAvailability | None,
        Field(description="MARKET=official, PRIVATE=custom uploaded, SHARED=shared"),
    ] = None,
    page: Annotated[int | None, Field(ge=1, description="Page number")] = None,
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get the applications available on the tenant."""
    async with (
        _reported("get-applications", "getting applications"),
        resolver.client(tenant_url) as client,
    ):
        applications = await client.list_applications(
            type=type, availability=availability, page=page
        )
    return object_response(applications, "Applications")


@mcp.tool(name="get-application", annotations=READ_ONLY)
async def get_application(
    id: Annotated[str, Field(description="Application ID")],
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get one application by ID."""
    async with (
        _reported("get-application", f"getting application {id}"),
        resolver.client(tenant_url) as client,
    ):
        application = await client.get(f"/application/applications/{id}")
    return object_response(application, f"Application {id}")


@mcp.tool(name="get-application-versions", annotations=READ_ONLY)
async def get_application_versions(
    id: Annotated[str, Field(description="Application ID")],
    tenant_url: TenantUrl = None,
    resolver: ClientResolver = Depends(get_client_resolver),
) -> str:
    """Get all versions of an application. Only HOSTED applications are versioned."""
    async with (
        _reported("get-application-versions", f"getting versions for application {id}"),
        resolver.client(tenant_url) as client,
    ):
        versions = await client.get(f"/application/applications/{id}/versions")
    return object_response(versions, f"Versions for application {id}")

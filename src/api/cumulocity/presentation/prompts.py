"""MCP prompts for the Cumulocity bounded context.

Guides are static markdown served from the prompt repository. The
remaining prompts are rendered per call: date ranges relative to now,
walkthroughs for finding and navigating devices, and summaries that read
live data (a device, its measurement series, its event types, the
caller's tenant and user) through a freshly resolved client.
"""

from collections import Counter
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Annotated, Literal

from fastmcp import FastMCP
from pydantic import Field

from cumulocity.dependencies import get_client_resolver, get_prompt_repository
from cumulocity.domain.value_objects import SupportedSeries
from cumulocity.ports.exceptions import CumulocityError
from shared_kernel.auth.exceptions import AuthenticationError

RECENT_ALARMS_SAMPLE_SIZE = 5
EVENT_TYPES_SAMPLE_SIZE = 100

TenantUrl = Annotated[
    str | None,
    Field(description="Cumulocity tenant URL (required in single-user mode)"),
]
DeviceId = Annotated[str, Field(min_length=1, description="Device ID")]

TimeRangePeriod = Literal["1h", "24h", "7d", "30d", "custom"]

MEASUREMENT_PERIODS = {
    "1h": ("Last Hour", timedelta(hours=1)),
    "24h": ("Last 24 Hours", timedelta(hours=24)),
    "7d": ("Last 7 Days", timedelta(days=7)),
    "30d": ("Last 30 Days", timedelta(days=30)),
}


def register_prompts(server: FastMCP) -> None:
    """Register every Cumulocity prompt on ``server``."""
    repository = get_prompt_repository()
    for name, description in repository.GUIDE_PROMPTS.items():
        server.prompt(_guide(name), name=name, description=description)

    server.prompt(
        datetime_guide,
        name="datetime-guide",
        description="Learn how to work with dates and time ranges in Cumulocity queries.",
    )
    server.prompt(
        calculate_date_range,
        name="calculate-date-range",
        description=(
            'Calculate ISO date ranges for a user query like "past week" or "last month".'
        ),
    )
    server.prompt(
        find_devices,
        name="find-devices",
        description="Get guidance on finding devices in the inventory.",
    )
    server.prompt(
        device_hierarchy,
        name="device-hierarchy",
        description="Understand and navigate the device and group hierarchy.",
    )
    server.prompt(
        lookup_device,
        name="lookup-device",
        description="Look up a device and see what data it provides.",
    )
    server.prompt(
        analyze_measurements,
        name="analyze-measurements",
        description="Get an analysis setup for a specific device's measurements.",
    )
    server.prompt(
        measurement_time_range,
        name="measurement-time-range",
        description="Get help with time range parameters for queries.",
    )
    server.prompt(
        device_event_types,
        name="device-event-types",
        description="Discover what event types a device generates.",
    )
    server.prompt(
        alarm_status,
        name="alarm-status",
        description="Get a current alarm status overview for a managed object.",
    )
    server.prompt(
        tenant_context,
        name="tenant-context",
        description=(
            "Get the current tenant and user. Use before any tenant-specific operations."
        ),
    )


def _guide(name: str) -> Callable[[], str]:
    def render() -> str:
        return get_prompt_repository().get_prompt(name)

    render.__name__ = name.replace("-", "_")
    return render


def _iso(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# Date ranges


def render_datetime_guide(now: datetime) -> str:
    """Render ISO 8601 date ranges relative to ``now`` (UTC)."""
    now = now.astimezone(UTC)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    month_start = today.replace(day=1)
    last_month_start = (month_start - timedelta(days=1)).replace(day=1)
    year_start = today.replace(month=1, day=1)
    last_year_start = year_start.replace(year=now.year - 1)
    last_year_end = year_start - timedelta(milliseconds=1)

    ranges = [
        ("Past 24 hours", now - timedelta(hours=24), now),
        ("Past 7 days", now - timedelta(days=7), now),
        ("Past 30 days", now - timedelta(days=30), now),
        ("Past year", now - timedelta(days=365), now),
        ("Today", today, now),
        ("Yesterday", today - timedelta(days=1), today),
        ("This week (since Monday)", today - timedelta(days=today.weekday()), now),
        ("This month", month_start, now),
        ("Last month", last_month_start, month_start),
        (f"This year ({now.year})", year_start, now),
        (f"Last year ({now.year - 1})", last_year_start, last_year_end),
    ]
    range_lines = "\n\n".join(
        f"**{label}:**\n- date_from: `{_iso(start)}`\n- date_to: `{_iso(end)}`"
        for label, start, end in ranges
    )

    return f"""# Working with Dates and Time Ranges

## Current Date/Time (UTC)
- **Today's Date**: {now.date().isoformat()}
- **Current Time**: {_iso(now)}

## ISO 8601 Format Required
All Cumulocity date parameters MUST use ISO 8601:
- Date only: `YYYY-MM-DD` (e.g. "2024-01-15")
- Date and time: `YYYY-MM-DDTHH:mm:ss.sssZ` (e.g. "2024-01-15T14:30:00.000Z")
- With offset: `YYYY-MM-DDTHH:mm:ss+HH:mm` (e.g. "2024-01-15T14:30:00+01:00")

## Common Time Ranges

{range_lines}

## Tools That Require Dates
- `get-audit`: date_from AND date_to
- `get-measurement-stats`: date_from AND date_to

Optional but recommended for `get-events`, `get-measurements`, `get-alarms`,
`get-tenant-stats` and `get-tenant-summary`.

## Best Practices
1. Use UTC unless the user names a timezone
2. Include the time component for precision
3. Default to reasonable ranges; don't query years of data without intent

Invalid: `"last week"`, `"2024/01/15"`. Valid: `"2024-01-15"`, `"2024-01-15T00:00:00.000Z"`.
"""


def datetime_guide() -> str:
    return render_datetime_guide(datetime.now(UTC))


def render_date_ranges(now: datetime) -> str:
    """Render ready-to-use ``date_from``/``date_to`` pairs ending at ``now``."""
    now = now.astimezone(UTC)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    ranges = {
        "past_24_hours": now - timedelta(hours=24),
        "past_week": now - timedelta(days=7),
        "past_month": now - timedelta(days=30),
        "past_year": now - timedelta(days=365),
        "today": today,
        "this_week": today - timedelta(days=today.weekday()),
        "this_month": today.replace(day=1),
        "this_year": today.replace(month=1, day=1),
    }
    sections = "\n\n".join(
        f"## {key.replace('_', ' ').upper()}\n"
        f"- **date_from**: `{_iso(start)}`\n"
        f"- **date_to**: `{_iso(now)}`"
        for key, start in ranges.items()
    )
    return f"""# Pre-calculated Date Ranges

Current time: {_iso(now)}

{sections}

Use these exact ISO strings in your tool calls.
"""


def calculate_date_range() -> str:
    return render_date_ranges(datetime.now(UTC))


def render_measurement_time_range(
    now: datetime, period: TimeRangePeriod | None = None
) -> str:
    now = now.astimezone(UTC)
    selected = MEASUREMENT_PERIODS.get(period) if period else None

    if selected is not None:
        label, span = selected
        body = (
            f"## Selected: {label}\n"
            f"```\ndate_from: \"{_iso(now - span)}\"\ndate_to: \"{_iso(now)}\"\n```"
        )
        example_from = now - span
    else:
        presets = "\n".join(
            f"- **{key}**: {label} (from {_iso(now - span)})"
            for key, (label, span) in MEASUREMENT_PERIODS.items()
        )
        body = f"## Available Presets\n{presets}"
        example_from = now - MEASUREMENT_PERIODS["24h"][1]

    return f"""# Time Range Query Builder

{body}

## Custom Range Format
Use ISO 8601 format: `YYYY-MM-DDTHH:mm:ss.sssZ`

Examples:
- Specific date: "2024-01-15T00:00:00.000Z"
- Date and time: "2024-01-15T14:30:00.000Z"

## Query Example
```
get-measurements(device_id="12345", date_from="{_iso(example_from)}", date_to="{_iso(now)}")
```
"""


def measurement_time_range(
    period: Annotated[
        TimeRangePeriod | None, Field(description="Preset period to calculate")
    ] = None,
) -> str:
    return render_measurement_time_range(datetime.now(UTC), period)


# Inventory


def find_devices(
    context: Annotated[
        str | None, Field(description="What kind of device are you looking for?")
    ] = None,
) -> str:
    return f"""# Finding Devices in Cumulocity

You're looking for: {context or "devices"}

## Recommended Workflow

1. **Start with a specific search:**
   Use `query-inventory` with filters to find devices.
   Example: `query-inventory(query="$filter=(name eq 'MyDevice')")`

2. **Search by name pattern:**
   Use a wildcard in the name filter.
   Example: `query-inventory(query="$filter=(name eq '*Sensor*')")`

3. **Search by capability:**
   Filter on the fragments a device carries.
   Example: `query-inventory(query="$filter=has(c8y_IsDevice)")`

4. **Navigate hierarchy:**
   Use `list-children` to explore device groups and assets.

5. **Get specific object:**
   Use `get-object(id="12345")` when you know the ID.

## Tips
- Never try to "list all": there may be thousands of devices
- Always use filters in `query-inventory`
- Use `get-supported-series` on a device to see what it measures
"""


def device_hierarchy() -> str:
    return """# Cumulocity Device Hierarchy

## Structure
```
Tenant
├── Device Group (c8y_IsDeviceGroup)
│   ├── Sub-Group
│   │   └── Device (c8y_IsDevice)
│   └── Device
├── Device Group
│   └── Asset (c8y_IsAsset)
│       └── Child Device
└── Root Device
```

## Navigation Tools

1. **query-inventory** - Find groups, e.g. `$filter=has(c8y_IsDeviceGroup) and (name eq '*Building*')`
2. **list-children** - Get children of a group or device (`type` = asset, device or addition)
3. **get-object** - Get full details of any object

## Workflow Example

1. Search for a group: `query-inventory(query="$filter=has(c8y_IsDeviceGroup) and (name eq '*Building*')")`
2. Get group children: `list-children(id="<group id>")`
3. Get device details: `get-object(id="<device id>")`
4. Check capabilities: `get-supported-series(device_id="<device id>")`

## Key Concepts
- Groups organize devices logically
- Assets represent physical things (buildings, machines)
- Devices are data sources with measurements, events and alarms
- Child relationships form the hierarchy
"""


async def lookup_device(device_id: DeviceId, tenant_url: TenantUrl = None) -> str:
    try:
        async with get_client_resolver().client(tenant_url) as client:
            device = await client.get_managed_object(device_id)
            series = await client.get_supported_series(device_id, device)
            alarms = await client.list_alarms(
                source=device_id,
                resolved=False,
                page_size=RECENT_ALARMS_SAMPLE_SIZE,
            )
    except (AuthenticationError, CumulocityError) as e:
        return f"Error looking up device: {e}"

    series_lines = "\n".join(f"- {s}" for s in series) or "No measurement series found"
    alarm_lines = (
        "\n".join(
            f"- [{alarm.get('severity')}] {alarm.get('text')}" for alarm in alarms.items
        )
        or "No active alarms"
    )
    return f"""# Device: {device.get("name") or "Unknown"} ({device_id})

## Basic Info
- Type: {device.get("type") or "N/A"}
- Owner: {device.get("owner") or "N/A"}
- Is Device: {"c8y_IsDevice" in device}

## Supported Measurements ({len(series)})
{series_lines}

## Active Alarms ({len(alarms.items)})
{alarm_lines}

## Next Steps
- `get-measurements(device_id="{device_id}", page_size=10)` for the latest values
- `get-events(device_id="{device_id}")` for recent events
- `get-alarms(device_id="{device_id}")` for alarm history
"""


# Measurements


def _series_section(device_id: str, series: list[SupportedSeries]) -> str:
    if not series:
        return "No series found. This device may not report measurements."
    return "\n\n".join(
        f"- **{s.fragment}.{s.series}**\n"
        f"  - Fragment: `{s.fragment}`\n"
        f"  - Series: `{s.series}`\n"
        f'  - Query: `get-measurements(device_id="{device_id}", '
        f'value_fragment_type="{s.fragment}", value_fragment_series="{s.series}")`'
        for s in series
    )


async def analyze_measurements(
    device_id: DeviceId, tenant_url: TenantUrl = None
) -> str:
    try:
        async with get_client_resolver().client(tenant_url) as client:
            device = await client.get_managed_object(device_id)
            series = SupportedSeries.parse_all(
                await client.get_supported_series(device_id, device)
            )
    except (AuthenticationError, CumulocityError) as e:
        return f"Error analyzing measurements: {e}"

    now = datetime.now(UTC)
    example = series[0] if series else SupportedSeries("c8y_Temperature", "T")
    return f"""# Measurement Analysis: {device.get("name") or "Unknown"}
Device ID: {device_id}

## Available Series ({len(series)})
{_series_section(device_id, series)}

## Quick Commands

### Get latest values:
```
get-measurements(device_id="{device_id}", page_size=10)
```

### Get statistics:
```
get-measurement-stats(device_id="{device_id}", fragment="{example.fragment}", series="{example.series}", date_from="{_iso(now - timedelta(days=7))}", date_to="{_iso(now)}")
```

## Time Ranges
- Last hour: date_from="{_iso(now - timedelta(hours=1))}"
- Last 24h: date_from="{_iso(now - timedelta(hours=24))}"
- Last 7d: date_from="{_iso(now - timedelta(days=7))}"
"""


# Events


async def device_event_types(device_id: DeviceId, tenant_url: TenantUrl = None) -> str:
    try:
        async with get_client_resolver().client(tenant_url) as client:
            device = await client.get_managed_object(device_id)
            events = await client.list_events(
                source=device_id, page_size=EVENT_TYPES_SAMPLE_SIZE
            )
    except (AuthenticationError, CumulocityError) as e:
        return f"Error discovering event types: {e}"

    counts = Counter(event["type"] for event in events.items if event.get("type"))
    ranked = counts.most_common()
    type_lines = (
        "\n".join(f"- **{event_type}**: {count} events" for event_type, count in ranked)
        or "No events found for this device."
    )
    if ranked:
        specific = f'```\nget-events(device_id="{device_id}", type="{ranked[0][0]}")\n```'
    else:
        specific = "No types available to query."

    return f"""# Event Types for: {device.get("name") or "Unknown"}
Device ID: {device_id}

## Found Types (from last {len(events.items)} events)
{type_lines}

## Query Specific Type
{specific}

## Get All Recent Events
```
get-events(device_id="{device_id}", page_size=20)
```
"""


# Alarms and tenant


def alarm_status(
    device_id: Annotated[
        str, Field(description="Managed object ID (device, asset, group, etc.)")
    ],
) -> str:
    return f"""# Alarm Status Overview

Active alarm counts for any managed object are kept in its
`c8y_ActiveAlarmsStatus` inventory fragment, a real-time summary by severity
(`critical`, `major`, `minor`, `warning`).

## Quick Actions

### Alarm counts for the object
```
get-alarm-counts(device_id="{device_id}")
```

### Critical alarms
```
get-alarms(status="ACTIVE", severity="CRITICAL", device_id="{device_id}")
```

### All active alarms
```
get-alarms(status="ACTIVE", device_id="{device_id}", page_size=20)
```

### By severity
```
get-alarms(severity="MAJOR", status="ACTIVE", device_id="{device_id}")
```
"""


async def tenant_context(tenant_url: TenantUrl = None) -> str:
    try:
        async with get_client_resolver().client(tenant_url) as client:
            tenant = await client.get_current_tenant(with_parent=True)
            user = await client.get_current_user()
    except (AuthenticationError, CumulocityError) as e:
        return f"Error getting tenant context: {e}"

    roles = [role["name"] for role in user.get("effectiveRoles") or [] if "name" in role]
    full_name = " ".join(
        part for part in (user.get("firstName"), user.get("lastName")) if part
    )
    return f"""# Tenant Context

## Current Tenant
- **Tenant ID**: {tenant.get("name")}
- **Domain**: {tenant.get("domainName")}
- **Parent**: {tenant.get("parent") or "none"}
- **Can Create Tenants**: {tenant.get("allowCreateTenants")}

## Current User
- **Username**: {user.get("userName")}
- **Email**: {user.get("email") or "not set"}
- **Name**: {full_name or "not set"}
- **Roles**: {", ".join(roles) or "none"}

---
Use tenant ID "{tenant.get("name")}" for any tenant-specific API calls.
"""

"""Domain value objects for the Cumulocity bounded context."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

DEFAULT_PAGE_SIZE = 20


class AlarmStatus(StrEnum):
    """Lifecycle state of an alarm."""

    ACTIVE = "ACTIVE"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    CLEARED = "CLEARED"


class AlarmSeverity(StrEnum):
    """Alarm severity, most severe first."""

    CRITICAL = "CRITICAL"
    MAJOR = "MAJOR"
    MINOR = "MINOR"
    WARNING = "WARNING"


class ChildType(StrEnum):
    """Kind of child reference to list below a managed object."""

    ASSET = "asset"
    DEVICE = "device"
    ADDITION = "addition"


class ApplicationType(StrEnum):
    """Cumulocity application types.

    HOSTED covers UI extensions and plugins, MICROSERVICE backend services.
    """

    EXTERNAL = "EXTERNAL"
    HOSTED = "HOSTED"
    MICROSERVICE = "MICROSERVICE"


class ApplicationAvailability(StrEnum):
    """Who can subscribe to an application."""

    MARKET = "MARKET"
    PRIVATE = "PRIVATE"
    SHARED = "SHARED"


@dataclass(frozen=True)
class PagingInfo:
    """Paging position of a result page.

    Attributes:
        current_page: 1-based page number.
        page_size: Requested page size.
        total_pages: Total number of pages, if the server reported it.
        total_records: Estimated number of records (pages times page size),
            or the exact count if the server reported one.
        has_more: Whether pages after this one exist.
    """

    current_page: int
    page_size: int
    total_pages: int | None = None
    total_records: int | None = None
    has_more: bool = False

    @classmethod
    def from_statistics(cls, statistics: Mapping[str, Any] | None) -> PagingInfo:
        """Build paging info from a Cumulocity ``statistics`` fragment."""
        statistics = statistics or {}
        current_page = statistics.get("currentPage") or 1
        page_size = statistics.get("pageSize") or DEFAULT_PAGE_SIZE
        total_pages = statistics.get("totalPages")

        total_records = statistics.get("totalElements")
        if total_records is None and total_pages:
            total_records = total_pages * page_size

        return cls(
            current_page=current_page,
            page_size=page_size,
            total_pages=total_pages,
            total_records=total_records,
            has_more=current_page < (total_pages or 1),
        )

    def describe(self) -> str:
        """Compact human readable summary, e.g. ``Page 1/3 of 150 (more available)``."""
        total_pages = self.total_pages if self.total_pages is not None else "?"
        total = f" of {self.total_records}" if self.total_records else ""
        more = " (more available)" if self.has_more else ""
        return f"Page {self.current_page}/{total_pages}{total}{more}"


@dataclass(frozen=True)
class ResultList:
    """One page of a Cumulocity collection."""

    items: list[dict[str, Any]]
    paging: PagingInfo


@dataclass(frozen=True)
class SupportedSeries:
    """A measurement series a device reports, split from ``fragment.series``."""

    fragment: str
    series: str

    @classmethod
    def parse(cls, value: str) -> SupportedSeries:
        fragment, _, series = value.partition(".")
        return cls(fragment=fragment, series=series)

    @classmethod
    def parse_all(cls, values: Iterable[str] | None) -> list[SupportedSeries]:
        return [cls.parse(value) for value in values or []]


@dataclass(frozen=True)
class AlarmCounts:
    """Active alarm counts per severity for one managed object."""

    critical: int = 0
    major: int = 0
    minor: int = 0
    warning: int = 0

    @property
    def total(self) -> int:
        return self.critical + self.major + self.minor + self.warning

    @classmethod
    def from_fragment(cls, fragment: Mapping[str, Any]) -> AlarmCounts:
        """Read a ``c8y_ActiveAlarmsStatus`` fragment."""
        return cls(
            critical=fragment.get("critical") or 0,
            major=fragment.get("major") or 0,
            minor=fragment.get("minor") or 0,
            warning=fragment.get("warning") or 0,
        )


@dataclass(frozen=True)
class MeasurementStats:
    """Summary statistics over a set of measurement values."""

    count: int
    min: float
    max: float
    avg: float

    @classmethod
    def from_values(cls, values: list[float]) -> MeasurementStats | None:
        """Summarize values, or return None when there are none."""
        if not values:
            return None
        return cls(
            count=len(values),
            min=min(values),
            max=max(values),
            avg=sum(values) / len(values),
        )

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence
from uuid import UUID


class Family(str, Enum):
    GROUPS = "groups"
    MEMBERS = "members"
    EVENTS = "events"
    ATTENDEES = "attendees"


# Axis names double as the suffix of the ``*_by_<axis>`` report keys.
CATEGORY = "category"
REGION = "region"
EVENT_CATEGORY = "event_category"
GROUP_CATEGORY = "group_category"
GROUP_REGION = "group_region"

FAMILY_AXES: Dict[Family, Sequence[str]] = {
    Family.GROUPS: (CATEGORY, REGION),
    Family.MEMBERS: (CATEGORY, REGION),
    Family.EVENTS: (EVENT_CATEGORY, GROUP_CATEGORY, GROUP_REGION),
    Family.ATTENDEES: (EVENT_CATEGORY, GROUP_CATEGORY, GROUP_REGION),
}


@dataclass(frozen=True)
class Fact:
    """
    One countable unit of activity (group creation, join, event, registration).

    ``labels`` only holds the axes this fact has a value for. ``timestamp`` is
    ``None`` for events without a start instant: those still count toward
    totals and breakdowns but never land in a month bucket.
    """

    timestamp: Optional[datetime]
    labels: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GroupRow:
    group_id: UUID
    category_id: Optional[UUID]
    region_id: Optional[UUID]
    created_at: datetime
    active: bool = True
    deleted: bool = False


@dataclass(frozen=True)
class MembershipRow:
    group_id: UUID
    user_id: UUID
    joined_at: datetime


@dataclass(frozen=True)
class EventRow:
    """
    Event row joined with its hosting group's category and region refs.
    """

    event_id: UUID
    group_id: UUID
    event_category_id: Optional[UUID]
    group_category_id: Optional[UUID]
    group_region_id: Optional[UUID]
    starts_at: Optional[datetime]
    published: bool = True
    canceled: bool = False
    deleted: bool = False


@dataclass(frozen=True)
class AttendeeRow:
    event_id: UUID
    user_id: UUID
    registered_at: datetime


@dataclass(frozen=True)
class CommunitySnapshot:
    """
    Every raw row scoped to one community, read in a single transaction.

    The lookups map reference ids to their display names and only contain
    entries owned by the community.
    """

    community_id: UUID
    groups: Sequence[GroupRow] = field(default_factory=tuple)
    memberships: Sequence[MembershipRow] = field(default_factory=tuple)
    events: Sequence[EventRow] = field(default_factory=tuple)
    attendees: Sequence[AttendeeRow] = field(default_factory=tuple)
    group_categories: Mapping[UUID, str] = field(default_factory=dict)
    regions: Mapping[UUID, str] = field(default_factory=dict)
    event_categories: Mapping[UUID, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.groups


@dataclass(frozen=True)
class LabelCount:
    label: str
    count: int


@dataclass(frozen=True)
class RunningTotalPoint:
    timestamp_ms: int
    cumulative: int


@dataclass(frozen=True)
class MonthCount:
    month: str
    count: int


@dataclass(frozen=True)
class AxisReport:
    """
    Breakdown of one axis: totals per label plus per-label series.

    Both mappings are keyed by label and ordered by label ascending.
    """

    axis: str
    totals: Sequence[LabelCount] = field(default_factory=tuple)
    running_total: Mapping[str, Sequence[RunningTotalPoint]] = field(default_factory=dict)
    per_month: Mapping[str, Sequence[MonthCount]] = field(default_factory=dict)


@dataclass(frozen=True)
class AggregateReport:
    total: int = 0
    running_total: Sequence[RunningTotalPoint] = field(default_factory=tuple)
    per_month: Sequence[MonthCount] = field(default_factory=tuple)
    axes: Sequence[AxisReport] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, Any]:
        """
        Flatten into the wire shape, ``total_by_<axis>`` etc. per axis.

        Pairs are emitted as 2-element lists so the document serializes to the
        same JSON regardless of the encoder.
        """

        payload: Dict[str, Any] = {
            "total": self.total,
            "running_total": _serialize_running_total(self.running_total),
            "per_month": _serialize_per_month(self.per_month),
        }
        for axis_report in self.axes:
            axis = axis_report.axis
            payload[f"total_by_{axis}"] = [[item.label, item.count] for item in axis_report.totals]
            payload[f"running_total_by_{axis}"] = {
                label: _serialize_running_total(series)
                for label, series in axis_report.running_total.items()
            }
            payload[f"per_month_by_{axis}"] = {
                label: _serialize_per_month(series)
                for label, series in axis_report.per_month.items()
            }
        return {key: payload[key] for key in sorted(payload)}


@dataclass(frozen=True)
class CommunityStats:
    groups: AggregateReport
    members: AggregateReport
    events: AggregateReport
    attendees: AggregateReport

    def as_dict(self) -> Dict[str, Any]:
        return {
            "attendees": self.attendees.as_dict(),
            "events": self.events.as_dict(),
            "groups": self.groups.as_dict(),
            "members": self.members.as_dict(),
        }


@dataclass(frozen=True)
class GroupStats:
    members: AggregateReport
    events: AggregateReport
    attendees: AggregateReport

    def as_dict(self) -> Dict[str, Any]:
        return {
            "attendees": self.attendees.as_dict(),
            "events": self.events.as_dict(),
            "members": self.members.as_dict(),
        }


def _serialize_running_total(series: Sequence[RunningTotalPoint]) -> list:
    return [[point.timestamp_ms, point.cumulative] for point in series]


def _serialize_per_month(series: Sequence[MonthCount]) -> list:
    return [[point.month, point.count] for point in series]

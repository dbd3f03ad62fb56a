from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, time, timezone
from typing import Callable, Optional
from uuid import UUID

from .bucketing import aggregate
from .extractor import FactExtractor
from .models import FAMILY_AXES, AggregateReport, CommunitySnapshot, CommunityStats, Family, GroupStats
from .repository import StatsDataRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _months_before(day: date, months: int) -> date:
    """Calendar subtraction; the day is clamped to the target month's length."""
    index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def empty_family_report(family: Family) -> AggregateReport:
    return aggregate((), FAMILY_AXES[family])


def empty_community_stats() -> CommunityStats:
    return CommunityStats(
        groups=empty_family_report(Family.GROUPS),
        members=empty_family_report(Family.MEMBERS),
        events=empty_family_report(Family.EVENTS),
        attendees=empty_family_report(Family.ATTENDEES),
    )


def empty_group_stats() -> GroupStats:
    return GroupStats(members=AggregateReport(), events=AggregateReport(), attendees=AggregateReport())


class CommunityStatsService:
    """
    Assemble the community (and single group) statistics documents.

    Each call loads one snapshot from the repository and runs the bucketing
    engine once per family. Nothing is cached between calls; store errors
    propagate to the caller untouched.
    """

    def __init__(
        self,
        repository: StatsDataRepository,
        per_month_window_months: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.repository = repository
        self.per_month_window_months = per_month_window_months
        self.clock = clock

    def build_report(self, community_id: UUID) -> CommunityStats:
        snapshot = self.repository.load(community_id)
        return self.build_report_from_snapshot(snapshot)

    def build_report_from_snapshot(self, snapshot: CommunitySnapshot) -> CommunityStats:
        if snapshot.is_empty():
            logger.info("Community %s has no groups; returning empty statistics.", snapshot.community_id)
            return empty_community_stats()

        extractor = FactExtractor(snapshot)
        since = self.per_month_since()
        reports = {}
        for family in Family:
            facts = extractor.extract(family)
            logger.debug("Community %s: %d %s facts", snapshot.community_id, len(facts), family.value)
            reports[family] = aggregate(facts, FAMILY_AXES[family], per_month_since=since)

        return CommunityStats(
            groups=reports[Family.GROUPS],
            members=reports[Family.MEMBERS],
            events=reports[Family.EVENTS],
            attendees=reports[Family.ATTENDEES],
        )

    def build_group_report(self, community_id: UUID, group_id: UUID) -> GroupStats:
        snapshot = self.repository.load(community_id)
        extractor = FactExtractor(snapshot)
        if group_id not in extractor.eligible_groups(group_id):
            logger.info("Group %s is not an eligible group of community %s.", group_id, community_id)
            return empty_group_stats()

        since = self.per_month_since()
        members, events, attendees = (
            aggregate(extractor.extract(family, group_id=group_id), (), per_month_since=since)
            for family in (Family.MEMBERS, Family.EVENTS, Family.ATTENDEES)
        )
        return GroupStats(members=members, events=events, attendees=attendees)

    def per_month_since(self) -> Optional[datetime]:
        """
        Start of the per-month window, or ``None`` for the whole history.

        The window starts at UTC midnight of today's date minus the configured
        number of months.
        """

        if not self.per_month_window_months:
            return None
        today = self.clock().astimezone(timezone.utc).date()
        start = _months_before(today, self.per_month_window_months)
        return datetime.combine(start, time.min, tzinfo=timezone.utc)

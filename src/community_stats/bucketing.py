"""
Month bucketing of facts into totals, breakdowns and sparse time series.

Every series is sparse: a month with no facts yields no point. Running totals
carry ``[epoch_millis_of_month_start, cumulative]`` and per-month series carry
``["YYYY-MM", count]``. Months are UTC calendar months of each fact's own
timestamp; nothing here looks at the current time.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import AggregateReport, AxisReport, Fact, LabelCount, MonthCount, RunningTotalPoint

LabelGetter = Callable[[Fact, str], Optional[str]]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _fact_label(fact: Fact, axis: str) -> Optional[str]:
    return fact.labels.get(axis)


def to_utc(value: datetime) -> datetime:
    """Naive datetimes are read as UTC, aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def month_start(value: datetime) -> datetime:
    return to_utc(value).replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def epoch_millis(value: datetime) -> int:
    return (to_utc(value) - EPOCH) // timedelta(milliseconds=1)


def month_label(value: datetime) -> str:
    month = month_start(value)
    return f"{month.year:04d}-{month.month:02d}"


def _month_counts(facts: Iterable[Fact], since: Optional[datetime] = None) -> List[Tuple[datetime, int]]:
    counts: Counter = Counter()
    for fact in facts:
        if fact.timestamp is None:
            continue
        if since is not None and to_utc(fact.timestamp) < since:
            continue
        counts[month_start(fact.timestamp)] += 1
    return sorted(counts.items())


def running_total(facts: Iterable[Fact]) -> List[RunningTotalPoint]:
    points: List[RunningTotalPoint] = []
    cumulative = 0
    for month, count in _month_counts(facts):
        cumulative += count
        points.append(RunningTotalPoint(timestamp_ms=epoch_millis(month), cumulative=cumulative))
    return points


def per_month(facts: Iterable[Fact], since: Optional[datetime] = None) -> List[MonthCount]:
    return [MonthCount(month=month_label(month), count=count) for month, count in _month_counts(facts, since)]


def aggregate(
    facts: Iterable[Fact],
    axes: Sequence[str],
    per_month_since: Optional[datetime] = None,
    label_of: LabelGetter = _fact_label,
) -> AggregateReport:
    """
    Aggregate ``facts`` overall and, independently, per label on each axis.

    ``per_month_since`` drops facts older than the cutoff from the per-month
    series only; totals, breakdowns and running totals keep the full history.
    ``label_of`` reads a fact's label on an axis and defaults to its label map.
    """

    facts = list(facts)
    since = to_utc(per_month_since) if per_month_since is not None else None
    return AggregateReport(
        total=len(facts),
        running_total=tuple(running_total(facts)),
        per_month=tuple(per_month(facts, since)),
        axes=tuple(_aggregate_axis(facts, axis, since, label_of) for axis in axes),
    )


def _aggregate_axis(
    facts: Sequence[Fact],
    axis: str,
    since: Optional[datetime],
    label_of: LabelGetter,
) -> AxisReport:
    by_label: Dict[str, List[Fact]] = defaultdict(list)
    for fact in facts:
        label = label_of(fact, axis)
        if label is not None:
            by_label[label].append(fact)

    totals: List[LabelCount] = []
    running: Dict[str, Tuple[RunningTotalPoint, ...]] = {}
    monthly: Dict[str, Tuple[MonthCount, ...]] = {}
    for label in sorted(by_label):
        subset = by_label[label]
        totals.append(LabelCount(label=label, count=len(subset)))
        series = running_total(subset)
        if series:
            running[label] = tuple(series)
        months = per_month(subset, since)
        if months:
            monthly[label] = tuple(months)

    return AxisReport(axis=axis, totals=tuple(totals), running_total=running, per_month=monthly)

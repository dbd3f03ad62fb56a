"""
Community analytics aggregation.

Given a community id, this package reads the community's groups, memberships,
events and attendee registrations and emits the time-bucketed statistics
document rendered by the dashboard analytics page.
"""

from .bucketing import aggregate  # noqa: F401
from .dimensions import DimensionResolver  # noqa: F401
from .extractor import FactExtractor, extract  # noqa: F401
from .models import (  # noqa: F401
    AggregateReport,
    AttendeeRow,
    AxisReport,
    CommunitySnapshot,
    CommunityStats,
    EventRow,
    Fact,
    Family,
    GroupRow,
    GroupStats,
    LabelCount,
    MembershipRow,
    MonthCount,
    RunningTotalPoint,
)
from .repository import (  # noqa: F401
    InMemoryStatsRepository,
    RepositoryConfig,
    SQLStatsRepository,
    StatsDataRepository,
    build_repository_from_env,
)
from .service import CommunityStatsService, empty_community_stats  # noqa: F401

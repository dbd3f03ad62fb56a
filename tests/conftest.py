# tests/conftest.py
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from community_stats.repository import SQLStatsRepository
from community_stats.schema import (
    community_table,
    event_attendee_table,
    event_category_table,
    event_table,
    group_category_table,
    group_member_table,
    group_table,
    metadata,
    region_table,
)
from community_stats.service import CommunityStatsService

COMMUNITY_ID = UUID("00000000-0000-0000-0000-000000000001")
COMMUNITY2_ID = UUID("00000000-0000-0000-0000-000000000002")
UNKNOWN_COMMUNITY_ID = UUID("00000000-0000-0000-0000-999999999999")

CATEGORY1_ID = UUID("00000000-0000-0000-0000-000000000011")
CATEGORY2_ID = UUID("00000000-0000-0000-0000-000000000012")
CATEGORY3_ID = UUID("00000000-0000-0000-0000-000000000013")
REGION1_ID = UUID("00000000-0000-0000-0000-000000000021")
REGION2_ID = UUID("00000000-0000-0000-0000-000000000022")
REGION3_ID = UUID("00000000-0000-0000-0000-000000000023")
EVENT_CATEGORY1_ID = UUID("00000000-0000-0000-0000-000000000031")
EVENT_CATEGORY2_ID = UUID("00000000-0000-0000-0000-000000000032")

GROUP1_ID = UUID("00000000-0000-0000-0000-000000000101")
GROUP2_ID = UUID("00000000-0000-0000-0000-000000000102")
GROUP3_ID = UUID("00000000-0000-0000-0000-000000000103")
GROUP4_ID = UUID("00000000-0000-0000-0000-000000000104")
GROUP5_ID = UUID("00000000-0000-0000-0000-000000000105")
DELETED_GROUP_ID = UUID("00000000-0000-0000-0000-000000000106")
INACTIVE_GROUP_ID = UUID("00000000-0000-0000-0000-000000000107")

EVENT_IDS = [UUID(f"00000000-0000-0000-0000-00000000030{n}") for n in range(1, 10)]
USER_IDS = [UUID(f"00000000-0000-0000-0000-00000000020{n}") for n in range(1, 10)]

# Fixture months are counted back from December 2025.
BASE_MONTH = datetime(2025, 12, 1, tzinfo=timezone.utc)


def months_ago(months: int, days: int = 0) -> datetime:
    index = BASE_MONTH.year * 12 + (BASE_MONTH.month - 1) - months
    year, month = divmod(index, 12)
    return datetime(year, month + 1, 1, tzinfo=timezone.utc) + timedelta(days=days)


def seed_community_fixture(connection) -> None:
    """
    Two communities; only the first one is reported on in most tests.

    Community 1:
      groups   g1 AI/ML Europe (m10), g2 AI/ML North America (m9),
               g3 Cloud Native Europe (m7), g4 Cloud Native North America (m5),
               plus one deleted and one inactive group that must be ignored
      members  8 joins across m11..m4, one per month
      events   6 published (m10, m8, m6, m4, m3, m2), a draft (m1), a canceled one (m0)
      attendees 11 registrations on the published events, 1 on the draft
    Community 2:
      one group with a member, an event and an attendee
    """

    user = USER_IDS
    event = EVENT_IDS
    connection.execute(
        community_table.insert(),
        [
            {"community_id": COMMUNITY_ID, "name": "test-community"},
            {"community_id": COMMUNITY2_ID, "name": "other-community"},
        ],
    )
    connection.execute(
        region_table.insert(),
        [
            {"region_id": REGION1_ID, "community_id": COMMUNITY_ID, "name": "Europe", "order": 1},
            {"region_id": REGION2_ID, "community_id": COMMUNITY_ID, "name": "North America", "order": 2},
            {"region_id": REGION3_ID, "community_id": COMMUNITY2_ID, "name": "South America", "order": 1},
        ],
    )
    connection.execute(
        group_category_table.insert(),
        [
            {"group_category_id": CATEGORY1_ID, "community_id": COMMUNITY_ID, "name": "AI/ML"},
            {"group_category_id": CATEGORY2_ID, "community_id": COMMUNITY_ID, "name": "Cloud Native"},
            {"group_category_id": CATEGORY3_ID, "community_id": COMMUNITY2_ID, "name": "Security"},
        ],
    )
    connection.execute(
        event_category_table.insert(),
        [
            {"event_category_id": EVENT_CATEGORY1_ID, "community_id": COMMUNITY_ID, "name": "Conference", "slug": "conference"},
            {"event_category_id": EVENT_CATEGORY2_ID, "community_id": COMMUNITY_ID, "name": "Meetup", "slug": "meetup"},
        ],
    )

    def group(group_id, community_id, category_id, region_id, name, created_at, active=True, deleted=False):
        return {
            "group_id": group_id,
            "community_id": community_id,
            "group_category_id": category_id,
            "region_id": region_id,
            "name": name,
            "created_at": created_at,
            "active": active,
            "deleted": deleted,
        }

    connection.execute(
        group_table.insert(),
        [
            group(GROUP1_ID, COMMUNITY_ID, CATEGORY1_ID, REGION1_ID, "AI Europe", months_ago(10, 15)),
            group(GROUP2_ID, COMMUNITY_ID, CATEGORY1_ID, REGION2_ID, "AI North America", months_ago(9, 15)),
            group(GROUP3_ID, COMMUNITY_ID, CATEGORY2_ID, REGION1_ID, "Cloud Europe", months_ago(7, 15)),
            group(GROUP4_ID, COMMUNITY_ID, CATEGORY2_ID, REGION2_ID, "Cloud North America", months_ago(5, 15)),
            group(GROUP5_ID, COMMUNITY2_ID, CATEGORY3_ID, REGION3_ID, "Other Community Group", months_ago(3, 15)),
            group(DELETED_GROUP_ID, COMMUNITY_ID, CATEGORY1_ID, REGION1_ID, "Deleted", months_ago(6, 1), deleted=True),
            group(INACTIVE_GROUP_ID, COMMUNITY_ID, CATEGORY2_ID, None, "Inactive", months_ago(4, 1), active=False),
        ],
    )
    connection.execute(
        group_member_table.insert(),
        [
            {"group_id": GROUP1_ID, "user_id": user[0], "created_at": months_ago(11, 20)},
            {"group_id": GROUP1_ID, "user_id": user[1], "created_at": months_ago(10, 10)},
            {"group_id": GROUP2_ID, "user_id": user[3], "created_at": months_ago(9, 20)},
            {"group_id": GROUP2_ID, "user_id": user[4], "created_at": months_ago(8, 10)},
            {"group_id": GROUP3_ID, "user_id": user[5], "created_at": months_ago(7, 20)},
            {"group_id": GROUP1_ID, "user_id": user[2], "created_at": months_ago(6, 5)},
            {"group_id": GROUP4_ID, "user_id": user[7], "created_at": months_ago(5, 20)},
            {"group_id": GROUP3_ID, "user_id": user[6], "created_at": months_ago(4, 10)},
            {"group_id": GROUP5_ID, "user_id": user[8], "created_at": months_ago(3, 20)},
            {"group_id": DELETED_GROUP_ID, "user_id": user[8], "created_at": months_ago(6, 2)},
            {"group_id": INACTIVE_GROUP_ID, "user_id": user[8], "created_at": months_ago(4, 2)},
        ],
    )

    def row(event_id, group_id, category_id, name, starts_at, published=True, canceled=False):
        return {
            "event_id": event_id,
            "group_id": group_id,
            "event_category_id": category_id,
            "name": name,
            "starts_at": starts_at,
            "published": published,
            "canceled": canceled,
            "deleted": False,
        }

    connection.execute(
        event_table.insert(),
        [
            row(event[0], GROUP1_ID, EVENT_CATEGORY1_ID, "Conference 1", months_ago(10, 15)),
            row(event[1], GROUP1_ID, EVENT_CATEGORY2_ID, "Meetup 1", months_ago(8, 15)),
            row(event[2], GROUP2_ID, EVENT_CATEGORY1_ID, "Conference 2", months_ago(6, 15)),
            row(event[3], GROUP3_ID, EVENT_CATEGORY2_ID, "Meetup 2", months_ago(4, 15)),
            row(event[4], GROUP3_ID, EVENT_CATEGORY1_ID, "Conference 3", months_ago(3, 15)),
            row(event[5], GROUP4_ID, EVENT_CATEGORY2_ID, "Meetup 3", months_ago(2, 15)),
            row(event[6], GROUP1_ID, EVENT_CATEGORY1_ID, "Conference Draft", months_ago(1, 15), published=False),
            row(event[7], GROUP2_ID, EVENT_CATEGORY2_ID, "Meetup Canceled", months_ago(0, 15), published=False, canceled=True),
            row(event[8], GROUP5_ID, EVENT_CATEGORY1_ID, "Other Community Event", months_ago(3, 15)),
        ],
    )
    connection.execute(
        event_attendee_table.insert(),
        [
            {"event_id": event[0], "user_id": user[0], "created_at": months_ago(10, 1)},
            {"event_id": event[0], "user_id": user[1], "created_at": months_ago(10, 5)},
            {"event_id": event[0], "user_id": user[2], "created_at": months_ago(10, 10)},
            {"event_id": event[1], "user_id": user[3], "created_at": months_ago(8, 1)},
            {"event_id": event[1], "user_id": user[4], "created_at": months_ago(8, 5)},
            {"event_id": event[2], "user_id": user[5], "created_at": months_ago(6, 1)},
            {"event_id": event[2], "user_id": user[6], "created_at": months_ago(6, 5)},
            {"event_id": event[3], "user_id": user[7], "created_at": months_ago(4, 1)},
            {"event_id": event[4], "user_id": user[0], "created_at": months_ago(3, 1)},
            {"event_id": event[4], "user_id": user[1], "created_at": months_ago(3, 5)},
            {"event_id": event[5], "user_id": user[2], "created_at": months_ago(2, 1)},
            {"event_id": event[6], "user_id": user[3], "created_at": months_ago(1, 1)},
            {"event_id": event[8], "user_id": user[8], "created_at": months_ago(3, 1)},
        ],
    )


@pytest.fixture(scope="function")
def engine():
    """Scratch in-memory SQLite database with the statistics tables."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def seeded_engine(engine):
    with engine.begin() as connection:
        seed_community_fixture(connection)
    return engine


@pytest.fixture(scope="function")
def repository(seeded_engine):
    return SQLStatsRepository(seeded_engine)


@pytest.fixture(scope="function")
def service(repository):
    return CommunityStatsService(repository)

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import create_engine, select
from sqlalchemy.engine import Connection, Engine, Row

from .models import AttendeeRow, CommunitySnapshot, EventRow, GroupRow, MembershipRow
from .schema import (
    event_attendee_table,
    event_category_table,
    event_table,
    group_category_table,
    group_member_table,
    group_table,
    region_table,
)

logger = logging.getLogger(__name__)


class StatsDataRepository:
    """
    Interface for loading the raw rows behind the community statistics.

    Implementations scope every row to the community (directly, or through the
    owning group / event) and return them as one consistent snapshot. The
    eligibility flags are returned as-is: filtering happens in the extractor.
    """

    def load(self, community_id: UUID) -> CommunitySnapshot:
        raise NotImplementedError


class SQLStatsRepository(StatsDataRepository):
    """
    Load the snapshot from the tables declared in ``schema.py``.

    All queries share one connection and one transaction. On PostgreSQL the
    transaction runs at REPEATABLE READ so the five reads see the same state.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def load(self, community_id: UUID) -> CommunitySnapshot:
        with self.engine.connect() as connection:
            if self.engine.dialect.name == "postgresql":
                connection = connection.execution_options(isolation_level="REPEATABLE READ")
            with connection.begin():
                return CommunitySnapshot(
                    community_id=community_id,
                    groups=self._load_groups(connection, community_id),
                    memberships=self._load_memberships(connection, community_id),
                    events=self._load_events(connection, community_id),
                    attendees=self._load_attendees(connection, community_id),
                    group_categories=self._load_lookup(
                        connection,
                        group_category_table.c.group_category_id,
                        group_category_table.c.name,
                        group_category_table.c.community_id,
                        community_id,
                    ),
                    regions=self._load_lookup(
                        connection,
                        region_table.c.region_id,
                        region_table.c.name,
                        region_table.c.community_id,
                        community_id,
                    ),
                    event_categories=self._load_lookup(
                        connection,
                        event_category_table.c.event_category_id,
                        event_category_table.c.name,
                        event_category_table.c.community_id,
                        community_id,
                    ),
                )

    def _load_groups(self, connection: Connection, community_id: UUID) -> Sequence[GroupRow]:
        query = select(
            group_table.c.group_id,
            group_table.c.group_category_id,
            group_table.c.region_id,
            group_table.c.created_at,
            group_table.c.active,
            group_table.c.deleted,
        ).where(group_table.c.community_id == community_id)
        rows = connection.execute(query).fetchall()
        return tuple(self._row_to_group(row) for row in rows)

    def _load_memberships(self, connection: Connection, community_id: UUID) -> Sequence[MembershipRow]:
        query = (
            select(
                group_member_table.c.group_id,
                group_member_table.c.user_id,
                group_member_table.c.created_at,
            )
            .select_from(
                group_member_table.join(group_table, group_table.c.group_id == group_member_table.c.group_id)
            )
            .where(group_table.c.community_id == community_id)
        )
        rows = connection.execute(query).fetchall()
        return tuple(self._row_to_membership(row) for row in rows)

    def _load_events(self, connection: Connection, community_id: UUID) -> Sequence[EventRow]:
        query = (
            select(
                event_table.c.event_id,
                event_table.c.group_id,
                event_table.c.event_category_id,
                group_table.c.group_category_id,
                group_table.c.region_id,
                event_table.c.starts_at,
                event_table.c.published,
                event_table.c.canceled,
                event_table.c.deleted,
            )
            .select_from(event_table.join(group_table, group_table.c.group_id == event_table.c.group_id))
            .where(group_table.c.community_id == community_id)
        )
        rows = connection.execute(query).fetchall()
        return tuple(self._row_to_event(row) for row in rows)

    def _load_attendees(self, connection: Connection, community_id: UUID) -> Sequence[AttendeeRow]:
        query = (
            select(
                event_attendee_table.c.event_id,
                event_attendee_table.c.user_id,
                event_attendee_table.c.created_at,
            )
            .select_from(
                event_attendee_table.join(
                    event_table, event_table.c.event_id == event_attendee_table.c.event_id
                ).join(group_table, group_table.c.group_id == event_table.c.group_id)
            )
            .where(group_table.c.community_id == community_id)
        )
        rows = connection.execute(query).fetchall()
        return tuple(self._row_to_attendee(row) for row in rows)

    @staticmethod
    def _load_lookup(connection: Connection, id_column, name_column, scope_column, community_id: UUID) -> Dict[UUID, str]:
        rows = connection.execute(select(id_column, name_column).where(scope_column == community_id)).fetchall()
        return {row[0]: str(row[1]) for row in rows}

    @staticmethod
    def _row_to_group(row: Row) -> GroupRow:
        return GroupRow(
            group_id=row.group_id,
            category_id=row.group_category_id,
            region_id=row.region_id,
            created_at=row.created_at,
            active=bool(row.active),
            deleted=bool(row.deleted),
        )

    @staticmethod
    def _row_to_membership(row: Row) -> MembershipRow:
        return MembershipRow(group_id=row.group_id, user_id=row.user_id, joined_at=row.created_at)

    @staticmethod
    def _row_to_event(row: Row) -> EventRow:
        return EventRow(
            event_id=row.event_id,
            group_id=row.group_id,
            event_category_id=row.event_category_id,
            group_category_id=row.group_category_id,
            group_region_id=row.region_id,
            starts_at=row.starts_at,
            published=bool(row.published),
            canceled=bool(row.canceled),
            deleted=bool(row.deleted),
        )

    @staticmethod
    def _row_to_attendee(row: Row) -> AttendeeRow:
        return AttendeeRow(event_id=row.event_id, user_id=row.user_id, registered_at=row.created_at)


@dataclass
class _CommunityReferences:
    group_categories: Dict[UUID, str] = field(default_factory=dict)
    regions: Dict[UUID, str] = field(default_factory=dict)
    event_categories: Dict[UUID, str] = field(default_factory=dict)


class InMemoryStatsRepository(StatsDataRepository):
    """
    Rows kept in Python lists, scoped the same way the SQL queries scope them.

    Useful for tests and for requests that ship their own rows.
    """

    def __init__(self) -> None:
        self._group_communities: Dict[UUID, UUID] = {}
        self._groups: List[GroupRow] = []
        self._memberships: List[MembershipRow] = []
        self._events: List[EventRow] = []
        self._attendees: List[AttendeeRow] = []
        self._references: Dict[UUID, _CommunityReferences] = {}

    def add_group_category(self, community_id: UUID, category_id: UUID, name: str) -> None:
        self._references_for(community_id).group_categories[category_id] = name

    def add_region(self, community_id: UUID, region_id: UUID, name: str) -> None:
        self._references_for(community_id).regions[region_id] = name

    def add_event_category(self, community_id: UUID, category_id: UUID, name: str) -> None:
        self._references_for(community_id).event_categories[category_id] = name

    def add_group(self, community_id: UUID, group: GroupRow) -> None:
        self._group_communities[group.group_id] = community_id
        self._groups.append(group)

    def add_membership(self, membership: MembershipRow) -> None:
        self._memberships.append(membership)

    def add_event(self, event: EventRow) -> None:
        self._events.append(event)

    def add_attendee(self, attendee: AttendeeRow) -> None:
        self._attendees.append(attendee)

    def load(self, community_id: UUID) -> CommunitySnapshot:
        group_ids = {
            group_id for group_id, owner in self._group_communities.items() if owner == community_id
        }
        events = tuple(event for event in self._events if event.group_id in group_ids)
        event_ids = {event.event_id for event in events}
        references = self._references.get(community_id) or _CommunityReferences()
        return CommunitySnapshot(
            community_id=community_id,
            groups=tuple(group for group in self._groups if group.group_id in group_ids),
            memberships=tuple(member for member in self._memberships if member.group_id in group_ids),
            events=events,
            attendees=tuple(attendee for attendee in self._attendees if attendee.event_id in event_ids),
            group_categories=dict(references.group_categories),
            regions=dict(references.regions),
            event_categories=dict(references.event_categories),
        )

    def _references_for(self, community_id: UUID) -> _CommunityReferences:
        return self._references.setdefault(community_id, _CommunityReferences())


@dataclass(frozen=True)
class RepositoryConfig:
    database_url: Optional[str] = None

    @classmethod
    def from_env(cls) -> "RepositoryConfig":
        return cls(database_url=os.getenv("COMMUNITY_STATS_DATABASE_URL"))


def build_repository_from_env(config: Optional[RepositoryConfig] = None) -> Optional[StatsDataRepository]:
    cfg = config or RepositoryConfig.from_env()
    if cfg.database_url:
        engine = create_engine(cfg.database_url)
        return SQLStatsRepository(engine)
    logger.info("COMMUNITY_STATS_DATABASE_URL is not set; no statistics store configured.")
    return None

"""
SQLAlchemy Core definitions of the tables the statistics engine reads.

Only the columns the engine needs are declared; the real schema carries many
more. ``metadata.create_all`` is used by the test-suite to build a scratch
SQLite database.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, MetaData, String, Table, Uuid

metadata = MetaData()

community_table = Table(
    "community",
    metadata,
    Column("community_id", Uuid, primary_key=True),
    Column("name", String(255), nullable=False),
)

region_table = Table(
    "region",
    metadata,
    Column("region_id", Uuid, primary_key=True),
    Column("community_id", Uuid, ForeignKey("community.community_id"), nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("order", Integer),
)

group_category_table = Table(
    "group_category",
    metadata,
    Column("group_category_id", Uuid, primary_key=True),
    Column("community_id", Uuid, ForeignKey("community.community_id"), nullable=False, index=True),
    Column("name", String(255), nullable=False),
)

event_category_table = Table(
    "event_category",
    metadata,
    Column("event_category_id", Uuid, primary_key=True),
    Column("community_id", Uuid, ForeignKey("community.community_id"), nullable=False, index=True),
    Column("name", String(255), nullable=False),
    Column("slug", String(255)),
)

group_table = Table(
    "group",
    metadata,
    Column("group_id", Uuid, primary_key=True),
    Column("community_id", Uuid, ForeignKey("community.community_id"), nullable=False, index=True),
    Column("group_category_id", Uuid, ForeignKey("group_category.group_category_id"), nullable=False),
    Column("region_id", Uuid, ForeignKey("region.region_id")),
    Column("name", String(255), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("active", Boolean, nullable=False, default=True),
    Column("deleted", Boolean, nullable=False, default=False),
)

group_member_table = Table(
    "group_member",
    metadata,
    Column("group_id", Uuid, ForeignKey("group.group_id"), primary_key=True),
    Column("user_id", Uuid, primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

event_table = Table(
    "event",
    metadata,
    Column("event_id", Uuid, primary_key=True),
    Column("group_id", Uuid, ForeignKey("group.group_id"), nullable=False, index=True),
    Column("event_category_id", Uuid, ForeignKey("event_category.event_category_id"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("starts_at", DateTime(timezone=True)),
    Column("published", Boolean, nullable=False, default=False),
    Column("canceled", Boolean, nullable=False, default=False),
    Column("deleted", Boolean, nullable=False, default=False),
)

event_attendee_table = Table(
    "event_attendee",
    metadata,
    Column("event_id", Uuid, ForeignKey("event.event_id"), primary_key=True),
    Column("user_id", Uuid, primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

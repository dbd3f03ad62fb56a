from __future__ import annotations

from typing import Dict, List, Optional
from uuid import UUID

from .dimensions import DimensionResolver
from .models import FAMILY_AXES, CommunitySnapshot, EventRow, Fact, Family, GroupRow


def _group_is_eligible(group: GroupRow) -> bool:
    return group.active and not group.deleted


def _event_is_eligible(event: EventRow) -> bool:
    return event.published and not event.canceled and not event.deleted


class FactExtractor:
    """
    Turn the raw rows of a snapshot into facts, one family at a time.

    Eligibility:
      - groups: active and not soft-deleted
      - members: memberships of eligible groups
      - events: published, not canceled, not soft-deleted, in eligible groups
      - attendees: registrations of eligible events

    Members inherit their group's labels and attendees their event's labels.
    """

    def __init__(self, snapshot: CommunitySnapshot, resolver: Optional[DimensionResolver] = None) -> None:
        self.snapshot = snapshot
        self.resolver = resolver or DimensionResolver.from_snapshot(snapshot)

    def extract(self, family: Family, group_id: Optional[UUID] = None) -> List[Fact]:
        """
        Return the facts of ``family``; ``group_id`` narrows them to one group.
        """

        family = Family(family)
        if family is Family.GROUPS:
            return self._group_facts(group_id)
        if family is Family.MEMBERS:
            return self._member_facts(group_id)
        if family is Family.EVENTS:
            return self._event_facts(group_id)
        return self._attendee_facts(group_id)

    def eligible_groups(self, group_id: Optional[UUID] = None) -> Dict[UUID, GroupRow]:
        return {
            group.group_id: group
            for group in self.snapshot.groups
            if _group_is_eligible(group) and (group_id is None or group.group_id == group_id)
        }

    def eligible_events(self, group_id: Optional[UUID] = None) -> Dict[UUID, EventRow]:
        groups = self.eligible_groups(group_id)
        return {
            event.event_id: event
            for event in self.snapshot.events
            if event.group_id in groups and _event_is_eligible(event)
        }

    def _group_facts(self, group_id: Optional[UUID]) -> List[Fact]:
        axes = FAMILY_AXES[Family.GROUPS]
        return [
            Fact(timestamp=group.created_at, labels=self.resolver.labels(group, axes))
            for group in self.eligible_groups(group_id).values()
        ]

    def _member_facts(self, group_id: Optional[UUID]) -> List[Fact]:
        axes = FAMILY_AXES[Family.MEMBERS]
        groups = self.eligible_groups(group_id)
        group_labels = {gid: self.resolver.labels(group, axes) for gid, group in groups.items()}
        return [
            Fact(timestamp=membership.joined_at, labels=group_labels[membership.group_id])
            for membership in self.snapshot.memberships
            if membership.group_id in groups
        ]

    def _event_facts(self, group_id: Optional[UUID]) -> List[Fact]:
        axes = FAMILY_AXES[Family.EVENTS]
        return [
            Fact(timestamp=event.starts_at, labels=self.resolver.labels(event, axes))
            for event in self.eligible_events(group_id).values()
        ]

    def _attendee_facts(self, group_id: Optional[UUID]) -> List[Fact]:
        axes = FAMILY_AXES[Family.ATTENDEES]
        events = self.eligible_events(group_id)
        event_labels = {eid: self.resolver.labels(event, axes) for eid, event in events.items()}
        return [
            Fact(timestamp=attendee.registered_at, labels=event_labels[attendee.event_id])
            for attendee in self.snapshot.attendees
            if attendee.event_id in events
        ]


def extract(repository, community_id: UUID, family: Family) -> List[Fact]:
    """Load a fresh snapshot for ``community_id`` and extract one family."""
    return FactExtractor(repository.load(community_id)).extract(family)

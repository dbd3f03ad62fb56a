from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from uuid import UUID

from .models import CATEGORY, EVENT_CATEGORY, GROUP_CATEGORY, GROUP_REGION, REGION, CommunitySnapshot

# axis -> (row attribute holding the reference id, lookup it resolves against)
_AXIS_SOURCES: Dict[str, Tuple[str, str]] = {
    CATEGORY: ("category_id", "group_categories"),
    REGION: ("region_id", "regions"),
    EVENT_CATEGORY: ("event_category_id", "event_categories"),
    GROUP_CATEGORY: ("group_category_id", "group_categories"),
    GROUP_REGION: ("group_region_id", "regions"),
}


class DimensionResolver:
    """
    Resolve the display name a raw row references along an axis.

    A null reference, or one that is not in the community's lookup, resolves
    to ``None``. No placeholder label is ever produced.
    """

    def __init__(
        self,
        group_categories: Mapping[UUID, str],
        regions: Mapping[UUID, str],
        event_categories: Mapping[UUID, str],
    ) -> None:
        self._lookups: Dict[str, Mapping[UUID, str]] = {
            "group_categories": group_categories,
            "regions": regions,
            "event_categories": event_categories,
        }

    @classmethod
    def from_snapshot(cls, snapshot: CommunitySnapshot) -> "DimensionResolver":
        return cls(
            group_categories=snapshot.group_categories,
            regions=snapshot.regions,
            event_categories=snapshot.event_categories,
        )

    def resolve(self, raw_row: Any, axis: str) -> Optional[str]:
        try:
            attribute, lookup_name = _AXIS_SOURCES[axis]
        except KeyError:
            raise ValueError(f"Unknown axis: {axis}") from None
        reference = getattr(raw_row, attribute, None)
        if reference is None:
            return None
        return self._lookups[lookup_name].get(reference)

    def labels(self, raw_row: Any, axes: Iterable[str]) -> Dict[str, str]:
        """
        Label map for ``raw_row``; axes that resolve to nothing are left out.
        """

        resolved: Dict[str, str] = {}
        for axis in axes:
            label = self.resolve(raw_row, axis)
            if label is not None:
                resolved[axis] = label
        return resolved

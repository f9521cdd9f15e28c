"""Aligns maintenance intervals across stores by interval value."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..models.record import MaintenanceInterval, Number
from .repository import MaintenancePlanRepository

logger = logging.getLogger(__name__)


def _duplicate_values(intervals: Sequence[MaintenanceInterval]) -> List[Number]:
    counts = Counter(i.interval_value for i in intervals)
    return sorted(value for value, count in counts.items() if count > 1)


@dataclass
class IntervalMatch:
    """Result of matching one model's intervals."""
    mapping: Dict[str, str] = field(default_factory=dict)  # source ID -> destination ID
    unmatched: List[MaintenanceInterval] = field(default_factory=list)
    source_duplicates: List[Number] = field(default_factory=list)
    destination_duplicates: List[Number] = field(default_factory=list)

    @property
    def source_ids(self) -> List[str]:
        return list(self.mapping.keys())

    def warnings(self, model_name: str) -> List[str]:
        """Human readable, non-fatal warnings about the match."""
        messages = []
        if self.unmatched:
            labels = ", ".join(i.label for i in self.unmatched)
            messages.append(f"Unmatched intervals for {model_name}: {labels}")
        if self.source_duplicates:
            messages.append(
                f"Duplicate source interval values for {model_name}: "
                f"{', '.join(str(v) for v in self.source_duplicates)}"
            )
        if self.destination_duplicates:
            messages.append(
                f"Duplicate destination interval values for {model_name}: "
                f"{', '.join(str(v) for v in self.destination_duplicates)} (first match used)"
            )
        return messages


class IntervalMatcher:
    """
    Maps source intervals to destination intervals of the same model.

    Two intervals match when their ``interval_value`` is exactly equal;
    names are ignored. If several destination intervals share a value the
    first one in result order wins.
    """

    def __init__(
        self,
        source: MaintenancePlanRepository,
        destination: MaintenancePlanRepository
    ):
        self.source = source
        self.destination = destination

    def match(self, source_model_id: str, destination_model_id: str) -> IntervalMatch:
        source_intervals = self.source.list_intervals(source_model_id)
        dest_intervals = self.destination.list_intervals(destination_model_id)

        logger.debug(
            f"Found {len(source_intervals)} source intervals, "
            f"{len(dest_intervals)} destination intervals"
        )

        return self.match_intervals(source_intervals, dest_intervals)

    def match_intervals(
        self,
        source_intervals: Sequence[MaintenanceInterval],
        dest_intervals: Sequence[MaintenanceInterval]
    ) -> IntervalMatch:
        """Match already loaded intervals."""
        by_value: Dict[Number, MaintenanceInterval] = {}
        for interval in dest_intervals:
            by_value.setdefault(interval.interval_value, interval)

        result = IntervalMatch(
            source_duplicates=_duplicate_values(source_intervals),
            destination_duplicates=_duplicate_values(dest_intervals),
        )

        for interval in source_intervals:
            dest = by_value.get(interval.interval_value)
            if dest is None:
                result.unmatched.append(interval)
                continue

            result.mapping[interval.id] = dest.id
            logger.debug(f"Matched interval: {interval.interval_value} ({interval.id} -> {dest.id})")

        return result

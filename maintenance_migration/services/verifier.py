"""Post-migration checks against the destination store."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .repository import MaintenancePlanRepository

logger = logging.getLogger(__name__)


@dataclass
class DuplicateTaskGroup:
    """Tasks sharing interval, description and type."""
    interval: str
    description: str
    type: str
    count: int


@dataclass
class ModelVerification:
    """Destination state of one model's maintenance plan."""
    model: str
    found: bool = True
    interval_count: int = 0
    task_count: int = 0
    task_types: List[str] = field(default_factory=list)
    intervals_without_tasks: List[str] = field(default_factory=list)
    duplicate_tasks: List[DuplicateTaskGroup] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.found and not self.duplicate_tasks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "found": self.found,
            "interval_count": self.interval_count,
            "task_count": self.task_count,
            "task_types": self.task_types,
            "intervals_without_tasks": self.intervals_without_tasks,
            "duplicate_tasks": [vars(d) for d in self.duplicate_tasks],
        }


class MigrationVerifier:
    """Summarizes intervals and tasks per model and flags suspicious data."""

    def __init__(self, destination: MaintenancePlanRepository):
        self.destination = destination

    def verify_model(self, model_name: str) -> ModelVerification:
        result = ModelVerification(model=model_name)

        model = self.destination.find_model(model_name)
        if model is None:
            result.found = False
            return result

        intervals = self.destination.list_intervals(model.id)
        tasks = self.destination.list_tasks([i.id for i in intervals])

        result.interval_count = len(intervals)
        result.task_count = len(tasks)
        result.task_types = sorted({t.type for t in tasks})

        tasks_per_interval = Counter(t.interval_id for t in tasks)
        labels = {i.id: i.label for i in intervals}
        result.intervals_without_tasks = [
            i.label for i in sorted(intervals, key=lambda i: i.interval_value)
            if tasks_per_interval[i.id] == 0
        ]

        for key, count in Counter(t.key() for t in tasks).items():
            if count > 1:
                interval_id, description, task_type = key
                result.duplicate_tasks.append(DuplicateTaskGroup(
                    interval=labels.get(interval_id, interval_id),
                    description=description,
                    type=task_type,
                    count=count,
                ))

        return result

    def verify(self, model_names: Sequence[str]) -> List[ModelVerification]:
        results = []
        for name in model_names:
            result = self.verify_model(name)
            if not result.ok:
                logger.warning(f"Verification issues for {name}")
            results.append(result)
        return results


def format_verification(results: Sequence[ModelVerification]) -> str:
    """Render verification results for the console."""
    lines = []
    for r in results:
        lines.append(f"\n=== {r.model} ===")
        if not r.found:
            lines.append("  Model not found in destination")
            continue

        lines.append(f"  Intervals: {r.interval_count}")
        lines.append(f"  Tasks: {r.task_count} ({len(r.task_types)} types)")
        if r.intervals_without_tasks:
            lines.append(f"  Intervals without tasks: {', '.join(r.intervals_without_tasks)}")
        for d in r.duplicate_tasks:
            lines.append(f"  Duplicate: {d.interval} / {d.description} ({d.type}) x{d.count}")
    return "\n".join(lines)

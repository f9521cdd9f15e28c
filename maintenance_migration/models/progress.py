"""Migration progress models persisted in the checkpoint file."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return date_parser.isoparse(value) if value else None


class ModelStatus(str, Enum):
    """Status of a model as shown in reports."""
    COMPLETED = "Completed"
    IN_PROGRESS = "In Progress"
    PENDING = "Pending"


@dataclass
class ModelStats:
    """Counters collected while migrating a single equipment model."""
    tasks_found: int = 0
    tasks_migrated: int = 0
    tasks_skipped: int = 0
    parts_found: int = 0
    parts_migrated: int = 0
    parts_skipped: int = 0
    errors: int = 0
    skipped_reasons: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Count an error and keep its message with the skip reasons."""
        self.errors += 1
        self.skipped_reasons.append(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "tasks_found": self.tasks_found,
            "tasks_migrated": self.tasks_migrated,
            "tasks_skipped": self.tasks_skipped,
            "parts_found": self.parts_found,
            "parts_migrated": self.parts_migrated,
            "parts_skipped": self.parts_skipped,
            "errors": self.errors,
            "skipped_reasons": self.skipped_reasons,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelStats":
        """Create from dictionary representation."""
        return cls(
            tasks_found=data.get("tasks_found", 0),
            tasks_migrated=data.get("tasks_migrated", 0),
            tasks_skipped=data.get("tasks_skipped", 0),
            parts_found=data.get("parts_found", 0),
            parts_migrated=data.get("parts_migrated", 0),
            parts_skipped=data.get("parts_skipped", 0),
            errors=data.get("errors", 0),
            skipped_reasons=list(data.get("skipped_reasons", [])),
        )


@dataclass
class RunTotals:
    """Cumulative counters for a whole run (across resumes)."""
    total_models: int = 0
    total_tasks_found: int = 0
    total_tasks_migrated: int = 0
    total_tasks_skipped: int = 0
    total_parts_found: int = 0
    total_parts_migrated: int = 0
    total_parts_skipped: int = 0
    total_errors: int = 0

    def add(self, stats: ModelStats) -> None:
        """Fold a model's counters into the totals."""
        self.total_tasks_found += stats.tasks_found
        self.total_tasks_migrated += stats.tasks_migrated
        self.total_tasks_skipped += stats.tasks_skipped
        self.total_parts_found += stats.parts_found
        self.total_parts_migrated += stats.parts_migrated
        self.total_parts_skipped += stats.parts_skipped
        self.total_errors += stats.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "total_models": self.total_models,
            "total_tasks_found": self.total_tasks_found,
            "total_tasks_migrated": self.total_tasks_migrated,
            "total_tasks_skipped": self.total_tasks_skipped,
            "total_parts_found": self.total_parts_found,
            "total_parts_migrated": self.total_parts_migrated,
            "total_parts_skipped": self.total_parts_skipped,
            "total_errors": self.total_errors,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunTotals":
        """Create from dictionary representation."""
        return cls(**{k: data.get(k, 0) for k in cls().to_dict()})


@dataclass
class ErrorEntry:
    """An error recorded against a model."""
    model: str
    error: str
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorEntry":
        return cls(
            model=data["model"],
            error=data["error"],
            timestamp=_parse_datetime(data.get("timestamp")) or utcnow(),
        )


@dataclass
class MigrationProgress:
    """
    Durable state of a migration run.

    The orchestrator owns one instance per run, folds each model's
    ModelStats into it and hands it to the ProgressTracker for saving.
    """
    completed_models: List[str] = field(default_factory=list)
    current_model: Optional[str] = None
    stats: RunTotals = field(default_factory=RunTotals)
    model_stats: Dict[str, ModelStats] = field(default_factory=dict)
    errors: List[ErrorEntry] = field(default_factory=list)
    started_at: Optional[datetime] = None
    last_updated_at: Optional[datetime] = None

    @classmethod
    def new(cls, total_models: int) -> "MigrationProgress":
        """Fresh progress for a run over ``total_models`` models."""
        return cls(stats=RunTotals(total_models=total_models), started_at=utcnow())

    def is_completed(self, model_name: str) -> bool:
        return model_name in self.completed_models

    def start_model(self, model_name: str) -> None:
        self.current_model = model_name

    def record_model(self, model_name: str, stats: ModelStats) -> None:
        """Record a model whose processing returned normally."""
        self.model_stats[model_name] = stats
        self.stats.add(stats)

        if stats.errors > 0:
            self.errors.append(ErrorEntry(
                model=model_name,
                error="; ".join(stats.skipped_reasons),
            ))

        # Errors are terminal per model: it is not retried on resume
        if model_name not in self.completed_models:
            self.completed_models.append(model_name)
        self.current_model = None

    def record_failure(self, model_name: str, message: str) -> None:
        """Record a model whose processing raised; it stays incomplete."""
        stats = ModelStats()
        stats.add_error(message)
        self.model_stats[model_name] = stats

        self.errors.append(ErrorEntry(model=model_name, error=message))
        self.stats.total_errors += 1

    def status_for(self, model_name: str) -> ModelStatus:
        if self.is_completed(model_name):
            return ModelStatus.COMPLETED
        # Started but never recorded as completed
        if self.current_model == model_name or model_name in self.model_stats:
            return ModelStatus.IN_PROGRESS
        return ModelStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "completed_models": self.completed_models,
            "current_model": self.current_model,
            "stats": self.stats.to_dict(),
            "model_stats": {
                name: stats.to_dict() for name, stats in self.model_stats.items()
            },
            "errors": [e.to_dict() for e in self.errors],
            "started_at": _isoformat(self.started_at),
            "last_updated_at": _isoformat(self.last_updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationProgress":
        """Create from dictionary representation."""
        return cls(
            completed_models=list(data.get("completed_models", [])),
            current_model=data.get("current_model"),
            stats=RunTotals.from_dict(data.get("stats", {})),
            model_stats={
                name: ModelStats.from_dict(stats)
                for name, stats in data.get("model_stats", {}).items()
            },
            errors=[ErrorEntry.from_dict(e) for e in data.get("errors", [])],
            started_at=_parse_datetime(data.get("started_at")),
            last_updated_at=_parse_datetime(data.get("last_updated_at")),
        )

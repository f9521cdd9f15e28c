"""Service layer for the migration toolkit."""

from .interval_matcher import IntervalMatch, IntervalMatcher
from .model_resolver import ModelResolver, ResolvedModel
from .parts_migrator import PartsMigrator
from .progress_tracker import ProgressTracker
from .repository import MaintenancePlanRepository
from .retry import retry_with_backoff
from .task_migrator import TaskMigrator
from .verifier import MigrationVerifier

__all__ = [
    "IntervalMatch",
    "IntervalMatcher",
    "ModelResolver",
    "ResolvedModel",
    "PartsMigrator",
    "ProgressTracker",
    "MaintenancePlanRepository",
    "retry_with_backoff",
    "TaskMigrator",
    "MigrationVerifier",
]

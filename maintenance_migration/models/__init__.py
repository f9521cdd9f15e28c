"""Data models for the migration toolkit."""

from .migration import (
    DEFAULT_MODELS,
    MigrationConfig,
    StoreConfig,
)
from .progress import (
    ErrorEntry,
    MigrationProgress,
    ModelStats,
    ModelStatus,
    RunTotals,
)
from .record import (
    EquipmentModel,
    MaintenanceInterval,
    MaintenanceTask,
    TaskPart,
)

__all__ = [
    "DEFAULT_MODELS",
    "MigrationConfig",
    "StoreConfig",
    "ErrorEntry",
    "MigrationProgress",
    "ModelStats",
    "ModelStatus",
    "RunTotals",
    "EquipmentModel",
    "MaintenanceInterval",
    "MaintenanceTask",
    "TaskPart",
]

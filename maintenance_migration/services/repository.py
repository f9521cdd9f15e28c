"""Typed access to the maintenance plan tables of one store."""

import time
import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

from ..models.record import (
    EquipmentModel,
    MaintenanceInterval,
    MaintenanceTask,
    TaskPart,
)
from ..stores.base import BaseStore, Row
from .retry import retry_with_backoff

logger = logging.getLogger(__name__)

T = TypeVar("T")

MODELS_TABLE = "equipment_models"
INTERVALS_TABLE = "maintenance_intervals"
TASKS_TABLE = "maintenance_tasks"
PARTS_TABLE = "task_parts"

MODEL_COLUMNS = ["id", "name"]
INTERVAL_COLUMNS = ["id", "interval_value", "name", "model_id"]
TASK_COLUMNS = ["id", "interval_id", "description", "type", "estimated_time", "requires_specialist"]
TASK_KEY_COLUMNS = ["id", "interval_id", "description", "type"]
PART_COLUMNS = ["id", "task_id", "name", "part_number", "quantity", "cost"]


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Split ``items`` into lists of at most ``size`` elements."""
    for i in range(0, len(items), size):
        yield list(items[i:i + size])


class MaintenancePlanRepository:
    """
    Reads and writes models, intervals, tasks and parts in one store.

    Every remote call goes through retry_with_backoff. Multi-gets are
    split into chunks of ``id_chunk_size`` IDs to stay within backend
    query-size limits.
    """

    def __init__(
        self,
        store: BaseStore,
        id_chunk_size: int = 100,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.store = store
        self.id_chunk_size = id_chunk_size
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    @property
    def name(self) -> str:
        return self.store.name

    def _call(self, func: Callable[[], T]) -> T:
        return retry_with_backoff(
            func,
            attempts=self.retry_attempts,
            base_delay=self.retry_delay,
            sleep=self._sleep,
        )

    def _select_in(
        self,
        table: str,
        columns: Sequence[str],
        column: str,
        ids: Sequence[str]
    ) -> List[Row]:
        """Filtered multi-get, one request per chunk of IDs."""
        rows: List[Row] = []
        for chunk in chunked(ids, self.id_chunk_size):
            rows.extend(self._call(
                lambda chunk=chunk: self.store.select(table, columns, in_filter=(column, chunk))
            ))
        return rows

    # Reads

    def find_model(self, name: str) -> Optional[EquipmentModel]:
        """Look up an equipment model by exact name."""
        row = self._call(lambda: self.store.select_one(MODELS_TABLE, MODEL_COLUMNS, {"name": name}))
        return EquipmentModel.from_row(row) if row else None

    def list_intervals(self, model_id: str) -> List[MaintenanceInterval]:
        """All intervals of a model, in backend order."""
        rows = self._call(
            lambda: self.store.select(INTERVALS_TABLE, INTERVAL_COLUMNS, eq={"model_id": model_id})
        )
        return [MaintenanceInterval.from_row(r) for r in rows]

    def list_tasks(self, interval_ids: Sequence[str]) -> List[MaintenanceTask]:
        """All tasks belonging to the given intervals."""
        if not interval_ids:
            return []
        rows = self._select_in(TASKS_TABLE, TASK_COLUMNS, "interval_id", interval_ids)
        return [MaintenanceTask.from_row(r) for r in rows]

    def list_parts(self, task_ids: Sequence[str]) -> List[TaskPart]:
        """All parts belonging to the given tasks."""
        if not task_ids:
            return []
        rows = self._select_in(PARTS_TABLE, PART_COLUMNS, "task_id", task_ids)
        return [TaskPart.from_row(r) for r in rows]

    def find_task(self, interval_id: str, description: str, task_type: str) -> Optional[str]:
        """ID of the first task matching the composite key, or None."""
        row = self._call(lambda: self.store.select_one(
            TASKS_TABLE,
            ["id"],
            {"interval_id": interval_id, "description": description, "type": task_type},
        ))
        return str(row["id"]) if row else None

    def find_part(self, task_id: str, name: str) -> Optional[str]:
        """ID of the first part with ``name`` under ``task_id``, or None."""
        row = self._call(lambda: self.store.select_one(
            PARTS_TABLE,
            ["id"],
            {"task_id": task_id, "name": name},
        ))
        return str(row["id"]) if row else None

    # Writes

    def insert_tasks(self, rows: List[Dict[str, Any]]) -> List[MaintenanceTask]:
        """Insert one batch of tasks and return the inserted rows' keys."""
        inserted = self._call(lambda: self.store.insert(TASKS_TABLE, rows, returning=TASK_KEY_COLUMNS))
        return [MaintenanceTask.from_row(r) for r in inserted]

    def insert_parts(self, rows: List[Dict[str, Any]]) -> List[Row]:
        """Insert one batch of parts."""
        return self._call(lambda: self.store.insert(PARTS_TABLE, rows, returning=["id", "task_id", "name"]))

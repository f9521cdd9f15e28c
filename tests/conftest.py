"""
Pytest configuration and shared fixtures for the migration tests.
"""

import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence

import pytest

from maintenance_migration.models.migration import MigrationConfig, StoreConfig
from maintenance_migration.orchestrator import MigrationOrchestrator
from maintenance_migration.services.progress_tracker import ProgressTracker
from maintenance_migration.services.repository import MaintenancePlanRepository
from maintenance_migration.stores.base import BaseStore


class InMemoryStore(BaseStore):
    """Store keeping tables in dictionaries and recording every call."""

    def __init__(self, name: str):
        super().__init__(name)
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.calls: List[Dict[str, Any]] = []
        self.reverse_inserts = False
        self._failures: Dict[tuple, List[Exception]] = defaultdict(list)

    # Test helpers

    def add(self, table: str, **row) -> str:
        row.setdefault("id", str(uuid.uuid4()))
        self.tables[table].append(row)
        return row["id"]

    def count(self, table: str) -> int:
        return len(self.tables[table])

    def fail(self, op: str, table: str, times: int = 1, exc: Optional[Exception] = None):
        """Make the next ``times`` calls of ``op`` on ``table`` raise."""
        for _ in range(times):
            self._failures[(op, table)].append(exc or RuntimeError(f"{op} {table} unavailable"))

    def calls_for(self, op: str, table: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["op"] == op and c["table"] == table]

    def _maybe_fail(self, op: str, table: str):
        pending = self._failures.get((op, table))
        if pending:
            raise pending.pop(0)

    # BaseStore

    def select(self, table, columns, eq=None, in_filter=None, limit=None):
        self.calls.append({"op": "select", "table": table, "eq": eq, "in_filter": in_filter})
        self._maybe_fail("select", table)

        rows = []
        for row in self.tables[table]:
            if eq and any(str(row.get(k)) != str(v) for k, v in eq.items()):
                continue
            if in_filter:
                column, values = in_filter
                if str(row.get(column)) not in {str(v) for v in values}:
                    continue
            rows.append({c: row.get(c) for c in columns})

        return rows[:limit] if limit else rows

    def insert(self, table, rows, returning=None):
        self.calls.append({"op": "insert", "table": table, "rows": rows})
        self._maybe_fail("insert", table)

        inserted = []
        for row in rows:
            new = {"id": str(uuid.uuid4()), **row}
            self.tables[table].append(new)
            inserted.append({c: new.get(c) for c in returning} if returning else dict(new))

        if self.reverse_inserts:
            inserted.reverse()
        return inserted


def seed_model(store: InMemoryStore, name: str, interval_values: Sequence) -> Dict[Any, str]:
    """Add a model with one interval per value; returns value -> interval ID."""
    model_id = store.add("equipment_models", name=name)
    return {
        value: store.add(
            "maintenance_intervals",
            model_id=model_id,
            interval_value=value,
            name=f"Service {value}",
        )
        for value in interval_values
    }


def add_task(store: InMemoryStore, interval_id: str, description: str, type: str = "inspection") -> str:
    return store.add(
        "maintenance_tasks",
        interval_id=interval_id,
        description=description,
        type=type,
        estimated_time=30,
        requires_specialist=False,
    )


def add_part(store: InMemoryStore, task_id: str, name: str, quantity: int = 1) -> str:
    return store.add(
        "task_parts",
        task_id=task_id,
        name=name,
        part_number=f"PN-{name}",
        quantity=quantity,
        cost=None,
    )


@pytest.fixture
def source_store():
    return InMemoryStore("source")


@pytest.fixture
def destination_store():
    return InMemoryStore("destination")


@pytest.fixture
def sleeps():
    """Delays requested by retry logic."""
    return []


@pytest.fixture
def source_repo(source_store, sleeps):
    return MaintenancePlanRepository(source_store, sleep=sleeps.append)


@pytest.fixture
def destination_repo(destination_store, sleeps):
    return MaintenancePlanRepository(destination_store, sleep=sleeps.append)


@pytest.fixture
def config(tmp_path):
    """Valid configuration writing into a temporary directory."""
    return MigrationConfig(
        source=StoreConfig(name="source", url="https://source.example.co", service_role_key="src-key"),
        destination=StoreConfig(name="destination", url="https://dest.example.co", service_role_key="dst-key"),
        models=["BOM-PUTZMEISTER", "KENWORTH-T460"],
        output_dir=str(tmp_path),
    )


@pytest.fixture
def make_orchestrator(source_store, destination_store, sleeps):
    """Build orchestrators over the in-memory stores."""
    def factory(config: MigrationConfig) -> MigrationOrchestrator:
        return MigrationOrchestrator(
            config,
            source_store=source_store,
            destination_store=destination_store,
            tracker=ProgressTracker(config.progress_path),
            sleep=sleeps.append,
        )
    return factory


@pytest.fixture
def putzmeister(source_store, destination_store):
    """
    BOM-PUTZMEISTER with intervals 100 and 300 in both stores, five source
    tasks under interval 100 and two parts under the first task.
    """
    src_intervals = seed_model(source_store, "BOM-PUTZMEISTER", [100, 300])
    dst_intervals = seed_model(destination_store, "BOM-PUTZMEISTER", [100, 300])

    task_ids = [
        add_task(source_store, src_intervals[100], description)
        for description in [
            "Check hydraulic oil level",
            "Grease boom pivots",
            "Inspect delivery pipe wear",
            "Clean water box",
            "Check agitator seals",
        ]
    ]
    part_ids = [
        add_part(source_store, task_ids[0], "Hydraulic oil filter"),
        add_part(source_store, task_ids[0], "Seal kit", quantity=2),
    ]

    return {
        "source_intervals": src_intervals,
        "destination_intervals": dst_intervals,
        "task_ids": task_ids,
        "part_ids": part_ids,
    }

"""Record models for maintenance plan data."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

Number = Union[int, float]

# (interval_id, description, type) identifies a task across stores
TaskKey = Tuple[str, str, str]

# (task_id, name) identifies a part at the destination
PartKey = Tuple[str, str]


@dataclass
class EquipmentModel:
    """An equipment model, identified across stores by its exact name."""
    id: str
    name: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "EquipmentModel":
        return cls(id=str(row["id"]), name=row["name"])


@dataclass
class MaintenanceInterval:
    """A maintenance interval (e.g. every 300 hours) belonging to a model."""
    id: str
    model_id: str
    interval_value: Number
    name: str = ""

    @property
    def label(self) -> str:
        """Human readable form used in warnings."""
        value = self.interval_value
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return f"{self.name} ({value})"

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MaintenanceInterval":
        return cls(
            id=str(row["id"]),
            model_id=str(row["model_id"]),
            interval_value=row["interval_value"],
            name=row.get("name") or "",
        )


@dataclass
class MaintenanceTask:
    """A task to perform at a maintenance interval."""
    id: str
    interval_id: str
    description: str
    type: str
    estimated_time: Optional[Number] = None
    requires_specialist: Optional[bool] = None

    def key(self, interval_id: Optional[str] = None) -> TaskKey:
        """Composite key, optionally rebased onto another interval ID."""
        return (interval_id or self.interval_id, self.description, self.type)

    def to_insert(self, interval_id: str) -> Dict[str, Any]:
        """Row payload for insertion under ``interval_id``."""
        return {
            "interval_id": interval_id,
            "description": self.description,
            "type": self.type,
            "estimated_time": self.estimated_time,
            "requires_specialist": self.requires_specialist,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MaintenanceTask":
        return cls(
            id=str(row["id"]),
            interval_id=str(row["interval_id"]),
            description=row["description"],
            type=row["type"],
            estimated_time=row.get("estimated_time"),
            requires_specialist=row.get("requires_specialist"),
        )


@dataclass
class TaskPart:
    """A part consumed by a maintenance task."""
    id: str
    task_id: str
    name: str
    quantity: Number = 1
    part_number: Optional[str] = None
    cost: Optional[Number] = None

    def to_insert(self, task_id: str) -> Dict[str, Any]:
        """Row payload for insertion under ``task_id``."""
        return {
            "task_id": task_id,
            "name": self.name,
            "part_number": self.part_number,
            "quantity": self.quantity,
            "cost": self.cost,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TaskPart":
        return cls(
            id=str(row["id"]),
            task_id=str(row["task_id"]),
            name=row["name"],
            quantity=row.get("quantity", 1),
            part_number=row.get("part_number"),
            cost=row.get("cost"),
        )

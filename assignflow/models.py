"""
Assignflow Models
=================

Priority: urgency levels (lower number = more urgent).
PriorityItem: the unit of work exchanged between producer and consumer.
RunReport: outcome of one coordinated producer/consumer run.

All models use Pydantic BaseModel (not dataclass).
"""

from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Priority(IntEnum):
    """Urgency of an item. HIGH sorts before MEDIUM before LOW."""
    HIGH = 1
    MEDIUM = 2
    LOW = 3

    @classmethod
    def parse(cls, value: Any) -> "Priority":
        """Accept a Priority, its number, or its name (any case)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().upper()
            if name in cls.__members__:
                return cls[name]
            if name.isdigit():
                return cls(int(name))
            raise ValueError(f"Unknown priority: {value!r}")
        return cls(value)


class PriorityItem(BaseModel):
    """An immutable, orderable unit of work.

    Items order by due timestamp first, then by priority. Two items with
    the same due timestamp and priority are order-equivalent even if their
    descriptions differ.
    """
    model_config = ConfigDict(frozen=True)

    description: str = Field(min_length=1)
    due: datetime
    priority: Priority = Priority.MEDIUM

    @field_validator("description")
    @classmethod
    def _description_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Cannot create an item with a blank description")
        return value

    @field_validator("due")
    @classmethod
    def _due_is_aware(cls, value: datetime) -> datetime:
        # Naive timestamps are taken as UTC so every pair of items compares.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("priority", mode="before")
    @classmethod
    def _parse_priority(cls, value: Any) -> Priority:
        return Priority.parse(value)

    @property
    def sort_key(self) -> Tuple[datetime, int]:
        """Key used for queue placement: (due, priority)."""
        return (self.due, int(self.priority))

    def __lt__(self, other: "PriorityItem") -> bool:
        if not isinstance(other, PriorityItem):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __le__(self, other: "PriorityItem") -> bool:
        if not isinstance(other, PriorityItem):
            return NotImplemented
        return self.sort_key <= other.sort_key

    def __gt__(self, other: "PriorityItem") -> bool:
        if not isinstance(other, PriorityItem):
            return NotImplemented
        return self.sort_key > other.sort_key

    def __ge__(self, other: "PriorityItem") -> bool:
        if not isinstance(other, PriorityItem):
            return NotImplemented
        return self.sort_key >= other.sort_key

    def __str__(self) -> str:
        return (
            f"PriorityItem(description={self.description!r}, "
            f"due={self.due.isoformat()}, priority={self.priority.name})"
        )

    def serialize(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        data = self.model_dump(mode="json")
        data["priority"] = self.priority.name
        return data

    @staticmethod
    def deserialize(data: Dict[str, Any]) -> "PriorityItem":
        return PriorityItem(**data)


class RunReport(BaseModel):
    """Outcome of a coordinated run."""
    status: str = "completed"  # "completed" or "cancelled"
    produced: int = 0
    consumed: int = 0
    failed: int = 0  # items whose processing raised
    duration: float = 0.0

    def serialize(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

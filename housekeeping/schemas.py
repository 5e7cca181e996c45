"""
Record schemas for the housekeeping collections.

Each Pydantic model maps to one record inside a named collection. Records are
persisted with camelCase keys (``lastCleaned``, ``roomsAssigned``) and read
back through ``from_store``.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from housekeeping.models import (
    AssignmentStatusEnum,
    PriorityEnum,
    RoomStatusEnum,
    ShiftEnum,
    StaffRoleEnum,
    StaffStatusEnum,
)


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_store(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_store(cls, data: Dict[str, Any]):
        return cls.model_validate(data)


def _unique(values: List[str]) -> List[str]:
    seen = []
    for v in values:
        if v not in seen:
            seen.append(v)
    return seen


class Room(Record):
    number: str = Field(..., min_length=1, description="Room number, unique")
    floor: int = Field(..., description="Floor the room is on")
    type: str = Field("Standard", description="Standard, Deluxe, Suite")
    status: RoomStatusEnum = RoomStatusEnum.Dirty
    last_cleaned: Optional[str] = Field(None, description="ISO timestamp or a relative label")
    assigned_to: Optional[str] = Field(None, description="Staff id while an assignment is open")
    priority: PriorityEnum = PriorityEnum.Medium
    issues: List[str] = Field(default_factory=list)


class Staff(Record):
    id: str
    name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""
    role: StaffRoleEnum = StaffRoleEnum.Housekeeper
    status: StaffStatusEnum = StaffStatusEnum.Available
    shift: ShiftEnum = ShiftEnum.Morning
    pin: str = Field(..., pattern=r"^\d{4}$", description="4-digit login PIN")
    hire_date: Optional[str] = None
    efficiency: int = Field(80, ge=0, le=100)
    rooms_assigned: List[str] = Field(default_factory=list)
    specializations: List[str] = Field(default_factory=list)
    notes: str = ""

    @field_validator("rooms_assigned", "specializations")
    @classmethod
    def _as_set(cls, v: List[str]) -> List[str]:
        return _unique(v)


class StaffOut(Record):
    """Staff as shown to clients: everything but the PIN."""

    id: str
    name: str
    email: str = ""
    phone: str = ""
    role: StaffRoleEnum
    status: StaffStatusEnum
    shift: ShiftEnum
    hire_date: Optional[str] = None
    efficiency: int
    rooms_assigned: List[str] = Field(default_factory=list)
    specializations: List[str] = Field(default_factory=list)
    notes: str = ""


class Assignment(Record):
    id: str
    room_number: str
    staff_id: str
    staff_name: str = Field(..., description="Name snapshot taken when the assignment was created")
    priority: PriorityEnum = PriorityEnum.Medium
    estimated_time: int = Field(..., gt=0, description="Minutes")
    status: AssignmentStatusEnum = AssignmentStatusEnum.Pending
    assigned_at: datetime
    due_time: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    superseded_by: Optional[str] = None

    @model_validator(mode="after")
    def _due_follows_estimate(self):
        if self.due_time != self.assigned_at + timedelta(minutes=self.estimated_time):
            raise ValueError("dueTime must equal assignedAt + estimatedTime")
        return self

    @property
    def is_open(self) -> bool:
        return self.superseded_by is None and self.status in (
            AssignmentStatusEnum.Pending,
            AssignmentStatusEnum.InProgress,
        )


class CleaningTask(Record):
    id: str
    description: str
    completed: bool = False
    photo_required: bool = False
    photo_uploaded: bool = False


class Area(Record):
    id: str
    area: str
    tasks: List[CleaningTask] = Field(default_factory=list)


class CompletionRecord(Record):
    room_number: str
    completed_at: datetime
    completed_tasks: int
    total_tasks: int
    photos_required: int = 0
    photos_uploaded: int = 0
    notes: str = ""
    completion_rate: float
    assignment_id: Optional[str] = None
    staff_id: Optional[str] = None


class Usage(Record):
    daily: float = 0
    weekly: float = 0
    monthly: float = 0


class Supply(Record):
    id: str
    name: str
    category: str = "General"
    current_stock: int = Field(..., ge=0)
    min_threshold: int = Field(..., ge=0)
    max_capacity: int = Field(..., gt=0)
    unit: str = "unit"
    cost_per_unit: float = Field(0, ge=0)
    last_restocked: Optional[str] = None
    usage: Usage = Field(default_factory=Usage)

    @model_validator(mode="after")
    def _stock_within_capacity(self):
        if self.current_stock > self.max_capacity:
            raise ValueError("currentStock cannot exceed maxCapacity")
        return self

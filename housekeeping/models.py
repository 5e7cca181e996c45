# models.py
import enum
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String

from housekeeping.database import Base


class RoomStatusEnum(str, enum.Enum):
    Clean = "clean"
    Dirty = "dirty"
    InProgress = "in-progress"
    Maintenance = "maintenance"
    Overdue = "overdue"


class PriorityEnum(str, enum.Enum):
    Low = "low"
    Medium = "medium"
    High = "high"


class StaffRoleEnum(str, enum.Enum):
    Manager = "manager"
    Supervisor = "supervisor"
    Housekeeper = "housekeeper"
    Maintenance = "maintenance"


class StaffStatusEnum(str, enum.Enum):
    Available = "available"
    Busy = "busy"
    Break = "break"
    OffDuty = "off-duty"


class ShiftEnum(str, enum.Enum):
    Morning = "morning"
    Evening = "evening"
    Night = "night"
    FullDay = "full-day"


class AssignmentStatusEnum(str, enum.Enum):
    Pending = "pending"
    InProgress = "in-progress"
    Completed = "completed"


class SupplyStatusEnum(str, enum.Enum):
    Critical = "critical"
    Low = "low"
    Medium = "medium"
    Good = "good"


# Allowed status changes; setting the current status again is always a no-op
ROOM_TRANSITIONS = {
    RoomStatusEnum.Clean: {RoomStatusEnum.Dirty, RoomStatusEnum.InProgress, RoomStatusEnum.Maintenance},
    RoomStatusEnum.Dirty: {
        RoomStatusEnum.Clean, RoomStatusEnum.InProgress, RoomStatusEnum.Maintenance, RoomStatusEnum.Overdue,
    },
    RoomStatusEnum.InProgress: {
        RoomStatusEnum.Clean, RoomStatusEnum.Dirty, RoomStatusEnum.Maintenance, RoomStatusEnum.Overdue,
    },
    RoomStatusEnum.Overdue: {
        RoomStatusEnum.Clean, RoomStatusEnum.Dirty, RoomStatusEnum.InProgress, RoomStatusEnum.Maintenance,
    },
    RoomStatusEnum.Maintenance: {RoomStatusEnum.Clean, RoomStatusEnum.Dirty},
}

ASSIGNMENT_TRANSITIONS = {
    AssignmentStatusEnum.Pending: AssignmentStatusEnum.InProgress,
    AssignmentStatusEnum.InProgress: AssignmentStatusEnum.Completed,
    AssignmentStatusEnum.Completed: None,
}

OPEN_ASSIGNMENT_STATUSES = (AssignmentStatusEnum.Pending, AssignmentStatusEnum.InProgress)


def _utcnow():
    return datetime.now(timezone.utc)


class Collection(Base):
    """One named collection: the whole JSON value is read and written at once."""

    __tablename__ = "collections"
    key = Column(String(200), primary_key=True, index=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

"""
Cleaning checklist engine.

Each room's current cleaning session is an area-grouped task list stored under
``cleaning-tasks-<room>``. Photos are tracked per task, but neither toggling
a task nor finalizing the session requires them: the finalize gate only looks
at ``completed``.
"""

from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from housekeeping import store as keys
from housekeeping.assignments import complete_for_room
from housekeeping.errors import InvalidState, NotFound
from housekeeping.models import RoomStatusEnum
from housekeeping.rooms import apply_status, find_room, load_rooms, save_rooms
from housekeeping.schemas import Area, CleaningTask, CompletionRecord
from housekeeping.seed import fresh_checklist
from housekeeping.store import CollectionStore, unit_of_work

logger = structlog.get_logger(__name__)


class Checklist:
    """One room's task list for the current cleaning session."""

    def __init__(self, room_number: str, areas: List[Area]):
        self.room_number = room_number
        self.areas = areas

    @classmethod
    def from_store(cls, room_number: str, data) -> "Checklist":
        return cls(room_number, [Area.from_store(a) for a in data])

    def to_store(self):
        return [a.to_store() for a in self.areas]

    @property
    def tasks(self) -> List[CleaningTask]:
        return [t for a in self.areas for t in a.tasks]

    @property
    def total_tasks(self) -> int:
        return len(self.tasks)

    @property
    def completed_tasks(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    @property
    def progress(self) -> float:
        total = self.total_tasks
        return self.completed_tasks / total * 100 if total else 0.0

    @property
    def can_finalize(self) -> bool:
        # photo uploads are not part of the gate
        return self.total_tasks > 0 and all(t.completed for t in self.tasks)

    @property
    def photos_required(self) -> int:
        return sum(1 for t in self.tasks if t.photo_required)

    @property
    def photos_uploaded(self) -> int:
        return sum(1 for t in self.tasks if t.photo_required and t.photo_uploaded)

    @property
    def pending_photos(self) -> List[str]:
        return [
            f"{a.id}/{t.id}" for a in self.areas for t in a.tasks if t.photo_required and not t.photo_uploaded
        ]

    def task(self, area_id: str, task_id: str) -> CleaningTask:
        for a in self.areas:
            if a.id != area_id:
                continue
            for t in a.tasks:
                if t.id == task_id:
                    return t
            raise NotFound(f"Task {task_id} not found in {area_id}.", "task", f"{area_id}/{task_id}")
        raise NotFound(f"Area {area_id} not found.", "area", area_id)

    def summary(self) -> dict:
        return {
            "roomNumber": self.room_number,
            "areas": self.to_store(),
            "totalTasks": self.total_tasks,
            "completedTasks": self.completed_tasks,
            "progress": self.progress,
            "canFinalize": self.can_finalize,
            "photosRequired": self.photos_required,
            "photosUploaded": self.photos_uploaded,
            "pendingPhotos": self.pending_photos,
        }


def _require_room(store: CollectionStore, room_number: str) -> None:
    find_room(load_rooms(store), room_number)


def load_checklist(store: CollectionStore, room_number: str) -> Checklist:
    data = store.read(keys.checklist_key(room_number))
    if data is None:
        data = fresh_checklist()
    return Checklist.from_store(room_number, data)


def save_checklist(store: CollectionStore, checklist: Checklist) -> None:
    store.write(keys.checklist_key(checklist.room_number), checklist.to_store())


# ----- Queries -----
def get_checklist(db: Session, room_number: str) -> Checklist:
    store = CollectionStore(db)
    _require_room(store, room_number)
    return load_checklist(store, room_number)


def completion_history(db: Session, room_number: Optional[str] = None) -> List[CompletionRecord]:
    records = [CompletionRecord.from_store(r) for r in CollectionStore(db).read(keys.COMPLETIONS, [])]
    if room_number is not None:
        records = [r for r in records if r.room_number == room_number]
    return records


# ----- Mutations -----
def initialize(db: Session, room_number: str) -> Checklist:
    with unit_of_work(db) as store:
        _require_room(store, room_number)
        checklist = Checklist.from_store(room_number, fresh_checklist())
        save_checklist(store, checklist)
    logger.info("Checklist reset for room %s", room_number)
    return checklist


def toggle_task(db: Session, room_number: str, area_id: str, task_id: str) -> Checklist:
    with unit_of_work(db) as store:
        _require_room(store, room_number)
        checklist = load_checklist(store, room_number)
        task = checklist.task(area_id, task_id)
        task.completed = not task.completed
        save_checklist(store, checklist)
    logger.debug("Room %s task %s/%s completed=%s", room_number, area_id, task_id, task.completed)
    return checklist


def upload_photo(db: Session, room_number: str, area_id: str, task_id: str) -> Checklist:
    with unit_of_work(db) as store:
        _require_room(store, room_number)
        checklist = load_checklist(store, room_number)
        task = checklist.task(area_id, task_id)
        if not task.photo_required:
            raise InvalidState(
                f"Task {area_id}/{task_id} does not take a photo.", "task", f"{area_id}/{task_id}"
            )
        task.photo_uploaded = True
        save_checklist(store, checklist)
    logger.info("Photo recorded for room %s task %s/%s", room_number, area_id, task_id)
    return checklist


def finalize(db: Session, room_number: str, notes: str = "", now: Optional[datetime] = None) -> CompletionRecord:
    now = now or datetime.now(timezone.utc)
    with unit_of_work(db) as store:
        _require_room(store, room_number)
        checklist = load_checklist(store, room_number)
        if not checklist.can_finalize:
            raise InvalidState(
                f"Room {room_number} checklist is {checklist.completed_tasks}/{checklist.total_tasks} complete.",
                "checklist",
                room_number,
            )

        assignment = complete_for_room(store, room_number, now)
        # completing the assignment already cleaned the room; this covers rooms cleaned without one
        rooms = load_rooms(store)
        room = find_room(rooms, room_number)
        if room.status != RoomStatusEnum.Clean:
            apply_status(room, RoomStatusEnum.Clean, now)
        room.last_cleaned = now.isoformat()
        save_rooms(store, rooms)

        record = CompletionRecord(
            room_number=room_number,
            completed_at=now,
            completed_tasks=checklist.completed_tasks,
            total_tasks=checklist.total_tasks,
            photos_required=checklist.photos_required,
            photos_uploaded=checklist.photos_uploaded,
            notes=(notes or "").strip(),
            completion_rate=checklist.progress,
            assignment_id=assignment.id if assignment else None,
            staff_id=assignment.staff_id if assignment else None,
        )
        history = store.read(keys.COMPLETIONS, [])
        history.append(record.to_store())
        store.write(keys.COMPLETIONS, history)
    logger.info(
        "Room %s cleaning completed: %d/%d tasks, %d/%d photos",
        room_number, record.completed_tasks, record.total_tasks, record.photos_uploaded, record.photos_required,
    )
    return record

# rooms.py: room registry
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from housekeeping import store as keys
from housekeeping.errors import InvalidState, NotFound
from housekeeping.models import ROOM_TRANSITIONS, RoomStatusEnum
from housekeeping.schemas import Room
from housekeeping.store import CollectionStore, unit_of_work

logger = structlog.get_logger(__name__)


# ----- Store-level helpers (used inside another operation's unit of work) -----
def load_rooms(store: CollectionStore) -> List[Room]:
    return [Room.from_store(r) for r in store.read(keys.ROOMS, [])]


def save_rooms(store: CollectionStore, rooms: List[Room]) -> None:
    store.write(keys.ROOMS, [r.to_store() for r in rooms])


def find_room(rooms: List[Room], number: str) -> Room:
    for r in rooms:
        if r.number == number:
            return r
    raise NotFound(f"Room {number} not found.", "room", number)


def apply_status(room: Room, status: RoomStatusEnum, now: Optional[datetime] = None) -> bool:
    """Move ``room`` to ``status`` in place. Returns False for a same-status no-op."""
    status = RoomStatusEnum(status)
    if room.status == status:
        return False
    if status not in ROOM_TRANSITIONS[room.status]:
        raise InvalidState(
            f"Room {room.number} cannot go from {room.status.value} to {status.value}.",
            "room",
            room.number,
        )
    room.status = status
    if status == RoomStatusEnum.Clean:
        room.last_cleaned = (now or datetime.now(timezone.utc)).isoformat()
    return True


# ----- Queries -----
def list_rooms(
    db: Session,
    status: Optional[RoomStatusEnum] = None,
    floor: Optional[int] = None,
    search: Optional[str] = None,
) -> List[Room]:
    store = CollectionStore(db)
    rooms = load_rooms(store)
    names = {s["id"]: s.get("name", "") for s in store.read(keys.STAFF, [])}
    term = (search or "").strip().lower()

    def matches(r: Room) -> bool:
        if status is not None and r.status != RoomStatusEnum(status):
            return False
        if floor is not None and r.floor != floor:
            return False
        if term:
            staff_name = names.get(r.assigned_to, "") if r.assigned_to else ""
            return term in r.number.lower() or term in staff_name.lower()
        return True

    return [r for r in rooms if matches(r)]


def get_room(db: Session, number: str) -> Room:
    return find_room(load_rooms(CollectionStore(db)), number)


# ----- Mutations -----
def set_status(db: Session, number: str, status: RoomStatusEnum, now: Optional[datetime] = None) -> Room:
    with unit_of_work(db) as store:
        rooms = load_rooms(store)
        room = find_room(rooms, number)
        if apply_status(room, status, now):
            save_rooms(store, rooms)
            logger.info("Room %s set to %s", number, room.status.value)
    return room


def record_issue(db: Session, number: str, text: str) -> Room:
    text = (text or "").strip()
    if not text:
        raise InvalidState("Issue text cannot be empty.", "room", number)
    with unit_of_work(db) as store:
        rooms = load_rooms(store)
        room = find_room(rooms, number)
        room.issues.append(text)
        save_rooms(store, rooms)
    logger.info("Issue recorded for room %s: %s", number, text)
    return room


def resolve_issues(db: Session, number: str) -> Room:
    with unit_of_work(db) as store:
        rooms = load_rooms(store)
        room = find_room(rooms, number)
        if room.issues:
            room.issues = []
            save_rooms(store, rooms)
            logger.info("Issues cleared for room %s", number)
    return room

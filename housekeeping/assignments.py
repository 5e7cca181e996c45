"""
Assignment scheduler.

An assignment binds one staff member to one room for one cleaning cycle and
only ever moves forward: pending -> in-progress -> completed. A room holds at
most one open assignment; handing the room to somebody else supersedes the
open record with a new one instead of cancelling it.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from housekeeping import config
from housekeeping import store as keys
from housekeeping.errors import Conflict, InvalidState, NotFound
from housekeeping.models import (
    ASSIGNMENT_TRANSITIONS,
    ROOM_TRANSITIONS,
    AssignmentStatusEnum,
    PriorityEnum,
    RoomStatusEnum,
    StaffStatusEnum,
)
from housekeeping.rooms import apply_status, find_room, load_rooms, save_rooms
from housekeeping.schemas import Assignment, Room, Staff
from housekeeping.seed import fresh_checklist
from housekeeping.staff import find_staff, load_staff, recompute_status, save_staff
from housekeeping.store import CollectionStore, unit_of_work

logger = structlog.get_logger(__name__)

ROOM_TYPE_WEIGHTS = {"standard": 1.0, "deluxe": 1.25, "suite": 1.5}
HIGH_PRIORITY_WEIGHT = 1.1
QUICK_TURNOVER_WEIGHT = 0.85
ROOM_SPECIALIST_WEIGHT = 0.9
MIN_ESTIMATE = 15


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ----- Store-level helpers -----
def load_assignments(store: CollectionStore) -> List[Assignment]:
    return [Assignment.from_store(a) for a in store.read(keys.ASSIGNMENTS, [])]


def save_assignments(store: CollectionStore, assignments: List[Assignment]) -> None:
    store.write(keys.ASSIGNMENTS, [a.to_store() for a in assignments])


def find_assignment(assignments: List[Assignment], assignment_id: str) -> Assignment:
    for a in assignments:
        if a.id == assignment_id:
            return a
    raise NotFound(f"Assignment {assignment_id} not found.", "assignment", assignment_id)


def open_assignment_for_room(assignments: List[Assignment], room_number: str) -> Optional[Assignment]:
    return next((a for a in assignments if a.room_number == room_number and a.is_open), None)


def _next_id(assignments: List[Assignment]) -> str:
    return str(max([int(a.id) for a in assignments if a.id.isdigit()], default=0) + 1)


def estimate_minutes(room: Room, member: Staff, priority: Optional[PriorityEnum] = None) -> int:
    minutes = config.DEFAULT_ESTIMATED_MINUTES * ROOM_TYPE_WEIGHTS.get(room.type.lower(), 1.0)
    if (priority or room.priority) == PriorityEnum.High:
        minutes *= HIGH_PRIORITY_WEIGHT
    skills = [s.lower() for s in member.specializations]
    if any("quick" in s for s in skills):
        minutes *= QUICK_TURNOVER_WEIGHT
    room_type = room.type.lower()
    if any(room_type in s for s in skills):
        minutes *= ROOM_SPECIALIST_WEIGHT
    return max(MIN_ESTIMATE, int(round(minutes)))


def _new_assignment(assignments, room, member, priority, estimated_time, now) -> Assignment:
    priority = PriorityEnum(priority) if priority else room.priority
    minutes = estimated_time if estimated_time is not None else estimate_minutes(room, member, priority)
    return Assignment(
        id=_next_id(assignments),
        room_number=room.number,
        staff_id=member.id,
        staff_name=member.name,
        priority=priority,
        estimated_time=minutes,
        status=AssignmentStatusEnum.Pending,
        assigned_at=now,
        due_time=now + timedelta(minutes=minutes),
    )


def _bind(member: Staff, room: Room) -> None:
    member.status = StaffStatusEnum.Busy
    if room.number not in member.rooms_assigned:
        member.rooms_assigned.append(room.number)
    room.assigned_to = member.id


def _step(assignment: Assignment, rooms: List[Room], members: List[Staff],
          assignments: List[Assignment], now: datetime) -> Assignment:
    """Move one assignment a single step forward and apply the room/staff effects."""
    if assignment.superseded_by is not None:
        raise InvalidState(
            f"Assignment {assignment.id} was superseded by {assignment.superseded_by}.",
            "assignment",
            assignment.id,
        )
    target = ASSIGNMENT_TRANSITIONS[assignment.status]
    if target is None:
        raise InvalidState(f"Assignment {assignment.id} is already completed.", "assignment", assignment.id)

    room = find_room(rooms, assignment.room_number)
    assignment.status = target
    if target == AssignmentStatusEnum.InProgress:
        assignment.started_at = now
        # a room under maintenance keeps that status while it is being cleaned
        if RoomStatusEnum.InProgress in ROOM_TRANSITIONS[room.status]:
            apply_status(room, RoomStatusEnum.InProgress, now)
    else:
        assignment.completed_at = now
        apply_status(room, RoomStatusEnum.Clean, now)
        room.assigned_to = None
        member = next((s for s in members if s.id == assignment.staff_id), None)
        if member is not None:
            recompute_status(member, assignments)
    return assignment


# ----- Queries -----
def list_assignments(
    db: Session,
    status: Optional[AssignmentStatusEnum] = None,
    room_number: Optional[str] = None,
    staff_id: Optional[str] = None,
) -> List[Assignment]:
    result = load_assignments(CollectionStore(db))
    if status is not None:
        result = [a for a in result if a.status == AssignmentStatusEnum(status)]
    if room_number is not None:
        result = [a for a in result if a.room_number == room_number]
    if staff_id is not None:
        result = [a for a in result if a.staff_id == staff_id]
    return result


def get_assignment(db: Session, assignment_id: str) -> Assignment:
    return find_assignment(load_assignments(CollectionStore(db)), assignment_id)


def overdue_assignments(db: Session, now: Optional[datetime] = None) -> List[Assignment]:
    now = now or _utcnow()
    return [a for a in load_assignments(CollectionStore(db)) if a.is_open and a.due_time < now]


# ----- Mutations -----
def assign(
    db: Session,
    staff_id: str,
    room_number: str,
    priority: Optional[PriorityEnum] = None,
    estimated_time: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Assignment:
    if estimated_time is not None and estimated_time <= 0:
        raise InvalidState("Estimated time must be a positive number of minutes.", "assignment")
    now = now or _utcnow()
    with unit_of_work(db) as store:
        members = load_staff(store)
        rooms = load_rooms(store)
        assignments = load_assignments(store)
        member = find_staff(members, staff_id)
        room = find_room(rooms, room_number)

        if member.status != StaffStatusEnum.Available:
            raise Conflict(f"Staff {staff_id} is {member.status.value}, not available.", "staff", staff_id)
        current = open_assignment_for_room(assignments, room_number)
        if current is not None:
            raise Conflict(
                f"Room {room_number} already has open assignment {current.id}.", "room", room_number
            )

        assignment = _new_assignment(assignments, room, member, priority, estimated_time, now)
        assignments.append(assignment)
        _bind(member, room)

        save_assignments(store, assignments)
        save_staff(store, members)
        save_rooms(store, rooms)
        # a new assignment starts a new cleaning session for the room
        store.write(keys.checklist_key(room_number), fresh_checklist())
    logger.info(
        "Assigned room %s to %s (assignment %s, %d min)",
        room_number, member.name, assignment.id, assignment.estimated_time,
    )
    return assignment


def advance(db: Session, assignment_id: str, now: Optional[datetime] = None) -> Assignment:
    now = now or _utcnow()
    with unit_of_work(db) as store:
        assignments = load_assignments(store)
        rooms = load_rooms(store)
        members = load_staff(store)
        assignment = _step(find_assignment(assignments, assignment_id), rooms, members, assignments, now)
        save_assignments(store, assignments)
        save_rooms(store, rooms)
        save_staff(store, members)
    logger.info("Assignment %s is now %s", assignment_id, assignment.status.value)
    return assignment


def complete_for_room(store: CollectionStore, room_number: str, now: datetime) -> Optional[Assignment]:
    """Drive the room's open assignment to completed inside the caller's unit of work."""
    assignments = load_assignments(store)
    assignment = open_assignment_for_room(assignments, room_number)
    if assignment is None:
        return None
    rooms = load_rooms(store)
    members = load_staff(store)
    while assignment.status != AssignmentStatusEnum.Completed:
        _step(assignment, rooms, members, assignments, now)
    save_assignments(store, assignments)
    save_rooms(store, rooms)
    save_staff(store, members)
    logger.info("Assignment %s completed for room %s", assignment.id, room_number)
    return assignment


def reassign(db: Session, assignment_id: str, staff_id: str, now: Optional[datetime] = None) -> Assignment:
    """Hand an open assignment's room to another available staff member."""
    now = now or _utcnow()
    with unit_of_work(db) as store:
        assignments = load_assignments(store)
        rooms = load_rooms(store)
        members = load_staff(store)
        old = find_assignment(assignments, assignment_id)
        if not old.is_open:
            raise InvalidState(f"Assignment {assignment_id} is not open.", "assignment", assignment_id)
        member = find_staff(members, staff_id)
        if member.id == old.staff_id:
            raise Conflict(f"Assignment {assignment_id} already belongs to staff {staff_id}.", "staff", staff_id)
        if member.status != StaffStatusEnum.Available:
            raise Conflict(f"Staff {staff_id} is {member.status.value}, not available.", "staff", staff_id)

        room = find_room(rooms, old.room_number)
        replacement = _new_assignment(assignments, room, member, old.priority, old.estimated_time, now)
        old.superseded_by = replacement.id
        assignments.append(replacement)
        _bind(member, room)
        previous = next((s for s in members if s.id == old.staff_id), None)
        if previous is not None:
            recompute_status(previous, assignments)
        # the room waits for the new staff member to start
        if room.status == RoomStatusEnum.InProgress:
            apply_status(room, RoomStatusEnum.Dirty, now)

        save_assignments(store, assignments)
        save_staff(store, members)
        save_rooms(store, rooms)
        store.write(keys.checklist_key(room.number), fresh_checklist())
    logger.info("Assignment %s superseded by %s (staff %s)", assignment_id, replacement.id, staff_id)
    return replacement


def flag_overdue_rooms(db: Session, now: Optional[datetime] = None) -> List[str]:
    """Mark rooms whose open assignment is past due as overdue."""
    now = now or _utcnow()
    flagged = []
    with unit_of_work(db) as store:
        rooms = load_rooms(store)
        for a in load_assignments(store):
            if not a.is_open or a.due_time >= now:
                continue
            room = find_room(rooms, a.room_number)
            if room.status in (RoomStatusEnum.Overdue, RoomStatusEnum.Maintenance, RoomStatusEnum.Clean):
                continue
            apply_status(room, RoomStatusEnum.Overdue, now)
            flagged.append(room.number)
        if flagged:
            save_rooms(store, rooms)
    if flagged:
        logger.info("Flagged overdue rooms: %s", ", ".join(flagged))
    return flagged

# staff.py: staff roster
import secrets
from datetime import date
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError
from sqlalchemy.orm import Session

from housekeeping import store as keys
from housekeeping.errors import Conflict, InvalidState, NotFound, Unauthorized
from housekeeping.models import StaffRoleEnum, StaffStatusEnum
from housekeeping.schemas import Assignment, Staff
from housekeeping.store import CollectionStore, unit_of_work

logger = structlog.get_logger(__name__)

DEFAULT_EFFICIENCY = 80


# ----- Store-level helpers -----
def load_staff(store: CollectionStore) -> List[Staff]:
    return [Staff.from_store(s) for s in store.read(keys.STAFF, [])]


def save_staff(store: CollectionStore, members: List[Staff]) -> None:
    store.write(keys.STAFF, [s.to_store() for s in members])


def find_staff(members: List[Staff], staff_id: str) -> Staff:
    for s in members:
        if s.id == staff_id:
            return s
    raise NotFound(f"Staff {staff_id} not found.", "staff", staff_id)


def open_work(assignments: List[Assignment], staff_id: str) -> List[Assignment]:
    return [a for a in assignments if a.staff_id == staff_id and a.is_open]


def _load_assignments(store: CollectionStore) -> List[Assignment]:
    return [Assignment.from_store(a) for a in store.read(keys.ASSIGNMENTS, [])]


def recompute_status(member: Staff, assignments: List[Assignment]) -> StaffStatusEnum:
    """Busy while any assignment is open; a busy member with none left is available again."""
    if open_work(assignments, member.id):
        member.status = StaffStatusEnum.Busy
    elif member.status == StaffStatusEnum.Busy:
        member.status = StaffStatusEnum.Available
    return member.status


def _sort_key(staff_id: str):
    # numeric ids sort numerically, anything else after them lexically
    return (0, int(staff_id), "") if staff_id.isdigit() else (1, 0, staff_id)


def _next_id(members: List[Staff]) -> str:
    return str(max([int(s.id) for s in members if s.id.isdigit()], default=0) + 1)


def _generate_pin() -> str:
    return str(1000 + secrets.randbelow(9000))


# ----- Queries -----
def list_staff(
    db: Session,
    role: Optional[StaffRoleEnum] = None,
    status: Optional[StaffStatusEnum] = None,
    search: Optional[str] = None,
) -> List[Staff]:
    term = (search or "").strip().lower()
    result = []
    for s in load_staff(CollectionStore(db)):
        if role is not None and s.role != StaffRoleEnum(role):
            continue
        if status is not None and s.status != StaffStatusEnum(status):
            continue
        if term and term not in s.name.lower() and term not in s.email.lower():
            continue
        result.append(s)
    return result


def get_staff(db: Session, staff_id: str) -> Staff:
    return find_staff(load_staff(CollectionStore(db)), staff_id)


def available_candidates(db: Session) -> List[Staff]:
    """Available staff, most efficient first; ties go to the lower id."""
    members = [s for s in load_staff(CollectionStore(db)) if s.status == StaffStatusEnum.Available]
    members.sort(key=lambda s: _sort_key(s.id))
    members.sort(key=lambda s: s.efficiency, reverse=True)
    return members


def authenticate(db: Session, staff_id: str, pin: str) -> Staff:
    members = load_staff(CollectionStore(db))
    member = next((s for s in members if s.id == staff_id), None)
    # same failure for unknown id and wrong PIN
    if member is None or not secrets.compare_digest(member.pin.encode(), str(pin or "").encode()):
        logger.warning("Rejected PIN for staff %s", staff_id)
        raise Unauthorized("Invalid staff ID or PIN", "staff", staff_id)
    return member


# ----- Mutations -----
def add_staff(db: Session, profile: Dict[str, Any]) -> Staff:
    name = (profile.get("name") or "").strip()
    if not name:
        raise InvalidState("Name cannot be empty.", "staff")
    with unit_of_work(db) as store:
        members = load_staff(store)
        if any(s.name.lower() == name.lower() for s in members):
            raise Conflict("Staff already exists.", "staff", name)
        # roster-owned fields are never taken from the profile
        data = {
            k: v for k, v in profile.items()
            if v is not None and k not in ("roomsAssigned", "hireDate")
        }
        data.update(
            id=_next_id(members),
            name=name,
            pin=profile.get("pin") or _generate_pin(),
            status=StaffStatusEnum.Available,
            efficiency=DEFAULT_EFFICIENCY,
            rooms_assigned=[],
            hire_date=date.today().isoformat(),
        )
        try:
            member = Staff.model_validate(data)
        except ValidationError as e:
            raise InvalidState(f"Invalid staff profile: {e.errors()[0]['msg']}", "staff") from e
        members.append(member)
        save_staff(store, members)
    logger.info("Added staff %s (%s)", member.name, member.id)
    return member


def update_staff(db: Session, staff_id: str, patch: Dict[str, Any]) -> Staff:
    with unit_of_work(db) as store:
        members = load_staff(store)
        member = find_staff(members, staff_id)
        fields = {k: v for k, v in patch.items() if v is not None and k != "id"}
        if "name" in fields:
            fields["name"] = fields["name"].strip()
            if any(s.id != staff_id and s.name.lower() == fields["name"].lower() for s in members):
                raise Conflict("Another staff member already has that name.", "staff", staff_id)
        try:
            updated = Staff.model_validate({**member.model_dump(), **fields})
        except ValidationError as e:
            raise InvalidState(f"Invalid staff update: {e.errors()[0]['msg']}", "staff", staff_id) from e

        working = bool(open_work(_load_assignments(store), staff_id))
        if updated.status != member.status:
            if updated.status == StaffStatusEnum.Busy and not working:
                raise Conflict("Staff without open assignments cannot be busy.", "staff", staff_id)
            if member.status == StaffStatusEnum.Busy and working:
                raise Conflict("Staff with open assignments must stay busy.", "staff", staff_id)

        members[members.index(member)] = updated
        save_staff(store, members)
    logger.info("Updated staff %s", staff_id)
    return updated


def remove_staff(db: Session, staff_id: str) -> Staff:
    with unit_of_work(db) as store:
        members = load_staff(store)
        member = find_staff(members, staff_id)
        pending = open_work(_load_assignments(store), staff_id)
        if pending:
            raise Conflict(
                f"Staff {staff_id} still has open assignments: {', '.join(a.id for a in pending)}.",
                "staff",
                staff_id,
            )
        members.remove(member)
        save_staff(store, members)
    logger.info("Removed staff %s (%s)", member.name, staff_id)
    return member

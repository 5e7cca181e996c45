# auth.py: PIN login on top of the staff roster
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from housekeeping import store as keys
from housekeeping.schemas import Staff
from housekeeping.staff import authenticate
from housekeeping.store import CollectionStore, unit_of_work

logger = structlog.get_logger(__name__)

HISTORY_LIMIT = 500


def login(db: Session, staff_id: str, pin: str, now: Optional[datetime] = None) -> Staff:
    """Check the PIN and record the login."""
    member = authenticate(db, staff_id, pin)
    now = now or datetime.now(timezone.utc)
    with unit_of_work(db) as store:
        history = store.read(keys.LOGIN_HISTORY, [])
        history.append({
            "staffId": member.id,
            "name": member.name,
            "role": member.role.value,
            "shift": member.shift.value,
            "loginTime": now.isoformat(),
        })
        store.write(keys.LOGIN_HISTORY, history[-HISTORY_LIMIT:])
    logger.info("Staff %s (%s) logged in", member.name, member.id)
    return member


def login_history(db: Session, staff_id: Optional[str] = None) -> List[dict]:
    history = CollectionStore(db).read(keys.LOGIN_HISTORY, [])
    if staff_id is not None:
        history = [h for h in history if h.get("staffId") == staff_id]
    return history

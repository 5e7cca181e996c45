# export.py: read-only snapshot of the core collections
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from housekeeping import store as keys
from housekeeping.store import CollectionStore


def snapshot_state(db: Session) -> dict:
    """Return a unified snapshot of all app data."""
    store = CollectionStore(db)
    checklists = {
        key[len(keys.CHECKLIST_PREFIX):]: store.read(key, [])
        for key in store.keys(keys.CHECKLIST_PREFIX)
    }
    return {
        "rooms": store.read(keys.ROOMS, []),
        "staff": store.read(keys.STAFF, []),
        "assignments": store.read(keys.ASSIGNMENTS, []),
        "supplies": store.read(keys.SUPPLIES, []),
        "checklists": checklists,
        "completions": store.read(keys.COMPLETIONS, []),
        "reports": store.read(keys.CUSTOMER_REPORTS, []),
        "exportedAt": datetime.now(timezone.utc).isoformat(),
    }

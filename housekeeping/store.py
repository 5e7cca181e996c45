# store.py: named JSON collections on top of the collections table
import copy
import threading
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from housekeeping.models import Collection

ROOMS = "rooms"
STAFF = "staff-data"
ASSIGNMENTS = "assignments-data"
SUPPLIES = "supplies-data"
COMPLETIONS = "completion-records"
CUSTOMER_REPORTS = "customer-reports"
LOGIN_HISTORY = "login-history"
APP_SETTINGS = "app-settings"
CHECKLIST_PREFIX = "cleaning-tasks-"


def checklist_key(room_number: str) -> str:
    return f"{CHECKLIST_PREFIX}{room_number}"


# Single mutator at a time across request threads
_mutation_lock = threading.RLock()


class CollectionStore:
    """Whole-value reads and writes of named collections."""

    def __init__(self, db: Session):
        self.db = db

    def _row(self, key: str) -> Optional[Collection]:
        return self.db.get(Collection, key)

    def exists(self, key: str) -> bool:
        return self._row(key) is not None

    def read(self, key: str, default: Any = None) -> Any:
        row = self._row(key)
        if row is None:
            return copy.deepcopy(default)
        # Callers transform their own copy and write it back
        return copy.deepcopy(row.payload)

    def write(self, key: str, value: Any) -> None:
        row = self._row(key)
        if row is None:
            self.db.add(Collection(key=key, payload=value))
        else:
            row.payload = value
            flag_modified(row, "payload")
        self.db.flush()

    def keys(self, prefix: str = "") -> List[str]:
        stmt = select(Collection.key).order_by(Collection.key)
        if prefix:
            stmt = stmt.where(Collection.key.startswith(prefix))
        return list(self.db.execute(stmt).scalars().all())


@contextmanager
def unit_of_work(db: Session) -> Iterator[CollectionStore]:
    """Serialize one mutation and commit its writes together or not at all."""
    with _mutation_lock:
        store = CollectionStore(db)
        try:
            yield store
        except Exception:
            db.rollback()
            raise
        db.commit()

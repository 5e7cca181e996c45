# app_settings.py: portal title/logo/theme and display counts
from typing import Dict, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from housekeeping import store as keys
from housekeeping.seed import DEFAULT_SETTINGS
from housekeeping.store import CollectionStore, unit_of_work


class AppSettings(BaseModel):
    title: str = DEFAULT_SETTINGS["title"]
    logo: str = DEFAULT_SETTINGS["logo"]
    theme: str = DEFAULT_SETTINGS["theme"]


def get_settings(db: Session) -> AppSettings:
    return AppSettings(**CollectionStore(db).read(keys.APP_SETTINGS, {}))


def update_settings(db: Session, title: Optional[str] = None, logo: Optional[str] = None,
                    theme: Optional[str] = None) -> AppSettings:
    with unit_of_work(db) as store:
        current = AppSettings(**store.read(keys.APP_SETTINGS, {}))
        changes = {k: v for k, v in {"title": title, "logo": logo, "theme": theme}.items() if v is not None}
        updated = current.model_copy(update=changes)
        store.write(keys.APP_SETTINGS, updated.model_dump())
    return updated


def collection_counts(db: Session) -> Dict[str, int]:
    """Record counts shown on the settings screen."""
    store = CollectionStore(db)
    return {
        "rooms": len(store.read(keys.ROOMS, [])),
        "staff": len(store.read(keys.STAFF, [])),
        "assignments": len(store.read(keys.ASSIGNMENTS, [])),
        "supplies": len(store.read(keys.SUPPLIES, [])),
        "reports": len(store.read(keys.CUSTOMER_REPORTS, [])),
    }

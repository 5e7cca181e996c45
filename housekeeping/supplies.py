# supplies.py: consumable stock and threshold evaluation
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

from housekeeping import store as keys
from housekeeping.errors import InvalidState, NotFound
from housekeeping.models import SupplyStatusEnum
from housekeeping.schemas import Supply
from housekeeping.store import CollectionStore, unit_of_work

logger = structlog.get_logger(__name__)

LOW_RATIO = 0.30
MEDIUM_RATIO = 0.60


def load_supplies(store: CollectionStore) -> List[Supply]:
    return [Supply.from_store(s) for s in store.read(keys.SUPPLIES, [])]


def save_supplies(store: CollectionStore, supplies: List[Supply]) -> None:
    store.write(keys.SUPPLIES, [s.to_store() for s in supplies])


def find_supply(supplies: List[Supply], supply_id: str) -> Supply:
    for s in supplies:
        if s.id == supply_id:
            return s
    raise NotFound(f"Supply {supply_id} not found.", "supply", supply_id)


def stock_status(supply: Supply) -> SupplyStatusEnum:
    # the threshold check wins over the percentage bands
    if supply.current_stock <= supply.min_threshold:
        return SupplyStatusEnum.Critical
    ratio = supply.current_stock / supply.max_capacity
    if ratio <= LOW_RATIO:
        return SupplyStatusEnum.Low
    if ratio <= MEDIUM_RATIO:
        return SupplyStatusEnum.Medium
    return SupplyStatusEnum.Good


def days_remaining(supply: Supply) -> Optional[float]:
    if supply.usage.daily <= 0:
        return None
    return supply.current_stock / supply.usage.daily


def _clamp(value: int, upper: int) -> int:
    return max(0, min(upper, value))


# ----- Queries -----
def list_supplies(db: Session, category: Optional[str] = None) -> List[Supply]:
    supplies = load_supplies(CollectionStore(db))
    if category:
        supplies = [s for s in supplies if s.category.lower() == category.lower()]
    return supplies


def get_supply(db: Session, supply_id: str) -> Supply:
    return find_supply(load_supplies(CollectionStore(db)), supply_id)


def critical_items(db: Session) -> List[Supply]:
    return [s for s in list_supplies(db) if stock_status(s) == SupplyStatusEnum.Critical]


def low_items(db: Session) -> List[Supply]:
    return [s for s in list_supplies(db) if stock_status(s) == SupplyStatusEnum.Low]


def cost_projection(db: Session) -> Dict[str, float]:
    supplies = list_supplies(db)
    return {
        "daily": round(sum(s.usage.daily * s.cost_per_unit for s in supplies), 2),
        "weekly": round(sum(s.usage.weekly * s.cost_per_unit for s in supplies), 2),
        "monthly": round(sum(s.usage.monthly * s.cost_per_unit for s in supplies), 2),
    }


def reorder_suggestions(db: Session) -> List[dict]:
    """Critical and low items with the quantity needed to fill them up."""
    suggestions = []
    for s in list_supplies(db):
        status = stock_status(s)
        if status not in (SupplyStatusEnum.Critical, SupplyStatusEnum.Low):
            continue
        quantity = s.max_capacity - s.current_stock
        suggestions.append({
            "id": s.id,
            "name": s.name,
            "status": status.value,
            "quantity": quantity,
            "unit": s.unit,
            "estimatedCost": round(quantity * s.cost_per_unit, 2),
        })
    return suggestions


# ----- Mutations -----
def adjust_stock(db: Session, supply_id: str, delta: int) -> Supply:
    """Add ``delta`` units, saturating at 0 and at capacity."""
    with unit_of_work(db) as store:
        supplies = load_supplies(store)
        supply = find_supply(supplies, supply_id)
        before = supply.current_stock
        supply.current_stock = _clamp(before + int(delta), supply.max_capacity)
        save_supplies(store, supplies)
    if before + int(delta) != supply.current_stock:
        logger.info("Stock for %s clamped to %d (requested %+d)", supply.name, supply.current_stock, delta)
    else:
        logger.info("Stock for %s changed %d -> %d", supply.name, before, supply.current_stock)
    return supply


def restock(db: Session, supply_id: str, quantity: Optional[int] = None, now: Optional[datetime] = None) -> Supply:
    """Top up a supply (to capacity when no quantity is given) and stamp the restock time."""
    if quantity is not None and quantity <= 0:
        raise InvalidState("Restock quantity must be positive.", "supply", supply_id)
    now = now or datetime.now(timezone.utc)
    with unit_of_work(db) as store:
        supplies = load_supplies(store)
        supply = find_supply(supplies, supply_id)
        target = supply.max_capacity if quantity is None else supply.current_stock + quantity
        supply.current_stock = _clamp(target, supply.max_capacity)
        supply.last_restocked = now.isoformat()
        save_supplies(store, supplies)
    logger.info("Restocked %s to %d %s", supply.name, supply.current_stock, supply.unit)
    return supply

"""
Dashboard counters.

Everything here is derived from the stored entities and kept in memory only.
The sampler re-reads the store on a timer and never writes back, so a refresh
racing a user edit can at worst show a stale number.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog
from sqlalchemy.orm import Session

from housekeeping import store as keys
from housekeeping.models import AssignmentStatusEnum, RoomStatusEnum, StaffStatusEnum, SupplyStatusEnum
from housekeeping.schemas import Assignment, CompletionRecord, Record, Room, Staff, Supply
from housekeeping.store import CollectionStore
from housekeeping.supplies import stock_status

logger = structlog.get_logger(__name__)


class DashboardStats(Record):
    total_rooms: int = 0
    clean_rooms: int = 0
    completed_today: int = 0
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    overdue_tasks: int = 0
    active_staff: int = 0
    available_staff: int = 0
    critical_supplies: int = 0
    completion_rate: float = 0.0
    sampled_at: Optional[datetime] = None


def compute_stats(db: Session, now: Optional[datetime] = None) -> DashboardStats:
    now = now or datetime.now(timezone.utc)
    store = CollectionStore(db)
    rooms = [Room.from_store(r) for r in store.read(keys.ROOMS, [])]
    staff = [Staff.from_store(s) for s in store.read(keys.STAFF, [])]
    assignments = [Assignment.from_store(a) for a in store.read(keys.ASSIGNMENTS, [])]
    supplies = [Supply.from_store(s) for s in store.read(keys.SUPPLIES, [])]
    completions = [CompletionRecord.from_store(c) for c in store.read(keys.COMPLETIONS, [])]

    open_work = [a for a in assignments if a.is_open]
    clean = sum(1 for r in rooms if r.status == RoomStatusEnum.Clean)
    return DashboardStats(
        total_rooms=len(rooms),
        clean_rooms=clean,
        completed_today=sum(1 for c in completions if c.completed_at.date() == now.date()),
        pending_tasks=sum(1 for a in open_work if a.status == AssignmentStatusEnum.Pending),
        in_progress_tasks=sum(1 for a in open_work if a.status == AssignmentStatusEnum.InProgress),
        overdue_tasks=sum(1 for a in open_work if a.due_time < now),
        active_staff=sum(1 for s in staff if s.status != StaffStatusEnum.OffDuty),
        available_staff=sum(1 for s in staff if s.status == StaffStatusEnum.Available),
        critical_supplies=sum(1 for s in supplies if stock_status(s) == SupplyStatusEnum.Critical),
        completion_rate=round(clean / len(rooms) * 100, 1) if rooms else 0.0,
        sampled_at=now,
    )


class MetricsSampler:
    """Keeps the latest DashboardStats; read-only against the store."""

    def __init__(self, session_factory: Callable[[], Session], interval: float = 30):
        self.session_factory = session_factory
        self.interval = interval
        self.latest: Optional[DashboardStats] = None
        self._task: Optional[asyncio.Task] = None

    def sample(self) -> DashboardStats:
        db = self.session_factory()
        try:
            self.latest = compute_stats(db)
        finally:
            db.close()
        logger.debug("Dashboard sampled: %s", self.latest.model_dump(exclude={"sampled_at"}))
        return self.latest

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.to_thread(self.sample)
            except Exception:
                # a failed refresh only leaves the previous numbers on screen
                logger.exception("Dashboard sampling failed")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.interval <= 0 or self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Dashboard sampler running every %ss", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

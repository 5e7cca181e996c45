# app.py: FastAPI app over the housekeeping collections
from contextlib import asynccontextmanager
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field
from sqlalchemy.orm import Session

from housekeeping import (
    app_settings,
    assignments,
    auth,
    checklist,
    config,
    export,
    rooms,
    staff,
    supplies,
)
from housekeeping.database import SessionLocal, get_db, init_db
from housekeeping.errors import Conflict, HousekeepingError, InvalidState, NotFound, Unauthorized
from housekeeping.metrics import DashboardStats, MetricsSampler, compute_stats
from housekeeping.models import (
    AssignmentStatusEnum,
    PriorityEnum,
    RoomStatusEnum,
    ShiftEnum,
    StaffRoleEnum,
    StaffStatusEnum,
)
from housekeeping.schemas import Assignment, CompletionRecord, Record, Room, StaffOut, Supply
from housekeeping.seed import seed_defaults

logger = structlog.get_logger(__name__)

ERROR_STATUS = {
    NotFound: 404,
    Conflict: 409,
    Unauthorized: 401,
    InvalidState: 400,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if config.SEED_DATA:
        db = SessionLocal()
        try:
            seed_defaults(db)
        finally:
            db.close()
    sampler = app.state.sampler
    sampler.start()
    yield
    await sampler.stop()


def create_app(sampler: Optional[MetricsSampler] = None, use_lifespan: bool = True) -> FastAPI:
    config.configure_logging()
    app = FastAPI(
        title="Housekeeping Management System API",
        lifespan=lifespan if use_lifespan else None,
    )
    app.state.sampler = sampler or MetricsSampler(SessionLocal, config.METRICS_INTERVAL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HousekeepingError)
    async def housekeeping_error_handler(request: Request, exc: HousekeepingError):
        status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.kind, exc.message)
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    app.include_router(rooms_router)
    app.include_router(staff_router)
    app.include_router(assignments_router)
    app.include_router(supplies_router)
    app.include_router(portal_router)
    return app


# ----- Pydantic payloads -----
class RoomStatusIn(Record):
    status: RoomStatusEnum


class IssueIn(Record):
    text: str


class StaffIn(Record):
    name: str
    email: Optional[str] = ""
    phone: Optional[str] = ""
    role: Optional[StaffRoleEnum] = StaffRoleEnum.Housekeeper
    shift: Optional[ShiftEnum] = ShiftEnum.Morning
    pin: Optional[str] = None
    specializations: Optional[List[str]] = None
    notes: Optional[str] = ""


class StaffPatch(Record):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[StaffRoleEnum] = None
    status: Optional[StaffStatusEnum] = None
    shift: Optional[ShiftEnum] = None
    pin: Optional[str] = None
    efficiency: Optional[int] = None
    rooms_assigned: Optional[List[str]] = None
    specializations: Optional[List[str]] = None
    notes: Optional[str] = None


class LoginIn(Record):
    staff_id: str
    pin: str


class AssignIn(Record):
    staff_id: str
    room_number: str
    priority: Optional[PriorityEnum] = None
    estimated_time: Optional[int] = Field(None, gt=0)


class ReassignIn(Record):
    staff_id: str


class FinalizeIn(Record):
    notes: Optional[str] = ""


class StockIn(Record):
    delta: int


class RestockIn(Record):
    quantity: Optional[int] = None


class SettingsIn(Record):
    title: Optional[str] = None
    logo: Optional[str] = None
    theme: Optional[str] = None


# ----- Routes -----
rooms_router = APIRouter(tags=["rooms"])

@rooms_router.get("/rooms", response_model=List[Room])
def list_rooms(status: Optional[RoomStatusEnum] = None, floor: Optional[int] = None,
               search: Optional[str] = None, db: Session = Depends(get_db)):
    return rooms.list_rooms(db, status=status, floor=floor, search=search)

@rooms_router.get("/rooms/{number}", response_model=Room)
def get_room(number: str, db: Session = Depends(get_db)):
    return rooms.get_room(db, number)

@rooms_router.patch("/rooms/{number}", response_model=Room)
def update_room(number: str, payload: RoomStatusIn, db: Session = Depends(get_db)):
    return rooms.set_status(db, number, payload.status)

@rooms_router.post("/rooms/{number}/issues", response_model=Room)
def add_issue(number: str, payload: IssueIn, db: Session = Depends(get_db)):
    return rooms.record_issue(db, number, payload.text)

@rooms_router.delete("/rooms/{number}/issues", response_model=Room)
def clear_issues(number: str, db: Session = Depends(get_db)):
    return rooms.resolve_issues(db, number)

@rooms_router.get("/rooms/{number}/checklist")
def get_checklist(number: str, db: Session = Depends(get_db)):
    return checklist.get_checklist(db, number).summary()

@rooms_router.post("/rooms/{number}/checklist")
def reset_checklist(number: str, db: Session = Depends(get_db)):
    return checklist.initialize(db, number).summary()

@rooms_router.post("/rooms/{number}/checklist/{area_id}/{task_id}/toggle")
def toggle_task(number: str, area_id: str, task_id: str, db: Session = Depends(get_db)):
    return checklist.toggle_task(db, number, area_id, task_id).summary()

@rooms_router.post("/rooms/{number}/checklist/{area_id}/{task_id}/photo")
def upload_photo(number: str, area_id: str, task_id: str, db: Session = Depends(get_db)):
    return checklist.upload_photo(db, number, area_id, task_id).summary()

@rooms_router.post("/rooms/{number}/checklist/finalize", response_model=CompletionRecord)
def finalize(number: str, payload: FinalizeIn, db: Session = Depends(get_db)):
    return checklist.finalize(db, number, payload.notes or "")

@rooms_router.get("/rooms/{number}/completions", response_model=List[CompletionRecord])
def completions(number: str, db: Session = Depends(get_db)):
    rooms.get_room(db, number)
    return checklist.completion_history(db, number)


staff_router = APIRouter(tags=["staff"])

@staff_router.get("/staff", response_model=List[StaffOut])
def list_staff(role: Optional[StaffRoleEnum] = None, status: Optional[StaffStatusEnum] = None,
               search: Optional[str] = None, db: Session = Depends(get_db)):
    return staff.list_staff(db, role=role, status=status, search=search)

@staff_router.get("/staff/available", response_model=List[StaffOut])
def available(db: Session = Depends(get_db)):
    return staff.available_candidates(db)

@staff_router.get("/staff/{staff_id}", response_model=StaffOut)
def get_staff(staff_id: str, db: Session = Depends(get_db)):
    return staff.get_staff(db, staff_id)

@staff_router.post("/staff", response_model=StaffOut, status_code=201)
def add_staff(payload: StaffIn, db: Session = Depends(get_db)):
    return staff.add_staff(db, payload.model_dump())

@staff_router.patch("/staff/{staff_id}", response_model=StaffOut)
def edit_staff(staff_id: str, payload: StaffPatch, db: Session = Depends(get_db)):
    return staff.update_staff(db, staff_id, payload.model_dump(exclude_unset=True))

@staff_router.delete("/staff/{staff_id}", response_model=StaffOut)
def remove_staff(staff_id: str, db: Session = Depends(get_db)):
    return staff.remove_staff(db, staff_id)

@staff_router.post("/login", response_model=StaffOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    return auth.login(db, payload.staff_id, payload.pin)

@staff_router.get("/login-history")
def login_history(staff_id: Optional[str] = None, db: Session = Depends(get_db)):
    return auth.login_history(db, staff_id)


assignments_router = APIRouter(tags=["assignments"])

@assignments_router.get("/assignments", response_model=List[Assignment])
def list_assignments(status: Optional[AssignmentStatusEnum] = None, room: Optional[str] = None,
                     staff_id: Optional[str] = None, db: Session = Depends(get_db)):
    return assignments.list_assignments(db, status=status, room_number=room, staff_id=staff_id)

@assignments_router.get("/assignments/overdue", response_model=List[Assignment])
def overdue(db: Session = Depends(get_db)):
    return assignments.overdue_assignments(db)

@assignments_router.post("/assignments/flag-overdue")
def flag_overdue(db: Session = Depends(get_db)):
    return {"rooms": assignments.flag_overdue_rooms(db)}

@assignments_router.get("/assignments/{assignment_id}", response_model=Assignment)
def get_assignment(assignment_id: str, db: Session = Depends(get_db)):
    return assignments.get_assignment(db, assignment_id)

@assignments_router.post("/assignments", response_model=Assignment, status_code=201)
def assign(payload: AssignIn, db: Session = Depends(get_db)):
    return assignments.assign(
        db, payload.staff_id, payload.room_number,
        priority=payload.priority, estimated_time=payload.estimated_time,
    )

@assignments_router.post("/assignments/{assignment_id}/advance", response_model=Assignment)
def advance(assignment_id: str, db: Session = Depends(get_db)):
    return assignments.advance(db, assignment_id)

@assignments_router.post("/assignments/{assignment_id}/reassign", response_model=Assignment)
def reassign(assignment_id: str, payload: ReassignIn, db: Session = Depends(get_db)):
    return assignments.reassign(db, assignment_id, payload.staff_id)


supplies_router = APIRouter(tags=["supplies"])

def with_status(s: Supply) -> dict:
    return {**s.to_store(), "status": supplies.stock_status(s).value,
            "daysRemaining": supplies.days_remaining(s)}

@supplies_router.get("/supplies")
def list_supplies(category: Optional[str] = None, db: Session = Depends(get_db)):
    return [with_status(s) for s in supplies.list_supplies(db, category)]

@supplies_router.get("/supplies/summary")
def summary(db: Session = Depends(get_db)):
    return {
        "critical": [with_status(s) for s in supplies.critical_items(db)],
        "low": [with_status(s) for s in supplies.low_items(db)],
        "costs": supplies.cost_projection(db),
        "reorder": supplies.reorder_suggestions(db),
    }

@supplies_router.get("/supplies/{supply_id}")
def get_supply(supply_id: str, db: Session = Depends(get_db)):
    return with_status(supplies.get_supply(db, supply_id))

@supplies_router.post("/supplies/{supply_id}/adjust")
def adjust(supply_id: str, payload: StockIn, db: Session = Depends(get_db)):
    return with_status(supplies.adjust_stock(db, supply_id, payload.delta))

@supplies_router.post("/supplies/{supply_id}/restock")
def restock(supply_id: str, payload: RestockIn, db: Session = Depends(get_db)):
    return with_status(supplies.restock(db, supply_id, payload.quantity))


portal_router = APIRouter(tags=["portal"])

@portal_router.get("/")
def root():
    return {"message": "Housekeeping Management System API is running"}

@portal_router.get("/state")
def get_state(db: Session = Depends(get_db)):
    state = export.snapshot_state(db)
    state["staff"] = [StaffOut.from_store(s).to_store() for s in state["staff"]]
    return state

@portal_router.get("/stats", response_model=DashboardStats)
def stats(request: Request, db: Session = Depends(get_db)):
    latest = request.app.state.sampler.latest
    return latest if latest is not None else compute_stats(db)

@portal_router.get("/settings", response_model=app_settings.AppSettings)
def get_settings(db: Session = Depends(get_db)):
    return app_settings.get_settings(db)

@portal_router.put("/settings", response_model=app_settings.AppSettings)
def put_settings(payload: SettingsIn, db: Session = Depends(get_db)):
    return app_settings.update_settings(db, payload.title, payload.logo, payload.theme)

@portal_router.get("/settings/counts")
def counts(db: Session = Depends(get_db)):
    return app_settings.collection_counts(db)


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("housekeeping.app:app", host=config.HOST, port=config.PORT, reload=config.DEBUG)

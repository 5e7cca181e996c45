# seed.py: initial rooms, staff, assignments and supplies
import copy
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from housekeeping import store as keys
from housekeeping.store import unit_of_work

logger = structlog.get_logger(__name__)


ROOMS = [
    {"number": "101", "floor": 1, "type": "Standard", "status": "clean", "lastCleaned": "2 hours ago",
     "assignedTo": None, "priority": "low", "issues": []},
    {"number": "102", "floor": 1, "type": "Standard", "status": "overdue", "lastCleaned": "6 hours ago",
     "assignedTo": None, "priority": "high", "issues": ["Bathroom needs attention"]},
    {"number": "103", "floor": 1, "type": "Deluxe", "status": "in-progress", "lastCleaned": "30 min ago",
     "assignedTo": "2", "priority": "medium", "issues": []},
    {"number": "201", "floor": 2, "type": "Standard", "status": "dirty", "lastCleaned": "4 hours ago",
     "assignedTo": None, "priority": "medium", "issues": []},
    {"number": "202", "floor": 2, "type": "Suite", "status": "clean", "lastCleaned": "1 hour ago",
     "assignedTo": None, "priority": "low", "issues": []},
    {"number": "203", "floor": 2, "type": "Standard", "status": "maintenance", "lastCleaned": "8 hours ago",
     "assignedTo": None, "priority": "high", "issues": ["AC repair needed"]},
    {"number": "301", "floor": 3, "type": "Deluxe", "status": "clean", "lastCleaned": "3 hours ago",
     "assignedTo": None, "priority": "low", "issues": []},
    {"number": "302", "floor": 3, "type": "Standard", "status": "dirty", "lastCleaned": "5 hours ago",
     "assignedTo": "3", "priority": "medium", "issues": []},
    {"number": "303", "floor": 3, "type": "Suite", "status": "in-progress", "lastCleaned": "45 min ago",
     "assignedTo": "5", "priority": "medium", "issues": []},
    {"number": "401", "floor": 4, "type": "Standard", "status": "overdue", "lastCleaned": "7 hours ago",
     "assignedTo": None, "priority": "high", "issues": ["Guest complaint"]},
]

STAFF = [
    {"id": "1", "name": "Maria Santos", "email": "maria@hotel.com", "phone": "+1-555-0101",
     "role": "housekeeper", "status": "available", "shift": "morning", "pin": "1234",
     "hireDate": "2023-01-15", "efficiency": 95, "roomsAssigned": ["101"],
     "specializations": ["Deep Cleaning", "VIP Suites"],
     "notes": "Excellent attention to detail. Preferred for VIP guests."},
    {"id": "2", "name": "John Davis", "email": "john@hotel.com", "phone": "+1-555-0102",
     "role": "housekeeper", "status": "busy", "shift": "morning", "pin": "2345",
     "hireDate": "2023-03-20", "efficiency": 88, "roomsAssigned": ["103"],
     "specializations": ["Standard Rooms", "Quick Turnovers"],
     "notes": "Fast and reliable. Good for high-volume days."},
    {"id": "3", "name": "Sarah Lee", "email": "sarah@hotel.com", "phone": "+1-555-0103",
     "role": "supervisor", "status": "busy", "shift": "full-day", "pin": "3456",
     "hireDate": "2022-08-10", "efficiency": 92, "roomsAssigned": ["302"],
     "specializations": ["Quality Control", "Training", "Inventory"],
     "notes": "Team leader with excellent organizational skills."},
    {"id": "4", "name": "Mike Rodriguez", "email": "mike@hotel.com", "phone": "+1-555-0104",
     "role": "maintenance", "status": "available", "shift": "morning", "pin": "4567",
     "hireDate": "2023-05-12", "efficiency": 85, "roomsAssigned": [],
     "specializations": ["HVAC", "Plumbing", "Electrical"],
     "notes": "Handles all maintenance requests efficiently."},
    {"id": "5", "name": "Lisa Kim", "email": "lisa@hotel.com", "phone": "+1-555-0105",
     "role": "housekeeper", "status": "busy", "shift": "evening", "pin": "5678",
     "hireDate": "2022-11-02", "efficiency": 97, "roomsAssigned": ["303"],
     "specializations": ["Suites", "Deep Cleaning"], "notes": ""},
    {"id": "6", "name": "Tom Brown", "email": "tom@hotel.com", "phone": "+1-555-0106",
     "role": "manager", "status": "available", "shift": "full-day", "pin": "6789",
     "hireDate": "2021-06-01", "efficiency": 90, "roomsAssigned": [],
     "specializations": ["Scheduling"], "notes": ""},
]

# (id, room, staff id, staff name, priority, minutes, status, minutes ago)
ASSIGNMENTS = [
    ("1", "101", "1", "Maria Santos", "high", 45, "completed", 180),
    ("2", "103", "2", "John Davis", "high", 60, "in-progress", 30),
    ("3", "303", "5", "Lisa Kim", "medium", 40, "in-progress", 45),
    ("4", "302", "3", "Sarah Lee", "low", 35, "pending", 10),
]

SUPPLIES = [
    {"id": "1", "name": "Toilet Paper", "category": "Bathroom", "currentStock": 45, "minThreshold": 20,
     "maxCapacity": 100, "unit": "rolls", "costPerUnit": 1.25, "lastRestocked": "2 days ago",
     "usage": {"daily": 8, "weekly": 56, "monthly": 240}},
    {"id": "2", "name": "Towels", "category": "Bathroom", "currentStock": 12, "minThreshold": 15,
     "maxCapacity": 50, "unit": "pieces", "costPerUnit": 8.5, "lastRestocked": "1 week ago",
     "usage": {"daily": 3, "weekly": 21, "monthly": 90}},
    {"id": "3", "name": "Bed Sheets", "category": "Bedroom", "currentStock": 28, "minThreshold": 25,
     "maxCapacity": 75, "unit": "sets", "costPerUnit": 15.0, "lastRestocked": "3 days ago",
     "usage": {"daily": 4, "weekly": 28, "monthly": 120}},
    {"id": "4", "name": "All-Purpose Cleaner", "category": "Cleaning", "currentStock": 8, "minThreshold": 10,
     "maxCapacity": 30, "unit": "bottles", "costPerUnit": 3.75, "lastRestocked": "5 days ago",
     "usage": {"daily": 2, "weekly": 14, "monthly": 60}},
    {"id": "5", "name": "Vacuum Bags", "category": "Equipment", "currentStock": 25, "minThreshold": 15,
     "maxCapacity": 50, "unit": "pieces", "costPerUnit": 2.0, "lastRestocked": "1 week ago",
     "usage": {"daily": 1, "weekly": 7, "monthly": 30}},
    {"id": "6", "name": "Disinfectant", "category": "Cleaning", "currentStock": 6, "minThreshold": 12,
     "maxCapacity": 40, "unit": "bottles", "costPerUnit": 4.25, "lastRestocked": "4 days ago",
     "usage": {"daily": 3, "weekly": 21, "monthly": 90}},
]

# Fixed checklist handed to every new cleaning session; (id, description, photo required)
CHECKLIST_TEMPLATE = [
    ("bathroom", "Bathroom", [
        ("toilet", "Clean and disinfect toilet", True),
        ("shower", "Clean shower/bathtub", True),
        ("sink", "Clean sink and mirror", False),
        ("floor", "Mop bathroom floor", False),
        ("towels", "Replace towels", False),
        ("supplies", "Restock bathroom supplies", False),
    ]),
    ("bedroom", "Bedroom", [
        ("bed", "Change bed linens", True),
        ("vacuum", "Vacuum carpet/floor", False),
        ("dust", "Dust furniture and surfaces", False),
        ("windows", "Clean windows and mirrors", False),
        ("trash", "Empty trash bins", False),
    ]),
    ("general", "General", [
        ("entry", "Clean entry area", False),
        ("ac", "Check AC/heating", False),
        ("amenities", "Restock amenities", False),
        ("final", "Final inspection", True),
    ]),
]


def fresh_checklist():
    """Stored form of a brand-new checklist: every task open, no photos."""
    return [
        {
            "id": area_id,
            "area": area,
            "tasks": [
                {"id": tid, "description": desc, "completed": False,
                 "photoRequired": photo, "photoUploaded": False}
                for tid, desc, photo in tasks
            ],
        }
        for area_id, area, tasks in CHECKLIST_TEMPLATE
    ]


DEFAULT_SETTINGS = {
    "title": "Housekeeping Management Portal",
    "logo": "/placeholder.svg?height=40&width=40",
    "theme": "default",
}


def seed_assignments(now: datetime):
    rows = []
    for aid, room, staff_id, name, priority, minutes, status, ago in ASSIGNMENTS:
        assigned_at = now - timedelta(minutes=ago)
        row = {
            "id": aid,
            "roomNumber": room,
            "staffId": staff_id,
            "staffName": name,
            "priority": priority,
            "estimatedTime": minutes,
            "status": status,
            "assignedAt": assigned_at.isoformat(),
            "dueTime": (assigned_at + timedelta(minutes=minutes)).isoformat(),
            "startedAt": None,
            "completedAt": None,
            "supersededBy": None,
        }
        if status != "pending":
            row["startedAt"] = (assigned_at + timedelta(minutes=5)).isoformat()
        if status == "completed":
            row["completedAt"] = (assigned_at + timedelta(minutes=minutes)).isoformat()
        rows.append(row)
    return rows


def seed_defaults(db: Session, now: Optional[datetime] = None) -> int:
    """Write seed records to every core collection that does not exist yet."""
    now = now or datetime.now(timezone.utc)
    defaults = {
        keys.ROOMS: ROOMS,
        keys.STAFF: STAFF,
        keys.ASSIGNMENTS: seed_assignments(now),
        keys.SUPPLIES: SUPPLIES,
        keys.APP_SETTINGS: DEFAULT_SETTINGS,
    }
    written = 0
    with unit_of_work(db) as store:
        for key, value in defaults.items():
            if store.exists(key):
                continue
            store.write(key, copy.deepcopy(value))
            written += 1
    if written:
        logger.info("Seeded %d collections", written)
    return written

"""Tests for housekeeping.checklist - cleaning sessions and finalization."""

import pytest

from housekeeping import assignments, checklist, rooms, staff
from housekeeping.errors import InvalidState, NotFound
from housekeeping.models import AssignmentStatusEnum, RoomStatusEnum, StaffStatusEnum


def complete_all(db, room_number):
    current = checklist.get_checklist(db, room_number)
    for area in current.areas:
        for task in area.tasks:
            if not task.completed:
                checklist.toggle_task(db, room_number, area.id, task.id)


class TestTemplate:
    def test_fresh_room_gets_template(self, db):
        current = checklist.get_checklist(db, "101")
        assert [a.id for a in current.areas] == ["bathroom", "bedroom", "general"]
        assert [len(a.tasks) for a in current.areas] == [6, 5, 4]
        assert current.total_tasks == 15
        assert current.completed_tasks == 0
        assert current.progress == 0
        assert not current.can_finalize

    def test_photo_tasks(self, db):
        current = checklist.get_checklist(db, "101")
        assert current.photos_required == 4
        assert current.pending_photos == ["bathroom/toilet", "bathroom/shower", "bedroom/bed", "general/final"]

    def test_unknown_room(self, db):
        with pytest.raises(NotFound):
            checklist.get_checklist(db, "999")


class TestToggle:
    def test_toggle_twice_restores(self, db):
        checklist.toggle_task(db, "201", "bathroom", "sink")
        assert checklist.get_checklist(db, "201").task("bathroom", "sink").completed
        checklist.toggle_task(db, "201", "bathroom", "sink")
        assert not checklist.get_checklist(db, "201").task("bathroom", "sink").completed

    def test_progress(self, db):
        for area_id, task_id in [("bathroom", "sink"), ("bedroom", "dust"), ("general", "ac")]:
            current = checklist.toggle_task(db, "201", area_id, task_id)
        assert current.completed_tasks == 3
        assert current.progress == pytest.approx(20.0)

    def test_photo_task_toggles_without_photo(self, db):
        current = checklist.toggle_task(db, "201", "bathroom", "toilet")
        assert current.task("bathroom", "toilet").completed
        assert not current.task("bathroom", "toilet").photo_uploaded

    def test_unknown_area(self, db):
        with pytest.raises(NotFound):
            checklist.toggle_task(db, "201", "garage", "sink")

    def test_unknown_task(self, db):
        with pytest.raises(NotFound):
            checklist.toggle_task(db, "201", "bathroom", "jacuzzi")


class TestPhotos:
    def test_upload(self, db):
        current = checklist.upload_photo(db, "201", "bathroom", "toilet")
        assert current.photos_uploaded == 1
        assert "bathroom/toilet" not in current.pending_photos

    def test_task_without_photo(self, db):
        with pytest.raises(InvalidState):
            checklist.upload_photo(db, "201", "bathroom", "sink")


class TestInitialize:
    def test_resets_progress(self, db):
        checklist.toggle_task(db, "201", "bathroom", "sink")
        checklist.upload_photo(db, "201", "bedroom", "bed")
        current = checklist.initialize(db, "201")
        assert current.completed_tasks == 0
        assert current.photos_uploaded == 0
        assert checklist.get_checklist(db, "201").completed_tasks == 0


class TestFinalize:
    def test_incomplete_checklist_rejected(self, db, now):
        checklist.toggle_task(db, "201", "bathroom", "sink")
        with pytest.raises(InvalidState):
            checklist.finalize(db, "201", now=now)
        assert checklist.completion_history(db) == []
        assert rooms.get_room(db, "201").status == RoomStatusEnum.Dirty

    def test_room_without_assignment(self, db, now):
        complete_all(db, "201")
        record = checklist.finalize(db, "201", notes="  All good ", now=now)
        assert record.completion_rate == 100
        assert record.total_tasks == 15
        assert record.notes == "All good"
        assert record.assignment_id is None
        room = rooms.get_room(db, "201")
        assert room.status == RoomStatusEnum.Clean
        assert room.last_cleaned == now.isoformat()

    def test_missing_photos_do_not_block(self, db, now):
        complete_all(db, "201")
        checklist.upload_photo(db, "201", "bathroom", "toilet")
        record = checklist.finalize(db, "201", now=now)
        assert record.photos_required == 4
        assert record.photos_uploaded == 1

    def test_completes_in_progress_assignment(self, db, now):
        complete_all(db, "303")
        record = checklist.finalize(db, "303", now=now)
        assert record.assignment_id == "3"
        assert record.staff_id == "5"
        assert assignments.get_assignment(db, "3").status == AssignmentStatusEnum.Completed
        assert staff.get_staff(db, "5").status == StaffStatusEnum.Available
        room = rooms.get_room(db, "303")
        assert room.status == RoomStatusEnum.Clean
        assert room.assigned_to is None

    def test_completes_pending_assignment(self, db, now):
        complete_all(db, "302")
        checklist.finalize(db, "302", now=now)
        a = assignments.get_assignment(db, "4")
        assert a.status == AssignmentStatusEnum.Completed
        assert a.started_at == now
        assert staff.get_staff(db, "3").status == StaffStatusEnum.Available

    def test_history_filtered_by_room(self, db, now):
        complete_all(db, "201")
        checklist.finalize(db, "201", now=now)
        complete_all(db, "303")
        checklist.finalize(db, "303", now=now)
        assert [r.room_number for r in checklist.completion_history(db)] == ["201", "303"]
        assert [r.room_number for r in checklist.completion_history(db, "303")] == ["303"]

    def test_unknown_room(self, db, now):
        with pytest.raises(NotFound):
            checklist.finalize(db, "999", now=now)

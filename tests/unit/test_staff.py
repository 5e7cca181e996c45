"""Tests for housekeeping.staff - the staff roster."""

import pytest

from housekeeping import assignments, staff
from housekeeping.errors import Conflict, InvalidState, NotFound, Unauthorized
from housekeeping.models import StaffRoleEnum, StaffStatusEnum


class TestListStaff:
    def test_role_filter(self, db):
        result = staff.list_staff(db, role=StaffRoleEnum.Housekeeper)
        assert [s.id for s in result] == ["1", "2", "5"]

    def test_status_filter(self, db):
        result = staff.list_staff(db, status="available")
        assert [s.id for s in result] == ["1", "4", "6"]

    def test_search_matches_name_or_email(self, db):
        assert [s.id for s in staff.list_staff(db, search="SANTOS")] == ["1"]
        assert [s.id for s in staff.list_staff(db, search="tom@")] == ["6"]


class TestAddStaff:
    def test_defaults(self, db):
        member = staff.add_staff(db, {"name": "Nina Park", "email": "nina@hotel.com"})
        assert member.id == "7"
        assert member.status == StaffStatusEnum.Available
        assert member.efficiency == 80
        assert member.rooms_assigned == []
        assert member.role == StaffRoleEnum.Housekeeper
        assert len(member.pin) == 4 and member.pin.isdigit()
        assert 1000 <= int(member.pin) <= 9999

    def test_explicit_pin_kept(self, db):
        member = staff.add_staff(db, {"name": "Nina Park", "pin": "0042"})
        assert member.pin == "0042"

    def test_caller_cannot_preset_roster_fields(self, db):
        member = staff.add_staff(
            db, {"name": "Nina Park", "status": "busy", "efficiency": 100, "rooms_assigned": ["101"]}
        )
        assert member.status == StaffStatusEnum.Available
        assert member.efficiency == 80
        assert member.rooms_assigned == []

    def test_ids_stay_unique(self, db):
        first = staff.add_staff(db, {"name": "Nina Park"})
        second = staff.add_staff(db, {"name": "Omar Reyes"})
        assert first.id != second.id

    def test_duplicate_name(self, db):
        with pytest.raises(Conflict):
            staff.add_staff(db, {"name": "maria santos"})

    def test_bad_pin(self, db):
        with pytest.raises(InvalidState):
            staff.add_staff(db, {"name": "Nina Park", "pin": "12ab"})

    def test_blank_name(self, db):
        with pytest.raises(InvalidState):
            staff.add_staff(db, {"name": "  "})


class TestUpdateStaff:
    def test_patch_fields(self, db):
        member = staff.update_staff(db, "4", {"phone": "+1-555-9999", "shift": "night", "efficiency": 91})
        assert member.phone == "+1-555-9999"
        assert member.shift.value == "night"
        assert staff.get_staff(db, "4").efficiency == 91

    def test_id_cannot_change(self, db):
        member = staff.update_staff(db, "4", {"id": "99", "notes": "Moved"})
        assert member.id == "4"

    def test_missing(self, db):
        with pytest.raises(NotFound):
            staff.update_staff(db, "99", {"notes": "x"})

    def test_available_to_break(self, db):
        assert staff.update_staff(db, "4", {"status": "break"}).status == StaffStatusEnum.Break

    def test_cannot_mark_idle_staff_busy(self, db):
        with pytest.raises(Conflict):
            staff.update_staff(db, "4", {"status": "busy"})

    def test_cannot_release_staff_with_open_work(self, db):
        with pytest.raises(Conflict):
            staff.update_staff(db, "2", {"status": "available"})
        assert staff.get_staff(db, "2").status == StaffStatusEnum.Busy

    def test_efficiency_out_of_range(self, db):
        with pytest.raises(InvalidState):
            staff.update_staff(db, "4", {"efficiency": 120})


class TestRemoveStaff:
    def test_remove_idle_member(self, db):
        staff.remove_staff(db, "4")
        with pytest.raises(NotFound):
            staff.get_staff(db, "4")

    def test_in_progress_work_blocks_removal(self, db):
        before_staff = staff.get_staff(db, "2")
        before_assignment = assignments.get_assignment(db, "2")
        with pytest.raises(Conflict):
            staff.remove_staff(db, "2")
        assert staff.get_staff(db, "2") == before_staff
        assert assignments.get_assignment(db, "2") == before_assignment

    def test_pending_work_blocks_removal(self, db):
        with pytest.raises(Conflict):
            staff.remove_staff(db, "3")

    def test_removal_allowed_after_reassigning(self, db):
        assignments.reassign(db, "2", "4")
        staff.remove_staff(db, "2")
        assert [s.id for s in staff.list_staff(db)] == ["1", "3", "4", "5", "6"]

    def test_remove_missing(self, db):
        with pytest.raises(NotFound):
            staff.remove_staff(db, "99")


class TestAuthenticate:
    def test_correct_pin(self, db):
        assert staff.authenticate(db, "1", "1234").name == "Maria Santos"

    def test_wrong_pin(self, db):
        with pytest.raises(Unauthorized):
            staff.authenticate(db, "1", "4321")

    def test_unknown_id_same_error(self, db):
        with pytest.raises(Unauthorized):
            staff.authenticate(db, "99", "1234")

    @pytest.mark.parametrize("pin", ["12é4", "１２３４", ""])
    def test_non_ascii_or_empty_pin_rejected(self, db, pin):
        with pytest.raises(Unauthorized):
            staff.authenticate(db, "1", pin)


class TestCandidates:
    def test_efficiency_descending(self, db):
        assert [s.id for s in staff.available_candidates(db)] == ["1", "6", "4"]

    def test_ties_broken_by_ascending_id(self, db):
        staff.update_staff(db, "4", {"efficiency": 95})
        staff.add_staff(db, {"name": "Nina Park"})
        staff.update_staff(db, "7", {"efficiency": 95})
        assert [s.id for s in staff.available_candidates(db)] == ["1", "4", "7", "6"]

    def test_numeric_ids_order_numerically(self, db):
        for i in range(5):
            staff.add_staff(db, {"name": f"Temp {i}"})
        ids = [s.id for s in staff.available_candidates(db) if s.efficiency == 80]
        assert ids == ["7", "8", "9", "10", "11"]


class TestRecomputeStatus:
    def test_busy_member_with_no_open_work_becomes_available(self, db):
        member = staff.get_staff(db, "2")
        assert staff.recompute_status(member, []) == StaffStatusEnum.Available

    def test_break_is_left_alone(self, db):
        member = staff.update_staff(db, "4", {"status": "break"})
        assert staff.recompute_status(member, []) == StaffStatusEnum.Break

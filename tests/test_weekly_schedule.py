"""Tests for weekly schedule grouping and statistics."""

from lensbook.schemas.availability_schema import DayOfWeek, SlotStatus
from lensbook.scheduling.weekly_schedule import (
    build_weekly_schedule,
    compute_stats,
    find_slot,
    slots_for_day,
)
from tests.conftest import OTHER_PHOTOGRAPHER_ID, PHOTOGRAPHER_ID, make_slot, t


class TestBuildWeeklySchedule:
    def test_all_seven_days_present(self):
        schedule = build_weekly_schedule(PHOTOGRAPHER_ID, [])
        assert set(schedule.days) == set(DayOfWeek)
        assert schedule.enabled_days == []

    def test_groups_and_sorts_by_start(self):
        slots = [
            make_slot("14:00", "15:00", slot_id=1),
            make_slot("09:00", "10:00", slot_id=2),
            make_slot("10:00", "11:00", day=DayOfWeek.FRIDAY, slot_id=3),
        ]
        schedule = build_weekly_schedule(PHOTOGRAPHER_ID, slots)
        monday = schedule.day(DayOfWeek.MONDAY)
        assert [s.id for s in monday.slots] == [2, 1]
        assert monday.is_enabled
        assert schedule.enabled_days == [DayOfWeek.MONDAY, DayOfWeek.FRIDAY]

    def test_other_photographers_ignored(self):
        slots = [
            make_slot("09:00", "10:00", slot_id=1),
            make_slot("09:00", "10:00", slot_id=2, photographer_id=OTHER_PHOTOGRAPHER_ID),
        ]
        schedule = build_weekly_schedule(PHOTOGRAPHER_ID, slots)
        assert [s.id for s in schedule.day(DayOfWeek.MONDAY).slots] == [1]

    def test_build_is_idempotent(self):
        slots = [
            make_slot("09:00", "10:00", slot_id=3),
            make_slot("09:00", "10:00", day=DayOfWeek.SUNDAY, slot_id=1),
            make_slot("08:00", "09:00", slot_id=2),
        ]
        first = build_weekly_schedule(PHOTOGRAPHER_ID, slots)
        second = build_weekly_schedule(PHOTOGRAPHER_ID, slots)
        assert first == second
        assert first.model_dump() == second.model_dump()


class TestComputeStats:
    def test_empty(self):
        stats = compute_stats([])
        assert stats.total_slots == 0
        assert stats.utilization_rate == 0

    def test_counts_by_status(self):
        slots = [
            make_slot("09:00", "10:00"),
            make_slot("10:00", "11:00", status=SlotStatus.UNAVAILABLE),
            make_slot("11:00", "12:00"),
            make_slot("12:00", "13:00"),
        ]
        stats = compute_stats(slots)
        assert stats.total_slots == 4
        assert stats.available_slots == 3
        assert stats.unavailable_slots == 1
        assert stats.utilization_rate == 25

    def test_rounds_half_up(self):
        slots = [make_slot("09:00", "10:00", status=SlotStatus.UNAVAILABLE)] + [
            make_slot(f"{h:02d}:00", f"{h + 1:02d}:00") for h in range(10, 17)
        ]
        # 1 of 8 is 12.5%
        assert compute_stats(slots).utilization_rate == 13

    def test_one_third(self):
        slots = [
            make_slot("09:00", "10:00", status=SlotStatus.UNAVAILABLE),
            make_slot("10:00", "11:00"),
            make_slot("11:00", "12:00"),
        ]
        assert compute_stats(slots).utilization_rate == 33


class TestLookups:
    def test_slots_for_day_filters_and_sorts(self):
        slots = [
            make_slot("11:00", "12:00", slot_id=1),
            make_slot("09:00", "10:00", slot_id=2),
            make_slot("09:00", "10:00", day=DayOfWeek.TUESDAY, slot_id=3),
            make_slot("09:00", "10:00", slot_id=4, photographer_id=OTHER_PHOTOGRAPHER_ID),
        ]
        found = slots_for_day(slots, PHOTOGRAPHER_ID, DayOfWeek.MONDAY)
        assert [s.id for s in found] == [2, 1]

    def test_find_slot_exact_match(self):
        slots = [make_slot("09:00", "10:00", slot_id=1), make_slot("10:00", "11:00", slot_id=2)]
        assert find_slot(slots, DayOfWeek.MONDAY, t("10:00"), t("11:00")).id == 2
        assert find_slot(slots, DayOfWeek.MONDAY, t("10:00"), t("10:30")) is None
        assert find_slot(slots, DayOfWeek.TUESDAY, t("09:00"), t("10:00")) is None

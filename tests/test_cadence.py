"""Tests for the training cadence scheduler."""
from __future__ import annotations

from datetime import date, timedelta

import pytest

from fitarc.services.cadence import (
    ACTIVE_WEEKDAYS,
    active_dates,
    infer_days_per_week,
    is_active_day,
    resolve_cadence,
    slot_index,
    split_tags,
    tag_for_slot,
)

MONDAY = date(2024, 1, 1)


class TestActiveDays:
    def test_three_day_cadence_is_mon_wed_fri(self):
        week = [MONDAY + timedelta(days=i) for i in range(7)]
        assert [is_active_day(MONDAY, 3, d) for d in week] == [
            True, False, True, False, True, False, False,
        ]

    def test_four_day_cadence_is_mon_tue_thu_sat(self):
        active = active_dates(MONDAY, 4, MONDAY, MONDAY + timedelta(days=6))
        assert [d.weekday() for d in active] == [0, 1, 3, 5]

    def test_six_day_cadence_skips_sunday_only(self):
        active = active_dates(MONDAY, 6, MONDAY, MONDAY + timedelta(days=6))
        assert len(active) == 6
        assert all(d.weekday() != 6 for d in active)

    def test_days_before_start_are_inactive(self):
        assert not is_active_day(MONDAY, 5, date(2023, 12, 29))

    def test_unsupported_cadence_raises(self):
        with pytest.raises(ValueError):
            is_active_day(MONDAY, 7, MONDAY)


class TestSlotIndex:
    def test_second_monday_on_three_day_cadence(self):
        assert slot_index(MONDAY, 3, date(2024, 1, 8)) == 3

    def test_inactive_day_has_no_slot(self):
        assert slot_index(MONDAY, 3, date(2024, 1, 2)) is None

    def test_before_start_has_no_slot(self):
        assert slot_index(MONDAY, 3, date(2023, 12, 29)) is None

    def test_start_day_is_slot_zero(self):
        assert slot_index(MONDAY, 4, MONDAY) == 0

    def test_midweek_start(self):
        wednesday = date(2024, 1, 3)
        assert slot_index(wednesday, 3, wednesday) == 0
        assert slot_index(wednesday, 3, date(2024, 1, 5)) == 1
        assert slot_index(wednesday, 3, date(2024, 1, 8)) == 2

    @pytest.mark.parametrize("cadence", sorted(ACTIVE_WEEKDAYS))
    def test_slots_count_up_by_one(self, cadence):
        start = date(2024, 2, 7)
        days = active_dates(start, cadence, start, start + timedelta(days=120))
        assert [slot_index(start, cadence, d) for d in days] == list(range(len(days)))


class TestSplits:
    def test_inferred_cadence(self):
        assert infer_days_per_week("full_body") == 3
        assert infer_days_per_week("upper_lower") == 4
        assert infer_days_per_week("push_pull_legs") == 5
        assert infer_days_per_week("Bro Split") == 5
        assert infer_days_per_week("something_else") == 5
        assert infer_days_per_week(None) == 3

    def test_explicit_days_per_week_wins_when_supported(self):
        assert resolve_cadence("full_body", 6) == 6
        assert resolve_cadence("full_body", 7) == 3
        assert resolve_cadence("upper_lower", None) == 4

    def test_rotation(self):
        assert split_tags("push_pull_legs") == ("push", "pull", "legs")
        assert [tag_for_slot("push_pull_legs", i) for i in range(5)] == [
            "push", "pull", "legs", "push", "pull",
        ]
        assert tag_for_slot("upper_lower", 3) == "lower"

    def test_unknown_split_rotates_full_body(self):
        assert split_tags(None) == ("full_body",)
        assert tag_for_slot("mystery", 9) == "full_body"

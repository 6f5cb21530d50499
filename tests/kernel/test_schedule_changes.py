"""Tests for schedule change descriptions (domain/schedule_changes.py)."""

from conftest import entry

from sitephase_kernel.domain.schedule_changes import describe_schedule_changes


class TestDateChanges:
    def test_extended(self):
        old = [entry("Drywall", "2024-02-01", "2024-02-10")]
        new = [entry("Drywall", "2024-02-01", "2024-02-13")]
        assert describe_schedule_changes(old, new) == ["Drywall was extended by 3 days"]

    def test_shortened_single_day(self):
        old = [entry("Drywall", "2024-02-01", "2024-02-10")]
        new = [entry("Drywall", "2024-02-01", "2024-02-09")]
        assert describe_schedule_changes(old, new) == ["Drywall was shortened by 1 day"]

    def test_shift_later(self):
        old = [entry("Insulation", "2024-02-01", "2024-02-10")]
        new = [entry("Insulation", "2024-02-05", "2024-02-14")]
        assert describe_schedule_changes(old, new) == ["Insulation was moved later by 4 days"]

    def test_shift_earlier(self):
        old = [entry("Insulation", "2024-02-05", "2024-02-14")]
        new = [entry("Insulation", "2024-02-03", "2024-02-12")]
        assert describe_schedule_changes(old, new) == ["Insulation was moved earlier by 2 days"]

    def test_length_change_wins_over_shift(self):
        old = [entry("Insulation", "2024-02-01", "2024-02-10")]
        new = [entry("Insulation", "2024-02-03", "2024-02-15")]
        assert describe_schedule_changes(old, new) == ["Insulation was extended by 3 days"]

    def test_missing_dates_not_described(self):
        old = [entry("Paint", "2024-03-01")]
        new = [entry("Paint", "2024-03-04", "2024-03-06")]
        assert describe_schedule_changes(old, new) == []


class TestMembershipAndWorkdays:
    def test_added_and_removed(self):
        old = [entry("Paint", "2024-03-01", "2024-03-04")]
        new = [entry("Trim", "2024-03-01", "2024-03-04")]
        assert describe_schedule_changes(old, new) == [
            "Trim was added to the schedule",
            "Paint was removed from the schedule",
        ]

    def test_workdays(self):
        old = [entry("Paint", "2024-03-01", "2024-03-04", workdays=3)]
        new = [entry("Paint", "2024-03-01", "2024-03-04", workdays=5)]
        assert describe_schedule_changes(old, new) == ["Paint duration was increased by 2 workdays"]

    def test_no_changes(self):
        blob = [entry("Paint", "2024-03-01", "2024-03-04", workdays=3)]
        assert describe_schedule_changes(blob, list(blob)) == []

    def test_garbage_elements_ignored(self):
        old = ["junk", {"startDate": "2024-03-01"}]
        new = [None, entry("Paint", "bad-date")]
        assert describe_schedule_changes(old, new) == ["Paint was added to the schedule"]

    def test_none_inputs(self):
        assert describe_schedule_changes(None, None) == []

"""Tests for the progress & payment metrics calculator (domain/metrics.py)."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from sitephase_kernel.domain.metrics import (
    PaymentSource,
    ProgressSource,
    compute_project_metrics,
    construction_metrics,
    payment_from_invoices,
    payment_from_tranches,
    schedule_progress,
    stored_progress,
    time_based_progress,
)
from sitephase_kernel.domain.schedule import Schedule, ScheduleEntry
from sitephase_kernel.domain.types import InvoiceInfo, ProjectInfo


def _project(**overrides):
    values = dict(
        project_id=uuid4(),
        name="Test",
        status="Active",
        phase="Framing Crew",
        progress=None,
        start_date=date(2024, 1, 1),
        estimated_completion=date(2024, 1, 11),
        budget=Decimal("100000"),
    )
    values.update(overrides)
    return ProjectInfo(**values)


def _invoice(project, total, status="Paid"):
    return InvoiceInfo(
        invoice_id=uuid4(),
        project_id=project.project_id,
        invoice_number="Draw 1",
        status=status,
        total=Decimal(total),
    )


@pytest.fixture
def two_entries():
    return Schedule([
        ScheduleEntry("Framing Crew", date(2024, 1, 1), date(2024, 1, 11)),
        ScheduleEntry("Insulation", date(2024, 1, 15), date(2024, 1, 25)),
    ])


class TestScheduleTier:
    def test_spec_scenario_four_of_ten_days_into_first_of_two(self, two_entries):
        result = schedule_progress(two_entries, date(2024, 1, 5))
        assert result.percent == 20
        assert result.phase == "Framing Crew"

    def test_before_first_entry_is_zero(self, two_entries):
        result = schedule_progress(two_entries, date(2023, 12, 1))
        assert (result.percent, result.phase) == (0, "Framing Crew")

    def test_after_last_entry_is_hundred(self, two_entries):
        result = schedule_progress(two_entries, date(2024, 2, 1))
        assert (result.percent, result.phase) == (100, "Insulation")

    def test_second_window(self, two_entries):
        # idx 1, frac 0.5 -> (1 + 0.5) / 2 = 75
        assert schedule_progress(two_entries, date(2024, 1, 20)).percent == 75

    def test_gap_between_windows_reports_last_entry_complete(self, two_entries):
        result = schedule_progress(two_entries, date(2024, 1, 13))
        assert (result.percent, result.phase) == (100, "Insulation")

    def test_long_gap_before_second_window(self):
        schedule = Schedule([
            ScheduleEntry("Framing Crew", date(2024, 1, 1), date(2024, 1, 10)),
            ScheduleEntry("Insulation", date(2024, 2, 1), date(2024, 2, 10)),
        ])
        result = schedule_progress(schedule, date(2024, 1, 20))
        assert (result.percent, result.phase) == (100, "Insulation")
        # back inside a window the position-based figure applies again
        assert schedule_progress(schedule, date(2024, 2, 1)).percent == 50

    def test_single_day_window(self):
        schedule = Schedule([ScheduleEntry("Paint", date(2024, 1, 1), date(2024, 1, 1))])
        assert schedule_progress(schedule, date(2024, 1, 1)).percent == 0

    def test_no_dated_entries(self):
        assert schedule_progress(Schedule(), date(2024, 1, 1)) is None
        undated = Schedule([ScheduleEntry("Paint", date(2024, 1, 1))])
        assert schedule_progress(undated, date(2024, 1, 1)) is None


class TestStoredAndTimeTiers:
    def test_stored_progress(self):
        assert stored_progress(_project(progress=35)) == 35
        assert stored_progress(_project(progress=0)) == 0
        assert stored_progress(_project(progress=None)) is None
        assert stored_progress(_project(progress=-1)) is None
        assert stored_progress(_project(progress=140)) == 100

    def test_time_based(self):
        project = _project()
        assert time_based_progress(project, date(2024, 1, 6)) == 50
        assert time_based_progress(project, date(2023, 12, 1)) == 0
        assert time_based_progress(project, date(2024, 6, 1)) == 100

    def test_time_based_missing_dates(self):
        assert time_based_progress(_project(estimated_completion=None), date(2024, 1, 6)) is None

    def test_construction_metrics(self):
        metrics = construction_metrics(_project(), date(2024, 1, 4))
        assert (metrics.duration_days, metrics.elapsed_days) == (10, 3)
        assert construction_metrics(_project(), date(2025, 1, 1)).elapsed_days == 10
        assert construction_metrics(_project(), date(2023, 1, 1)).elapsed_days == 0

    def test_construction_duration_at_least_one_day(self):
        same_day = _project(estimated_completion=date(2024, 1, 1))
        metrics = construction_metrics(same_day, date(2024, 3, 1))
        assert (metrics.duration_days, metrics.elapsed_days) == (1, 1)
        inverted = _project(estimated_completion=date(2023, 12, 1))
        assert construction_metrics(inverted, date(2023, 12, 1)).duration_days == 1

    def test_construction_metrics_missing_dates(self):
        metrics = construction_metrics(_project(start_date=None), date(2024, 1, 4))
        assert (metrics.duration_days, metrics.elapsed_days) == (0, 0)


class TestPrecedence:
    def test_schedule_wins_over_stored(self, two_entries):
        metrics = compute_project_metrics(
            _project(progress=90), two_entries, today=date(2024, 1, 5),
        )
        assert metrics.progress_percent == 20
        assert metrics.progress_source is ProgressSource.SCHEDULE
        assert metrics.phase == "Framing Crew"
        assert metrics.phase_label == "Framing"

    def test_stored_used_without_schedule(self):
        metrics = compute_project_metrics(_project(progress=40), None, today=date(2024, 1, 5))
        assert metrics.progress_percent == 40
        assert metrics.progress_source is ProgressSource.STORED
        assert metrics.phase == "Framing Crew"

    def test_time_fallback(self):
        metrics = compute_project_metrics(_project(progress=None), [], today=date(2024, 1, 6))
        assert metrics.progress_percent == 50
        assert metrics.progress_source is ProgressSource.TIME

    def test_phase_default_when_nothing_known(self):
        metrics = compute_project_metrics(
            _project(phase=None, start_date=None, estimated_completion=None),
            None,
            today=date(2024, 1, 6),
        )
        assert metrics.phase == "Planning & Permits"
        assert metrics.progress_percent == 0
        assert metrics.progress_source is ProgressSource.NONE

    def test_raw_blob_entries_accepted(self):
        metrics = compute_project_metrics(
            _project(),
            [{"name": "Framing Crew", "startDate": "2024-01-01", "endDate": "2024-01-11"}],
            today=date(2024, 1, 6),
        )
        assert metrics.progress_percent == 50

    def test_broken_schedule_input_falls_through(self, captured_logs):
        metrics = compute_project_metrics(
            _project(progress=30), object(), today=date(2024, 1, 6),
        )
        assert metrics.progress_source is ProgressSource.STORED
        assert any(r["message"] == "metrics_schedule_tier_failed" for r in captured_logs())


class TestPayments:
    def test_paid_invoices_summed(self):
        project = _project()
        invoices = [
            _invoice(project, "20000"),
            _invoice(project, "15000"),
            _invoice(project, "9999", status="Sent"),
            InvoiceInfo(uuid4(), uuid4(), "Draw 2", "Paid", Decimal("5000")),
        ]
        data = payment_from_invoices(project, invoices)
        assert data.total_paid == Decimal("35000")
        assert data.remaining_balance == Decimal("65000")
        assert data.payment_progress == Decimal("35.00")

    def test_overpaid_clamped(self):
        project = _project(budget=Decimal("1000"))
        data = payment_from_invoices(project, [_invoice(project, "1500")])
        assert data.remaining_balance == Decimal("0")
        assert data.payment_progress == Decimal("100.00")

    def test_zero_budget(self):
        project = _project(budget=Decimal("0"))
        data = payment_from_invoices(project, [_invoice(project, "1500")])
        assert data.payment_progress == Decimal("0.00")

    def test_tranche_deposit_only_at_zero_progress(self):
        data = payment_from_tranches(_project(progress=0))
        assert data.total_paid == Decimal("20000.00")

    def test_tranche_thresholds(self):
        # thresholds: 0, 16.67, 33.33, 50, 66.67, 83.33, 100
        assert payment_from_tranches(_project(progress=50)).total_paid == Decimal("70000.00")
        assert payment_from_tranches(_project(progress=49)).total_paid == Decimal("55000.00")
        assert payment_from_tranches(_project(progress=100)).total_paid == Decimal("100000.00")

    def test_empty_invoice_list_is_visible_data(self):
        metrics = compute_project_metrics(_project(progress=100), None, [], today=date(2024, 1, 6))
        assert metrics.payment_source is PaymentSource.INVOICES
        assert metrics.payment_data.total_paid == Decimal("0")

    def test_no_invoice_visibility_uses_tranches(self):
        metrics = compute_project_metrics(_project(progress=0), None, None, today=date(2024, 1, 6))
        assert metrics.payment_source is PaymentSource.TRANCHE_FALLBACK
        assert metrics.payment_data.total_paid == Decimal("20000.00")

    def test_custom_tranche_schedule(self):
        data = payment_from_tranches(_project(progress=0), (50, 50))
        assert data.total_paid == Decimal("50000.00")

    def test_to_dict(self, two_entries):
        metrics = compute_project_metrics(_project(), two_entries, today=date(2024, 1, 5))
        payload = metrics.to_dict()
        assert payload["progress_percent"] == 20
        assert payload["progress_source"] == "schedule"
        assert payload["construction_metrics"] == {"duration_days": 10, "elapsed_days": 4}

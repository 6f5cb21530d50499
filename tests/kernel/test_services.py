"""Tests for the activity, schedule snapshot and phase transition services."""

from datetime import date, datetime
from uuid import uuid4

import pytest

from sitephase_kernel.domain.progression import DecisionReason, PhaseDecision
from sitephase_kernel.domain.schedule import ScheduleEntry
from sitephase_kernel.exceptions import ProjectNotFoundError
from sitephase_kernel.models import ProjectModel, ScheduleSnapshotModel
from sitephase_kernel.selectors import ScheduleSelector
from sitephase_kernel.services import (
    ActivityLogService,
    PhaseTransitionService,
    ScheduleSnapshotService,
)
from sitephase_kernel.services.schedule_snapshot_service import entry_to_blob


def _advance_to(phase, progress, reason=DecisionReason.SCHEDULE_ADVANCED):
    return PhaseDecision(
        current_phase="Framing Crew",
        next_phase=phase,
        next_progress=progress,
        reason=reason,
    )


class TestActivityLogService:
    def test_record_and_read_back(self, session, make_project):
        project_id = make_project()
        service = ActivityLogService(session)
        first = service.record(
            project_id=project_id,
            activity_type="phase_update",
            title="Automatic Phase Progression",
            description="first",
            occurred_at=datetime(2024, 1, 2, 6, 0, 0),
        )
        service.record(
            project_id=project_id,
            activity_type="phase_update",
            title="Automatic Phase Progression",
            description="second",
            occurred_at=datetime(2024, 1, 3, 6, 0, 0),
        )
        assert first.activity_id is not None
        assert [a.description for a in service.for_project(project_id)] == ["first", "second"]


class TestScheduleSnapshotService:
    def test_revisions_increment(self, session, make_project, clock):
        project_id = make_project()
        service = ScheduleSnapshotService(session, clock)
        assert service.record_snapshot(project_id, [
            ScheduleEntry("Framing Crew", date(2024, 1, 2), date(2024, 1, 20), 14),
        ]) == 1
        assert service.record_snapshot(project_id, [
            {"name": "Insulation", "startDate": date(2024, 2, 1), "endDate": "2024-02-10"},
        ]) == 2

        schedule = ScheduleSelector(session).latest_schedule(project_id)
        assert [e.name for e in schedule] == ["Insulation"]
        assert session.query(ScheduleSnapshotModel).count() == 2

    def test_created_at_from_clock(self, session, make_project, clock):
        project_id = make_project()
        ScheduleSnapshotService(session, clock).record_snapshot(project_id, [])
        row = session.query(ScheduleSnapshotModel).one()
        assert row.created_at == clock.now()
        assert row.schedule_data == []

    def test_entry_to_blob(self):
        blob = entry_to_blob(ScheduleEntry("Paint", date(2024, 3, 1)))
        assert blob == {
            "name": "Paint",
            "start_date": "2024-03-01",
            "end_date": None,
            "duration_days": None,
        }


class TestPhaseTransitionService:
    def test_apply_writes_phase_progress_and_one_activity(
        self, session, make_project, clock, activities, captured_logs,
    ):
        project_id = make_project(phase="Framing Crew", progress=10)
        service = PhaseTransitionService(session, clock)

        record = service.apply(project_id, _advance_to("Insulation", 45))

        project = session.get(ProjectModel, project_id)
        assert (project.phase, project.progress) == ("Insulation", 45)
        assert project.updated_at == clock.now()
        rows = activities(project_id)
        assert len(rows) == 1
        assert rows[0].id == record.activity_id
        assert rows[0].activity_type == "phase_update"
        assert rows[0].title == "Automatic Phase Progression"
        assert rows[0].description == "Project automatically advanced to Insulation phase"
        assert rows[0].project_name == "Smith Residence"

        logs = [r for r in captured_logs() if r["message"] == "phase_transition_applied"]
        assert logs[0]["from_phase"] == "Framing Crew"
        assert logs[0]["to_phase"] == "Insulation"

    def test_noop_decision_writes_nothing(self, session, make_project, clock, activities):
        project_id = make_project()
        noop = PhaseDecision(
            current_phase="Framing Crew",
            next_phase=None,
            next_progress=None,
            reason=DecisionReason.NO_CANDIDATE,
        )
        assert PhaseTransitionService(session, clock).apply(project_id, noop) is None
        assert activities(project_id) == []

    def test_custom_activity_labels(self, session, make_project, clock, activities):
        project_id = make_project()
        service = PhaseTransitionService(
            session, clock, activity_type="phase_change", activity_title="Phase moved",
        )
        service.apply(project_id, _advance_to("Insulation", 45))
        row = activities(project_id)[0]
        assert (row.activity_type, row.title) == ("phase_change", "Phase moved")

    def test_missing_project(self, session, clock):
        with pytest.raises(ProjectNotFoundError):
            PhaseTransitionService(session, clock).apply(uuid4(), _advance_to("Insulation", 45))

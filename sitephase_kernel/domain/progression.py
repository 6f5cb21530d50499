"""
Phase progression decision -- the pure half of the progression state machine.

Given a project snapshot, its schedule and the day being evaluated, decide
whether the project's phase advances and to what.  Persisting the decision
(project row update + activity entry) belongs to
``sitephase_kernel.services.phase_transition_service``.

Rules, in order:

    1. Bootstrap: phase "Pre Construction" and today >= start_date
       -> "Framing Crew".  Independent of schedule content.
    2. Schedule scan: for any other non-bootstrap phase, find the schedule
       entry named exactly like the phase, then walk the later entries in
       start-date order.  Stop at the first entry that starts after today.
       The candidate is the LAST scanned entry that is a recognized taxonomy
       phase ranked after the current phase.
    3. A candidate different from the current phase is a transition;
       anything else is a no-op with a reason.

Transitions are forward-only: a candidate whose taxonomy ordinal does not
exceed the current phase's ordinal is ignored.  The engine never moves a
phase backward, including after a manual override.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from sitephase_kernel.domain.phases import (
    BOOTSTRAP_PHASES,
    FRAMING_CREW,
    PRE_CONSTRUCTION,
    TERMINAL_PHASE,
    get_phase,
    ordinal_of,
    percentage_for,
)
from sitephase_kernel.domain.schedule import Schedule
from sitephase_kernel.domain.types import ProjectInfo


class DecisionReason(str, Enum):
    """Why a decision did or did not produce a transition."""

    START_DATE_REACHED = "start_date_reached"
    SCHEDULE_ADVANCED = "schedule_advanced"
    START_DATE_NOT_REACHED = "start_date_not_reached"
    BOOTSTRAP_PHASE = "bootstrap_phase"
    NO_PHASE = "no_phase"
    TERMINAL_PHASE = "terminal_phase"
    SCHEDULE_MISSING = "schedule_missing"
    PHASE_NOT_IN_SCHEDULE = "phase_not_in_schedule"
    NO_CANDIDATE = "no_candidate"


@dataclass(frozen=True)
class PhaseDecision:
    """Outcome of evaluating one project on one day."""

    current_phase: str | None
    reason: DecisionReason
    next_phase: str | None = None
    next_progress: int | None = None

    @property
    def is_transition(self) -> bool:
        return self.next_phase is not None and self.next_phase != self.current_phase


def _transition(current: str | None, target: str, reason: DecisionReason) -> PhaseDecision:
    return PhaseDecision(
        current_phase=current,
        reason=reason,
        next_phase=target,
        next_progress=percentage_for(target) or 0,
    )


def next_phase_from_schedule(
    current_phase: str,
    schedule: Schedule,
    today: date,
) -> str | None:
    """Most recently started recognized phase after ``current_phase``.

    Returns None when the current phase is not in the schedule or nothing
    later has started yet.
    """
    index = schedule.index_of(current_phase)
    if index is None:
        return None

    current_ordinal = ordinal_of(current_phase)
    candidate: str | None = None
    for entry in schedule.entries[index + 1:]:
        if entry.start_date > today:
            break
        definition = get_phase(entry.name)
        if definition is None:
            continue
        if current_ordinal is not None and definition.ordinal <= current_ordinal:
            continue
        candidate = entry.name
    return candidate


def decide_next_phase(
    project: ProjectInfo,
    schedule: Schedule | None,
    today: date,
) -> PhaseDecision:
    """Decide whether ``project`` advances on ``today``."""
    phase = project.phase or None

    if phase == PRE_CONSTRUCTION:
        if project.start_date is not None and today >= project.start_date:
            return _transition(phase, FRAMING_CREW, DecisionReason.START_DATE_REACHED)
        return PhaseDecision(phase, DecisionReason.START_DATE_NOT_REACHED)

    if phase is None:
        return PhaseDecision(phase, DecisionReason.NO_PHASE)
    if phase in BOOTSTRAP_PHASES:
        return PhaseDecision(phase, DecisionReason.BOOTSTRAP_PHASE)
    if phase == TERMINAL_PHASE:
        return PhaseDecision(phase, DecisionReason.TERMINAL_PHASE)
    if schedule is None or schedule.is_empty:
        return PhaseDecision(phase, DecisionReason.SCHEDULE_MISSING)
    if schedule.index_of(phase) is None:
        return PhaseDecision(phase, DecisionReason.PHASE_NOT_IN_SCHEDULE)

    candidate = next_phase_from_schedule(phase, schedule, today)
    if candidate is None or candidate == phase:
        return PhaseDecision(phase, DecisionReason.NO_CANDIDATE)
    return _transition(phase, candidate, DecisionReason.SCHEDULE_ADVANCED)

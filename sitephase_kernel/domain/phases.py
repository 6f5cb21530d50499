"""
Phase taxonomy -- the ordered table of construction phases.

Each phase carries an ordinal and the completion percentage a project is
stored at while in that phase.  The table is static configuration:

    - ordinals are 0..N-1 in table order
    - percentages are non-decreasing by ordinal and lie in [0, 100]
    - names are unique

"Planning & Permits" and "Pre Construction" are bootstrap phases: the
progression job never derives them from the schedule, and it only leaves
"Pre Construction" through the start-date rule.  "Final" is terminal.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PhaseDefinition:
    """One row of the phase taxonomy."""

    name: str
    ordinal: int
    target_progress_percentage: int


PLANNING_AND_PERMITS = "Planning & Permits"
PRE_CONSTRUCTION = "Pre Construction"
FRAMING_CREW = "Framing Crew"
FINAL = "Final"

BOOTSTRAP_PHASES: frozenset[str] = frozenset({PLANNING_AND_PERMITS, PRE_CONSTRUCTION})
TERMINAL_PHASE = FINAL

_TAXONOMY_ROWS: tuple[tuple[str, int], ...] = (
    (PLANNING_AND_PERMITS, 0),
    (PRE_CONSTRUCTION, 5),
    (FRAMING_CREW, 10),
    ("Plumbing Underground", 15),
    ("Concrete Crew", 20),
    ("Interior Framing", 25),
    ("Plumbing Rough In", 30),
    ("HVAC Rough In", 35),
    ("Electric Rough In", 40),
    ("Insulation", 45),
    ("Drywall", 55),
    ("Paint", 65),
    ("Flooring", 75),
    ("Doors and Trim", 80),
    ("Garage Doors and Gutters", 85),
    ("Garage Finish", 87),
    ("Plumbing Final", 90),
    ("HVAC Final", 92),
    ("Electric Final", 94),
    ("Kitchen Install", 96),
    ("Interior Finishes", 98),
    (FINAL, 100),
)

PHASE_TAXONOMY: tuple[PhaseDefinition, ...] = tuple(
    PhaseDefinition(name=name, ordinal=i, target_progress_percentage=pct)
    for i, (name, pct) in enumerate(_TAXONOMY_ROWS)
)

_BY_NAME: dict[str, PhaseDefinition] = {p.name: p for p in PHASE_TAXONOMY}


def get_phase(name: str | None) -> PhaseDefinition | None:
    """Exact-name lookup; None for unrecognized or empty names."""
    if not name:
        return None
    return _BY_NAME.get(name)


def percentage_for(name: str | None) -> int | None:
    """Target progress percentage for a phase name, or None if unrecognized."""
    phase = get_phase(name)
    return phase.target_progress_percentage if phase is not None else None


def is_recognized(name: str | None) -> bool:
    return get_phase(name) is not None


def ordinal_of(name: str | None) -> int | None:
    phase = get_phase(name)
    return phase.ordinal if phase is not None else None


def phase_names() -> tuple[str, ...]:
    return tuple(p.name for p in PHASE_TAXONOMY)


def normalize_phase_label(name: str) -> str:
    """Collapse a free-text schedule entry name to a short display label.

    Used only for display; identity checks always use exact taxonomy names.
    """
    n = name.lower()
    if "framing" in n:
        return "Framing"
    if "pre construction" in n:
        return PRE_CONSTRUCTION
    if "planning" in n or "permit" in n:
        return PLANNING_AND_PERMITS
    if "insulation" in n:
        return "Insulation"
    if "drywall" in n:
        return "Drywall"
    if "final" in n:
        return FINAL
    if "rough" in n:
        return "Rough-ins"
    return name

"""
Schedule model -- a project's date-windowed work plan.

Responsibility:
    Turn the latest schedule snapshot blob into an ordered, validated tuple of
    ``ScheduleEntry`` values and answer the lookups the progression job, the
    draw synchronizer and the metrics calculator need.

Architecture position:
    Kernel > Domain.  Pure; the only side effect is logging of skipped
    entries.

Invariants enforced:
    - Entries are sorted by ``start_date`` ascending inside the model,
      whatever order the snapshot stored them in (stable for ties).
    - An entry with ``end_date`` before ``start_date`` is skipped.
    - An entry without a parseable ``start_date`` is skipped.

An empty schedule is a valid state (schedule not authored yet).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping

from sitephase_kernel.exceptions import ScheduleEntryInvariantError
from sitephase_kernel.logging_config import get_logger

logger = get_logger("domain.schedule")


class TradeAnchor(str, Enum):
    """Canonical schedule points that payment milestones key off.

    The value is the case-insensitive search term resolved through
    ``Schedule.find_by_name``.
    """

    FRAMING_CREW = "framing crew"
    INSULATION = "insulation"
    DRYWALL = "drywall"


@dataclass(frozen=True)
class ScheduleEntry:
    """One named trade window.  ``end_date`` may be unknown."""

    name: str
    start_date: date
    end_date: date | None = None
    duration_days: int | None = None

    def contains(self, day: date) -> bool:
        return self.end_date is not None and self.start_date <= day <= self.end_date


def to_day(value: Any) -> date | None:
    """Truncate a date, datetime or ISO string to a calendar day.

    Returns None for None / empty input.

    Raises:
        ValueError: if ``value`` is not a recognizable date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Cannot parse date from {value!r}")


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) not in (None, ""):
            return raw[key]
    return None


def parse_schedule_entry(raw: Mapping[str, Any]) -> ScheduleEntry:
    """Parse one snapshot blob element.

    Accepts ``startDate``/``endDate``/``workdays`` as written by the schedule
    builder, or ``start_date``/``end_date``/``duration_days``.

    Raises:
        ScheduleEntryInvariantError: missing name or start date, malformed
            dates, or end before start.
    """
    name = str(raw.get("name") or "").strip()
    if not name:
        raise ScheduleEntryInvariantError("<unnamed>", "entry has no name")

    try:
        start = to_day(_first_present(raw, "start_date", "startDate"))
        end = to_day(_first_present(raw, "end_date", "endDate"))
    except ValueError as exc:
        raise ScheduleEntryInvariantError(name, f"malformed date: {exc}") from exc

    if start is None:
        raise ScheduleEntryInvariantError(name, "entry has no start date")
    if end is not None and end < start:
        raise ScheduleEntryInvariantError(
            name, f"end_date {end.isoformat()} precedes start_date {start.isoformat()}",
        )

    duration = _first_present(raw, "duration_days", "workdays", "duration")
    try:
        duration_days = int(duration) if duration is not None else None
    except (TypeError, ValueError):
        duration_days = None

    return ScheduleEntry(
        name=name,
        start_date=start,
        end_date=end,
        duration_days=duration_days,
    )


class Schedule:
    """Ordered, validated view over a project's schedule entries."""

    def __init__(self, entries: Iterable[ScheduleEntry] = ()):
        self._entries: tuple[ScheduleEntry, ...] = tuple(
            sorted(entries, key=lambda e: e.start_date)
        )

    @classmethod
    def from_snapshot(
        cls,
        schedule_data: Iterable[Mapping[str, Any]] | None,
        project_id: Any = None,
    ) -> Schedule:
        """Build a schedule from a snapshot blob, skipping invalid entries."""
        entries: list[ScheduleEntry] = []
        for position, raw in enumerate(schedule_data or ()):
            if not isinstance(raw, Mapping):
                logger.info(
                    "schedule_entry_skipped",
                    extra={
                        "project_id": str(project_id) if project_id else None,
                        "position": position,
                        "reason": "entry is not an object",
                    },
                )
                continue
            try:
                entries.append(parse_schedule_entry(raw))
            except ScheduleEntryInvariantError as exc:
                logger.info(
                    "schedule_entry_skipped",
                    extra={
                        "project_id": str(project_id) if project_id else None,
                        "position": position,
                        "entry_name": exc.entry_name,
                        "reason": exc.reason,
                    },
                )
        return cls(entries)

    # -------------------------------------------------------------------------
    # Sequence protocol
    # -------------------------------------------------------------------------

    @property
    def entries(self) -> tuple[ScheduleEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ScheduleEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> ScheduleEntry:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"Schedule({[e.name for e in self._entries]!r})"

    @property
    def is_empty(self) -> bool:
        return not self._entries

    @property
    def first(self) -> ScheduleEntry | None:
        return self._entries[0] if self._entries else None

    @property
    def last(self) -> ScheduleEntry | None:
        return self._entries[-1] if self._entries else None

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find_by_name(self, name: str) -> ScheduleEntry | None:
        """First entry whose name case-insensitively contains ``name``.

        First match wins; entries sharing the substring are not
        disambiguated further.
        """
        needle = name.lower()
        for entry in self._entries:
            if needle in entry.name.lower():
                return entry
        return None

    def find_anchor(self, anchor: TradeAnchor) -> ScheduleEntry | None:
        return self.find_by_name(anchor.value)

    def index_of(self, name: str) -> int | None:
        """Position of the first entry whose name equals ``name`` exactly."""
        for i, entry in enumerate(self._entries):
            if entry.name == name:
                return i
        return None

    def find_exact(self, name: str) -> ScheduleEntry | None:
        index = self.index_of(name)
        return self._entries[index] if index is not None else None

    def dated_entries(self) -> tuple[ScheduleEntry, ...]:
        """Entries that have both a start and an end date."""
        return tuple(e for e in self._entries if e.end_date is not None)

    def window_containing(self, day: date) -> tuple[int, ScheduleEntry] | None:
        """First dated entry whose window contains ``day``, with its position
        among ``dated_entries()``."""
        for i, entry in enumerate(self.dated_entries()):
            if entry.contains(day):
                return i, entry
        return None

    def latest_end_date(self) -> date | None:
        ends = [e.end_date for e in self._entries if e.end_date is not None]
        return max(ends) if ends else None

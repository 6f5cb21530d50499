"""
Human-readable descriptions of what changed between two schedule snapshots.

Entries are matched by exact name.  Per matched entry at most one date
description is produced (a change in window length wins over a shift), plus
one for a changed workday count.  Descriptions are returned to the caller;
nothing here writes anywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping

from sitephase_kernel.domain.schedule import to_day

GENERIC_CHANGE_DESCRIPTION = (
    "Project schedule has been updated with new phase timelines and dates."
)


@dataclass(frozen=True)
class _EntryView:
    name: str
    start_date: date | None
    end_date: date | None
    workdays: int | None


def _lenient_day(raw: Mapping[str, Any], *keys: str) -> date | None:
    for key in keys:
        if raw.get(key) not in (None, ""):
            try:
                return to_day(raw[key])
            except (TypeError, ValueError):
                return None
    return None


def _lenient_int(raw: Mapping[str, Any], *keys: str) -> int | None:
    for key in keys:
        if raw.get(key) not in (None, ""):
            try:
                return int(raw[key])
            except (TypeError, ValueError):
                return None
    return None


def _views(schedule_data: Iterable[Any] | None) -> list[_EntryView]:
    views = []
    for raw in schedule_data or ():
        if not isinstance(raw, Mapping) or not raw.get("name"):
            continue
        views.append(_EntryView(
            name=str(raw["name"]),
            start_date=_lenient_day(raw, "start_date", "startDate"),
            end_date=_lenient_day(raw, "end_date", "endDate"),
            workdays=_lenient_int(raw, "duration_days", "workdays", "duration"),
        ))
    return views


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def _describe_dates(new: _EntryView, old: _EntryView) -> str | None:
    if (new.start_date, new.end_date) == (old.start_date, old.end_date):
        return None
    if None in (new.start_date, new.end_date, old.start_date, old.end_date):
        return None

    length_change = (
        (new.end_date - new.start_date).days - (old.end_date - old.start_date).days
    )
    if length_change:
        verb = "extended" if length_change > 0 else "shortened"
        return f"{new.name} was {verb} by {_plural(abs(length_change), 'day')}"

    shift = (new.start_date - old.start_date).days
    if shift:
        direction = "moved later" if shift > 0 else "moved earlier"
        return f"{new.name} was {direction} by {_plural(abs(shift), 'day')}"
    return None


def _describe_workdays(new: _EntryView, old: _EntryView) -> str | None:
    if new.workdays is None or old.workdays is None or new.workdays == old.workdays:
        return None
    change = new.workdays - old.workdays
    verb = "increased" if change > 0 else "reduced"
    return f"{new.name} duration was {verb} by {_plural(abs(change), 'workday')}"


def describe_schedule_changes(
    old_schedule: Iterable[Any] | None,
    new_schedule: Iterable[Any] | None,
) -> list[str]:
    """Describe how ``new_schedule`` differs from ``old_schedule``.

    Both arguments are raw snapshot blobs.  Returns an empty list when no
    difference is detected.
    """
    old_views = _views(old_schedule)
    new_views = _views(new_schedule)
    old_by_name: dict[str, _EntryView] = {}
    for view in old_views:
        old_by_name.setdefault(view.name, view)
    new_names = {v.name for v in new_views}

    changes: list[str] = []
    for new in new_views:
        old = old_by_name.get(new.name)
        if old is None:
            changes.append(f"{new.name} was added to the schedule")
            continue
        for description in (_describe_dates(new, old), _describe_workdays(new, old)):
            if description:
                changes.append(description)

    for old in old_views:
        if old.name not in new_names:
            changes.append(f"{old.name} was removed from the schedule")
    return changes

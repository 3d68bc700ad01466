"""Character-count deltas between consecutive history entries, and the
day/hour timeline the history view is drawn from."""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List
from zoneinfo import ZoneInfo

from .history_utils import entry_field, sort_chronologically, to_utc

DISPLAY_TIMEZONE = "America/Toronto"


@dataclass
class EntryWithDiff:
    entry: Any
    char_diff: int


@dataclass
class HourGroup:
    hour: int
    label: str
    entries: List[EntryWithDiff] = field(default_factory=list)


@dataclass
class DayGroup:
    date: str
    hours: List[HourGroup] = field(default_factory=list)


def compute_char_diffs(entries: Iterable[Any]) -> List[EntryWithDiff]:
    """Pair each entry with its char_count change; oldest first, baseline diff is 0."""
    ordered = sort_chronologically(entries)
    diffs = []
    for i, entry in enumerate(ordered):
        if i == 0:
            diffs.append(EntryWithDiff(entry=entry, char_diff=0))
            continue
        previous = ordered[i - 1]
        diffs.append(EntryWithDiff(
            entry=entry,
            char_diff=(entry_field(entry, "char_count") or 0) - (entry_field(previous, "char_count") or 0),
        ))
    return diffs


def hour_label(hour: int) -> str:
    """Short 12-hour label: 0 -> "12a", 9 -> "9a", 12 -> "12p", 17 -> "5p"."""
    if hour == 0:
        return "12a"
    if hour < 12:
        return f"{hour}a"
    if hour == 12:
        return "12p"
    return f"{hour - 12}p"


def group_by_date(diffs: Iterable[EntryWithDiff], tz: str = DISPLAY_TIMEZONE) -> List[DayGroup]:
    """
    Group entries by local calendar day, then by local hour.

    Days are labelled like ``"Wed Jan 15"`` in ``tz`` (DST-aware).

    Args:
        diffs: Entries with diffs, oldest first (as from ``compute_char_diffs``).
        tz: IANA zone name the day and hour boundaries are taken in.

    Returns:
        Days newest first; hours within a day and entries within an hour
        oldest first.
    """
    zone = ZoneInfo(tz)
    days: Dict[str, Dict[int, HourGroup]] = {}

    for item in diffs:
        local = to_utc(entry_field(item.entry, "created_at")).astimezone(zone)
        hours = days.setdefault(f"{local:%a %b} {local.day}", {})
        group = hours.get(local.hour)
        if group is None:
            group = hours[local.hour] = HourGroup(hour=local.hour, label=hour_label(local.hour))
        group.entries.append(item)

    timeline = [
        DayGroup(date=date, hours=[hours[h] for h in sorted(hours)])
        for date, hours in days.items()
    ]
    timeline.reverse()
    return timeline

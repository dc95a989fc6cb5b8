"""
Human readable summaries of rehearsal slot selections.
"""

from typing import Dict, Iterable, List

from .models import Slot, day_index, parse_time_label

MINUTES_PER_DAY = 24 * 60


def format_time_12h(label: str) -> str:
    """Format an ``HH:MM`` label as ``6:30 PM``."""
    minutes = parse_time_label(label)
    hour, minute = divmod(minutes, 60)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


def format_compact(minutes: int) -> str:
    """Format minutes after midnight as ``6PM`` or ``6:30PM``."""
    hour, minute = divmod(minutes % MINUTES_PER_DAY, 60)
    suffix = "PM" if hour >= 12 else "AM"
    if minute == 0:
        return f"{hour % 12 or 12}{suffix}"
    return f"{hour % 12 or 12}:{minute:02d}{suffix}"


def summarize_slots(slots: Iterable[Slot], interval_minutes: int = 30) -> Dict[str, List[str]]:
    """
    Merge contiguous slots of each day into readable ranges.

    Example: Monday 18:00, 18:30 and 19:00 at 30 minutes -> ``{"Monday": ["6PM - 7:30PM"]}``

    Days are returned in canonical weekday order.
    """
    by_day: Dict[str, List[int]] = {}
    for slot in slots:
        by_day.setdefault(slot.day, []).append(slot.minutes)

    summary: Dict[str, List[str]] = {}
    for day in sorted(by_day, key=day_index):
        starts = sorted(set(by_day[day]))
        ranges: List[str] = []
        range_start = range_end = starts[0]

        for minutes in starts[1:]:
            if minutes == range_end + interval_minutes:
                range_end = minutes
                continue
            ranges.append(f"{format_compact(range_start)} - {format_compact(range_end + interval_minutes)}")
            range_start = range_end = minutes

        ranges.append(f"{format_compact(range_start)} - {format_compact(range_end + interval_minutes)}")
        summary[day] = ranges

    return summary

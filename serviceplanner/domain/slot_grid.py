"""
Slot grid generation for rehearsal polls.

Pure functions: a SlotConfig goes in, the ordered slot universe comes out.
"""

from typing import Any, List, Mapping, Union

from .models import SlotConfig, SlotGrid, format_time_label


def generate_time_labels(config: SlotConfig) -> List[str]:
    """
    Generate the start label of every full interval within the configured range.

    The end time is exclusive and a partial trailing interval is omitted, so
    18:00-19:00 at 30 minutes yields ``["18:00", "18:30"]``.
    """
    labels: List[str] = []
    current = config.start_minutes

    while current + config.interval_minutes <= config.end_minutes:
        labels.append(format_time_label(current))
        current += config.interval_minutes

    return labels


def generate_slots(config: Union[SlotConfig, Mapping[str, Any]]) -> SlotGrid:
    """
    Build the slot universe for a rehearsal poll.

    Args:
        config: A SlotConfig, or a stored ``task_config`` mapping with
            ``days``, ``time_start``, ``time_end`` and ``interval_minutes``

    Returns:
        SlotGrid with days in canonical weekday order. Empty when no days are
        configured or the range is shorter than one interval.

    Raises:
        InvalidConfig: If the configuration is malformed
    """
    if not isinstance(config, SlotConfig):
        config = SlotConfig.from_task_config(config)

    days = config.ordered_days
    if not days:
        return SlotGrid.empty()

    times = generate_time_labels(config)
    if not times:
        return SlotGrid.empty()

    return SlotGrid(days=days, times=times)

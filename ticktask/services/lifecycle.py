"""Pure subtask lifecycle derivation.

A subtask's display state is a function of (start_time, end_time, completed,
now) and nothing else, so it is recomputed on every tick or edit instead of
being stored.
"""
import math
from datetime import datetime
from typing import Optional

from ticktask.config import SubtaskState
from ticktask.models.entities import SubtaskView


def remaining_seconds(end: datetime, now: datetime) -> int:
    """Whole seconds left until ``end``, rounded half-up and floored at 0."""
    return max(0, math.floor((end - now).total_seconds() + 0.5))


def derive_state(
    subtask_id: str,
    start: Optional[datetime],
    end: Optional[datetime],
    completed: bool,
    now: datetime,
) -> SubtaskView:
    """Derive the lifecycle state of one subtask at ``now``.

    Rules, first match wins:
    1. completed -> COMPLETED
    2. both times set and start <= now < end -> ACTIVE with remaining seconds
    3. both times set and now < start -> UPCOMING, wake up at start
    4. end set and now >= end -> ENDED
    5. otherwise -> UPCOMING with no timer
    """
    if completed:
        return SubtaskView(subtask_id, SubtaskState.COMPLETED)
    if start is not None and end is not None:
        if start <= now < end:
            return SubtaskView(
                subtask_id,
                SubtaskState.ACTIVE,
                remaining_seconds=remaining_seconds(end, now),
            )
        if now < start:
            return SubtaskView(subtask_id, SubtaskState.UPCOMING, wake_at=start)
    if end is not None and now >= end:
        return SubtaskView(subtask_id, SubtaskState.ENDED)
    return SubtaskView(subtask_id, SubtaskState.UPCOMING)


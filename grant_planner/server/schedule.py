# server/schedule.py
# ---------------------------------------------------------
# Deadline schedule generation.
#
# The available days between start and end are split evenly across
# a mechanism's steps; step i (0-based) is due at
#   start + interval * (i + 1)
# where interval = floor(total_days / step_count).
# ---------------------------------------------------------

from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from dateutil.parser import isoparse

from .errors import InvalidDateRangeError, UnknownMechanismError
from .step_models import ScheduleEntry
from .step_repo import StepRepo, step_repo

DateLike = Union[date, str]


def coerce_date(value: DateLike) -> date:
    """Accept a date, a datetime or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return isoparse(value.strip()).date()


def deadline_interval(start: date, end: date, step_count: int) -> int:
    total_days = (end - start).days
    return total_days // step_count


def generate_schedule(
    mechanism: str,
    start: DateLike,
    end: DateLike,
    repo: Optional[StepRepo] = None,
) -> List[ScheduleEntry]:
    """
    Build the deadline schedule for one planning run.

    Raises:
      UnknownMechanismError  - mechanism is not registered
      InvalidDateRangeError  - end is not after start, or the range has
                               fewer days than there are steps
    """
    repo = repo or step_repo
    if mechanism not in repo:
        raise UnknownMechanismError(mechanism)

    steps = repo.steps(mechanism)
    start_d = coerce_date(start)
    end_d = coerce_date(end)

    if end_d >= date.max:
        raise InvalidDateRangeError(
            f"End date must be before {date.max.isoformat()}."
        )
    if end_d <= start_d:
        raise InvalidDateRangeError(
            f"End date {end_d.isoformat()} must be after start date {start_d.isoformat()}."
        )

    interval = deadline_interval(start_d, end_d, len(steps))
    if interval < 1:
        raise InvalidDateRangeError(
            f"The date range needs at least {len(steps)} days "
            f"for {len(steps)} steps."
        )

    return [
        ScheduleEntry(
            **step.model_dump(),
            deadline=start_d + timedelta(days=interval * (i + 1)),
        )
        for i, step in enumerate(steps)
    ]

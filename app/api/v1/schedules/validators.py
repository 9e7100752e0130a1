"""Period list validation, run on every schedule write right before persistence."""

from typing import List, Sequence, TypeVar

from app.core.exceptions import OverlapError, ValidationError
from app.core.time_utils import to_minutes

P = TypeVar("P")


def validate_and_sort_periods(periods: Sequence[P]) -> List[P]:
    """
    Return the periods sorted by start time (stable on ties) after checking
    that no two of them overlap.

    Works on anything with start_time / end_time "HH:MM" attributes (request
    schemas or ORM rows). Back-to-back periods (end == next start) are allowed.
    Raises ValidationError for a period that does not end after it starts and
    OverlapError with the submitted indices of the first conflicting pair.
    """
    keyed = []
    for index, period in enumerate(periods):
        start = to_minutes(period.start_time)
        end = to_minutes(period.end_time)
        if end <= start:
            raise ValidationError(f"Period #{index}: end_time must be after start_time")
        keyed.append((start, end, index, period))

    # list.sort is stable, index only breaks ties explicitly
    keyed.sort(key=lambda item: (item[0], item[2]))

    for current, following in zip(keyed, keyed[1:]):
        if current[1] > following[0]:
            raise OverlapError(current[2], following[2])

    return [item[3] for item in keyed]

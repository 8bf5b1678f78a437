from django.conf import settings

from habits.exceptions import InvalidArgument


def bounded_limit(limit, default: int) -> int:
    """Caller-supplied page size, defaulted and capped at HABITS_MAX_PAGE_SIZE."""
    if limit is None:
        limit = default
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
        raise InvalidArgument("Limit must be a non-negative integer")
    return min(limit, settings.HABITS_MAX_PAGE_SIZE)


def non_negative_offset(offset) -> int:
    offset = offset or 0
    if not isinstance(offset, int) or isinstance(offset, bool) or offset < 0:
        raise InvalidArgument("Offset must be a non-negative integer")
    return offset

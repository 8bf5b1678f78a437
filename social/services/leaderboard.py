"""
Leaderboard of a viewer's social circle.

Counting is pushed to the database; ranking is a chain of plain stages over
LeaderboardRow values so it can be exercised without any storage:

    rows -> drop_without_active_habits -> order_rows -> assign_ranks
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Count
from django.utils import timezone

from habits.exceptions import InvalidWindow
from habits.models import HabitCompletion
from habits.services.registry import active_habit_counts
from social.services.follow_graph import PublicUser, followees_of, public_identity
from social.services.limits import bounded_limit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaderboardRow:
    user: PublicUser
    total_completions: int
    active_habits: int
    is_current_user: bool


@dataclass(frozen=True)
class LeaderboardEntry:
    user: PublicUser
    total_completions: int
    active_habits: int
    is_current_user: bool
    rank: int


def window_start(window: str, now=None) -> Optional[date]:
    """
    Inclusive lower bound on completion dates for a window token, or None
    for an unbounded window.
    """
    windows = settings.HABITS_LEADERBOARD_WINDOWS
    if window not in windows:
        raise InvalidWindow(f"Unknown leaderboard window {window!r}")
    days = windows[window]
    if days is None:
        return None
    now = now or timezone.now()
    return timezone.localdate(now - timedelta(days=days))


def drop_without_active_habits(rows: Iterable[LeaderboardRow]) -> List[LeaderboardRow]:
    return [row for row in rows if row.active_habits > 0]


def order_rows(rows: Iterable[LeaderboardRow]) -> List[LeaderboardRow]:
    return sorted(rows, key=lambda r: (-r.total_completions, -r.active_habits, r.user.id))


def assign_ranks(rows: List[LeaderboardRow], limit: int) -> List[LeaderboardEntry]:
    # positional ranks, equal scores still get consecutive ranks
    return [
        LeaderboardEntry(
            user=row.user,
            total_completions=row.total_completions,
            active_habits=row.active_habits,
            is_current_user=row.is_current_user,
            rank=position,
        )
        for position, row in enumerate(rows[:limit], start=1)
    ]


def rank_rows(rows: Iterable[LeaderboardRow], limit: int) -> List[LeaderboardEntry]:
    return assign_ranks(order_rows(drop_without_active_habits(rows)), limit)


def _completion_counts(user_ids, since: Optional[date]):
    qs = HabitCompletion.objects.filter(owner_id__in=user_ids)
    if since is not None:
        qs = qs.filter(completion_date__gte=since)
    return {row["owner_id"]: row["n"] for row in qs.values("owner_id").annotate(n=Count("id"))}


def load_rows(viewer_id, since: Optional[date]) -> List[LeaderboardRow]:
    candidate_ids = followees_of(viewer_id) | {viewer_id}

    users = get_user_model().objects.filter(pk__in=candidate_ids).select_related("profile")
    habits = active_habit_counts(candidate_ids)
    completions = _completion_counts(candidate_ids, since)

    return [
        LeaderboardRow(
            user=public_identity(user),
            total_completions=completions.get(user.pk, 0),
            active_habits=habits.get(user.pk, 0),
            is_current_user=user.pk == viewer_id,
        )
        for user in users
    ]


def build_leaderboard(viewer_id, window: str = "week", limit=None, now=None) -> List[LeaderboardEntry]:
    since = window_start(window, now)
    limit = bounded_limit(limit, settings.HABITS_DEFAULT_LEADERBOARD_LIMIT)

    entries = rank_rows(load_rows(viewer_id, since), limit)
    logger.debug("Leaderboard for user %s (%s): %d entries", viewer_id, window, len(entries))
    return entries

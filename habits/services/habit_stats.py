import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from django.db.models import Count, Exists, Max, OuterRef, Q
from django.utils import timezone

from habits.exceptions import NotFound
from habits.models import Habit, HabitCompletion
from habits.services import completion_log

logger = logging.getLogger(__name__)

WEEK_DAYS = 7


def with_habit_stats(qs, today: Optional[date] = None):
    """
    Adds efficient annotations used by derived GraphQL fields.

    - total_completions_anno
    - week_completions_anno
    - last_completion_anno
    - completed_today_anno
    """
    today = today or timezone.localdate()
    week_start = today - timedelta(days=WEEK_DAYS)

    today_completion_exists = HabitCompletion.objects.filter(habit_id=OuterRef("pk"), completion_date=today)

    return qs.annotate(
        total_completions_anno=Count("completions", distinct=True),
        week_completions_anno=Count(
            "completions",
            filter=Q(completions__completion_date__gte=week_start),
            distinct=True,
        ),
        last_completion_anno=Max("completions__completion_date"),
        completed_today_anno=Exists(today_completion_exists),
    )


def _prefetched_completion_dates_or_none(habit):
    """
    If `completions` were prefetched, Django stores them in _prefetched_objects_cache
    We can use that to avoid DB queries.
    """

    cache = getattr(habit, "_prefetched_objects_cache", None) or {}
    if "completions" not in cache:
        return None

    return {c.completion_date for c in cache["completions"]}


def _completion_dates(habit):
    dates = _prefetched_completion_dates_or_none(habit)
    if dates is not None:
        return dates
    return set(habit.completions.values_list("completion_date", flat=True))


def total_completions(habit: Habit) -> int:
    val = getattr(habit, "total_completions_anno", None)
    if val is not None:
        return int(val)
    return habit.completions.count()


def week_completions(habit: Habit, today: Optional[date] = None) -> int:
    val = getattr(habit, "week_completions_anno", None)
    if val is not None:
        return int(val)
    today = today or timezone.localdate()
    return habit.completions.filter(completion_date__gte=today - timedelta(days=WEEK_DAYS)).count()


def last_completion_date(habit: Habit) -> Optional[date]:
    if hasattr(habit, "last_completion_anno"):
        return habit.last_completion_anno
    latest = habit.completions.order_by("-completion_date").first()
    return latest.completion_date if latest else None


def completed_today(habit: Habit, today: Optional[date] = None) -> bool:
    val = getattr(habit, "completed_today_anno", None)
    if val is not None:
        return bool(val)
    today = today or timezone.localdate()
    return habit.completions.filter(completion_date=today).exists()


def streak_from_dates(dates: Iterable[date], today: date) -> int:
    """
    Consecutive days with a completion, ending at `today`.

    Walks the distinct dates newest first and stops at the first day that is
    not exactly one before the previous one. No completion today means 0.
    Dates after `today` are ignored.
    """
    streak = 0
    for d in sorted({d for d in dates if d <= today}, reverse=True):
        if d != today - timedelta(days=streak):
            break
        streak += 1
    return streak


def _week_start(d: date) -> date:
    return d - timedelta(days=d.weekday())


def weekly_streak_from_dates(dates: Iterable[date], today: date) -> int:
    """Consecutive Monday-based weeks with at least one completion, ending with the current week."""
    weeks = {_week_start(d) for d in dates if d <= today}
    streak = 0
    expected = _week_start(today)
    while expected in weeks:
        streak += 1
        expected -= timedelta(days=WEEK_DAYS)
    return streak


def best_streak_from_dates(dates: Iterable[date]) -> int:
    dates = sorted(set(dates))
    if not dates:
        return 0

    best = 1
    cur = 1
    for prev, nxt in zip(dates, dates[1:]):
        if nxt == prev + timedelta(days=1):
            cur += 1
            if cur > best:
                best = cur
        else:
            cur = 1
    return best


def current_streak(habit: Habit, today: Optional[date] = None) -> int:
    today = today or timezone.localdate()
    dates = _completion_dates(habit)
    if habit.frequency == Habit.Frequency.WEEKLY:
        return weekly_streak_from_dates(dates, today)
    return streak_from_dates(dates, today)


def best_streak(habit: Habit) -> int:
    """
    Max consecutive-day streak across all completions.
    Uses prefetched completions if available; otherwise queries once.
    """
    return best_streak_from_dates(_completion_dates(habit))


def habit_stats(habit_id, owner_id, today: Optional[date] = None) -> dict:
    today = today or timezone.localdate()
    habit = with_habit_stats(Habit.objects.filter(pk=habit_id, owner_id=owner_id), today).first()
    if habit is None:
        raise NotFound("Habit not found")

    return {
        "total_completions": total_completions(habit),
        "week_completions": week_completions(habit, today),
        "last_completion_date": last_completion_date(habit),
    }


def dashboard_summary(owner_id, today: Optional[date] = None) -> dict:
    today = today or timezone.localdate()
    active = Habit.objects.filter(owner_id=owner_id, is_active=True)

    summary = {
        "active_habits": active.count(),
        "completed_today": HabitCompletion.objects.filter(
            habit__in=active, completion_date=today
        ).count(),
        "week_completions": completion_log.count_in_window(owner_id, today - timedelta(days=WEEK_DAYS)),
        "total_completions": completion_log.count_in_window(owner_id),
    }
    logger.debug("Dashboard summary for user %s: %s", owner_id, summary)
    return summary

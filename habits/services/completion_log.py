"""
Append-only log of habit completions.

One row per (habit, calendar day). The calendar day of an instant is its date
in the configured TIME_ZONE, for writes and reads alike.
"""
import logging
from datetime import date, datetime
from typing import List, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from habits.exceptions import DuplicateCompletion, InvalidArgument, NotFound
from habits.models import Habit, HabitCompletion

logger = logging.getLogger(__name__)


def normalize_completion_date(value) -> date:
    """
    Strip the time of day from `value`.

    Aware datetimes are converted to the local calendar day first; naive
    datetimes are taken to be local already.
    """
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidArgument(f"Expected a date, got {value!r}")


def record(habit_id, owner_id, date=None, note=None, now=None) -> HabitCompletion:
    now = now or timezone.now()
    completion_date = normalize_completion_date(date if date is not None else now)

    habit = Habit.objects.filter(pk=habit_id, owner_id=owner_id, is_active=True).first()
    if habit is None:
        logger.info("Check-in rejected, habit %s not found for user %s", habit_id, owner_id)
        raise NotFound("Habit not found")

    try:
        with transaction.atomic():
            completion = HabitCompletion.objects.create(
                habit=habit,
                owner_id=owner_id,
                completion_date=completion_date,
                note=note or "",
                created_at=now,
            )
    except IntegrityError as exc:
        logger.info("Duplicate check-in for habit %s on %s", habit_id, completion_date)
        raise DuplicateCompletion() from exc

    logger.info("User %s checked in habit %s for %s", owner_id, habit_id, completion_date)
    return completion


def remove(habit_id, owner_id, date=None) -> None:
    completion_date = normalize_completion_date(date if date is not None else timezone.now())

    deleted, _ = HabitCompletion.objects.filter(
        habit_id=habit_id,
        owner_id=owner_id,
        completion_date=completion_date,
    ).delete()
    if not deleted:
        raise NotFound("No completion found for this date")

    logger.info("User %s removed check-in of habit %s for %s", owner_id, habit_id, completion_date)


def history(habit_id, since: Optional[date] = None) -> List[HabitCompletion]:
    qs = HabitCompletion.objects.filter(habit_id=habit_id)
    if since is not None:
        qs = qs.filter(completion_date__gte=normalize_completion_date(since))
    return list(qs.order_by("-completion_date"))


def count_in_window(owner_id, from_date: Optional[date] = None) -> int:
    qs = HabitCompletion.objects.filter(owner_id=owner_id)
    if from_date is not None:
        qs = qs.filter(completion_date__gte=normalize_completion_date(from_date))
    return qs.count()

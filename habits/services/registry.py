import logging
from typing import Dict, Iterable

from django.db import IntegrityError, transaction
from django.db.models import Count

from habits.exceptions import DuplicateHabit, InvalidArgument, NotFound
from habits.models import Category, Habit

logger = logging.getLogger(__name__)


def get_owned_habit(habit_id, owner_id, active_only: bool = False) -> Habit:
    qs = Habit.objects.select_related("category").filter(pk=habit_id, owner_id=owner_id)
    if active_only:
        qs = qs.filter(is_active=True)
    habit = qs.first()
    if habit is None:
        raise NotFound("Habit not found")
    return habit


def _clean_habit_fields(name, frequency, target_count, category_id):
    name = (name or "").strip()
    if not name:
        raise InvalidArgument("Habit name is required")
    if frequency not in Habit.Frequency.values:
        raise InvalidArgument('Frequency must be either "daily" or "weekly"')
    if not isinstance(target_count, int) or isinstance(target_count, bool) or not 1 <= target_count <= 10:
        raise InvalidArgument("Target count must be a number between 1 and 10")
    if category_id is not None and not Category.objects.filter(pk=category_id).exists():
        raise NotFound("Category not found")
    return name


def register_habit(
        owner_id,
        name: str,
        *,
        frequency: str = Habit.Frequency.DAILY,
        target_count: int = 1,
        category_id=None,
        description: str = "",
) -> Habit:
    name = _clean_habit_fields(name, frequency, target_count, category_id)

    try:
        with transaction.atomic():
            habit = Habit.objects.create(
                owner_id=owner_id,
                name=name,
                description=description or "",
                frequency=frequency,
                target_count=target_count,
                category_id=category_id,
            )
    except IntegrityError as exc:
        raise DuplicateHabit() from exc

    logger.info("User %s registered habit %s (%s)", owner_id, habit.pk, name)
    return habit


def update_habit(
        habit_id,
        owner_id,
        name: str,
        *,
        frequency: str = Habit.Frequency.DAILY,
        target_count: int = 1,
        category_id=None,
        description: str = "",
        is_active=None,
) -> Habit:
    """Replace an owned habit's editable fields; the active-name rule still holds."""
    name = _clean_habit_fields(name, frequency, target_count, category_id)
    habit = get_owned_habit(habit_id, owner_id)

    habit.name = name
    habit.description = description or ""
    habit.frequency = frequency
    habit.target_count = target_count
    habit.category_id = category_id
    if is_active is not None:
        habit.is_active = is_active

    try:
        with transaction.atomic():
            habit.save()
    except IntegrityError as exc:
        raise DuplicateHabit() from exc

    logger.info("User %s updated habit %s", owner_id, habit_id)
    return habit


def deactivate_habit(habit_id, owner_id) -> Habit:
    habit = get_owned_habit(habit_id, owner_id)
    if habit.is_active:
        habit.is_active = False
        habit.save(update_fields=["is_active", "updated_at"])
        logger.info("User %s deactivated habit %s", owner_id, habit_id)
    return habit


def active_habit_counts(user_ids: Iterable) -> Dict[int, int]:
    rows = (
        Habit.objects.filter(owner_id__in=list(user_ids), is_active=True)
        .values("owner_id")
        .annotate(n=Count("id"))
    )
    return {row["owner_id"]: row["n"] for row in rows}

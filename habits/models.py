from __future__ import annotations
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Category(models.Model):
    name = models.CharField(max_length=50, unique=True)
    color = models.CharField(max_length=7, default="#3B82F6")
    icon = models.CharField(max_length=50, default="target")

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Habit(models.Model):
    class Frequency(models.TextChoices):
        DAILY = "daily", "Daily"
        WEEKLY = "weekly", "Weekly"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='habits',
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="habits",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    frequency = models.CharField(max_length=10, choices=Frequency.choices, default=Frequency.DAILY)
    target_count = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1), MaxValueValidator(10)],
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            # inactive habits keep their name so history stays readable
            models.UniqueConstraint(
                fields=['owner', 'name'],
                condition=Q(is_active=True),
                name='unique_active_habit_name_per_user',
            ),
            models.CheckConstraint(
                condition=Q(target_count__gte=1) & Q(target_count__lte=10),
                name="habit_target_count_range",
            ),
        ]
        indexes = [models.Index(fields=["owner", "is_active"], name="habit_owner_active_idx")]

    if TYPE_CHECKING:
        # Django dynamically injects this via related_name="completions"
        completions = None

    def __str__(self) -> str:
        return self.name


class HabitCompletion(models.Model):
    habit = models.ForeignKey(Habit, on_delete=models.CASCADE,
                              related_name="completions")
    # copied from habit.owner so per-user counts skip the join
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="habit_completions",
    )
    completion_date = models.DateField()
    note = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["habit", "completion_date"],
                                    name="unique_completion_per_habit_per_day")
        ]
        indexes = [
            models.Index(fields=["owner", "completion_date"], name="completion_owner_date_idx"),
            models.Index(fields=["owner", "created_at"], name="completion_owner_logged_idx"),
        ]
        ordering = ["-completion_date", "-created_at"]

    def __str__(self) -> str:
        return f"{self.habit.name} @ {self.completion_date}"

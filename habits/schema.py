from datetime import timedelta

import graphene
from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone
from graphene_django import DjangoObjectType

from .exceptions import AuthenticationRequired, InvalidArgument, NotFound
from .models import Category, Habit, HabitCompletion
from habits.services import completion_log, habit_stats, registry


def require_user(info):
    user = info.context.user
    if user.is_anonymous:
        raise AuthenticationRequired()
    return user


def parse_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"Invalid id {value!r}") from exc


class CategoryType(DjangoObjectType):
    class Meta:
        model = Category
        fields = ("id", "name", "color", "icon")


class CompletionType(DjangoObjectType):
    class Meta:
        model = HabitCompletion
        fields = ("id", "habit", "completion_date", "note", "created_at")


class HabitType(DjangoObjectType):
    total_completions = graphene.Int()
    week_completions = graphene.Int()
    last_completion_date = graphene.Date()
    completed_today = graphene.Boolean()
    current_streak = graphene.Int()
    best_streak = graphene.Int()
    recent_completions = graphene.List(CompletionType)

    class Meta:
        model = Habit
        fields = (
            "id", "name", "description", "frequency", "target_count",
            "is_active", "created_at", "updated_at", "category",
        )
        convert_choices_to_enum = False

    def resolve_total_completions(self, info):
        return habit_stats.total_completions(self)

    def resolve_week_completions(self, info):
        return habit_stats.week_completions(self)

    def resolve_last_completion_date(self, info):
        return habit_stats.last_completion_date(self)

    def resolve_completed_today(self, info):
        return habit_stats.completed_today(self)

    def resolve_current_streak(self, info):
        return habit_stats.current_streak(self)

    def resolve_best_streak(self, info):
        return habit_stats.best_streak(self)

    def resolve_recent_completions(self, info):
        since = timezone.localdate() - timedelta(days=settings.HABITS_HISTORY_DAYS)
        return completion_log.history(self.pk, since=since)


class HabitStatsType(graphene.ObjectType):
    total_completions = graphene.Int(required=True)
    week_completions = graphene.Int(required=True)
    last_completion_date = graphene.Date()


class DashboardType(graphene.ObjectType):
    active_habits = graphene.Int(required=True)
    completed_today = graphene.Int(required=True)
    week_completions = graphene.Int(required=True)
    total_completions = graphene.Int(required=True)


class UserType(DjangoObjectType):
    class Meta:
        model = get_user_model()
        fields = ("id", "username", "email", "first_name", "last_name")


class Query(graphene.ObjectType):
    me = graphene.Field(UserType)
    categories = graphene.List(CategoryType)
    habits = graphene.List(HabitType, active_only=graphene.Boolean(required=False))
    habit = graphene.Field(HabitType, id=graphene.ID(required=True))
    habit_stats = graphene.Field(HabitStatsType, id=graphene.ID(required=True))
    dashboard = graphene.Field(DashboardType)

    def resolve_me(self, info):
        user = info.context.user
        return None if user.is_anonymous else user

    def resolve_categories(self, info):
        return Category.objects.all()

    def resolve_habits(self, info, active_only=None):
        user = info.context.user
        if user.is_anonymous:
            return Habit.objects.none()

        qs = Habit.objects.filter(owner=user).select_related("category").order_by("name")
        if active_only is True:
            qs = qs.filter(is_active=True)

        return habit_stats.with_habit_stats(qs).prefetch_related("completions")

    def resolve_habit(self, info, id):
        user = require_user(info)

        habit = habit_stats.with_habit_stats(
            Habit.objects.filter(owner=user, pk=parse_id(id))
        ).prefetch_related("completions").first()
        if habit is None:
            raise NotFound("Habit not found")
        return habit

    def resolve_habit_stats(self, info, id):
        user = require_user(info)
        return habit_stats.habit_stats(parse_id(id), user.pk)

    def resolve_dashboard(self, info):
        user = require_user(info)
        return habit_stats.dashboard_summary(user.pk)


class CreateHabit(graphene.Mutation):
    class Arguments:
        name = graphene.String(required=True)
        description = graphene.String(required=False)
        frequency = graphene.String(required=False)
        target_count = graphene.Int(required=False)
        category_id = graphene.ID(required=False)

    habit = graphene.Field(HabitType)

    def mutate(self, info, name, description="", frequency=Habit.Frequency.DAILY, target_count=None,
               category_id=None):
        user = require_user(info)
        habit = registry.register_habit(
            user.pk,
            name,
            frequency=frequency,
            target_count=1 if target_count is None else target_count,
            category_id=parse_id(category_id) if category_id is not None else None,
            description=description,
        )
        return CreateHabit(habit=habit)


class UpdateHabit(graphene.Mutation):
    class Arguments:
        id = graphene.ID(required=True)
        name = graphene.String(required=True)
        description = graphene.String(required=False)
        frequency = graphene.String(required=False)
        target_count = graphene.Int(required=False)
        category_id = graphene.ID(required=False)
        is_active = graphene.Boolean(required=False)

    habit = graphene.Field(HabitType)

    def mutate(self, info, id, name, description="", frequency=Habit.Frequency.DAILY, target_count=None,
               category_id=None, is_active=None):
        user = require_user(info)
        habit = registry.update_habit(
            parse_id(id),
            user.pk,
            name,
            frequency=frequency,
            target_count=1 if target_count is None else target_count,
            category_id=parse_id(category_id) if category_id is not None else None,
            description=description,
            is_active=is_active,
        )
        return UpdateHabit(habit=habit)


class DeleteHabit(graphene.Mutation):
    class Arguments:
        id = graphene.ID(required=True)

    ok = graphene.Boolean(required=True)
    deleted_id = graphene.ID(required=True)

    def mutate(self, info, id):
        user = require_user(info)
        registry.deactivate_habit(parse_id(id), user.pk)
        return DeleteHabit(ok=True, deleted_id=id)


class CheckIn(graphene.Mutation):
    class Arguments:
        habit_id = graphene.ID(required=True)
        date = graphene.Date(required=False)
        note = graphene.String(required=False)

    completion = graphene.Field(CompletionType)
    current_streak = graphene.Int()

    @classmethod
    def mutate(cls, root, info, habit_id, date=None, note=None):
        user = require_user(info)
        completion = completion_log.record(parse_id(habit_id), user.pk, date=date, note=note)
        streak = habit_stats.current_streak(completion.habit)
        return cls(completion=completion, current_streak=streak)


class RemoveCheckIn(graphene.Mutation):
    class Arguments:
        habit_id = graphene.ID(required=True)
        date = graphene.Date(required=False)

    ok = graphene.Boolean(required=True)

    @classmethod
    def mutate(cls, root, info, habit_id, date=None):
        user = require_user(info)
        completion_log.remove(parse_id(habit_id), user.pk, date=date)
        return cls(ok=True)


class Mutation(graphene.ObjectType):
    create_habit = CreateHabit.Field()
    update_habit = UpdateHabit.Field()
    delete_habit = DeleteHabit.Field()
    check_in = CheckIn.Field()
    remove_check_in = RemoveCheckIn.Field()

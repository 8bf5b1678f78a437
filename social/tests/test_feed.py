from datetime import date, timedelta

import pytest
from django.utils import timezone

from habits.exceptions import InvalidArgument
from habits.models import Category, Habit, HabitCompletion
from social.models import Profile
from social.services import feed, follow_graph

pytestmark = pytest.mark.django_db


@pytest.fixture()
def now():
    return timezone.now()


def _log(habit, completion_date, logged_at, note=""):
    return HabitCompletion.objects.create(
        habit=habit, owner=habit.owner, completion_date=completion_date, note=note, created_at=logged_at
    )


def test_build_feed__empty_when_following_nobody(user, other_user, now):
    _log(Habit.objects.create(owner=other_user, name="Gym"), now.date(), now)

    assert feed.build_feed(user.pk, now=now) == []


def test_build_feed__newest_first_and_excludes_viewer(user, other_user, make_user, now):
    third = make_user("u3")
    follow_graph.follow(user.pk, other_user.pk)
    follow_graph.follow(user.pk, third.pk)

    theirs = Habit.objects.create(owner=other_user, name="Gym")
    third_habit = Habit.objects.create(owner=third, name="Read")
    mine = Habit.objects.create(owner=user, name="Walk")

    oldest = _log(theirs, date(2024, 1, 1), now - timedelta(days=3))
    newest = _log(third_habit, date(2024, 1, 2), now - timedelta(hours=1))
    middle = _log(theirs, date(2024, 1, 3), now - timedelta(days=1))
    _log(mine, date(2024, 1, 3), now)

    items = feed.build_feed(user.pk, now=now)

    assert [i.completion_id for i in items] == [newest.pk, middle.pk, oldest.pk]


def test_build_feed__only_completions_logged_in_trailing_week(user, other_user, now):
    follow_graph.follow(user.pk, other_user.pk)
    habit = Habit.objects.create(owner=other_user, name="Gym")
    today = now.date()

    recent = _log(habit, today - timedelta(days=30), now - timedelta(days=6))
    # the completion day is recent but it was logged long ago
    _log(habit, today, now - timedelta(days=8))

    assert [i.completion_id for i in feed.build_feed(user.pk, now=now)] == [recent.pk]


def test_build_feed__joins_habit_category_and_public_user(user, other_user, now):
    follow_graph.follow(user.pk, other_user.pk)
    Profile.objects.create(user=other_user, avatar_url="https://example.com/u2.png")
    category = Category.objects.get(name="Health & Fitness")
    habit = Habit.objects.create(owner=other_user, name="Gym", category=category, frequency="weekly")
    completion = _log(habit, now.date(), now, note="new PR")

    [item] = feed.build_feed(user.pk, now=now)

    assert item.completion_id == completion.pk
    assert item.completion_date == now.date()
    assert item.logged_at == now
    assert item.note == "new PR"
    assert item.habit.name == "Gym"
    assert item.habit.frequency == "weekly"
    assert item.habit.category == feed.FeedCategory("Health & Fitness", "#EF4444", "heart")
    assert item.user.username == "u2"
    assert item.user.first_name == "Dos"
    assert item.user.last_name == "Two"
    assert item.user.avatar_url == "https://example.com/u2.png"


def test_build_feed__keeps_completions_of_deactivated_habits(user, other_user, now):
    follow_graph.follow(user.pk, other_user.pk)
    habit = Habit.objects.create(owner=other_user, name="Old habit")
    _log(habit, now.date(), now)
    habit.is_active = False
    habit.save()

    [item] = feed.build_feed(user.pk, now=now)

    assert item.habit.name == "Old habit"
    assert item.habit.category is None


def test_build_feed__paginates_from_most_recent(user, other_user, now):
    follow_graph.follow(user.pk, other_user.pk)
    habit = Habit.objects.create(owner=other_user, name="Gym")
    logged = [_log(habit, now.date() - timedelta(days=i), now - timedelta(hours=i)) for i in range(5)]

    page = feed.build_feed(user.pk, limit=2, offset=1, now=now)

    assert [i.completion_id for i in page] == [logged[1].pk, logged[2].pk]
    assert feed.build_feed(user.pk, limit=2, offset=5, now=now) == []


@pytest.mark.parametrize("kwargs", [{"limit": -1}, {"offset": -3}, {"limit": "10"}])
def test_build_feed__rejects_bad_paging(user, kwargs):
    with pytest.raises(InvalidArgument):
        feed.build_feed(user.pk, **kwargs)


def test_build_feed__caps_limit(user, other_user, now, settings):
    settings.HABITS_MAX_PAGE_SIZE = 3
    follow_graph.follow(user.pk, other_user.pk)
    habit = Habit.objects.create(owner=other_user, name="Gym")
    for i in range(5):
        _log(habit, now.date() - timedelta(days=i), now - timedelta(hours=i))

    assert len(feed.build_feed(user.pk, limit=50, now=now)) == 3


def test_newest_first__breaks_timestamp_ties_by_completion_id():
    at = timezone.now()
    items = [
        feed.FeedItem(completion_id=i, completion_date=at.date(), logged_at=at, note="", habit=None, user=None)
        for i in (1, 3, 2)
    ]

    assert [i.completion_id for i in feed.newest_first(items)] == [3, 2, 1]

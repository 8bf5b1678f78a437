import json
from datetime import timedelta

import pytest
from django.test import Client
from django.utils import timezone

from habits.models import Category, Habit, HabitCompletion

pytestmark = pytest.mark.django_db


def _post_graphql(client: Client, query: str, variables=None):
    payload = {"query": query}
    if variables is not None:
        payload["variables"] = variables
    response = client.post("/graphql/", data=payload, content_type="application/json")
    assert response.status_code == 200
    data = json.loads(response.content)
    assert "errors" not in data, data.get("errors")
    return data["data"]


def _bulk_create_completions(habit, dates):
    HabitCompletion.objects.bulk_create(
        [HabitCompletion(habit=habit, owner=habit.owner, completion_date=d) for d in dates]
    )


def test_graphql_habits__anonymous__returns_empty_list():
    client = Client()

    query = """
      query {
        habits {
          id
          name
        }
      }
    """
    data = _post_graphql(client, query)
    assert data["habits"] == []


def test_graphql_categories__lists_seeded_categories():
    data = _post_graphql(Client(), "query { categories { name color icon } }")

    by_name = {c["name"]: c for c in data["categories"]}
    assert by_name["Mindfulness"] == {"name": "Mindfulness", "color": "#8B5CF6", "icon": "brain"}


def test_graphql_habits__returns_only_logged_in_users_habits(user, other_user):
    today = timezone.localdate()

    habit_u1 = Habit.objects.create(
        owner=user, name="GraphQLHabit", category=Category.objects.get(name="Learning")
    )
    _bulk_create_completions(habit_u1, [today, today - timedelta(days=1)])

    # Other user's habit (should NOT show up)
    habit_u2 = Habit.objects.create(owner=other_user, name="OtherUsersHabit")
    _bulk_create_completions(habit_u2, [today])

    client = Client()
    client.force_login(user)

    query = """
      query {
        habits {
          id
          name
          frequency
          category { name }
          totalCompletions
          completedToday
          weekCompletions
          lastCompletionDate
          currentStreak
          bestStreak
        }
      }
    """
    data = _post_graphql(client, query)
    habits = data["habits"]

    assert len(habits) == 1
    h = habits[0]

    assert h["name"] == "GraphQLHabit"
    assert h["frequency"] == "daily"
    assert h["category"] == {"name": "Learning"}
    assert h["totalCompletions"] == 2
    assert h["completedToday"] is True
    assert h["weekCompletions"] == 2
    assert h["lastCompletionDate"] == str(today)
    assert h["currentStreak"] == 2
    assert h["bestStreak"] == 2


def test_graphql_habits__active_only_hides_deactivated(user):
    Habit.objects.create(owner=user, name="Active")
    Habit.objects.create(owner=user, name="Retired", is_active=False)

    client = Client()
    client.force_login(user)

    all_names = [h["name"] for h in _post_graphql(client, "query { habits { name } }")["habits"]]
    active_names = [h["name"] for h in _post_graphql(client, "query { habits(activeOnly: true) { name } }")["habits"]]

    assert all_names == ["Active", "Retired"]
    assert active_names == ["Active"]


def test_graphql_habit__by_id__returns_recent_completions_and_derived_fields_for_owner(user, other_user):
    today = timezone.localdate()

    habit = Habit.objects.create(owner=user, name="SingleHabit")

    # - today..today-2 => currentStreak 3
    # - also an older run today-10..today-6 => bestStreak 5
    # - and one completion outside the 30 day history
    dates = [
        today,
        today - timedelta(days=1),
        today - timedelta(days=2),
        today - timedelta(days=6),
        today - timedelta(days=7),
        today - timedelta(days=8),
        today - timedelta(days=9),
        today - timedelta(days=10),
        today - timedelta(days=45),
    ]
    _bulk_create_completions(habit, dates)

    other = Habit.objects.create(owner=other_user, name="NotYours")

    client = Client()
    client.force_login(user)

    query = """
      query($id: ID!) {
        habit(id: $id) {
          id
          name
          totalCompletions
          completedToday
          weekCompletions
          currentStreak
          bestStreak
          recentCompletions {
            completionDate
          }
        }
      }
    """

    data = _post_graphql(client, query, variables={"id": str(habit.id)})
    h = data["habit"]

    assert h["name"] == "SingleHabit"
    assert h["totalCompletions"] == 9
    assert h["completedToday"] is True
    assert h["weekCompletions"] == 5  # today, -1, -2, -6, -7
    assert h["currentStreak"] == 3
    assert h["bestStreak"] == 5
    assert len(h["recentCompletions"]) == 8
    assert h["recentCompletions"][0]["completionDate"] == str(today)

    # another user's habit id must not leak anything
    response = client.post(
        "/graphql/",
        data={"query": query, "variables": {"id": str(other.id)}},
        content_type="application/json",
    )
    payload = json.loads(response.content)

    assert payload.get("data", {}).get("habit") is None
    assert payload["errors"][0]["message"] == "Habit not found"


def test_graphql_habit_stats__returns_stats_for_owner_only(user, other_user):
    today = timezone.localdate()
    habit = Habit.objects.create(owner=user, name="Stats")
    _bulk_create_completions(habit, [today - timedelta(days=1), today - timedelta(days=20)])
    other = Habit.objects.create(owner=other_user, name="Hidden")

    client = Client()
    client.force_login(user)
    query = """
      query($id: ID!) {
        habitStats(id: $id) { totalCompletions weekCompletions lastCompletionDate }
      }
    """

    data = _post_graphql(client, query, {"id": str(habit.id)})
    assert data["habitStats"] == {
        "totalCompletions": 2,
        "weekCompletions": 1,
        "lastCompletionDate": str(today - timedelta(days=1)),
    }

    response = client.post(
        "/graphql/",
        data={"query": query, "variables": {"id": str(other.id)}},
        content_type="application/json",
    )
    payload = json.loads(response.content)
    assert payload["data"]["habitStats"] is None
    assert "errors" in payload


def test_graphql_dashboard__requires_login_and_summarizes(user):
    today = timezone.localdate()
    habit = Habit.objects.create(owner=user, name="Dash")
    Habit.objects.create(owner=user, name="Idle")
    _bulk_create_completions(habit, [today, today - timedelta(days=2)])

    query = "query { dashboard { activeHabits completedToday weekCompletions totalCompletions } }"

    anonymous = json.loads(
        Client().post("/graphql/", data={"query": query}, content_type="application/json").content
    )
    assert anonymous["errors"][0]["message"] == "Authentication required"

    client = Client()
    client.force_login(user)
    assert _post_graphql(client, query)["dashboard"] == {
        "activeHabits": 2,
        "completedToday": 1,
        "weekCompletions": 2,
        "totalCompletions": 2,
    }

"""
Activity feed: recent completions logged by the users a viewer follows.

The database narrows the candidates to followees and the logging window;
ordering and pagination are plain stages over FeedItem values.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from django.conf import settings
from django.utils import timezone

from habits.models import HabitCompletion
from social.services.follow_graph import PublicUser, followees_of, public_identity
from social.services.limits import bounded_limit, non_negative_offset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedCategory:
    name: str
    color: str
    icon: str


@dataclass(frozen=True)
class FeedHabit:
    name: str
    frequency: str
    category: Optional[FeedCategory]


@dataclass(frozen=True)
class FeedItem:
    completion_id: int
    completion_date: date
    logged_at: datetime
    note: str
    habit: FeedHabit
    user: PublicUser


def feed_item(completion: HabitCompletion) -> FeedItem:
    # joined regardless of habit.is_active, the feed reflects history
    habit = completion.habit
    category = habit.category
    return FeedItem(
        completion_id=completion.pk,
        completion_date=completion.completion_date,
        logged_at=completion.created_at,
        note=completion.note,
        habit=FeedHabit(
            name=habit.name,
            frequency=habit.frequency,
            category=FeedCategory(category.name, category.color, category.icon) if category else None,
        ),
        user=public_identity(completion.owner),
    )


def within_window(items: Iterable[FeedItem], since: datetime) -> List[FeedItem]:
    return [item for item in items if item.logged_at >= since]


def newest_first(items: Iterable[FeedItem]) -> List[FeedItem]:
    return sorted(items, key=lambda i: (i.logged_at, i.completion_id), reverse=True)


def paginate(items: List[FeedItem], limit: int, offset: int) -> List[FeedItem]:
    return items[offset:offset + limit]


def build_feed(viewer_id, limit=None, offset=0, now=None) -> List[FeedItem]:
    limit = bounded_limit(limit, settings.HABITS_DEFAULT_FEED_LIMIT)
    offset = non_negative_offset(offset)

    candidate_ids = followees_of(viewer_id) - {viewer_id}
    if not candidate_ids:
        return []

    since = (now or timezone.now()) - timedelta(days=settings.HABITS_FEED_WINDOW_DAYS)
    completions = (
        HabitCompletion.objects.filter(owner_id__in=candidate_ids, created_at__gte=since)
        .select_related("habit__category", "owner__profile")
    )

    items = newest_first(within_window((feed_item(c) for c in completions), since))
    page = paginate(items, limit, offset)
    logger.debug("Feed for user %s: %d of %d items", viewer_id, len(page), len(items))
    return page

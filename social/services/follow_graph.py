"""
Directed follow edges between users.

Uniqueness of (follower, followee) and the no-self-follow rule are enforced by
database constraints; the checks here only turn them into typed errors early.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Set

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from habits.exceptions import DuplicateFollow, InvalidArgument, NotFound, SelfFollow
from social.models import UserFollow
from social.services.limits import bounded_limit

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 10


@dataclass(frozen=True)
class PublicUser:
    id: int
    username: str
    first_name: str
    last_name: str
    avatar_url: str


@dataclass(frozen=True)
class FollowListing:
    user: PublicUser
    followed_at: datetime
    is_following_back: Optional[bool] = None


@dataclass(frozen=True)
class SearchResult:
    user: PublicUser
    is_following: bool


def public_identity(user) -> PublicUser:
    profile = getattr(user, "profile", None)
    return PublicUser(
        id=user.pk,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        avatar_url=profile.avatar_url if profile else "",
    )


def follow(follower_id, followee_id, now=None) -> UserFollow:
    if follower_id == followee_id:
        raise SelfFollow()

    if not get_user_model().objects.filter(pk=followee_id).exists():
        raise NotFound("User not found")

    try:
        with transaction.atomic():
            edge = UserFollow.objects.create(
                follower_id=follower_id,
                followee_id=followee_id,
                created_at=now or timezone.now(),
            )
    except IntegrityError as exc:
        logger.info("User %s already follows user %s", follower_id, followee_id)
        raise DuplicateFollow() from exc

    logger.info("User %s followed user %s", follower_id, followee_id)
    return edge


def unfollow(follower_id, followee_id) -> None:
    deleted, _ = UserFollow.objects.filter(follower_id=follower_id, followee_id=followee_id).delete()
    if not deleted:
        raise NotFound("Follow relationship not found")
    logger.info("User %s unfollowed user %s", follower_id, followee_id)


def followees_of(user_id) -> Set[int]:
    return set(UserFollow.objects.filter(follower_id=user_id).values_list("followee_id", flat=True))


def followers_of(user_id) -> Set[int]:
    return set(UserFollow.objects.filter(followee_id=user_id).values_list("follower_id", flat=True))


def is_following(follower_id, followee_id) -> bool:
    return UserFollow.objects.filter(follower_id=follower_id, followee_id=followee_id).exists()


def following_list(user_id) -> List[FollowListing]:
    edges = (
        UserFollow.objects.filter(follower_id=user_id)
        .select_related("followee__profile")
        .order_by("-created_at", "-id")
    )
    return [FollowListing(user=public_identity(e.followee), followed_at=e.created_at) for e in edges]


def followers_list(user_id) -> List[FollowListing]:
    edges = list(
        UserFollow.objects.filter(followee_id=user_id)
        .select_related("follower__profile")
        .order_by("-created_at", "-id")
    )
    following_back = followees_of(user_id)
    return [
        FollowListing(
            user=public_identity(e.follower),
            followed_at=e.created_at,
            is_following_back=e.follower_id in following_back,
        )
        for e in edges
    ]


def search_users(viewer_id, query: str, limit=None) -> List[SearchResult]:
    query = (query or "").strip()
    if len(query) < MIN_SEARCH_LENGTH:
        raise InvalidArgument("Search query must be at least 2 characters")
    limit = bounded_limit(limit, DEFAULT_SEARCH_LIMIT)

    users = list(
        get_user_model().objects.exclude(pk=viewer_id)
        .filter(
            Q(username__icontains=query)
            | Q(first_name__icontains=query)
            | Q(last_name__icontains=query)
        )
        .select_related("profile")
        .order_by("username")[:limit]
    )
    followed = followees_of(viewer_id)
    return [SearchResult(user=public_identity(u), is_following=u.pk in followed) for u in users]

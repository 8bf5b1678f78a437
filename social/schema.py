import graphene

from habits.schema import parse_id, require_user
from social.services import feed, follow_graph, leaderboard


class PublicUserType(graphene.ObjectType):
    id = graphene.ID(required=True)
    username = graphene.String(required=True)
    first_name = graphene.String()
    last_name = graphene.String()
    avatar_url = graphene.String()


class LeaderboardEntryType(graphene.ObjectType):
    user = graphene.Field(PublicUserType, required=True)
    total_completions = graphene.Int(required=True)
    active_habits = graphene.Int(required=True)
    is_current_user = graphene.Boolean(required=True)
    rank = graphene.Int(required=True)


class FeedCategoryType(graphene.ObjectType):
    name = graphene.String()
    color = graphene.String()
    icon = graphene.String()


class FeedHabitType(graphene.ObjectType):
    name = graphene.String(required=True)
    frequency = graphene.String(required=True)
    category = graphene.Field(FeedCategoryType)


class FeedItemType(graphene.ObjectType):
    completion_id = graphene.ID(required=True)
    completion_date = graphene.Date(required=True)
    logged_at = graphene.DateTime(required=True)
    note = graphene.String()
    habit = graphene.Field(FeedHabitType, required=True)
    user = graphene.Field(PublicUserType, required=True)


class FollowListingType(graphene.ObjectType):
    user = graphene.Field(PublicUserType, required=True)
    followed_at = graphene.DateTime(required=True)
    is_following_back = graphene.Boolean()


class SearchResultType(graphene.ObjectType):
    user = graphene.Field(PublicUserType, required=True)
    is_following = graphene.Boolean(required=True)


class Query(graphene.ObjectType):
    leaderboard = graphene.List(
        LeaderboardEntryType,
        period=graphene.String(required=False),
        limit=graphene.Int(required=False),
    )
    feed = graphene.List(
        FeedItemType,
        limit=graphene.Int(required=False),
        offset=graphene.Int(required=False),
    )
    following = graphene.List(FollowListingType)
    followers = graphene.List(FollowListingType)
    search_users = graphene.List(
        SearchResultType,
        q=graphene.String(required=True),
        limit=graphene.Int(required=False),
    )

    def resolve_leaderboard(self, info, period="week", limit=None):
        user = require_user(info)
        return leaderboard.build_leaderboard(user.pk, window=period, limit=limit)

    def resolve_feed(self, info, limit=None, offset=0):
        user = require_user(info)
        return feed.build_feed(user.pk, limit=limit, offset=offset)

    def resolve_following(self, info):
        user = require_user(info)
        return follow_graph.following_list(user.pk)

    def resolve_followers(self, info):
        user = require_user(info)
        return follow_graph.followers_list(user.pk)

    def resolve_search_users(self, info, q, limit=None):
        user = require_user(info)
        return follow_graph.search_users(user.pk, q, limit=limit)


class FollowUser(graphene.Mutation):
    class Arguments:
        user_id = graphene.ID(required=True)

    ok = graphene.Boolean(required=True)
    followed_at = graphene.DateTime()

    def mutate(self, info, user_id):
        user = require_user(info)
        edge = follow_graph.follow(user.pk, parse_id(user_id))
        return FollowUser(ok=True, followed_at=edge.created_at)


class UnfollowUser(graphene.Mutation):
    class Arguments:
        user_id = graphene.ID(required=True)

    ok = graphene.Boolean(required=True)

    def mutate(self, info, user_id):
        user = require_user(info)
        follow_graph.unfollow(user.pk, parse_id(user_id))
        return UnfollowUser(ok=True)


class Mutation(graphene.ObjectType):
    follow_user = FollowUser.Field()
    unfollow_user = UnfollowUser.Field()

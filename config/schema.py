import graphene
from habits.schema import Query as HabitsQuery, Mutation as HabitsMutation
from social.schema import Query as SocialQuery, Mutation as SocialMutation


class Query(HabitsQuery, SocialQuery, graphene.ObjectType):
    pass


class Mutation(HabitsMutation, SocialMutation, graphene.ObjectType):
    pass

schema = graphene.Schema(query=Query, mutation=Mutation)

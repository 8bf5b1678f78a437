"""
URL configuration for the habit tracker project.

Everything the core exposes goes through the single GraphQL endpoint.
"""
from django.contrib import admin
from django.urls import path
from django.views.decorators.csrf import csrf_exempt
from graphene_django.views import GraphQLView

from habits.exceptions import HabitTrackerError


class HabitsGraphQLView(GraphQLView):
    @staticmethod
    def format_error(error):
        formatted = GraphQLView.format_error(error)
        # typed failures carry their code in extensions
        original = getattr(error, "original_error", None)
        if isinstance(original, HabitTrackerError):
            formatted.setdefault("extensions", {})["code"] = original.code
        return formatted


urlpatterns = [
    path('admin/', admin.site.urls),
    path('graphql/', csrf_exempt(HabitsGraphQLView.as_view(graphiql=True))),
]

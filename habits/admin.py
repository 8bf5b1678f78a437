from django.contrib import admin

from .models import Category, Habit, HabitCompletion


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "color", "icon")


@admin.register(Habit)
class HabitAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "frequency", "target_count", "is_active", "created_at")
    list_filter = ("frequency", "is_active")
    search_fields = ("name", "owner__username")


@admin.register(HabitCompletion)
class HabitCompletionAdmin(admin.ModelAdmin):
    list_display = ("habit", "owner", "completion_date", "created_at")
    date_hierarchy = "completion_date"

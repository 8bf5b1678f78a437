from django.db import migrations

DEFAULT_CATEGORIES = [
    ("Health & Fitness", "#EF4444", "heart"),
    ("Learning", "#3B82F6", "book"),
    ("Productivity", "#10B981", "zap"),
    ("Mindfulness", "#8B5CF6", "brain"),
    ("Social", "#F59E0B", "users"),
    ("Hobbies", "#EC4899", "palette"),
    ("Finance", "#059669", "dollar-sign"),
    ("Other", "#6B7280", "more-horizontal"),
]


def create_default_categories(apps, schema_editor):
    Category = apps.get_model("habits", "Category")
    for name, color, icon in DEFAULT_CATEGORIES:
        Category.objects.update_or_create(name=name, defaults={"color": color, "icon": icon})


def remove_default_categories(apps, schema_editor):
    Category = apps.get_model("habits", "Category")
    Category.objects.filter(name__in=[name for name, _, _ in DEFAULT_CATEGORIES]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("habits", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(create_default_categories, remove_default_categories),
    ]

from django.db import migrations, models

import events.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=events.models.new_event_id,
                        editable=False,
                        max_length=64,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("venue", models.CharField(max_length=255)),
                ("starts_at", models.DateTimeField()),
                ("price", models.PositiveIntegerField(help_text="Price in paise")),
                ("capacity", models.PositiveIntegerField()),
                ("sold_count", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("image_url", models.URLField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["starts_at"],
                "indexes": [
                    models.Index(
                        fields=["is_active", "starts_at"], name="event_active_start_idx"
                    )
                ],
            },
        ),
    ]

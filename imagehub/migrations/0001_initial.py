import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Image",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "external_id",
                    models.CharField(
                        db_index=True,
                        help_text="Identifier of the file at the source provider",
                        max_length=255,
                    ),
                ),
                (
                    "size",
                    models.BigIntegerField(default=0, help_text="Size in bytes"),
                ),
                (
                    "mime_type",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                ("storage_location", models.CharField(max_length=1024)),
                ("source", models.CharField(db_index=True, max_length=50)),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True, default=django.utils.timezone.now
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]

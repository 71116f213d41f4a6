import django.core.serializers.json
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ImportJob",
            fields=[
                (
                    "id",
                    models.CharField(max_length=255, primary_key=True, serialize=False),
                ),
                ("job_type", models.CharField(max_length=100)),
                (
                    "payload",
                    models.JSONField(
                        default=dict,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                    ),
                ),
                ("created", models.DateTimeField(auto_now_add=True)),
                ("modified", models.DateTimeField(auto_now=True)),
                (
                    "processed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="Time when a worker started the current attempt",
                        null=True,
                    ),
                ),
                (
                    "completed",
                    models.DateTimeField(
                        blank=True,
                        help_text="Time when the job completed without error",
                        null=True,
                    ),
                ),
                (
                    "failed",
                    models.DateTimeField(
                        blank=True,
                        help_text="Time when the job failed after its last attempt",
                        null=True,
                    ),
                ),
                ("progress", models.PositiveSmallIntegerField(default=0)),
                (
                    "result",
                    models.JSONField(
                        blank=True,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Status message, if any, from the last worker",
                    ),
                ),
                ("failed_reason", models.TextField(blank=True, default="")),
                ("attempts_made", models.PositiveIntegerField(default=0)),
                ("max_attempts", models.PositiveIntegerField(default=3)),
                (
                    "backoff_delay_ms",
                    models.PositiveIntegerField(
                        default=5000,
                        help_text="Base delay of the exponential retry backoff",
                    ),
                ),
                (
                    "failure_history",
                    models.JSONField(
                        default=list,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                        help_text="Information about previous failed attempts, if any",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(
                        fields=["completed"], name="importer_im_complet_4a3b1e_idx"
                    ),
                    models.Index(
                        fields=["failed"], name="importer_im_failed_8c2d7f_idx"
                    ),
                ],
            },
        ),
    ]

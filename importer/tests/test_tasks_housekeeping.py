from datetime import timedelta

from django.test import TestCase, override_settings
from django.utils import timezone

from importer.models import ImportJob
from importer.tasks.housekeeping import prune_import_jobs
from importer.tests.utils import create_import_job


@override_settings(
    IMPORTER={
        "KEEP_COMPLETED_COUNT": 2,
        "KEEP_COMPLETED_SECONDS": 3600,
        "KEEP_FAILED_COUNT": 1,
    }
)
class PruneImportJobsTests(TestCase):
    def test_prune_import_jobs(self):
        now = timezone.now()
        for minutes in (1, 2, 3):
            create_import_job(
                pk=f"completed-{minutes}", completed=now - timedelta(minutes=minutes)
            )
        create_import_job(pk="completed-old", completed=now - timedelta(hours=2))
        for minutes in (1, 2):
            create_import_job(
                pk=f"failed-{minutes}", failed=now - timedelta(minutes=minutes)
            )
        create_import_job(pk="waiting")
        create_import_job(pk="active", processed_at=now - timedelta(days=3))

        result = prune_import_jobs()

        self.assertEqual(result, {"completed": 2, "failed": 1})
        self.assertEqual(
            set(ImportJob.objects.values_list("pk", flat=True)),
            {"completed-1", "completed-2", "failed-1", "waiting", "active"},
        )

    def test_nothing_to_prune(self):
        create_import_job(pk="completed-1", completed=timezone.now())

        self.assertEqual(prune_import_jobs(), {"completed": 0, "failed": 0})
        self.assertTrue(ImportJob.objects.filter(pk="completed-1").exists())

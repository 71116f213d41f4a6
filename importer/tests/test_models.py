from django.test import TestCase
from django.utils import timezone

from importer.models import ImportJob, JobState
from importer.tests.utils import create_import_job


class ImportJobTests(TestCase):
    def test_str(self):
        job = create_import_job(pk="job-1")
        self.assertEqual(str(job), "ImportJob(id=job-1, job_type=import-drive-folder)")

    def test_state(self):
        job = create_import_job()
        self.assertEqual(job.state, JobState.WAITING)
        self.assertFalse(job.is_finished)
        self.assertIsNone(job.finished_at)

        job.processed_at = timezone.now()
        self.assertEqual(job.state, JobState.ACTIVE)

        job.completed = timezone.now()
        self.assertEqual(job.state, JobState.COMPLETED)
        self.assertEqual(job.finished_at, job.completed)
        self.assertTrue(job.is_finished)

    def test_failed_state_wins(self):
        job = create_import_job(
            processed_at=timezone.now(),
            completed=timezone.now(),
            failed=timezone.now(),
        )
        self.assertEqual(job.state, JobState.FAILED)

    def test_attempts_remaining(self):
        job = create_import_job(max_attempts=3)
        self.assertEqual(job.attempts_remaining, 3)
        job.attempts_made = 3
        self.assertEqual(job.attempts_remaining, 0)
        job.attempts_made = 5
        self.assertEqual(job.attempts_remaining, 0)

    def test_update_status(self):
        job = create_import_job()
        job.update_status("Working")
        job.refresh_from_db()
        self.assertEqual(job.status, "Working")

        job.update_status("Not saved", do_save=False)
        job.refresh_from_db()
        self.assertEqual(job.status, "Working")

    def test_update_progress_is_monotonic(self):
        job = create_import_job()

        self.assertEqual(job.update_progress(38), 38)
        self.assertEqual(job.update_progress(10), 38)
        self.assertEqual(job.update_progress(38), 38)

        # Another handle on the same row can't lower it either
        stale = ImportJob.objects.get(pk=job.pk)
        stale.update_progress(67)
        job.update_progress(50)

        job.refresh_from_db()
        self.assertEqual(job.progress, 67)

    def test_update_progress_is_clamped(self):
        job = create_import_job()
        self.assertEqual(job.update_progress(250), 100)
        job.refresh_from_db()
        self.assertEqual(job.progress, 100)

    def test_record_failed_attempt(self):
        job = create_import_job()
        job.attempts_made = 1
        failed_at = timezone.now()

        job.record_failed_attempt(ValueError("bad folder"), failed_at)
        job.save()
        job.refresh_from_db()

        self.assertEqual(len(job.failure_history), 1)
        entry = job.failure_history[0]
        self.assertEqual(entry["attempt"], 1)
        self.assertEqual(entry["error"], "bad folder")
        self.assertEqual(entry["error_type"], "ValueError")
        self.assertTrue(
            entry["failed"].startswith(failed_at.strftime("%Y-%m-%dT%H:%M:%S"))
        )


class ImportJobQuerySetTests(TestCase):
    def test_filters(self):
        waiting = create_import_job(pk="waiting")
        completed = create_import_job(pk="completed", completed=timezone.now())
        failed = create_import_job(pk="failed", failed=timezone.now())

        self.assertQuerySetEqual(ImportJob.objects.completed(), [completed])
        self.assertQuerySetEqual(ImportJob.objects.failed(), [failed])
        self.assertQuerySetEqual(ImportJob.objects.unfinished(), [waiting])

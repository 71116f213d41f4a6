import json
from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from importer.models import ImportJob
from importer.status import get_job_status
from importer.tests.utils import create_import_job


class JobStatusTests(TestCase):
    def test_unknown_job(self):
        self.assertIsNone(get_job_status("gdrive-unknown-1"))

    def test_waiting_job(self):
        job = create_import_job(pk="job-1")

        status = get_job_status("job-1")

        self.assertEqual(status.job_id, "job-1")
        self.assertEqual(status.state, "waiting")
        self.assertEqual(status.progress, 0)
        self.assertEqual(status.payload, job.payload)
        self.assertEqual(status.created_at, job.created)
        self.assertIsNone(status.result)
        self.assertIsNone(status.processed_at)
        self.assertIsNone(status.finished_at)
        self.assertIsNone(status.failed_reason)

    def test_active_job(self):
        started = timezone.now()
        create_import_job(pk="job-1", processed_at=started, progress=38)

        status = get_job_status("job-1")

        self.assertEqual(status.state, "active")
        self.assertEqual(status.progress, 38)
        self.assertEqual(status.processed_at, started)

    def test_active_job_result_is_hidden(self):
        # A result left over from an earlier attempt isn't shown until the
        # job finishes
        create_import_job(
            pk="job-1", processed_at=timezone.now(), result={"total": 1}
        )
        self.assertIsNone(get_job_status("job-1").result)

    def test_completed_job(self):
        finished = timezone.now()
        result = {
            "success": True,
            "total": 3,
            "processed": 1,
            "failed": 1,
            "skipped": 1,
            "message": "Import completed: 1 processed, 1 failed, 1 skipped",
        }
        create_import_job(
            pk="job-1",
            processed_at=finished - timedelta(seconds=5),
            completed=finished,
            progress=100,
            result=result,
        )

        status = get_job_status("job-1")

        self.assertEqual(status.state, "completed")
        self.assertEqual(status.result, result)
        self.assertEqual(status.finished_at, finished)

    def test_failed_job(self):
        finished = timezone.now()
        create_import_job(
            pk="job-1",
            failed=finished,
            failed_reason="Permission denied. Ensure the folder is shared publicly.",
            progress=0,
        )

        status = get_job_status("job-1")

        self.assertEqual(status.state, "failed")
        self.assertEqual(status.finished_at, finished)
        self.assertEqual(
            status.failed_reason,
            "Permission denied. Ensure the folder is shared publicly.",
        )

    def test_reading_status_does_not_modify_the_job(self):
        job = create_import_job(pk="job-1", progress=10)

        for i in range(3):
            get_job_status("job-1")

        self.assertEqual(ImportJob.objects.get(pk="job-1").modified, job.modified)

    def test_progress_reads_never_decrease(self):
        job = create_import_job(pk="job-1")
        seen = []
        for progress in (10, 38, 20, 67, 95, 100):
            job.update_progress(progress)
            seen.append(get_job_status("job-1").progress)

        self.assertEqual(seen, [10, 38, 38, 67, 95, 100])

    def test_as_dict_is_json_serializable(self):
        create_import_job(pk="job-1", completed=timezone.now(), result={"total": 0})

        data = get_job_status("job-1").as_dict()

        self.assertEqual(json.loads(json.dumps(data))["state"], "completed")
        self.assertEqual(data["result"], {"total": 0})
        self.assertIsInstance(data["created_at"], str)
        self.assertIsNone(data["processed_at"])

from functools import wraps
from logging import getLogger

from django.utils.timezone import now

from importer.queue import backoff_countdown

logger = getLogger(__name__)


def update_job_status(f):
    """
    Decorator which records each execution attempt of an ImportJob.

    On entry the attempt is counted and the job becomes active. A return value
    is stored as the job's result and completes the job. An exception is
    recorded in the failure history; while the job has attempts left it is
    handed back to Celery to be retried after the exponential backoff delay,
    otherwise the job is marked as failed and the exception is re-raised.

    Assumes that all wrapped functions get the Celery task self value as the
    first parameter and the ImportJob as the second, and that they return an
    object with an ``as_dict`` method.
    """

    @wraps(f)
    def inner(self, job, *args, **kwargs):
        # A redelivered message for a job which already reached a terminal
        # state must not run it again
        unfinished = job.__class__._default_manager.unfinished()
        if not unfinished.filter(pk=job.pk).exists():
            logger.warning(
                "Job %s was already finished and will not be repeated",
                job,
                extra={"data": {"object": job, "args": args, "kwargs": kwargs}},
            )
            return

        job.attempts_made += 1
        job.processed_at = now()
        job.status = "Processing attempt %d of %d" % (
            job.attempts_made,
            job.max_attempts,
        )
        job.save()

        try:
            result = f(self, job, *args, **kwargs)
        except Exception as exc:
            failed_at = now()
            job.record_failed_attempt(exc, failed_at)
            job.failed_reason = str(exc)

            if job.attempts_remaining:
                countdown = backoff_countdown(job.backoff_delay_ms, job.attempts_made)
                job.processed_at = None
                job.update_status(
                    "Attempt %d failed: %s\n\nRetrying in %s seconds"
                    % (job.attempts_made, exc, countdown),
                    do_save=False,
                )
                job.save()
                logger.info(
                    "Retrying job %s in %s seconds after attempt %d failed",
                    job,
                    countdown,
                    job.attempts_made,
                )
                raise self.retry(
                    exc=exc, countdown=countdown, max_retries=job.max_attempts - 1
                )

            job.failed = failed_at
            job.update_status(
                "{}\n\nUnhandled exception: {}".format(job.status, exc).strip(),
                do_save=False,
            )
            job.save()
            logger.error(
                "Job %s failed after %d attempt(s): %s", job, job.attempts_made, exc
            )
            raise

        job.result = result.as_dict()
        job.completed = now()
        job.failed_reason = ""
        job.progress = 100
        job.update_status("Completed", do_save=False)
        job.save()
        return job.result

    return inner

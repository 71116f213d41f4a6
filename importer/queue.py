"""
Job queue facade over Celery and the ImportJob table.

``enqueue`` records the job and publishes it to the broker once the record is
committed; the broker provides at-least-once delivery and Celery owns the
retry countdowns. ``get_job`` reads the record back.
"""

import uuid
from dataclasses import dataclass, field
from logging import getLogger
from typing import Any, Optional

from celery import Task
from django.db import transaction

from imagehub.celery import app as imagehub_celery_app
from importer.config import importer_setting
from importer.models import ImportJob

logger = getLogger(__name__)

IMPORT_FOLDER_JOB = "import-drive-folder"

#: Job type -> name of the registered Celery task which executes it
JOB_HANDLERS = {
    IMPORT_FOLDER_JOB: "importer.tasks.folders.import_folder_task",
}


@dataclass(frozen=True)
class Backoff:
    kind: str = "exponential"
    base_delay_ms: int = field(
        default_factory=lambda: importer_setting("BACKOFF_DELAY_MS")
    )

    def __post_init__(self):
        if self.kind != "exponential":
            raise ValueError(f"Unsupported backoff kind: {self.kind}")
        if self.base_delay_ms < 0:
            raise ValueError("Backoff delay must not be negative")


@dataclass(frozen=True)
class JobOptions:
    idempotency_key: Optional[str] = None
    max_attempts: int = field(default_factory=lambda: importer_setting("MAX_ATTEMPTS"))
    backoff: Backoff = field(default_factory=Backoff)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")


def backoff_countdown(base_delay_ms, attempts_made):
    """
    Seconds to wait before the next attempt after ``attempts_made`` failed
    attempts: the base delay doubled for every earlier failure, capped.
    """
    max_delay_ms = importer_setting("BACKOFF_MAX_DELAY_MS")
    delay_ms = base_delay_ms * 2 ** max(0, attempts_made - 1)
    return min(delay_ms, max_delay_ms) / 1000


def get_registered_task(name: str) -> Task:
    """
    Retrieve a Celery task by its fully qualified name.

    This avoids importing task modules here, which would be circular, and
    unlike ``app.send_task`` it honours settings such as ``ALWAYS_EAGER``.

    Raises:
        RuntimeError: If the task name is not found in the registry.
    """
    try:
        return imagehub_celery_app.tasks[name]
    except KeyError as err:
        raise RuntimeError(f"Task {name} is not registered. Did you typo it?") from err


def enqueue(job_type: str, payload: dict[str, Any], options=None) -> str:
    """
    Record a job and queue it for execution. Returns the job id.

    When ``options.idempotency_key`` names a job which already exists, that
    job's id is returned and nothing new is queued.
    """
    if options is None:
        options = JobOptions()

    try:
        task_name = JOB_HANDLERS[job_type]
    except KeyError:
        raise ValueError(f"Unknown job type: {job_type}") from None
    task = get_registered_task(task_name)

    job_id = options.idempotency_key or str(uuid.uuid4())

    with transaction.atomic():
        job, created = ImportJob.objects.get_or_create(
            pk=job_id,
            defaults={
                "job_type": job_type,
                "payload": payload,
                "max_attempts": options.max_attempts,
                "backoff_delay_ms": options.backoff.base_delay_ms,
            },
        )
        if not created:
            logger.info("Job %s already exists; not queueing it again", job_id)
            return job.pk

        # Publishing after the commit keeps a fast worker from looking for a
        # row it can't see yet
        transaction.on_commit(
            lambda: task.apply_async(
                (job_id,), task_id=job_id, queue=importer_setting("QUEUE_NAME")
            )
        )

    logger.info("Queued %s job %s", job_type, job_id)
    return job.pk


def get_job(job_id: str) -> Optional[ImportJob]:
    try:
        return ImportJob.objects.get(pk=job_id)
    except ImportJob.DoesNotExist:
        return None

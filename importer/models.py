from logging import getLogger

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

logger = getLogger(__name__)


class JobState(models.TextChoices):
    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportJobQuerySet(models.QuerySet):
    def completed(self):
        return self.filter(completed__isnull=False)

    def failed(self):
        return self.filter(failed__isnull=False)

    def unfinished(self):
        return self.filter(completed__isnull=True, failed__isnull=True)


class ImportJob(models.Model):
    """
    Durable record of one queued job. The Celery task which executes it uses
    the same id.

    The queue state is derived from the timestamps below rather than stored:
    a job is failed or completed once the matching timestamp is set, active
    while an attempt is running and waiting otherwise.
    """

    id = models.CharField(max_length=255, primary_key=True)
    job_type = models.CharField(max_length=100)
    payload = models.JSONField(encoder=DjangoJSONEncoder, default=dict)

    created = models.DateTimeField(auto_now_add=True)
    modified = models.DateTimeField(auto_now=True)

    processed_at = models.DateTimeField(
        help_text="Time when a worker started the current attempt",
        null=True,
        blank=True,
    )
    completed = models.DateTimeField(
        help_text="Time when the job completed without error", null=True, blank=True
    )
    failed = models.DateTimeField(
        help_text="Time when the job failed after its last attempt",
        null=True,
        blank=True,
    )

    progress = models.PositiveSmallIntegerField(default=0)
    result = models.JSONField(encoder=DjangoJSONEncoder, null=True, blank=True)

    status = models.TextField(
        help_text="Status message, if any, from the last worker", blank=True, default=""
    )
    failed_reason = models.TextField(blank=True, default="")

    attempts_made = models.PositiveIntegerField(default=0)
    max_attempts = models.PositiveIntegerField(default=3)
    backoff_delay_ms = models.PositiveIntegerField(
        default=5000, help_text="Base delay of the exponential retry backoff"
    )

    failure_history = models.JSONField(
        help_text="Information about previous failed attempts, if any",
        encoder=DjangoJSONEncoder,
        default=list,
    )

    objects = ImportJobQuerySet.as_manager()

    class Meta:
        indexes = [
            models.Index(fields=["completed"], name="importer_im_complet_4a3b1e_idx"),
            models.Index(fields=["failed"], name="importer_im_failed_8c2d7f_idx"),
        ]

    def __str__(self):
        return "ImportJob(id=%s, job_type=%s)" % (self.pk, self.job_type)

    @property
    def state(self):
        if self.failed:
            return JobState.FAILED
        if self.completed:
            return JobState.COMPLETED
        if self.processed_at:
            return JobState.ACTIVE
        return JobState.WAITING

    @property
    def finished_at(self):
        return self.completed or self.failed

    @property
    def is_finished(self):
        return self.finished_at is not None

    @property
    def attempts_remaining(self):
        return max(0, self.max_attempts - self.attempts_made)

    def update_status(self, status, do_save=True):
        self.status = status
        if do_save:
            self.save(update_fields=["status", "modified"])

    def update_progress(self, progress):
        """
        Raise the stored progress to ``progress``. Lower values are ignored so
        pollers never see progress go backwards.
        """
        progress = max(0, min(100, int(progress)))
        updated = type(self)._default_manager.filter(
            pk=self.pk, progress__lt=progress
        ).update(progress=progress)
        if updated:
            self.progress = progress
        return self.progress

    def record_failed_attempt(self, exc, failed_at):
        self.failure_history.append(
            {
                "attempt": self.attempts_made,
                "failed": failed_at,
                "error": str(exc),
                "error_type": type(exc).__name__,
            }
        )

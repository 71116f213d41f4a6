import datetime
from logging import getLogger

from django.utils import timezone

from imagehub.celery import app
from imagehub.logging import ImagehubLogger
from importer.config import importer_setting
from importer.models import ImportJob

logger = getLogger(__name__)
structured_logger = ImagehubLogger.get_logger(__name__)


def _prune_beyond(queryset, timestamp_field, keep_count):
    """
    Delete every job in ``queryset`` except the ``keep_count`` most recently
    finished ones
    """
    keep_ids = queryset.order_by(f"-{timestamp_field}").values_list("pk", flat=True)[
        :keep_count
    ]
    deleted, _ = queryset.exclude(pk__in=list(keep_ids)).delete()
    return deleted


@app.task
def prune_import_jobs():
    """
    Apply the retention policy to finished jobs: completed jobs are kept up
    to a count and an age limit, failed jobs up to a larger count limit.
    Unfinished jobs are never touched.
    """
    cutoff = timezone.now() - datetime.timedelta(
        seconds=importer_setting("KEEP_COMPLETED_SECONDS")
    )

    expired, _ = ImportJob.objects.completed().filter(completed__lt=cutoff).delete()
    completed = _prune_beyond(
        ImportJob.objects.completed(),
        "completed",
        importer_setting("KEEP_COMPLETED_COUNT"),
    )
    failed = _prune_beyond(
        ImportJob.objects.failed(), "failed", importer_setting("KEEP_FAILED_COUNT")
    )

    logger.debug(
        "Pruned %d expired and %d surplus completed jobs and %d failed jobs",
        expired,
        completed,
        failed,
    )
    structured_logger.info(
        "Import job retention applied.",
        event_code="import_jobs_pruned",
        completed_removed=expired + completed,
        failed_removed=failed,
    )
    return {"completed": expired + completed, "failed": failed}

import re
from logging import getLogger

from django.utils.timezone import now

from imagehub.celery import app
from imagehub.storage import ImageStore
from importer import models
from importer.config import importer_setting
from importer.exceptions import InvalidFolderReference
from importer.pipeline import TransferPipeline
from importer.providers import GOOGLE_DRIVE, get_file_provider
from importer.queue import IMPORT_FOLDER_JOB, Backoff, JobOptions, enqueue, get_job

from .decorators import update_job_status

logger = getLogger(__name__)

FOLDER_ID_PATTERNS = [
    re.compile(r"/folders/([a-zA-Z0-9_-]+)"),
    re.compile(r"[?&]id=([a-zA-Z0-9_-]+)"),
    re.compile(r"^([a-zA-Z0-9_-]+)$"),
]

#: Prefix of the job ids for each source
JOB_ID_PREFIXES = {GOOGLE_DRIVE: "gdrive"}

# Tasks


@app.task(
    bind=True,
    acks_late=True,
    rate_limit=importer_setting("RATE_LIMIT"),
)
def import_folder_task(self, job_pk):
    """
    Run the ImportJob ``job_pk``.

    The ``RATE_LIMIT`` admission rate is enforced by Celery per worker
    process, so running N worker nodes admits up to N times that many jobs
    per second across the cluster.
    """
    try:
        job = models.ImportJob.objects.get(pk=job_pk)
    except models.ImportJob.DoesNotExist:
        logger.exception(
            "ImportJob %s could not be found while attempting to run "
            "import_folder_task",
            job_pk,
        )
        raise

    return import_folder(self, job)


@update_job_status
def import_folder(self, job):
    source = job.payload["source"]
    pipeline = TransferPipeline(
        provider=get_file_provider(source),
        image_store=ImageStore(),
        source=source,
        report_progress=job.update_progress,
        job=job,
    )
    return pipeline.run(job.payload["folder_ref"])


# End tasks


def extract_folder_id(folder_url):
    """
    Extract the folder id from a Drive folder URL, an ``?id=`` URL or a bare id

    Raises:
        InvalidFolderReference: nothing resembling a folder id was found
    """
    folder_url = (folder_url or "").strip()
    if not folder_url:
        raise InvalidFolderReference("Folder URL is required")

    for pattern in FOLDER_ID_PATTERNS:
        m = pattern.search(folder_url)
        if m:
            return m.group(1)

    raise InvalidFolderReference(
        f"Unable to extract a folder ID from {folder_url!r}. Please use a valid "
        "Google Drive folder URL."
    )


def submit_import_job(folder_url, source=GOOGLE_DRIVE):
    """
    Validate a folder reference and queue a job importing the folder.
    Returns the job id.

    The id combines the folder and the request time in milliseconds, so
    identical requests made in the same instant collapse into one job while
    later imports of the same folder still run.
    """
    folder_id = extract_folder_id(folder_url)
    # Fails early for sources without a provider
    get_file_provider(source)

    requested_at = now()
    job_id = "%s-%s-%d" % (
        JOB_ID_PREFIXES.get(source, source),
        folder_id,
        int(requested_at.timestamp() * 1000),
    )

    job_id = enqueue(
        IMPORT_FOLDER_JOB,
        {
            "folder_ref": folder_id,
            "source": source,
            "requested_at": requested_at.isoformat(),
        },
        JobOptions(
            idempotency_key=job_id,
            max_attempts=importer_setting("MAX_ATTEMPTS"),
            backoff=Backoff(base_delay_ms=importer_setting("BACKOFF_DELAY_MS")),
        ),
    )
    logger.info("Import of folder %s queued as job %s", folder_id, job_id)
    return job_id


def query_job(job_id):
    return get_job(job_id)

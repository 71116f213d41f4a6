"""
Reconciliation between Image records and the object store.

Image records point at their stored objects only through a URL, so an object
deleted outside of the application, or a transfer which failed halfway,
leaves a record behind whose image no longer exists. The sweep checks every
record and deletes those whose object is definitely gone. A check which
cannot be completed is reported and the record is kept.
"""

import concurrent.futures
from dataclasses import dataclass, field
from itertools import islice
from logging import getLogger

from django.db import transaction

from imagehub.celery import app
from imagehub.logging import ImagehubLogger
from imagehub.models import Image
from imagehub.storage import ImageStore
from importer.config import importer_setting

logger = getLogger(__name__)
structured_logger = ImagehubLogger.get_logger(__name__)


@dataclass
class SweepReport:
    total_checked: int = 0
    removed_ids: list = field(default_factory=list)
    errors: list = field(default_factory=list)

    @property
    def removed_count(self):
        return len(self.removed_ids)

    def as_dict(self):
        return {
            "total_checked": self.total_checked,
            "removed_count": self.removed_count,
            "removed_ids": list(self.removed_ids),
            "errors": list(self.errors),
        }


def batched(iterable, size):
    iterator = iter(iterable)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            return
        yield batch


class ReconciliationSweep:
    def __init__(self, image_store, batch_size=None):
        self.image_store = image_store
        self.batch_size = batch_size or importer_setting("RECONCILE_BATCH_SIZE")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")

    def sweep(self) -> SweepReport:
        report = SweepReport()

        # Loaded up front because rows are deleted while the list is walked
        images = list(
            Image.objects.order_by("pk").only(
                "pk", "name", "external_id", "source", "storage_location"
            )
        )

        for batch in batched(images, self.batch_size):
            missing = self.check_batch(batch, report)

            # Deletions happen here rather than in the worker threads so every
            # database write stays on the caller's connection
            for image in missing:
                self.remove_record(image, report)

        structured_logger.info(
            "Image reconciliation finished.",
            event_code="image_reconciliation_finished",
            total_checked=report.total_checked,
            removed_count=report.removed_count,
            error_count=len(report.errors),
        )
        return report

    def remove_record(self, image, report):
        image_id = image.pk
        try:
            with transaction.atomic():
                image.delete()
        except Exception as exc:
            logger.exception("Unable to remove image %s", image_id)
            structured_logger.error(
                "Image record removal failed.",
                event_code="image_reconciliation_remove_failed",
                reason=str(exc),
                reason_code=type(exc).__name__,
                image=image,
            )
            report.errors.append({"image_id": image_id, "error": str(exc)})
            return

        report.removed_ids.append(image_id)
        logger.info(
            "Removed image %s: %s no longer exists",
            image_id,
            image.storage_location,
        )
        structured_logger.info(
            "Image record removed.",
            event_code="image_reconciliation_removed",
            image=image,
            image_id=image_id,
        )

    def check_batch(self, batch, report):
        """
        Check the objects of one batch concurrently and return the images
        whose object is missing. Failed checks are added to the report.
        """
        missing = []
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=len(batch)
        ) as executor:
            futures = [
                executor.submit(self.image_store.exists, image.storage_location)
                for image in batch
            ]

        for image, future in zip(batch, futures):
            report.total_checked += 1
            try:
                exists = future.result()
            except Exception as exc:
                logger.warning(
                    "Unable to check the object of image %s at %s: %s",
                    image.pk,
                    image.storage_location,
                    exc,
                )
                structured_logger.warning(
                    "Image existence check failed.",
                    event_code="image_reconciliation_check_failed",
                    reason=str(exc),
                    reason_code=type(exc).__name__,
                    image=image,
                )
                report.errors.append({"image_id": image.pk, "error": str(exc)})
                continue

            if not exists:
                missing.append(image)

        return missing


@app.task
def reconcile_images_task():
    report = ReconciliationSweep(ImageStore()).sweep()
    return report.as_dict()

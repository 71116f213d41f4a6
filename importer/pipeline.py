"""
The per-job transfer pipeline.

A job lists the candidate items of one folder and copies them into the object
store one at a time. Each item ends in an ItemResult; the job result is the
fold of those results. Listing failures escape ``run`` and fail the whole
attempt so the queue can retry it; a single item's failure is only counted.
"""

from dataclasses import asdict, dataclass
from logging import getLogger
from typing import Callable, Optional

from django.db import transaction

from imagehub.logging import ImagehubLogger
from imagehub.models import Image
from importer.exceptions import ImageImportFailure

logger = getLogger(__name__)
structured_logger = ImagehubLogger.get_logger(__name__)

#: Progress reported once the folder listing is done
LISTED_PROGRESS = 10
#: Share of the progress bar spread across the items
ITEMS_PROGRESS_SPAN = 85


class ItemOutcome:
    PROCESSED = "processed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ItemResult:
    item: object
    outcome: str
    error: Optional[BaseException] = None
    image_id: Optional[int] = None


@dataclass(frozen=True)
class ImportResult:
    success: bool
    total: int
    processed: int
    failed: int
    skipped: int
    message: str

    def as_dict(self):
        return asdict(self)

    @classmethod
    def empty(cls):
        return cls(
            success=True,
            total=0,
            processed=0,
            failed=0,
            skipped=0,
            message="No images found in folder",
        )

    @classmethod
    def from_item_results(cls, item_results):
        counts = {
            ItemOutcome.PROCESSED: 0,
            ItemOutcome.FAILED: 0,
            ItemOutcome.SKIPPED: 0,
        }
        for item_result in item_results:
            counts[item_result.outcome] += 1

        processed = counts[ItemOutcome.PROCESSED]
        failed = counts[ItemOutcome.FAILED]
        skipped = counts[ItemOutcome.SKIPPED]
        return cls(
            success=True,
            total=processed + failed + skipped,
            processed=processed,
            failed=failed,
            skipped=skipped,
            message=(
                f"Import completed: {processed} processed, {failed} failed, "
                f"{skipped} skipped"
            ),
        )


def item_progress(index, total):
    return LISTED_PROGRESS + round(ITEMS_PROGRESS_SPAN * (index + 1) / total)


class TransferPipeline:
    """
    Copies the images of one provider folder into the object store and records
    them as Image rows.

    Args:
        provider: file provider client with ``list_items`` and ``fetch_content``
        image_store: ``imagehub.storage.ImageStore``
        source: provenance tag stored on every new Image
        report_progress: called with an integer percentage as work advances
    """

    def __init__(
        self,
        provider,
        image_store,
        source,
        report_progress: Optional[Callable[[int], object]] = None,
        job=None,
    ):
        self.provider = provider
        self.image_store = image_store
        self.source = source
        self.report_progress = report_progress or (lambda progress: None)
        self.structured_logger = structured_logger.bind(job=job)

    def run(self, folder_ref) -> ImportResult:
        # Provider errors here are job-level failures and are left to propagate
        items = self.provider.list_items(folder_ref)
        self.report_progress(LISTED_PROGRESS)

        self.structured_logger.info(
            "Folder listing finished.",
            event_code="import_folder_listed",
            folder_ref=folder_ref,
            total=len(items),
        )

        if not items:
            self.report_progress(100)
            return ImportResult.empty()

        item_results = []
        for index, item in enumerate(items):
            logger.info("[%d/%d] Processing %s", index + 1, len(items), item.name)
            item_results.append(self.transfer_item(item))
            self.report_progress(item_progress(index, len(items)))

        result = ImportResult.from_item_results(item_results)
        self.report_progress(100)

        self.structured_logger.info(
            "Folder import finished.",
            event_code="import_folder_finished",
            folder_ref=folder_ref,
            processed=result.processed,
            failed=result.failed,
            skipped=result.skipped,
        )
        return result

    def transfer_item(self, item) -> ItemResult:
        try:
            if Image.objects.filter(external_id=item.external_id).exists():
                logger.info("%s was already imported; skipping", item.external_id)
                return ItemResult(item, ItemOutcome.SKIPPED)

            image = self._copy_item(item)
        except Exception as exc:
            logger.warning(
                "Unable to import %s (%s)", item.name, item.external_id, exc_info=True
            )
            self.structured_logger.warning(
                "Item import failed.",
                event_code="import_item_failed",
                reason=str(exc),
                reason_code=getattr(exc.__cause__, "code", None)
                or type(exc).__name__,
                item=item,
            )
            return ItemResult(item, ItemOutcome.FAILED, error=exc)

        return ItemResult(item, ItemOutcome.PROCESSED, image_id=image.pk)

    def _copy_item(self, item):
        path = self.image_store.generate_path(item.name)
        try:
            chunks = self.provider.fetch_content(item.external_id)
            location = self.image_store.put(path, chunks, item.mime_type)
        except Exception as exc:
            raise ImageImportFailure(
                f"Unable to copy {item.external_id} to {path}: {exc}"
            ) from exc

        try:
            with transaction.atomic():
                image = Image.objects.create(
                    name=item.name,
                    external_id=item.external_id,
                    size=item.size,
                    mime_type=item.mime_type,
                    storage_location=location,
                    source=self.source,
                )
        except Exception as exc:
            # Don't leave an object behind that no record points at
            try:
                self.image_store.remove(self.image_store.path_from_location(location))
            except Exception:
                logger.exception("Unable to remove orphaned object at %s", location)
            raise ImageImportFailure(
                f"Unable to save metadata for {item.external_id}: {exc}"
            ) from exc

        logger.info("Imported %s as image %s", item.external_id, image.pk)
        return image

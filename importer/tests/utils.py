from django.core.files.storage import InMemoryStorage

from imagehub.models import Image
from imagehub.storage import ImageStore
from importer.exceptions import ProviderError
from importer.models import ImportJob
from importer.providers import GOOGLE_DRIVE, ProviderItem
from importer.queue import IMPORT_FOLDER_JOB

TEST_STORAGE_URL = "https://images.example.com/"


def create_import_job(*, pk="gdrive-folder123-1700000000000", **kwargs):
    kwargs.setdefault("job_type", IMPORT_FOLDER_JOB)
    kwargs.setdefault(
        "payload",
        {
            "folder_ref": "folder123",
            "source": GOOGLE_DRIVE,
            "requested_at": "2023-11-14T22:13:20+00:00",
        },
    )
    import_job = ImportJob(pk=pk, **kwargs)
    import_job.save()
    return import_job


def create_image(*, external_id="file-1", **kwargs):
    kwargs.setdefault("name", f"{external_id}.jpg")
    kwargs.setdefault("size", 1024)
    kwargs.setdefault("mime_type", "image/jpeg")
    kwargs.setdefault(
        "storage_location",
        f"{TEST_STORAGE_URL}imported/1700000000000-abcd1234-{external_id}.jpg",
    )
    kwargs.setdefault("source", GOOGLE_DRIVE)
    image = Image(external_id=external_id, **kwargs)
    image.save()
    return image


def create_image_store():
    # Every test gets its own storage so stored objects don't leak between
    # tests
    return ImageStore(
        storage=InMemoryStorage(base_url=TEST_STORAGE_URL), folder="imported"
    )


def create_provider_item(external_id="file-1", **kwargs):
    kwargs.setdefault("name", f"{external_id}.jpg")
    kwargs.setdefault("size", 4)
    kwargs.setdefault("mime_type", "image/jpeg")
    return ProviderItem(external_id=external_id, **kwargs)


class FakeProvider:
    """
    In-memory file provider. ``fetch_errors`` maps external ids to the error
    raised when that file is downloaded.
    """

    source = GOOGLE_DRIVE

    def __init__(self, items=None, list_error=None, fetch_errors=None):
        self.items = list(items or [])
        self.list_error = list_error
        self.fetch_errors = fetch_errors or {}
        self.listed = []
        self.fetched = []

    def list_items(self, folder_ref):
        self.listed.append(folder_ref)
        if self.list_error is not None:
            raise self.list_error
        return list(self.items)

    def fetch_content(self, external_id):
        self.fetched.append(external_id)
        if external_id in self.fetch_errors:
            raise self.fetch_errors[external_id]
        return iter([b"\x89PNG", b"data-", external_id.encode()])


def permission_denied(message="Permission denied."):
    return ProviderError(ProviderError.PERMISSION_DENIED, message)

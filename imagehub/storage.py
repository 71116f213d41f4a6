import os
import re
import time
import uuid
from logging import getLogger
from tempfile import NamedTemporaryFile
from urllib.parse import unquote, urlparse

from django.core.files import File
from django.core.files.storage import storages
from django.utils.functional import LazyObject

from importer.config import importer_setting
from importer.exceptions import MalformedStorageLocation

logger = getLogger(__name__)

UNSAFE_FILENAME_CHARACTERS = re.compile(r"[^a-zA-Z0-9.-]")


class LazyImageStorage(LazyObject):
    def _setup(self):
        self._wrapped = storages["images"]


# We use a LazyObject so the value isn't evaluated when the code is loaded,
# which is needed to override the setting during tests
IMAGE_STORAGE = LazyImageStorage()


def sanitize_filename(name):
    return UNSAFE_FILENAME_CHARACTERS.sub("_", name)


class ImageStore:
    """
    Narrow object store interface used by the import pipeline and the
    reconciliation sweep, backed by a Django storage.

    Only listing is used to decide whether an object exists, so the same code
    works for every storage backend, including ones without a cheap
    existence call.
    """

    def __init__(self, storage=None, folder=None):
        self.storage = storage if storage is not None else IMAGE_STORAGE
        self.folder = folder or importer_setting("STORAGE_FOLDER")

    def generate_path(self, original_name, timestamp=None):
        """
        Return a new object path for an upload. The millisecond timestamp
        keeps paths roughly ordered and the random component keeps concurrent
        transfers of identically named files apart.
        """
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        return "%s/%d-%s-%s" % (
            self.folder,
            timestamp,
            uuid.uuid4().hex[:8],
            sanitize_filename(original_name),
        )

    def put(self, path, chunks, content_type):
        """
        Store the byte chunks under ``path`` and return the public location of
        the stored object
        """
        # The content is spooled to a temporary file first so a failed
        # download never leaves a partial object behind
        with NamedTemporaryFile(mode="x+b") as temp_file:
            for chunk in chunks:
                if chunk:
                    temp_file.write(chunk)
            temp_file.flush()
            temp_file.seek(0)

            content = File(temp_file, name=os.path.basename(path))
            content.content_type = content_type
            saved_name = self.storage.save(path, content)

        logger.info("Stored %s as %s", path, saved_name)
        return self.storage.url(saved_name)

    def list_matching(self, folder_path, name_pattern):
        """
        Return the names of the files directly inside ``folder_path`` which
        contain ``name_pattern``
        """
        try:
            _, files = self.storage.listdir(folder_path)
        except FileNotFoundError:
            return []
        return [name for name in files if name_pattern in name]

    def remove(self, path):
        if not self.storage.exists(path):
            return False
        self.storage.delete(path)
        return True

    def path_from_location(self, location):
        """
        Convert a public location back into the storage path it was created
        from.

        Raises:
            MalformedStorageLocation: the location does not point at a file
                inside the storage folder.
        """
        if not location:
            raise MalformedStorageLocation("Empty storage location")

        segments = [unquote(i) for i in urlparse(location).path.split("/")]
        try:
            # The last occurrence wins so a bucket or prefix which happens to
            # share the folder's name doesn't confuse us
            index = len(segments) - 1 - segments[::-1].index(self.folder)
        except ValueError:
            raise MalformedStorageLocation(
                f"{location} is not inside the {self.folder} folder"
            ) from None

        remainder = [i for i in segments[index + 1 :] if i]
        if len(remainder) != 1:
            raise MalformedStorageLocation(f"{location} does not name a single file")

        return f"{self.folder}/{remainder[0]}"

    def exists(self, location):
        """
        Check whether the object behind ``location`` is still present by
        listing its folder and looking for the exact filename
        """
        path = self.path_from_location(location)
        folder_path, filename = path.rsplit("/", 1)
        return filename in self.list_matching(folder_path, filename)

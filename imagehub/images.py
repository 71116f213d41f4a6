from dataclasses import dataclass
from logging import getLogger

from imagehub.models import Image
from importer.exceptions import MalformedStorageLocation

logger = getLogger(__name__)


@dataclass(frozen=True)
class ImagePage:
    images: list
    total: int
    limit: int
    offset: int

    @property
    def has_more(self):
        return self.offset + len(self.images) < self.total


def list_images(source=None, limit=100, offset=0):
    """
    Return one page of image records, newest first, optionally restricted to
    a single source
    """
    if limit < 0 or offset < 0:
        raise ValueError("limit and offset must not be negative")

    qs = Image.objects.for_source(source)
    images = list(qs.newest_first()[offset : offset + limit])
    return ImagePage(images=images, total=qs.count(), limit=limit, offset=offset)


def image_stats():
    return Image.objects.all().stats()


def delete_image(image_id, image_store):
    """
    Delete an image record together with its stored object.

    Returns False if there is no record with that id. A record whose location
    can't be mapped back to a stored object is still deleted.
    """
    try:
        image = Image.objects.get(pk=image_id)
    except Image.DoesNotExist:
        return False

    try:
        path = image_store.path_from_location(image.storage_location)
    except MalformedStorageLocation:
        logger.warning(
            "Image %s has a malformed storage location %r; deleting the record only",
            image.pk,
            image.storage_location,
        )
    else:
        if not image_store.remove(path):
            logger.info(
                "Stored object %s for image %s was already gone", path, image.pk
            )

    image.delete()
    return True

"""
Delete an image record and its stored object.

Usage:
    python manage.py delete_image 42
"""

from django.core.management.base import BaseCommand, CommandError

from imagehub.images import delete_image
from imagehub.storage import ImageStore


class Command(BaseCommand):
    help = "Delete an image record together with its stored object"  # NOQA: A003

    def add_arguments(self, parser):
        parser.add_argument("image_id", type=int)

    def handle(self, *, image_id, **options):
        if not delete_image(image_id, ImageStore()):
            raise CommandError(f"Image {image_id} was not found")

        self.stdout.write(f"Deleted image {image_id}")

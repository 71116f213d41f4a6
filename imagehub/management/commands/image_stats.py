import json

from django.core.management.base import BaseCommand

from imagehub.images import image_stats


class Command(BaseCommand):
    help = "Print image counts and total size as JSON"  # NOQA: A003

    def handle(self, **options):
        self.stdout.write(json.dumps(image_stats(), indent=2))

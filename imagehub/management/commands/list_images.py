import json

from django.core.management.base import BaseCommand, CommandError

from imagehub.images import list_images

IMAGE_FIELDS = ("id", "name", "external_id", "size", "mime_type", "source")


class Command(BaseCommand):
    help = "Print one page of imported images as JSON, newest first"  # NOQA: A003

    def add_arguments(self, parser):
        parser.add_argument("--source", help="Only list images from this source")
        parser.add_argument("--limit", type=int, default=100)
        parser.add_argument("--offset", type=int, default=0)

    def handle(self, *, source, limit, offset, **options):
        try:
            page = list_images(source=source, limit=limit, offset=offset)
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        images = []
        for image in page.images:
            data = {name: getattr(image, name) for name in IMAGE_FIELDS}
            data["storage_location"] = image.storage_location
            data["created_at"] = image.created_at.isoformat()
            images.append(data)

        self.stdout.write(
            json.dumps(
                {
                    "images": images,
                    "total": page.total,
                    "limit": page.limit,
                    "offset": page.offset,
                    "has_more": page.has_more,
                },
                indent=2,
            )
        )

"""
Remove Image records whose stored object no longer exists.

Usage:
    python manage.py reconcile_images
    python manage.py reconcile_images --batch-size 10 --verbosity 2
"""

from timeit import default_timer

from django.core.management.base import BaseCommand

from imagehub.storage import ImageStore
from importer.config import importer_setting
from importer.tasks.reconciliation import ReconciliationSweep


class Command(BaseCommand):
    help = "Delete Image records whose backing object is missing"  # NOQA: A003

    def add_arguments(self, parser):
        parser.add_argument(
            "--batch-size",
            type=int,
            default=importer_setting("RECONCILE_BATCH_SIZE"),
            help="Number of objects checked concurrently (default=%(default)s)",
        )

    def handle(self, *, batch_size, verbosity, **options):
        start_time = default_timer()

        report = ReconciliationSweep(ImageStore(), batch_size=batch_size).sweep()

        self.stdout.write(
            "Checked %d images, removed %d, %d errors"
            % (report.total_checked, report.removed_count, len(report.errors))
        )
        if verbosity > 1:
            for image_id in report.removed_ids:
                self.stdout.write("Removed image %s" % image_id)
            for error in report.errors:
                self.stdout.write(
                    "Unable to check image %(image_id)s: %(error)s" % error
                )
            self.stdout.write(
                "Finished in %0.1f seconds" % (default_timer() - start_time)
            )

"""
Start a Celery worker for the import queue.

The broker and the database are checked first; the worker is not started
when either of them is unreachable.

Usage:
    python manage.py run_import_worker
    python manage.py run_import_worker --concurrency 2 --loglevel DEBUG
"""

from django.core.management.base import BaseCommand, CommandError

from imagehub.celery import app
from importer.config import importer_setting
from importer.worker import build_worker, wait_until_ready


class Command(BaseCommand):
    help = "Run a worker processing import jobs"  # NOQA: A003

    def add_arguments(self, parser):
        parser.add_argument(
            "--concurrency",
            type=int,
            default=importer_setting("WORKER_CONCURRENCY"),
            help="Number of jobs executed at the same time (default=%(default)s)",
        )
        parser.add_argument(
            "--loglevel",
            default="INFO",
            help="Worker log level (default=%(default)s)",
        )

    def handle(self, *, concurrency, loglevel, **options):
        if concurrency < 1:
            raise CommandError("--concurrency must be at least 1")

        report = wait_until_ready(app)
        if not report.ok:
            raise CommandError(
                "Not starting the worker: %s" % "; ".join(report.errors)
            )

        self.stdout.write(
            "Starting import worker with concurrency %d" % concurrency
        )
        build_worker(app, concurrency=concurrency, loglevel=loglevel).start()

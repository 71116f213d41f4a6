from django.core.management.base import BaseCommand, CommandError

from importer.providers import GOOGLE_DRIVE
from importer.tasks.folders import submit_import_job


class Command(BaseCommand):
    help = "Queue the import of every image in a remote folder"  # NOQA: A003

    def add_arguments(self, parser):
        parser.add_argument("folder_url", help="Folder URL or bare folder id")
        parser.add_argument(
            "--source",
            default=GOOGLE_DRIVE,
            help="File provider holding the folder (default=%(default)s)",
        )

    def handle(self, *, folder_url, source, **options):
        try:
            job_id = submit_import_job(folder_url, source=source)
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(job_id)

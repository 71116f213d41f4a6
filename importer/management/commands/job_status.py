import json

from django.core.management.base import BaseCommand, CommandError

from importer.status import get_job_status


class Command(BaseCommand):
    help = "Print the status of an import job as JSON"  # NOQA: A003

    def add_arguments(self, parser):
        parser.add_argument("job_id")

    def handle(self, *, job_id, **options):
        status = get_job_status(job_id)
        if status is None:
            raise CommandError(f"Job {job_id} was not found")

        self.stdout.write(json.dumps(status.as_dict(), indent=2))

"""
Lifecycle of the import worker process.

``wait_until_ready`` connects to the broker and the database up front and
reports what is unreachable, so a worker never starts consuming jobs it can't
run. On shutdown Celery stops consuming and lets running jobs finish;
unacknowledged messages go back to the broker. Database connections owned by
the process are closed once the worker has stopped.
"""

from dataclasses import dataclass, field
from logging import getLogger

from celery.signals import worker_shutdown
from django.db import connections

from importer.config import importer_setting

logger = getLogger(__name__)


@dataclass
class ReadinessReport:
    errors: list = field(default_factory=list)

    @property
    def ok(self):
        return not self.errors


def check_database(alias="default"):
    connection = connections[alias]
    connection.ensure_connection()
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")


def check_broker(app, max_retries=3):
    with app.connection_for_write() as conn:
        conn.ensure_connection(max_retries=max_retries)


def wait_until_ready(app, max_retries=3) -> ReadinessReport:
    report = ReadinessReport()

    try:
        check_broker(app, max_retries=max_retries)
    except Exception as exc:
        logger.error("Unable to connect to the broker: %s", exc)
        report.errors.append(f"broker: {exc}")

    try:
        check_database()
    except Exception as exc:
        logger.error("Unable to connect to the database: %s", exc)
        report.errors.append(f"database: {exc}")

    return report


def build_worker(app, concurrency=None, loglevel="INFO"):
    """
    Create a Celery worker consuming only the import queue
    """
    return app.Worker(
        queues=[importer_setting("QUEUE_NAME")],
        concurrency=concurrency or importer_setting("WORKER_CONCURRENCY"),
        loglevel=loglevel,
        prefetch_multiplier=1,
    )


@worker_shutdown.connect
def close_connections_on_shutdown(sender=None, **kwargs):
    logger.info("Worker shutting down; closing database connections")
    connections.close_all()

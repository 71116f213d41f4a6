"""
Importer app level configurations

Every value can be overridden from Django settings through the ``IMPORTER``
dict, e.g. ``IMPORTER = {"WORKER_CONCURRENCY": 2}``.
"""

import os

from django.conf import settings

IMPORTER_DEFAULTS = {
    # Job queue
    "QUEUE_NAME": "image-import",
    "MAX_ATTEMPTS": 3,
    "BACKOFF_DELAY_MS": 5000,
    "BACKOFF_MAX_DELAY_MS": 5 * 60 * 1000,
    # Worker pool
    "WORKER_CONCURRENCY": 5,
    # Per worker process, not across the cluster
    "RATE_LIMIT": "10/s",
    # Retention
    "KEEP_COMPLETED_COUNT": 100,
    "KEEP_COMPLETED_SECONDS": 24 * 3600,
    "KEEP_FAILED_COUNT": 500,
    # Object store
    "STORAGE_FOLDER": "imported",
    # Reconciliation
    "RECONCILE_BATCH_SIZE": 5,
    # File provider
    "GOOGLE_API_KEY": os.getenv("GOOGLE_API_KEY"),
    "GOOGLE_DRIVE_API_URL": "https://www.googleapis.com/drive/v3",
    "REQUEST_TIMEOUT": 30,
}


def importer_setting(name):
    overrides = getattr(settings, "IMPORTER", None) or {}
    if name in overrides:
        return overrides[name]
    return IMPORTER_DEFAULTS[name]

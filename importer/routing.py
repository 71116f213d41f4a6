"""
Celery task routing.

Every importer task, including the periodic housekeeping and reconciliation
tasks started by beat, is sent to the import queue so the worker started by
``run_import_worker`` consumes all of them.
"""

from importer.config import importer_setting

TASK_PREFIX = "importer.tasks."


def route_task(name, args, kwargs, options, task=None, **kw):
    if name.startswith(TASK_PREFIX):
        return {"queue": importer_setting("QUEUE_NAME")}
    return None

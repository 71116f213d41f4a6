import importlib
import os
import pkgutil

import sentry_sdk
from celery import Celery
from sentry_sdk.integrations.celery import CeleryIntegration

from imagehub import get_version

SENTRY_BACKEND_DSN = os.environ.get("SENTRY_BACKEND_DSN", None)

if SENTRY_BACKEND_DSN:
    IMAGEHUB_ENVIRONMENT = os.environ.get("IMAGEHUB_ENVIRONMENT", None)
    sentry_sdk.init(
        SENTRY_BACKEND_DSN,
        environment=IMAGEHUB_ENVIRONMENT,
        release=get_version(),
        integrations=[CeleryIntegration()],
    )

app = Celery("imagehub")

# Settings are read from Django's settings module; every Celery key there is
# prefixed with CELERY_ (e.g. CELERY_TASK_ACKS_LATE)
app.config_from_object("django.conf:settings", namespace="CELERY")

# Finds importer/tasks/__init__.py
app.autodiscover_tasks()


def import_all_submodules(package_name: str):
    """
    Import a package and every module below it so that the tasks they define
    are registered
    """
    pkg = importlib.import_module(package_name)
    if not hasattr(pkg, "__path__"):
        return
    for mod in pkgutil.walk_packages(pkg.__path__, pkg.__name__ + "."):
        importlib.import_module(mod.name)


# Autodiscovery stops at the tasks package itself, so the job handlers in
# importer/tasks/*.py are imported once the app is finalized, which happens
# after Django has loaded its apps
@app.on_after_finalize.connect
def _load_all_task_modules(sender, **kwargs):
    import_all_submodules("importer.tasks")

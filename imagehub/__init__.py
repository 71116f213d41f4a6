VERSION = (0, 3, 0)


def get_version():
    return ".".join(map(str, VERSION))


# Imported after the version helpers, which the Celery app module uses
from imagehub.celery import app as celery_app  # NOQA: E402

__all__ = ["celery_app", "get_version"]

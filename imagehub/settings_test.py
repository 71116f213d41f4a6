from .settings_template import *  # NOQA ignore=F405
from .settings_template import LOGGING

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

ALLOWED_HOSTS = ["127.0.0.1", "0.0.0.0"]  # nosec

CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.InMemoryStorage",
    },
    "images": {
        "BACKEND": "django.core.files.storage.InMemoryStorage",
        "OPTIONS": {"base_url": "https://images.example.com/"},
    },
}

IMPORTER = {
    "GOOGLE_API_KEY": "test-api-key",
    "GOOGLE_DRIVE_API_URL": "https://drive.example.com/drive/v3",
}

LOGGING["loggers"]["structlog"]["handlers"] = ["null"]

from django.apps.config import AppConfig


class ImporterConfig(AppConfig):
    name = "importer"
    default_auto_field = "django.db.models.AutoField"

    def ready(self):
        from . import worker  # NOQA

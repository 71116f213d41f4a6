from django.apps.config import AppConfig


class ImagehubAppConfig(AppConfig):
    name = "imagehub"
    default_auto_field = "django.db.models.AutoField"

import os

from .settings_template import *  # NOQA ignore=F405
from .settings_template import IMAGEHUB_ENVIRONMENT, IMPORTER, LOGGING

LOGGING["handlers"]["stream"]["level"] = "INFO"
LOGGING["loggers"]["django"]["level"] = "INFO"
LOGGING["loggers"]["celery"]["level"] = "INFO"

DJANGO_SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "changeme")

S3_BUCKET_NAME = os.getenv("S3_BUCKET_NAME")

AWS_STORAGE_BUCKET_NAME = S3_BUCKET_NAME
AWS_DEFAULT_ACL = None  # Don't set an ACL on the files, inherit the bucket ACLs

STORAGES = {
    "default": {
        "BACKEND": "storages.backends.s3boto3.S3Boto3Storage",
    },
    "images": {
        "BACKEND": "imagehub.storage_backends.PublicImageStorage",
        "OPTIONS": {"bucket_name": S3_BUCKET_NAME},
    },
}

if IMAGEHUB_ENVIRONMENT == "production":
    MEDIA_URL = os.getenv("MEDIA_URL", "https://%s.s3.amazonaws.com/" % S3_BUCKET_NAME)
else:
    MEDIA_URL = "https://%s.s3.amazonaws.com/" % S3_BUCKET_NAME

IMPORTER.update(
    {
        "STORAGE_FOLDER": os.getenv("IMPORT_STORAGE_FOLDER", "imported"),
        "WORKER_CONCURRENCY": int(os.getenv("IMPORT_WORKER_CONCURRENCY", "5")),
    }
)

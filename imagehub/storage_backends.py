from storages.backends.s3boto3 import S3Boto3Storage


class PublicImageStorage(S3Boto3Storage):
    """
    Bucket storage for imported images.

    Objects are served from unsigned public URLs so the stored location stays
    valid indefinitely, and an existing object is never overwritten.
    """

    querystring_auth = False
    file_overwrite = False
    default_acl = None

    def get_default_settings(self):
        defaults = super().get_default_settings()
        defaults["object_parameters"] = {"CacheControl": "max-age=3600"}
        return defaults

class InvalidFolderReference(ValueError):
    """
    Raised when a folder URL or identifier cannot be turned into a folder
    reference. Rejected before anything is queued.
    """


class UnsupportedSource(ValueError):
    """
    Raised when an import is requested for a source tag without a file
    provider.
    """


class ProviderError(Exception):
    """
    Raised by file providers with a classified error code.

    ``code`` is one of ``not_found``, ``permission_denied`` or ``other``.
    ``external_id`` names the item involved, if the failing call was about a
    single item.
    """

    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    OTHER = "other"

    def __init__(self, code, message, external_id=None):
        super().__init__(message)
        self.code = code
        self.external_id = external_id


class ImageImportFailure(Exception):
    """
    Raised when copying a single item into the object store fails.

    Callers should include a concise human-readable reason in the exception
    message and chain the underlying cause.
    """

    pass


class MalformedStorageLocation(ValueError):
    pass

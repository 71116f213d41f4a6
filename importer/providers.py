"""
Clients for the external file providers which imports read from.

A provider lists the image files inside a folder and streams the content of a
single file. Every failure is raised as a ProviderError carrying a
classification code so callers can tell a missing folder from a permissions
problem or a transient failure.
"""

from dataclasses import dataclass
from logging import getLogger

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from importer.config import importer_setting
from importer.exceptions import ProviderError, UnsupportedSource

logger = getLogger(__name__)

GOOGLE_DRIVE = "google_drive"

DOWNLOAD_CHUNK_SIZE = 256 * 1024


@dataclass(frozen=True)
class ProviderItem:
    external_id: str
    name: str
    size: int
    mime_type: str


def requests_retry_session(
    retries=3,
    backoff_factor=0.5,
    status_forcelist=(429, 500, 502, 503, 504),
    session=None,
):
    session = session or requests.Session()
    retry = Retry(
        total=retries,
        read=retries,
        connect=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class GoogleDriveProvider:
    """
    Reads public Google Drive folders through the Drive v3 REST API using an
    API key.
    """

    source = GOOGLE_DRIVE

    LIST_FIELDS = "nextPageToken, files(id, name, size, mimeType)"
    PAGE_SIZE = 1000

    def __init__(self, api_key, session=None, base_url=None, timeout=None):
        self.api_key = api_key
        self.session = session or requests_retry_session()
        self.base_url = (base_url or importer_setting("GOOGLE_DRIVE_API_URL")).rstrip(
            "/"
        )
        self.timeout = timeout or importer_setting("REQUEST_TIMEOUT")

    def list_items(self, folder_ref):
        """
        Return every non-trashed image file directly inside the folder, in the
        order the API lists them
        """
        params = {
            "q": f"'{folder_ref}' in parents and mimeType contains 'image/' "
            "and trashed=false",
            "fields": self.LIST_FIELDS,
            "pageSize": self.PAGE_SIZE,
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
            "key": self.api_key,
        }

        items = []
        page_token = None
        while True:
            if page_token:
                params["pageToken"] = page_token
            data = self._get_json(f"{self.base_url}/files", params, folder_ref)

            for entry in data.get("files", []):
                items.append(
                    ProviderItem(
                        external_id=entry["id"],
                        name=entry.get("name") or entry["id"],
                        size=int(entry.get("size") or 0),
                        mime_type=entry.get("mimeType", ""),
                    )
                )

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        logger.info("Found %d image(s) in folder %s", len(items), folder_ref)
        return items

    def fetch_content(self, external_id):
        """
        Start downloading a file and return an iterator over its bytes. The
        HTTP response is closed once the iterator is exhausted or discarded.
        """
        url = f"{self.base_url}/files/{external_id}"
        params = {"alt": "media", "supportsAllDrives": "true", "key": self.api_key}
        try:
            resp = self.session.get(
                url, params=params, stream=True, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise ProviderError(
                ProviderError.OTHER,
                f"Unable to download file {external_id}: {exc}",
                external_id=external_id,
            ) from exc

        if not resp.ok:
            resp.close()
            raise self._classify(
                resp,
                not_found="File not found or not accessible.",
                permission_denied=(
                    "Permission denied. File might not be publicly accessible."
                ),
                external_id=external_id,
            )

        return self._iter_content(resp)

    @staticmethod
    def _iter_content(resp):
        with resp:
            yield from resp.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE)

    def _get_json(self, url, params, folder_ref):
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderError(
                ProviderError.OTHER, f"Unable to list folder {folder_ref}: {exc}"
            ) from exc

        if not resp.ok:
            raise self._classify(
                resp,
                not_found=(
                    "Folder not found. Make sure the folder is publicly accessible."
                ),
                permission_denied=(
                    "Permission denied. Ensure the folder is shared publicly and "
                    "API key is valid."
                ),
            )
        return resp.json()

    @staticmethod
    def _classify(resp, *, not_found, permission_denied, external_id=None):
        if resp.status_code == 404:
            return ProviderError(ProviderError.NOT_FOUND, not_found, external_id)
        if resp.status_code == 403:
            return ProviderError(
                ProviderError.PERMISSION_DENIED, permission_denied, external_id
            )
        return ProviderError(
            ProviderError.OTHER,
            f"Provider request failed with HTTP {resp.status_code}: {resp.reason}",
            external_id,
        )


def get_file_provider(source):
    """
    Build the provider client for a source tag
    """
    if source == GOOGLE_DRIVE:
        return GoogleDriveProvider(api_key=importer_setting("GOOGLE_API_KEY"))
    raise UnsupportedSource(f"Imports from {source!r} are not supported")

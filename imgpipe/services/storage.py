"""Asset store backends for base and watermark images.

The pipeline only needs ``fetch(key) -> bytes``. Two backends exist:

    gcs    Google Cloud Storage bucket ``settings.bucket_name`` (production)
    local  files under ``settings.local_asset_dir`` (development, tests)

Both raise ``AssetNotFoundError`` for a missing key and ``TransportError``
for any other I/O failure, and are safe to share across concurrent requests.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Protocol

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.cloud import storage

from imgpipe.config import get_settings
from imgpipe.errors import AssetNotFoundError, TransportError

logger = logging.getLogger(__name__)


class AssetStore(Protocol):
    def fetch(self, key: str) -> bytes:
        ...


class GCSAssetStore:  # pylint: disable=too-few-public-methods
    """Read-only wrapper around a Google Cloud Storage bucket."""

    def __init__(
        self,
        bucket_name: str,
        *,
        project: Optional[str] = None,
        client: Optional[storage.Client] = None,
    ) -> None:
        self._client = client or storage.Client(project=project)
        self._bucket_name = bucket_name
        self._bucket = self._client.bucket(bucket_name)

    def fetch(self, key: str) -> bytes:
        logger.info("Fetching %s from GCS bucket %s", key, self._bucket_name)
        blob = self._bucket.blob(key)
        try:
            return blob.download_as_bytes()
        except NotFound as exc:
            raise AssetNotFoundError(key) from exc
        except (GoogleAPIError, OSError) as exc:
            logger.error("Error fetching %s from GCS: %s", key, exc)
            raise TransportError(key, str(exc)) from exc


class LocalAssetStore:  # pylint: disable=too-few-public-methods
    """Serve assets from a directory on the local filesystem."""

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir).resolve()

    def _path_for(self, key: str) -> Path:
        path = (self._base_dir / key).resolve()
        if path != self._base_dir and self._base_dir not in path.parents:
            raise AssetNotFoundError(key)
        return path

    def fetch(self, key: str) -> bytes:
        path = self._path_for(key)
        logger.info("Fetching %s from %s", key, self._base_dir)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise AssetNotFoundError(key) from exc
        except OSError as exc:
            logger.error("Error reading %s: %s", path, exc)
            raise TransportError(key, str(exc)) from exc


@lru_cache()
def get_asset_store() -> AssetStore:
    """Return the process-wide asset store selected by ``STORAGE_BACKEND``."""

    settings = get_settings()
    if settings.storage_backend == "local":
        return LocalAssetStore(settings.local_asset_dir)
    return GCSAssetStore(settings.bucket_name, project=settings.project_id)

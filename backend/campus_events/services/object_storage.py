"""Signed upload and download URLs from the object-storage sidecar."""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlparse

import requests

from campus_events.config import settings

logger = logging.getLogger(__name__)

BUCKET_HOST = "storage.googleapis.com"


class ObjectStorageError(Exception):
    """The sidecar could not issue a signed URL."""


class ObjectNotFoundError(ObjectStorageError):
    """No object exists at the requested path."""


class ObjectStorageService:
    def __init__(
        self,
        sidecar_url: str,
        private_dir: str,
        ttl_seconds: int = 900,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.sidecar_url = sidecar_url.rstrip("/")
        self.private_dir = private_dir.rstrip("/")
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self.session = session or requests.Session()

    def _split_path(self, path: str) -> tuple[str, str]:
        """'/bucket/a/b' -> ('bucket', 'a/b')."""
        parts = path.lstrip("/").split("/", 1)
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise ObjectStorageError(f"Invalid object path: {path!r}")
        return parts[0], parts[1]

    def _sign(self, bucket: str, object_name: str, method: str) -> str:
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=self.ttl_seconds)
        try:
            response = self.session.post(
                f"{self.sidecar_url}/object-storage/signed-object-url",
                json={
                    "bucket_name": bucket,
                    "object_name": object_name,
                    "method": method,
                    "expires_at": expires_at.isoformat(),
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()["signed_url"]
        except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
            raise ObjectStorageError(f"Failed to sign {method} URL: {exc}") from exc

    def get_upload_url(self) -> str:
        """Signed PUT URL for a fresh object under ``<private_dir>/uploads/``."""
        if not self.private_dir:
            raise ObjectStorageError("PRIVATE_OBJECT_DIR is not configured")
        bucket, object_name = self._split_path(f"{self.private_dir}/uploads/{uuid.uuid4()}")
        signed_url = self._sign(bucket, object_name, "PUT")
        logger.info("Issued upload URL for %s/%s", bucket, object_name)
        return signed_url

    def get_object_url(self, entity_path: str) -> str:
        """Signed GET URL for '/objects/<entity>'.

        Raises ObjectNotFoundError when the path is malformed or nothing is
        stored there.
        """
        if not self.private_dir:
            raise ObjectStorageError("PRIVATE_OBJECT_DIR is not configured")
        entity = entity_path.lstrip("/")
        if entity.startswith("objects/"):
            entity = entity[len("objects/"):]
        entity = entity.strip("/")
        if not entity or ".." in entity.split("/"):
            raise ObjectNotFoundError(entity_path)
        bucket, object_name = self._split_path(f"{self.private_dir}/{entity}")

        head_url = self._sign(bucket, object_name, "HEAD")
        try:
            response = self.session.head(head_url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ObjectStorageError(f"Failed to check object: {exc}") from exc
        if response.status_code == 404:
            raise ObjectNotFoundError(entity_path)
        if not response.ok:
            raise ObjectStorageError(f"Object check returned {response.status_code}")
        return self._sign(bucket, object_name, "GET")

    def normalize_object_path(self, raw_url: str) -> str:
        """Map a bucket URL inside the private dir to '/objects/<entity>'.

        Anything else (already normalized paths, third-party URLs) is returned
        unchanged.
        """
        if not raw_url.startswith(f"https://{BUCKET_HOST}/"):
            return raw_url
        path = urlparse(raw_url).path
        prefix = self.private_dir if self.private_dir.startswith("/") else f"/{self.private_dir}"
        if not path.startswith(f"{prefix}/"):
            return path
        return f"/objects/{path[len(prefix) + 1:]}"


def get_object_storage() -> ObjectStorageService:
    """FastAPI dependency."""
    return ObjectStorageService(
        sidecar_url=settings.OBJECT_STORAGE_SIDECAR_URL,
        private_dir=settings.PRIVATE_OBJECT_DIR,
        ttl_seconds=settings.UPLOAD_URL_TTL_SECONDS,
        timeout=settings.PROVIDER_TIMEOUT_SECONDS,
    )

"""Thin client for the Supabase Storage REST API.

Only what the content lifecycle needs: public URLs, blob deletion and the
helper that maps a public object URL back to its storage path. Every call is
blocking (``requests``); async callers wrap them with ``asyncio.to_thread``.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable
from urllib.parse import quote, unquote

import requests

from app.core.config import settings
from app.core.errors import StorageError

logger = logging.getLogger(__name__)

_PUBLIC_OBJECT_PATH = re.compile(r"/storage/v1/object/public/[^/]+/(.+)$")


def extract_storage_path(url: str | None) -> str | None:
    """Return the decoded object path of a Supabase public URL, or None."""

    if not url or not isinstance(url, str):
        return None
    match = _PUBLIC_OBJECT_PATH.search(url.split("?", 1)[0])
    if not match:
        return None
    return unquote(match.group(1))


class SupabaseStorageClient:
    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        bucket_name: str | None = None,
        timeout: float | None = None,
    ) -> None:
        url = base_url if base_url is not None else settings.SUPABASE_URL
        self.base_url = str(url).rstrip("/") if url else None
        self.service_key = service_key if service_key is not None else settings.SUPABASE_SERVICE_ROLE_KEY
        self.bucket_name = bucket_name or settings.SUPABASE_BUCKET_NAME or "media"
        self.timeout = timeout or settings.SUPABASE_TIMEOUT_SECONDS

    def is_configured(self) -> bool:
        return bool(self.base_url and self.service_key)

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.service_key or "",
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
        }

    def get_public_url(self, path: str) -> str | None:
        if not self.base_url or not path:
            return None
        return f"{self.base_url}/storage/v1/object/public/{self.bucket_name}/{quote(path.lstrip('/'))}"

    def delete_files(self, paths: Iterable[str]) -> None:
        """Remove several objects in one call. Raises StorageError on failure."""

        prefixes = [path.lstrip("/") for path in paths if path]
        if not prefixes:
            return
        if not self.is_configured():
            raise StorageError("Supabase Storage is not configured", error_code="STORAGE_NOT_CONFIGURED")

        url = f"{self.base_url}/storage/v1/object/{self.bucket_name}"
        try:
            response = requests.delete(
                url,
                json={"prefixes": prefixes},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise StorageError(
                f"Supabase Storage unreachable: {exc}",
                context={"paths": prefixes},
            ) from exc

        if response.status_code >= 400:
            raise StorageError(
                f"Supabase Storage delete failed ({response.status_code}): {response.text[:200]}",
                context={"paths": prefixes, "status": response.status_code},
            )
        logger.info("Deleted %s object(s) from bucket '%s'", len(prefixes), self.bucket_name)

    def delete_file_from_storage(self, path: str) -> None:
        self.delete_files([path])

    def delete_video_from_storage(self, path: str) -> bool:
        """Best-effort delete used as a compensating action. Never raises."""

        if not self.is_configured():
            logger.warning("Supabase not configured, cannot delete video '%s'", path)
            return False
        if not path or not isinstance(path, str):
            logger.warning("Invalid storage path for deletion: %r", path)
            return False

        logger.info("Deleting video from storage (rollback): %s", path)
        try:
            self.delete_files([path])
        except StorageError as exc:
            logger.error("Failed to delete video '%s' from storage: %s", path, exc.message)
            return False
        return True


storage_client = SupabaseStorageClient()

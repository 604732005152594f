"""
Media host uploads for practice recordings.

Recordings are posted to Cloudinary's unsigned upload endpoint with the
configured upload preset; the public URL it returns is what gets stored.
"""

import asyncio
from pathlib import Path
from typing import Union

import requests
from loguru import logger

from tribute_tracker.core.config import MediaConfig

UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/{resource_type}/upload"


class MediaUploadError(Exception):
    """Raised when a recording cannot be uploaded to the media host."""


class MediaHost:
    def __init__(self, media_config: MediaConfig) -> None:
        self._config = media_config

    @property
    def configured(self) -> bool:
        return self._config.configured

    def upload_sync(self, path: Union[str, Path]) -> str:
        """Upload a file and return its public URL.

        Raises:
            MediaUploadError: If the host is unconfigured, the file is missing,
                the request fails or the response carries no URL
        """
        if not self.configured:
            raise MediaUploadError(
                "Media host not configured. Set CLOUDINARY_CLOUD_NAME and CLOUDINARY_UPLOAD_PRESET."
            )
        file_path = Path(path).expanduser()
        if not file_path.is_file():
            raise MediaUploadError(f"Recording not found: {file_path}")

        url = UPLOAD_URL.format(
            cloud_name=self._config.cloud_name,
            resource_type=self._config.resource_type,
        )
        logger.info(f"Uploading {file_path.name} to media host")
        try:
            with open(file_path, "rb") as fh:
                response = requests.post(
                    url,
                    data={"upload_preset": self._config.upload_preset},
                    files={"file": (file_path.name, fh)},
                    timeout=self._config.timeout_seconds,
                )
            response.raise_for_status()
        except requests.RequestException as e:
            raise MediaUploadError(f"Upload of {file_path.name} failed: {e}") from e

        public_url = response.json().get("secure_url")
        if not public_url:
            raise MediaUploadError(f"Upload of {file_path.name} returned no URL")
        logger.info(f"Uploaded {file_path.name}: {public_url}")
        return public_url

    async def upload(self, path: Union[str, Path]) -> str:
        """Async wrapper running the blocking upload in a worker thread."""
        return await asyncio.to_thread(self.upload_sync, path)

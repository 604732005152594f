"""Tests for recording uploads to the media host."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from tribute_tracker.core.config import MediaConfig
from tribute_tracker.domain.media import MediaHost, MediaUploadError


@pytest.fixture
def media() -> MediaHost:
    return MediaHost(MediaConfig(cloud_name="demo", upload_preset="practice"))


@pytest.fixture
def recording(tmp_path: Path) -> Path:
    path = tmp_path / "take1.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return path


def _response(payload: dict) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def test_upload_returns_secure_url(media: MediaHost, recording: Path) -> None:
    url = "https://res.cloudinary.com/demo/video/upload/take1.mp4"
    with patch("tribute_tracker.domain.media.requests.post") as mock_post:
        mock_post.return_value = _response({"secure_url": url})
        assert media.upload_sync(recording) == url

    args, kwargs = mock_post.call_args
    assert args[0] == "https://api.cloudinary.com/v1_1/demo/video/upload"
    assert kwargs["data"] == {"upload_preset": "practice"}
    assert kwargs["files"]["file"][0] == "take1.mp4"
    assert kwargs["timeout"] == 120


def test_unconfigured_host_raises(recording: Path) -> None:
    media = MediaHost(MediaConfig())
    assert media.configured is False
    with pytest.raises(MediaUploadError, match="not configured"):
        media.upload_sync(recording)


def test_missing_file_raises(media: MediaHost, tmp_path: Path) -> None:
    with patch("tribute_tracker.domain.media.requests.post") as mock_post:
        with pytest.raises(MediaUploadError, match="not found"):
            media.upload_sync(tmp_path / "nope.mp4")
    mock_post.assert_not_called()


def test_http_error_is_wrapped(media: MediaHost, recording: Path) -> None:
    with patch("tribute_tracker.domain.media.requests.post") as mock_post:
        mock_post.return_value.raise_for_status.side_effect = requests.HTTPError("400 Bad Request")
        with pytest.raises(MediaUploadError, match="400 Bad Request"):
            media.upload_sync(recording)


def test_response_without_url_raises(media: MediaHost, recording: Path) -> None:
    with patch("tribute_tracker.domain.media.requests.post") as mock_post:
        mock_post.return_value = _response({"error": {"message": "Upload preset not found"}})
        with pytest.raises(MediaUploadError, match="no URL"):
            media.upload_sync(recording)


@pytest.mark.anyio
async def test_async_upload_runs_in_thread(media: MediaHost, recording: Path) -> None:
    with patch("tribute_tracker.domain.media.requests.post") as mock_post:
        mock_post.return_value = _response({"secure_url": "https://cdn/take1.mp4"})
        assert await media.upload(recording) == "https://cdn/take1.mp4"

"""Tests for the local asset store."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from adcompose.storage.asset_store import FileAssetStore


@pytest.fixture
def asset_store(settings, logger):
    """Create FileAssetStore instance for testing."""
    return FileAssetStore(settings, logger)


def _download(chunks, status_error=None):
    response = MagicMock()
    response.__enter__.return_value = response
    response.iter_content.return_value = chunks
    response.raise_for_status.side_effect = status_error
    return response


@patch("adcompose.storage.asset_store.requests.get")
def test_upload_from_url(mock_get, asset_store, settings):
    """Test the rendered file is copied under the project's video folder."""
    mock_get.return_value = _download([b"fake ", b"", b"video"])

    uri = asset_store.upload_from_url("https://render.example.com/out/final.mov?sig=abc", "proj_1")

    assert uri.startswith("file://")
    stored = list((Path(settings.asset_storage_path) / "proj_1" / "videos").iterdir())
    assert len(stored) == 1
    assert stored[0].suffix == ".mov"
    assert stored[0].read_bytes() == b"fake video"
    assert mock_get.call_args.kwargs["timeout"] == settings.download_timeout_seconds


@patch("adcompose.storage.asset_store.requests.get")
def test_upload_http_error_propagates(mock_get, asset_store):
    """Test download failures raise."""
    mock_get.return_value = _download([], status_error=requests.HTTPError("404 Not Found"))

    with pytest.raises(requests.HTTPError):
        asset_store.upload_from_url("https://render.example.com/out/missing.mp4", "proj_1")

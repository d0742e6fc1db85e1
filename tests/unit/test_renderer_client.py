"""Tests for the HTTP renderer client."""

from unittest.mock import Mock, patch

import pytest
import requests

from adcompose.core.config import Settings
from adcompose.services.renderer_client import HttpRendererClient


@pytest.fixture
def client(settings, logger):
    """Create HttpRendererClient instance for testing."""
    return HttpRendererClient(settings, logger)


def _response(body, status_error=None):
    response = Mock()
    response.json.return_value = body
    response.raise_for_status.side_effect = status_error
    return response


@patch("adcompose.services.renderer_client.requests.post")
def test_render_posts_request(mock_post, client, settings):
    """Test the request is posted once with the configured timeout."""
    mock_post.return_value = _response({"url": "https://render.example.com/out.mp4", "durationSeconds": 30})
    request = {"clips": [], "resolution": "1080p", "aspectRatio": "portrait"}

    output = client.render(request)

    mock_post.assert_called_once()
    args, kwargs = mock_post.call_args
    assert args[0] == "https://render.example.com/render"
    assert kwargs["json"] == request
    assert kwargs["timeout"] == settings.renderer_timeout_seconds
    assert "Authorization" not in kwargs["headers"]
    assert output.url == "https://render.example.com/out.mp4"
    assert output.duration_seconds == 30


@patch("adcompose.services.renderer_client.requests.post")
def test_render_sends_api_key(mock_post, settings, logger):
    """Test the API key is sent as a bearer token."""
    settings.renderer_api_key = "secret"
    mock_post.return_value = _response({"videoUrl": "https://render.example.com/out.mp4"})

    output = HttpRendererClient(settings, logger).render({"clips": []})

    assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"
    assert output.duration_seconds is None


@patch("adcompose.services.renderer_client.requests.post")
def test_render_http_error_propagates(mock_post, client):
    """Test non-2xx responses raise."""
    mock_post.return_value = _response({}, status_error=requests.HTTPError("502 Bad Gateway"))

    with pytest.raises(requests.HTTPError):
        client.render({"clips": []})


@patch("adcompose.services.renderer_client.requests.post")
def test_render_without_url_rejected(mock_post, client):
    """Test a response without an output URL is an error."""
    mock_post.return_value = _response({"status": "ok"})

    with pytest.raises(ValueError):
        client.render({"clips": []})


def test_missing_renderer_url(logger, tmp_path):
    """Test the client requires a renderer URL."""
    settings = Settings(renderer_url=None, storage_path=str(tmp_path))

    with pytest.raises(ValueError):
        HttpRendererClient(settings, logger)

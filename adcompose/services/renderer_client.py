"""HTTP client for the external render service."""

from typing import Any

import requests

from adcompose.core.config import Settings
from adcompose.models.schemas import RenderOutput


class HttpRendererClient:
    """Posts composition requests to a render service and returns the encoded file handle."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the renderer client.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.renderer_url = settings.renderer_url

        if not self.renderer_url:
            raise ValueError("RENDERER_URL not configured. Set RENDERER_URL in .env file.")

    def render(self, request: dict[str, Any]) -> RenderOutput:
        """
        Submit a render request.

        The call is made exactly once; retrying is left to the caller.

        Args:
            request: Render request built from a composition plan

        Returns:
            Handle to the encoded output

        Raises:
            requests.RequestException: On network errors or non-2xx responses
            ValueError: If the response does not contain an output URL
        """
        headers = {"Content-Type": "application/json"}
        if self.settings.renderer_api_key:
            headers["Authorization"] = f"Bearer {self.settings.renderer_api_key}"

        self.logger.info(
            f"Submitting render: {len(request.get('clips', []))} clips, "
            f"{request.get('resolution')} {request.get('aspectRatio')} -> {self.renderer_url}"
        )
        response = requests.post(
            self.renderer_url,
            json=request,
            headers=headers,
            timeout=self.settings.renderer_timeout_seconds,
        )
        response.raise_for_status()

        body = response.json()
        url = body.get("url") or body.get("videoUrl")
        if not url:
            raise ValueError(f"Renderer response has no output URL: {body}")

        duration = body.get("durationSeconds", body.get("duration"))
        self.logger.info(f"Render complete: {url}")
        return RenderOutput(url=url, duration_seconds=duration)

"""Local asset store for rendered videos."""

import uuid
from pathlib import Path
from typing import Any

import requests

from adcompose.core.config import Settings


class FileAssetStore:
    """Downloads rendered output into local storage and returns its file URI."""

    def __init__(self, settings: Settings, logger: Any):
        self.settings = settings
        self.logger = logger
        self.storage_path = Path(settings.asset_storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def upload_from_url(self, url: str, project_id: str) -> str:
        """
        Copy a remote file into project storage.

        Args:
            url: URL of the encoded file
            project_id: Owning project

        Returns:
            file:// URI of the stored copy
        """
        target_dir = self.storage_path / project_id / "videos"
        target_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(url.split("?", 1)[0]).suffix or ".mp4"
        target = target_dir / f"final-video-{uuid.uuid4().hex[:8]}{suffix}"

        self.logger.info(f"Downloading rendered video: {url}")
        with requests.get(url, stream=True, timeout=self.settings.download_timeout_seconds) as response:
            response.raise_for_status()
            with open(target, "wb") as f:
                for chunk in response.iter_content(chunk_size=1024 * 1024):
                    if chunk:
                        f.write(chunk)

        self.logger.info(f"Stored rendered video at: {target}")
        return target.resolve().as_uri()

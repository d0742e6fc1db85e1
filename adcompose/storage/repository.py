"""Storage repository for projects, scenes, media assets and final videos."""

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Optional

from adcompose.core.config import Settings
from adcompose.models.schemas import AssetKind, FinalVideo, MediaAsset, Project, Scene, UsageRecord
from adcompose.services.scene_asset_resolver import newest_first


# Locks are shared by every repository instance writing the same file
_file_locks: dict[Path, Lock] = {}
_file_locks_guard = Lock()


def _lock_for(file_path: Path) -> Lock:
    with _file_locks_guard:
        return _file_locks.setdefault(file_path.resolve(), Lock())


class ProjectRepository:
    """JSON-file project store. One document per project."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the repository.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.storage_path = Path(settings.storage_path)
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def _file_path(self, project_id: str) -> Path:
        return self.storage_path / f"{project_id}.json"

    def _lock(self, project_id: str) -> Lock:
        return _lock_for(self._file_path(project_id))

    def _read(self, project_id: str) -> Optional[dict]:
        file_path = self._file_path(project_id)
        if not file_path.exists():
            return None
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, project_id: str, document: dict) -> None:
        file_path = self._file_path(project_id)
        tmp_path = file_path.with_name(f"{file_path.name}.{uuid.uuid4().hex[:8]}.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        tmp_path.replace(file_path)

    def _require(self, project_id: str) -> dict:
        document = self._read(project_id)
        if document is None:
            raise KeyError(f"Project {project_id} not found")
        return document

    # ------------------------------------------------------------------
    # Writes used when seeding a project
    # ------------------------------------------------------------------

    def save_project(
        self,
        project: Project,
        scenes: Optional[list[Scene]] = None,
        assets: Optional[list[MediaAsset]] = None,
    ) -> None:
        """
        Save a project with its scenes and assets, replacing any previous document.

        Args:
            project: Project record
            scenes: Project scenes
            assets: Project media assets
        """
        self.logger.info(f"Saving project: {project.id}")
        document = {
            "project": project.model_dump(mode="json"),
            "scenes": [scene.model_dump(mode="json") for scene in scenes or []],
            "assets": [asset.model_dump(mode="json") for asset in assets or []],
            "final_videos": [],
            "usage": [],
        }
        with self._lock(project.id):
            self._write(project.id, document)
        self.logger.info(f"Project saved to: {self._file_path(project.id)}")

    def add_media_asset(self, project_id: str, asset: MediaAsset) -> None:
        """Append a media asset to a project."""
        with self._lock(project_id):
            document = self._require(project_id)
            document["assets"].append(asset.model_dump(mode="json"))
            self._write(project_id, document)

    def update_project_settings(self, project_id: str, settings: dict[str, Any]) -> Project:
        """Replace a project's settings bag."""
        with self._lock(project_id):
            document = self._require(project_id)
            document["project"]["settings"] = settings
            self._write(project_id, document)
        return Project(**document["project"])

    # ------------------------------------------------------------------
    # Project store reads
    # ------------------------------------------------------------------

    def get_project(self, project_id: str) -> Optional[Project]:
        """
        Load a project record.

        Returns:
            Project if found, None otherwise
        """
        document = self._read(project_id)
        if document is None:
            self.logger.warning(f"Project not found: {project_id}")
            return None
        return Project(**document["project"])

    def list_scenes(self, project_id: str) -> list[Scene]:
        """Scenes ordered by scene number."""
        document = self._read(project_id) or {}
        scenes = [Scene(**scene) for scene in document.get("scenes", [])]
        return sorted(scenes, key=lambda s: s.scene_number)

    def list_media_assets(self, project_id: str, kind: Optional[AssetKind] = None) -> list[MediaAsset]:
        """Media assets, newest first, optionally filtered by kind."""
        document = self._read(project_id) or {}
        assets = [MediaAsset(**asset) for asset in document.get("assets", [])]
        if kind is not None:
            assets = [asset for asset in assets if asset.kind == kind]
        return newest_first(assets)

    def list_projects(self) -> list[str]:
        """
        List all project IDs.

        Returns:
            List of project IDs
        """
        project_ids = [f.stem for f in self.storage_path.glob("*.json")]
        self.logger.info(f"Found {len(project_ids)} projects")
        return project_ids

    # ------------------------------------------------------------------
    # Project store write used after rendering
    # ------------------------------------------------------------------

    def record_compile(
        self,
        project_id: str,
        url: str,
        duration_seconds: int,
        resolution: str,
        metadata: dict[str, Any],
        usage: UsageRecord,
        step: str,
    ) -> FinalVideo:
        """
        Persist a compiled video in a single document write.

        The final video record, its usage record and the project step change land
        together or not at all.

        Args:
            project_id: Project identifier
            url: Stored video URL
            duration_seconds: Video duration in whole seconds
            resolution: Output resolution
            metadata: Compile metadata (music volume, captions)
            usage: Usage accounting entry
            step: New wizard step

        Returns:
            The saved final video record
        """
        final_video = FinalVideo(
            id=f"video_{uuid.uuid4().hex[:12]}",
            project_id=project_id,
            url=url,
            duration_seconds=duration_seconds,
            resolution=resolution,
            metadata=metadata,
            created_at=datetime.now(timezone.utc),
        )
        with self._lock(project_id):
            document = self._require(project_id)
            document.setdefault("final_videos", []).append(final_video.model_dump(mode="json"))
            document.setdefault("usage", []).append(usage.model_dump(mode="json"))
            document["project"]["current_step"] = step
            self._write(project_id, document)
        self.logger.info(f"Final video {final_video.id} saved, project {project_id} moved to step: {step}")
        return final_video

    def list_final_videos(self, project_id: str) -> list[FinalVideo]:
        document = self._read(project_id) or {}
        return [FinalVideo(**video) for video in document.get("final_videos", [])]

    def list_usage(self, project_id: str) -> list[UsageRecord]:
        document = self._read(project_id) or {}
        return [UsageRecord(**usage) for usage in document.get("usage", [])]

"""Project Snapshot Loader - reads scenes, assets and settings as one consistent snapshot."""

from typing import Any, Optional

from adcompose.core.config import Settings
from adcompose.core.errors import InvalidSettings, ProjectNotFound, UpstreamFetchError
from adcompose.models.schemas import (
    CaptionSettings,
    CompileOptions,
    CompileRequest,
    MusicSelection,
    Project,
    ProjectSnapshot,
)
from adcompose.services.render_submission import ProjectStore
from adcompose.utils.parallel_executor import ParallelExecutor


def caption_settings_from(project: Project) -> CaptionSettings:
    """Caption styling stored under the project's settings bag."""
    captions = project.settings.get("captions") or {}
    if isinstance(captions, dict) and "captions_enabled" in project.settings and "enabled" not in captions:
        captions = {**captions, "enabled": project.settings["captions_enabled"]}
    return CaptionSettings.model_validate(captions)


def music_selection_from(project: Project) -> Optional[MusicSelection]:
    """Music chosen in the authoring step, if any."""
    music = project.settings.get("music")
    if not music:
        return None
    return MusicSelection.model_validate(music)


def compile_options_from(project: Project, request: CompileRequest, settings: Settings) -> CompileOptions:
    """
    Resolve compile options: explicit request value, then the project's own
    duration and aspect ratio from the wizard, then the application default.
    """
    project_settings = project.settings

    def pick(requested: Any, stored_key: Optional[str], default: Any) -> Any:
        if requested is not None:
            return requested
        if stored_key and project_settings.get(stored_key):
            return project_settings[stored_key]
        return default

    return CompileOptions(
        target_duration=pick(request.duration, "duration", settings.default_duration_seconds),
        resolution=pick(request.resolution, None, settings.default_resolution),
        aspect_ratio=pick(request.aspect_ratio, "aspectRatio", settings.default_aspect_ratio),
        output_format=pick(request.output_format, None, settings.default_output_format),
        include_captions=request.include_captions,
        music_volume=request.music_volume,
    )


class ProjectSnapshotLoader:
    """Issues the upstream reads concurrently and never returns partial data."""

    def __init__(self, settings: Settings, logger: Any, project_store: ProjectStore):
        """
        Initialize the loader.

        Args:
            settings: Application settings
            logger: Logger instance
            project_store: Source of projects, scenes and media assets
        """
        self.settings = settings
        self.logger = logger
        self.project_store = project_store
        self.executor = ParallelExecutor(settings, logger)

    def load(self, project_id: str) -> ProjectSnapshot:
        """
        Load a complete project snapshot.

        Args:
            project_id: Project identifier

        Returns:
            Snapshot with project, scenes, assets, caption settings and music selection

        Raises:
            ProjectNotFound: If the project does not exist
            UpstreamFetchError: If any read fails
            InvalidSettings: If stored caption or music settings cannot be parsed
        """
        names = ["project", "scenes", "media assets"]
        results = self.executor.execute_all(
            [
                lambda: self.project_store.get_project(project_id),
                lambda: self.project_store.list_scenes(project_id),
                lambda: self.project_store.list_media_assets(project_id),
            ],
            task_names=names,
            project_id=project_id,
        )

        for name, (_, error) in zip(names, results):
            if error is not None:
                raise UpstreamFetchError(name, error) from error

        (project, _), (scenes, _), (assets, _) = results
        if project is None:
            raise ProjectNotFound(project_id)

        try:
            caption_settings = caption_settings_from(project)
        except ValueError as e:
            raise InvalidSettings(
                "captions", project.settings.get("captions"), reason=f"Stored caption settings are invalid: {e}"
            ) from e
        try:
            music = music_selection_from(project)
        except ValueError as e:
            raise InvalidSettings(
                "music", project.settings.get("music"), reason=f"Stored music selection is invalid: {e}"
            ) from e

        self.logger.info(f"Loaded project {project_id}: {len(scenes)} scenes, {len(assets)} media assets")
        return ProjectSnapshot(
            project=project,
            scenes=scenes,
            assets=assets,
            caption_settings=caption_settings,
            music=music,
        )

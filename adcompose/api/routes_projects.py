"""FastAPI routes for compiling projects and editing caption settings."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException

from adcompose.core.config import Settings, settings
from adcompose.core.errors import (
    BuildError,
    CompileInProgress,
    CompositionError,
    ProjectNotFound,
    SubmissionFailure,
    UpstreamFetchError,
)
from adcompose.core.logging_config import get_logger
from adcompose.models.schemas import CaptionSettings, CompileRequest, CompileResponse
from adcompose.pipelines.compile_project import build_plan, compile_project
from adcompose.services.render_submission import AssetStore, ProjectStore, Renderer
from adcompose.services.renderer_client import HttpRendererClient
from adcompose.storage.asset_store import FileAssetStore
from adcompose.storage.repository import ProjectRepository
from adcompose.utils.error_handler import get_suggestion

router = APIRouter(prefix="/projects", tags=["projects"])


def get_settings() -> Settings:
    return settings


def get_project_store(app_settings: Settings = Depends(get_settings)) -> ProjectRepository:
    return ProjectRepository(app_settings, get_logger(__name__))


def get_renderer(app_settings: Settings = Depends(get_settings)) -> Renderer:
    try:
        return HttpRendererClient(app_settings, get_logger(__name__))
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))


def get_asset_store(app_settings: Settings = Depends(get_settings)) -> AssetStore:
    return FileAssetStore(app_settings, get_logger(__name__))


_STATUS_BY_ERROR = [
    (ProjectNotFound, 404),
    (BuildError, 400),
    (CompileInProgress, 409),
    (SubmissionFailure, 502),
    (UpstreamFetchError, 503),
]


def _http_error(error: CompositionError) -> HTTPException:
    status_code = next((code for cls, code in _STATUS_BY_ERROR if isinstance(error, cls)), 500)
    return HTTPException(
        status_code=status_code,
        detail={
            "error": str(error),
            "code": error.code,
            "details": error.details(),
            "suggestion": get_suggestion(error),
            "retryable": error.retryable,
        },
    )


@router.get("/{project_id}/compile-plan")
def preview_compile_plan(
    project_id: str,
    duration: Optional[float] = None,
    resolution: Optional[str] = None,
    aspect_ratio: Optional[str] = None,
    output_format: Optional[str] = None,
    include_captions: Optional[bool] = None,
    music_volume: Optional[float] = None,
    app_settings: Settings = Depends(get_settings),
    project_store: ProjectStore = Depends(get_project_store),
) -> dict[str, Any]:
    """Build the composition plan without rendering it."""
    logger = get_logger(__name__, project_id=project_id)
    request = CompileRequest(
        duration=duration,
        resolution=resolution,
        aspect_ratio=aspect_ratio,
        output_format=output_format,
        include_captions=include_captions,
        music_volume=music_volume,
    )

    try:
        plan = build_plan(project_id, request, app_settings, logger, project_store)
    except CompositionError as e:
        logger.warning(f"Plan preview failed: {e}")
        raise _http_error(e)

    return {"fingerprint": plan.fingerprint(), "request": plan.to_render_request()}


@router.post("/{project_id}/compile", response_model=CompileResponse, status_code=201)
def compile_video(
    project_id: str,
    request: CompileRequest,
    app_settings: Settings = Depends(get_settings),
    project_store: ProjectStore = Depends(get_project_store),
    renderer: Renderer = Depends(get_renderer),
    asset_store: AssetStore = Depends(get_asset_store),
) -> CompileResponse:
    """
    Compile a project into a final video.

    Pipeline:
    ProjectSnapshotLoader → CompositionBuilder → Renderer → AssetStore → ProjectStore
    """
    logger = get_logger(__name__, project_id=project_id)
    logger.info(f"Compile requested for project {project_id}")

    try:
        _, result = compile_project(
            project_id,
            request,
            app_settings,
            logger,
            project_store,
            renderer=renderer,
            asset_store=asset_store,
        )
    except CompositionError as e:
        logger.error(f"Error compiling video: {e}")
        raise _http_error(e)

    return CompileResponse(video=result.final_video, plan_fingerprint=result.plan_fingerprint, usage=result.usage)


@router.get("/{project_id}/captions")
def get_captions(project_id: str, project_store: ProjectRepository = Depends(get_project_store)) -> dict[str, Any]:
    """Get the project's caption settings."""
    project = project_store.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")
    return {"captions": project.settings.get("captions") or {}}


@router.post("/{project_id}/captions")
def save_captions(
    project_id: str,
    captions: CaptionSettings,
    project_store: ProjectRepository = Depends(get_project_store),
) -> dict[str, Any]:
    """Save the project's caption settings. Range checks happen on the request model."""
    project = project_store.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")

    caption_data = captions.model_dump(mode="json", by_alias=True)
    updated = project_store.update_project_settings(
        project_id,
        {**project.settings, "captions": caption_data, "captions_enabled": captions.enabled},
    )
    return {"captions": updated.settings["captions"]}

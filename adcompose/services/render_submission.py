"""Render Submission Coordinator - hands a plan to the renderer and persists the result."""

import math
from typing import Any, Optional, Protocol

from adcompose.core.config import Settings
from adcompose.core.errors import SubmissionFailure
from adcompose.models.schemas import (
    CompileResult,
    CompositionPlan,
    FinalVideo,
    MediaAsset,
    Project,
    RenderOutput,
    Scene,
    UsageRecord,
)
from adcompose.services.compile_guard import CompileGuard, get_compile_guard

STEP_COMPLETE = "complete"


class Renderer(Protocol):
    def render(self, request: dict[str, Any]) -> RenderOutput: ...


class AssetStore(Protocol):
    def upload_from_url(self, url: str, project_id: str) -> str: ...


class ProjectStore(Protocol):
    def get_project(self, project_id: str) -> Optional[Project]: ...

    def list_scenes(self, project_id: str) -> list[Scene]: ...

    def list_media_assets(self, project_id: str) -> list[MediaAsset]: ...

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
        """Write the final video, its usage record and the new project step as one update."""
        ...


class RenderSubmissionCoordinator:
    """Submits a composition plan and records the final video. Holds the per-project compile guard."""

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        renderer: Renderer,
        asset_store: AssetStore,
        project_store: ProjectStore,
        guard: Optional[CompileGuard] = None,
    ):
        """
        Initialize the coordinator.

        Args:
            settings: Application settings
            logger: Logger instance
            renderer: External renderer
            asset_store: Where the encoded output is stored
            project_store: Where the final video record is written
            guard: Per-project compile guard (defaults to the process-wide guard)
        """
        self.settings = settings
        self.logger = logger
        self.renderer = renderer
        self.asset_store = asset_store
        self.project_store = project_store
        self.guard = guard or get_compile_guard(settings.compile_timeout_seconds)

    def compute_usage(self, project_id: str, duration_seconds: float) -> UsageRecord:
        """One billing unit per started block of output video, minimum one."""
        block = self.settings.render_billing_block_seconds
        units = max(1, math.ceil(duration_seconds / block)) if block > 0 else 1
        return UsageRecord(
            project_id=project_id,
            units=units,
            cost=round(units * self.settings.render_unit_cost, 6),
        )

    def submit(self, plan: CompositionPlan) -> CompileResult:
        """
        Render a plan and persist the final video.

        Args:
            plan: Validated composition plan

        Returns:
            Final video record, usage record and plan fingerprint

        Raises:
            CompileInProgress: If another compile for the project is in flight
            SubmissionFailure: If rendering, upload or persistence fails
        """
        project_id = plan.project_id
        with self.guard.hold(project_id):
            self.logger.info(f"Submitting composition plan for project {project_id}")

            try:
                output = self.renderer.render(plan.to_render_request())
            except Exception as e:
                self.logger.error(f"Render failed for project {project_id}: {e}")
                raise SubmissionFailure("render", plan, e) from e

            try:
                stored_url = self.asset_store.upload_from_url(output.url, project_id)
            except Exception as e:
                self.logger.error(f"Upload failed for project {project_id}: {e}")
                raise SubmissionFailure("upload", plan, e) from e

            duration = output.duration_seconds if output.duration_seconds else plan.total_duration
            usage = self.compute_usage(project_id, duration)
            caption_style = plan.caption_settings.model_dump(mode="json", by_alias=True) if plan.caption_settings else None
            metadata = {
                "musicVolume": plan.music_volume,
                "includeCaptions": plan.includes_captions,
                "captionStyle": caption_style,
            }

            try:
                final_video = self.project_store.record_compile(
                    project_id=project_id,
                    url=stored_url,
                    duration_seconds=int(round(duration)),
                    resolution=plan.resolution.value,
                    metadata=metadata,
                    usage=usage,
                    step=STEP_COMPLETE,
                )
            except Exception as e:
                self.logger.error(f"Persisting final video failed for project {project_id}: {e}")
                raise SubmissionFailure("persist", plan, e) from e

        self.logger.info(f"Final video {final_video.id} saved for project {project_id}: {final_video.url}")
        return CompileResult(final_video=final_video, usage=usage, plan_fingerprint=plan.fingerprint())

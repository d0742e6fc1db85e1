"""Compile pipeline - project snapshot → composition plan → render → final video record."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from adcompose.core.config import Settings, settings
from adcompose.core.errors import BuildError, CompileInProgress, CompositionError, SubmissionFailure
from adcompose.core.logging_config import get_logger, setup_logging
from adcompose.models.schemas import CompileRequest, CompileResult, CompositionPlan
from adcompose.services.compile_guard import CompileGuard
from adcompose.services.composition_builder import CompositionBuilder
from adcompose.services.render_submission import AssetStore, ProjectStore, Renderer, RenderSubmissionCoordinator
from adcompose.services.renderer_client import HttpRendererClient
from adcompose.services.snapshot_loader import ProjectSnapshotLoader, compile_options_from
from adcompose.storage.asset_store import FileAssetStore
from adcompose.storage.repository import ProjectRepository
from adcompose.utils.error_handler import format_error_message

EXIT_OK = 0
EXIT_BUILD_ERROR = 1
EXIT_SUBMISSION_FAILED = 2
EXIT_COMPILE_IN_PROGRESS = 3


def build_plan(
    project_id: str,
    request: CompileRequest,
    settings: Settings,
    logger: Any,
    project_store: ProjectStore,
) -> CompositionPlan:
    """
    Load a project snapshot and build its composition plan.

    Args:
        project_id: Project identifier
        request: Requested compile settings (unset fields fall back to the project, then app defaults)
        settings: App settings
        logger: Logger instance
        project_store: Source of project data

    Returns:
        Validated composition plan
    """
    logger.info("Step 1: Loading project snapshot...")
    snapshot = ProjectSnapshotLoader(settings, logger, project_store).load(project_id)

    logger.info("Step 2: Building composition plan...")
    options = compile_options_from(snapshot.project, request, settings)
    return CompositionBuilder(settings, logger).build_from_snapshot(snapshot, options)


def compile_project(
    project_id: str,
    request: CompileRequest,
    settings: Settings,
    logger: Any,
    project_store: ProjectStore,
    renderer: Optional[Renderer] = None,
    asset_store: Optional[AssetStore] = None,
    guard: Optional[CompileGuard] = None,
    dry_run: bool = False,
) -> tuple[CompositionPlan, Optional[CompileResult]]:
    """
    Compile a project into a final video.

    Args:
        project_id: Project identifier
        request: Requested compile settings
        settings: App settings
        logger: Logger instance
        project_store: Project store (reads and final video writes)
        renderer: External renderer (required unless dry_run)
        asset_store: Asset store for the encoded output (required unless dry_run)
        guard: Per-project compile guard (defaults to the process-wide guard)
        dry_run: Build the plan only, without rendering

    Returns:
        Tuple of (plan, compile result or None on dry run)
    """
    plan = build_plan(project_id, request, settings, logger, project_store)

    if dry_run:
        logger.info("Dry run: skipping render and persistence")
        return plan, None

    if renderer is None or asset_store is None:
        raise ValueError("renderer and asset_store are required unless dry_run is set")

    logger.info("Step 3: Rendering and saving final video...")
    coordinator = RenderSubmissionCoordinator(
        settings, logger, renderer=renderer, asset_store=asset_store, project_store=project_store, guard=guard
    )
    result = coordinator.submit(plan)
    return plan, result


def _request_from_args(args: argparse.Namespace) -> CompileRequest:
    return CompileRequest(
        duration=args.duration,
        resolution=args.resolution,
        aspect_ratio=args.aspect_ratio,
        output_format=args.format,
        include_captions=args.captions,
        music_volume=args.music_volume,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entrypoint for the compile pipeline."""
    parser = argparse.ArgumentParser(
        description="Ad Compose - compile a project into a final video",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--project-id", type=str, required=True, help="Project to compile")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help=f"Target video duration in seconds (default: project duration, else {settings.default_duration_seconds})",
    )
    parser.add_argument("--resolution", type=str, default=None, help="480p, 720p, 1080p or 4k")
    parser.add_argument("--aspect-ratio", type=str, default=None, help="portrait, landscape or square (default: project aspect ratio)")
    parser.add_argument("--format", type=str, default=None, help="mp4 or mov")
    parser.add_argument(
        "--captions",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force captions on or off (default: follow project caption settings)",
    )
    parser.add_argument("--music-volume", type=float, default=None, help="Music level between 0 and 1 (default: 0.3)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build and print the composition plan without rendering",
    )
    parser.add_argument("--plan-output", type=str, default=None, help="Write the render request JSON to this file")
    parser.add_argument("--storage-path", type=str, default=None, help="Override project storage path")

    args = parser.parse_args(argv)

    setup_logging(log_level=settings.log_level, log_file=settings.log_file)
    logger = get_logger(__name__, project_id=args.project_id)

    if args.storage_path:
        settings.storage_path = args.storage_path

    logger.info("=" * 60)
    logger.info(f"Compiling project: {args.project_id}")
    logger.info("=" * 60)

    try:
        request = _request_from_args(args)
        project_store = ProjectRepository(settings, logger)
        renderer = None
        asset_store = None
        if not args.dry_run:
            renderer = HttpRendererClient(settings, logger)
            asset_store = FileAssetStore(settings, logger)

        plan, result = compile_project(
            args.project_id,
            request,
            settings,
            logger,
            project_store,
            renderer=renderer,
            asset_store=asset_store,
            dry_run=args.dry_run,
        )

        request_json = json.dumps(plan.to_render_request(), indent=2)
        if args.plan_output:
            Path(args.plan_output).write_text(request_json, encoding="utf-8")
            logger.info(f"Render request written to: {args.plan_output}")
        if args.dry_run:
            print(request_json)
        else:
            logger.info("=" * 60)
            logger.info("Compile complete!")
            logger.info(f"Video: {result.final_video.url} ({result.final_video.duration_seconds}s)")
            logger.info(f"Usage: {result.usage.units} unit(s), cost {result.usage.cost}")
            logger.info("=" * 60)
        return EXIT_OK

    except BuildError as e:
        logger.error(format_error_message("Building composition plan", e, {"project_id": args.project_id}))
        return EXIT_BUILD_ERROR
    except CompileInProgress as e:
        logger.error(format_error_message("Compiling video", e))
        return EXIT_COMPILE_IN_PROGRESS
    except SubmissionFailure as e:
        logger.error(format_error_message("Compiling video", e, {"project_id": args.project_id, "stage": e.stage}))
        return EXIT_SUBMISSION_FAILED
    except CompositionError as e:
        logger.error(format_error_message("Compiling video", e, {"project_id": args.project_id}))
        return EXIT_SUBMISSION_FAILED if e.retryable else EXIT_BUILD_ERROR
    except ValueError as e:
        logger.error(f"❌ Configuration error: {e}")
        return EXIT_BUILD_ERROR


if __name__ == "__main__":
    sys.exit(main())

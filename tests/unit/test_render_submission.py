"""Tests for Render Submission Coordinator."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from adcompose.core.errors import CompileInProgress, SubmissionFailure
from adcompose.models.schemas import CompileOptions, FinalVideo, RenderOutput
from adcompose.services.compile_guard import CompileGuard
from adcompose.services.composition_builder import CompositionBuilder
from adcompose.services.render_submission import STEP_COMPLETE, RenderSubmissionCoordinator


@pytest.fixture
def plan(settings, logger, scenes, assets):
    return CompositionBuilder(settings, logger).build("proj_1", scenes, assets, CompileOptions(target_duration=30))


@pytest.fixture
def renderer():
    renderer = Mock()
    renderer.render.return_value = RenderOutput(url="https://render.example.com/out/abc.mp4", duration_seconds=30.2)
    return renderer


@pytest.fixture
def asset_store():
    asset_store = Mock()
    asset_store.upload_from_url.return_value = "https://storage.example.com/proj_1/final.mp4"
    return asset_store


@pytest.fixture
def project_store():
    project_store = Mock()

    def record_compile(project_id, url, duration_seconds, resolution, metadata, usage, step):
        return FinalVideo(
            id="video_1",
            project_id=project_id,
            url=url,
            duration_seconds=duration_seconds,
            resolution=resolution,
            metadata=metadata,
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )

    project_store.record_compile.side_effect = record_compile
    return project_store


@pytest.fixture
def guard():
    return CompileGuard(timeout_seconds=600)


@pytest.fixture
def coordinator(settings, logger, renderer, asset_store, project_store, guard):
    """Create RenderSubmissionCoordinator with mocked collaborators."""
    return RenderSubmissionCoordinator(settings, logger, renderer, asset_store, project_store, guard=guard)


def test_submit_success(coordinator, plan, renderer, asset_store, project_store, guard):
    """Test a successful submission renders, stores, and records the video."""
    result = coordinator.submit(plan)

    renderer.render.assert_called_once_with(plan.to_render_request())
    asset_store.upload_from_url.assert_called_once_with("https://render.example.com/out/abc.mp4", "proj_1")

    call = project_store.record_compile.call_args.kwargs
    assert call["url"] == "https://storage.example.com/proj_1/final.mp4"
    assert call["duration_seconds"] == 30
    assert call["resolution"] == "1080p"
    assert call["metadata"]["musicVolume"] == 0.3
    assert call["metadata"]["includeCaptions"] is True
    assert call["metadata"]["captionStyle"]["fontFamily"] == "Arial"
    assert call["usage"] == result.usage
    assert call["step"] == STEP_COMPLETE

    project_store.record_compile.assert_called_once()
    assert result.final_video.id == "video_1"
    assert result.plan_fingerprint == plan.fingerprint()
    assert not guard.is_in_flight("proj_1")


def test_render_failure_carries_plan(coordinator, plan, renderer, asset_store, project_store, guard):
    """Test a renderer error surfaces as a retryable failure holding the plan."""
    renderer.render.side_effect = ConnectionError("renderer down")

    with pytest.raises(SubmissionFailure) as exc_info:
        coordinator.submit(plan)

    error = exc_info.value
    assert error.stage == "render"
    assert error.plan is plan
    assert error.retryable
    assert isinstance(error.cause, ConnectionError)
    asset_store.upload_from_url.assert_not_called()
    project_store.record_compile.assert_not_called()
    assert not guard.is_in_flight("proj_1")


def test_upload_failure(coordinator, plan, asset_store, project_store):
    """Test an asset store error is reported as an upload failure."""
    asset_store.upload_from_url.side_effect = OSError("disk full")

    with pytest.raises(SubmissionFailure) as exc_info:
        coordinator.submit(plan)

    assert exc_info.value.stage == "upload"
    project_store.record_compile.assert_not_called()


def test_persist_failure(coordinator, plan, project_store):
    """Test a project store error is reported as a persist failure."""
    project_store.record_compile.side_effect = RuntimeError("db unavailable")

    with pytest.raises(SubmissionFailure) as exc_info:
        coordinator.submit(plan)

    assert exc_info.value.stage == "persist"
    assert exc_info.value.plan is plan


def test_concurrent_compile_rejected(coordinator, plan, renderer, guard):
    """Test a submission is refused while another compile holds the project."""
    guard.acquire("proj_1")

    with pytest.raises(CompileInProgress):
        coordinator.submit(plan)

    renderer.render.assert_not_called()


def test_plan_duration_used_when_renderer_omits_it(coordinator, plan, renderer, project_store):
    """Test the plan's total duration is recorded when the renderer reports none."""
    renderer.render.return_value = RenderOutput(url="https://render.example.com/out/abc.mp4")

    coordinator.submit(plan)

    assert project_store.record_compile.call_args.kwargs["duration_seconds"] == 30


@pytest.mark.parametrize(
    "duration,units",
    [(0.5, 1), (30, 1), (30.2, 2), (60, 2), (95, 4)],
)
def test_usage_units(coordinator, duration, units):
    """Test one billing unit per started 30-second block, minimum one."""
    usage = coordinator.compute_usage("proj_1", duration)

    assert usage.units == units
    assert usage.usage_type == "video_render"
    assert usage.cost == pytest.approx(units * 0.1)

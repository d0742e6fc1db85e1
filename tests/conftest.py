"""Shared pytest fixtures and configuration."""

from datetime import datetime, timedelta, timezone

import pytest

from adcompose.core.config import Settings
from adcompose.core.logging_config import get_logger
from adcompose.models.schemas import AssetKind, MediaAsset, Project, Scene

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_scene(number: int, text: str = None) -> Scene:
    return Scene(
        id=f"scene_{number}",
        scene_number=number,
        script_text=text if text is not None else f"Line for scene {number}",
        visual_description=f"Visual {number}",
    )


def make_asset(
    asset_id: str,
    kind: AssetKind = AssetKind.IMAGE,
    scene_id: str = None,
    scene_number: int = None,
    minutes: int = 0,
) -> MediaAsset:
    metadata = {"sceneNumber": scene_number} if scene_number is not None else {}
    return MediaAsset(
        id=asset_id,
        kind=kind,
        url=f"https://cdn.example.com/{asset_id}",
        scene_id=scene_id,
        metadata=metadata,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


@pytest.fixture
def settings(tmp_path):
    """Create test settings instance with temporary storage."""
    return Settings(
        storage_path=str(tmp_path / "projects"),
        asset_storage_path=str(tmp_path / "assets"),
        renderer_url="https://render.example.com/render",
    )


@pytest.fixture
def logger():
    """Create test logger instance."""
    return get_logger(__name__)


@pytest.fixture
def scenes():
    """Three scenes, delivered out of order."""
    return [make_scene(2), make_scene(1), make_scene(3)]


@pytest.fixture
def assets():
    """One image per scene plus voiceover and music."""
    return [
        make_asset("img_1", scene_id="scene_1", minutes=1),
        make_asset("img_2", scene_id="scene_2", minutes=2),
        make_asset("img_3", scene_number=3, minutes=3),
        make_asset("voice_1", kind=AssetKind.VOICEOVER, minutes=4),
        make_asset("music_1", kind=AssetKind.MUSIC, minutes=5),
    ]


@pytest.fixture
def project():
    return Project(id="proj_1", name="Test Ad", current_step="compile")

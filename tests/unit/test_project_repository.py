"""Tests for the JSON project repository."""

import threading

import pytest

from conftest import make_asset
from adcompose.models.schemas import AssetKind, UsageRecord
from adcompose.storage.repository import ProjectRepository


@pytest.fixture
def repository(settings, logger):
    """Create ProjectRepository instance for testing."""
    return ProjectRepository(settings, logger)


def test_save_and_load_project(repository, project, scenes, assets):
    """Test saving and reading back a project."""
    repository.save_project(project, scenes, assets)

    loaded = repository.get_project("proj_1")

    assert loaded == project
    assert [s.scene_number for s in repository.list_scenes("proj_1")] == [1, 2, 3]
    assert {a.id for a in repository.list_media_assets("proj_1")} == {a.id for a in assets}


def test_missing_project(repository):
    """Test reads of an unknown project."""
    assert repository.get_project("nope") is None
    assert repository.list_scenes("nope") == []
    assert repository.list_media_assets("nope") == []


def test_media_assets_newest_first_and_filtered(repository, project, scenes, assets):
    """Test assets come back newest first and can be filtered by kind."""
    repository.save_project(project, scenes, assets)
    repository.add_media_asset("proj_1", make_asset("music_2", kind=AssetKind.MUSIC, minutes=60))

    all_assets = repository.list_media_assets("proj_1")
    music = repository.list_media_assets("proj_1", kind=AssetKind.MUSIC)

    assert all_assets[0].id == "music_2"
    assert [a.id for a in music] == ["music_2", "music_1"]


def test_record_compile(repository, project, scenes, assets):
    """Test the final video, usage and step change are saved together."""
    repository.save_project(project, scenes, assets)

    video = repository.record_compile(
        project_id="proj_1",
        url="file:///tmp/final.mp4",
        duration_seconds=30,
        resolution="1080p",
        metadata={"musicVolume": 0.3},
        usage=UsageRecord(project_id="proj_1", units=1, cost=0.1),
        step="complete",
    )

    assert video.id.startswith("video_")
    assert repository.list_final_videos("proj_1")[0].url == "file:///tmp/final.mp4"
    assert repository.list_usage("proj_1")[0].units == 1
    assert repository.get_project("proj_1").current_step == "complete"


def test_record_compile_failed_write_leaves_project_unchanged(repository, project, scenes, assets, monkeypatch):
    """Test a failed write persists none of the compile records."""
    repository.save_project(project, scenes, assets)

    def fail_write(project_id, document):
        raise OSError("disk full")

    monkeypatch.setattr(repository, "_write", fail_write)

    with pytest.raises(OSError):
        repository.record_compile(
            project_id="proj_1",
            url="file:///tmp/final.mp4",
            duration_seconds=30,
            resolution="1080p",
            metadata={},
            usage=UsageRecord(project_id="proj_1", units=1, cost=0.1),
            step="complete",
        )

    assert repository.list_final_videos("proj_1") == []
    assert repository.list_usage("proj_1") == []
    assert repository.get_project("proj_1").current_step == "compile"


def test_update_project_settings(repository, project):
    """Test replacing the settings bag."""
    repository.save_project(project)

    updated = repository.update_project_settings("proj_1", {"captions_enabled": False})

    assert updated.settings == {"captions_enabled": False}
    assert repository.get_project("proj_1").settings == {"captions_enabled": False}


def test_writes_to_unknown_project_fail(repository):
    """Test writes require an existing project."""
    with pytest.raises(KeyError):
        repository.update_project_settings("nope", {})


def test_list_projects(repository, project):
    """Test listing stored project IDs."""
    repository.save_project(project)

    assert repository.list_projects() == ["proj_1"]


def test_concurrent_writers_share_lock(settings, logger, project):
    """Test writes from separate repository instances to one project are serialized."""
    ProjectRepository(settings, logger).save_project(project)
    errors = []

    def writer(index):
        repository = ProjectRepository(settings, logger)
        try:
            for round_number in range(10):
                if index % 2:
                    repository.add_media_asset("proj_1", make_asset(f"img_{index}_{round_number}"))
                else:
                    repository.update_project_settings("proj_1", {"writer": index, "round": round_number})
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=writer, args=(index,)) for index in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    repository = ProjectRepository(settings, logger)
    assert errors == []
    assert len(repository.list_media_assets("proj_1")) == 30
    assert list(repository.storage_path.glob("*.tmp")) == []

"""Tests for Caption Synchronizer service."""

import pytest

from conftest import make_scene
from adcompose.models.schemas import CaptionSettings
from adcompose.services.caption_synchronizer import CaptionSynchronizer, captions_enabled


@pytest.fixture
def synchronizer(settings, logger):
    """Create CaptionSynchronizer instance for testing."""
    return CaptionSynchronizer(settings, logger)


def test_cues_follow_scene_durations(synchronizer):
    """Test one cue per scene, laid end to end."""
    scenes = [make_scene(1, "Hook"), make_scene(2, "Benefit"), make_scene(3, "Buy now")]

    cues = synchronizer.synchronize(scenes, [10.0, 10.0, 10.0], enabled=True)

    assert [(c.start, c.duration) for c in cues] == [(0.0, 10.0), (10.0, 10.0), (20.0, 10.0)]
    assert [c.text for c in cues] == ["Hook", "Benefit", "Buy now"]
    assert [c.scene_number for c in cues] == [1, 2, 3]


def test_cues_tile_timeline_without_gaps(synchronizer):
    """Test each cue starts exactly where the previous one ends."""
    scenes = [make_scene(n) for n in range(1, 8)]
    duration = 31 / 7

    cues = synchronizer.synchronize(scenes, [duration] * 7, enabled=True)

    assert cues[0].start == 0.0
    for previous, current in zip(cues, cues[1:]):
        assert current.start == previous.start + previous.duration
    assert abs(cues[-1].start + cues[-1].duration - 31) < 1e-9


def test_disabled_returns_none(synchronizer):
    """Test no cues are produced when captions are off."""
    assert synchronizer.synchronize([make_scene(1)], [5.0], enabled=False) is None


def test_mismatched_lengths_rejected(synchronizer):
    """Test every scene needs exactly one duration."""
    with pytest.raises(ValueError):
        synchronizer.synchronize([make_scene(1), make_scene(2)], [5.0], enabled=True)


def test_script_text_passed_verbatim(synchronizer):
    """Test text is not wrapped or trimmed; wrapping is left to the renderer."""
    text = "  one two three four five six seven  "

    [cue] = synchronizer.synchronize([make_scene(1, text)], [5.0], enabled=True)

    assert cue.text == text


def test_compile_option_overrides_caption_settings():
    """Test explicit include_captions wins over the project setting."""
    enabled = CaptionSettings(enabled=True)
    disabled = CaptionSettings(enabled=False)

    assert captions_enabled(enabled, None) is True
    assert captions_enabled(disabled, None) is False
    assert captions_enabled(enabled, False) is False
    assert captions_enabled(disabled, True) is True

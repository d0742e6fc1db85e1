"""Caption Synchronizer - derives caption cues aligned to scene boundaries."""

from typing import Any, Optional

from adcompose.core.config import Settings
from adcompose.models.schemas import CaptionCue, CaptionSettings, Scene


def captions_enabled(caption_settings: CaptionSettings, include_captions: Optional[bool]) -> bool:
    """An explicit compile option wins over the project's caption settings."""
    if include_captions is not None:
        return include_captions
    return caption_settings.enabled


class CaptionSynchronizer:
    """Produces one caption cue per scene, sharing the clip time slices."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the caption synchronizer.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger

    def synchronize(
        self,
        scenes: list[Scene],
        durations: list[float],
        enabled: bool,
    ) -> Optional[list[CaptionCue]]:
        """
        Build caption cues for scenes already sorted by scene number.

        Cues are laid end to end from 0 using a running accumulator, so they never
        overlap and cover the whole timeline. Script text is passed through verbatim;
        line wrapping (words_per_line) is left to the renderer.

        Args:
            scenes: Scenes in ascending scene-number order
            durations: Allocated duration of each scene
            enabled: Whether captions are included

        Returns:
            Caption cues, or None when captions are disabled
        """
        if not enabled:
            self.logger.debug("Captions disabled, skipping cue generation")
            return None

        if len(scenes) != len(durations):
            raise ValueError(f"Got {len(durations)} durations for {len(scenes)} scenes")

        cues = []
        current_time = 0.0
        for scene, duration in zip(scenes, durations):
            cues.append(
                CaptionCue(
                    scene_number=scene.scene_number,
                    text=scene.script_text,
                    start=current_time,
                    duration=duration,
                )
            )
            current_time += duration

        self.logger.debug(f"Generated {len(cues)} caption cues covering {current_time:.3f}s")
        return cues

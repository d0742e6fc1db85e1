"""Timeline Allocator - splits the target duration across scenes."""

import math
from typing import Any

from adcompose.core.config import Settings
from adcompose.core.errors import EmptyProject, InvalidDuration


def validate_duration(target_duration: Any) -> float:
    """Return the duration as a float, or raise InvalidDuration."""
    if isinstance(target_duration, bool) or not isinstance(target_duration, (int, float)):
        raise InvalidDuration(target_duration)
    if not math.isfinite(target_duration) or target_duration <= 0:
        raise InvalidDuration(target_duration)
    return float(target_duration)


class TimelineAllocator:
    """Equal-split duration allocator."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the allocator.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger

    def allocate(self, scene_count: int, target_duration: float) -> list[float]:
        """
        Split the target duration equally across scenes.

        Every scene receives target_duration / scene_count seconds. Durations are
        not rounded, so the total matches the target up to float precision.

        Args:
            scene_count: Number of scenes (must be >= 1)
            target_duration: Total duration in seconds (must be > 0)

        Returns:
            Per-scene durations, one per scene
        """
        if scene_count < 1:
            raise EmptyProject()
        duration = validate_duration(target_duration)

        scene_duration = duration / scene_count
        self.logger.debug(f"Allocated {scene_count} scenes x {scene_duration:.3f}s = {duration}s")
        return [scene_duration] * scene_count

    @staticmethod
    def offsets(durations: list[float]) -> list[float]:
        """Start offset of each slice, accumulated from zero."""
        current_time = 0.0
        starts = []
        for duration in durations:
            starts.append(current_time)
            current_time += duration
        return starts

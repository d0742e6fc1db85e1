"""Audio Mix Planner - selects voiceover and music and sets the music level."""

import math
from typing import Any, Optional

from adcompose.core.config import Settings
from adcompose.core.errors import InvalidSettings
from adcompose.models.schemas import AssetKind, AudioMix, MediaAsset, MusicSelection, MusicSource
from adcompose.services.scene_asset_resolver import newest_first


class AudioMixPlanner:
    """Picks at most one voiceover and at most one music track for a project."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the audio mix planner.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger

    def resolve_volume(self, music_volume: Optional[float]) -> float:
        """Return the music level, defaulting when unset and rejecting out-of-range values."""
        if music_volume is None:
            return self.settings.default_music_volume
        if (
            isinstance(music_volume, bool)
            or not isinstance(music_volume, (int, float))
            or not math.isfinite(music_volume)
            or not 0.0 <= music_volume <= 1.0
        ):
            raise InvalidSettings("music_volume", music_volume, allowed="0.0-1.0")
        return float(music_volume)

    def plan(
        self,
        assets: list[MediaAsset],
        music: Optional[MusicSelection] = None,
        music_volume: Optional[float] = None,
    ) -> AudioMix:
        """
        Select the voiceover and music references for a project.

        Args:
            assets: All project assets
            music: Music chosen during authoring (at most one source)
            music_volume: Requested music level (None = default)

        Returns:
            Audio mix with URLs and music level
        """
        volume = self.resolve_volume(music_volume)

        voiceovers = newest_first(a for a in assets if a.kind == AssetKind.VOICEOVER)
        voiceover_url = voiceovers[0].url if voiceovers else None

        music_assets = newest_first(a for a in assets if a.kind == AssetKind.MUSIC)
        music_url, music_source = self._select_music(music_assets, music)

        self.logger.debug(
            f"Audio mix: voiceover={'yes' if voiceover_url else 'no'}, "
            f"music={music_source.value if music_source else 'none'}, volume={volume}"
        )
        return AudioMix(
            voiceover_url=voiceover_url,
            music_url=music_url,
            music_source=music_source,
            music_volume=volume,
        )

    def _select_music(
        self,
        music_assets: list[MediaAsset],
        music: Optional[MusicSelection],
    ) -> tuple[Optional[str], Optional[MusicSource]]:
        chosen = music.chosen() if music else []
        if len(chosen) > 1:
            raise InvalidSettings(
                "music",
                chosen,
                reason=f"Only one music source may be selected, got {', '.join(chosen)}",
            )

        if not chosen:
            if music_assets:
                return music_assets[0].url, MusicSource.LATEST_ASSET
            return None, None

        if music.preset_track_url:
            return music.preset_track_url, MusicSource.PRESET

        asset_id = music.library_asset_id or music.generated_asset_id
        source = MusicSource.LIBRARY if music.library_asset_id else MusicSource.GENERATED
        for asset in music_assets:
            if asset.id == asset_id:
                return asset.url, source

        raise InvalidSettings("music", asset_id, reason=f"Music asset {asset_id} not found")

"""Scene Asset Resolver - maps each scene to the visual asset that represents it."""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from adcompose.core.config import Settings
from adcompose.models.schemas import AssetKind, MatchOrigin, MediaAsset, Scene, SceneResolution

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _created_key(asset: MediaAsset) -> datetime:
    created_at = asset.created_at
    if created_at is None:
        return _OLDEST
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


def newest_first(assets: Iterable[MediaAsset]) -> list[MediaAsset]:
    """
    Sort assets by creation time, newest first.

    The sort is stable: assets with equal (or missing) timestamps keep their
    delivery order, and assets without a timestamp sort after timestamped ones.
    """
    return sorted(assets, key=_created_key, reverse=True)


class SceneAssetResolver:
    """Two-stage resolver: match by scene ID first, then by the scene-number hint."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the resolver.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger

    def resolve(
        self,
        scenes: list[Scene],
        assets: list[MediaAsset],
        kinds: Iterable[AssetKind],
    ) -> list[SceneResolution]:
        """
        Resolve every scene to at most one asset of the given kinds.

        Args:
            scenes: Project scenes, in any order
            assets: All project assets, in any order
            kinds: Asset kinds eligible to represent a scene

        Returns:
            One tagged resolution per scene, in ascending scene-number order
        """
        eligible = set(kinds)
        candidates = newest_first(asset for asset in assets if asset.kind in eligible)

        by_scene_id: dict[str, MediaAsset] = {}
        by_scene_number: dict[int, MediaAsset] = {}
        for asset in candidates:
            if asset.scene_id:
                by_scene_id.setdefault(asset.scene_id, asset)
            hint = asset.scene_number_hint
            if hint is not None:
                by_scene_number.setdefault(hint, asset)

        resolutions = []
        for scene in sorted(scenes, key=lambda s: s.scene_number):
            resolutions.append(self._resolve_scene(scene, by_scene_id, by_scene_number))

        unresolved = [r.scene.scene_number for r in resolutions if not r.resolved]
        self.logger.debug(
            f"Resolved {len(resolutions) - len(unresolved)}/{len(resolutions)} scenes "
            f"from {len(candidates)} candidate assets"
        )
        if unresolved:
            self.logger.warning(f"Unresolved scenes: {unresolved}")
        return resolutions

    def _resolve_scene(
        self,
        scene: Scene,
        by_scene_id: dict[str, MediaAsset],
        by_scene_number: dict[int, MediaAsset],
    ) -> SceneResolution:
        asset: Optional[MediaAsset] = by_scene_id.get(scene.id)
        if asset is not None:
            return SceneResolution(scene=scene, origin=MatchOrigin.MATCHED_BY_ID, asset=asset)

        asset = by_scene_number.get(scene.scene_number)
        if asset is not None:
            return SceneResolution(scene=scene, origin=MatchOrigin.MATCHED_BY_HINT, asset=asset)

        return SceneResolution(scene=scene, origin=MatchOrigin.UNRESOLVED)

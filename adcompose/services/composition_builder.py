"""Composition Builder - turns a project snapshot into a validated composition plan."""

from enum import Enum
from typing import Any, Optional, TypeVar

from adcompose.core.config import Settings
from adcompose.core.errors import EmptyProject, InvalidSettings, MissingSceneAsset
from adcompose.models.schemas import (
    VISUAL_KINDS,
    AspectRatio,
    AssetKind,
    CaptionSettings,
    Clip,
    CompileOptions,
    CompositionPlan,
    MediaAsset,
    MusicSelection,
    OutputFormat,
    ProjectSnapshot,
    Resolution,
    Scene,
    Transition,
    output_dimensions,
)
from adcompose.services.audio_mix_planner import AudioMixPlanner
from adcompose.services.caption_synchronizer import CaptionSynchronizer, captions_enabled
from adcompose.services.scene_asset_resolver import SceneAssetResolver
from adcompose.services.timeline_allocator import TimelineAllocator, validate_duration

E = TypeVar("E", bound=Enum)


def _parse_choice(enum_cls: type[E], field: str, value: Any) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidSettings(field, value, allowed=[member.value for member in enum_cls]) from None


class CompositionBuilder:
    """
    Builds composition plans.

    The build is a pure function of its inputs: no I/O, no clock, no randomness.
    Validation runs in a fixed order and stops at the first problem:

    1. at least one scene
    2. every scene resolves to an image or video clip
    3. positive target duration
    4. resolution, aspect ratio and output format are known values
    5. music volume in [0, 1] and a single music source
    """

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize the builder and its components.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.resolver = SceneAssetResolver(settings, logger)
        self.allocator = TimelineAllocator(settings, logger)
        self.caption_synchronizer = CaptionSynchronizer(settings, logger)
        self.audio_mix_planner = AudioMixPlanner(settings, logger)

    def build_from_snapshot(self, snapshot: ProjectSnapshot, options: CompileOptions) -> CompositionPlan:
        """Build a plan from a complete project snapshot."""
        return self.build(
            project_id=snapshot.project.id,
            scenes=snapshot.scenes,
            assets=snapshot.assets,
            options=options,
            caption_settings=snapshot.caption_settings,
            music=snapshot.music,
        )

    def build(
        self,
        project_id: str,
        scenes: list[Scene],
        assets: list[MediaAsset],
        options: CompileOptions,
        caption_settings: Optional[CaptionSettings] = None,
        music: Optional[MusicSelection] = None,
    ) -> CompositionPlan:
        """
        Build a composition plan.

        Args:
            project_id: Project identifier
            scenes: Project scenes, in any order
            assets: All project media assets
            options: Compile options
            caption_settings: Project caption styling (defaults apply when None)
            music: Music chosen during authoring

        Returns:
            Complete composition plan

        Raises:
            EmptyProject, MissingSceneAsset, InvalidDuration, InvalidSettings
        """
        caption_settings = caption_settings or CaptionSettings()

        # 1. scenes
        if not scenes:
            raise EmptyProject(project_id)

        # 2. visual asset per scene
        resolutions = self.resolver.resolve(scenes, assets, VISUAL_KINDS)
        for resolution in resolutions:
            if not resolution.resolved:
                raise MissingSceneAsset(resolution.scene.scene_number, resolution.scene.id)

        # 3. duration
        target_duration = validate_duration(options.target_duration)

        # 4. output settings
        output_resolution = _parse_choice(Resolution, "resolution", options.resolution)
        aspect_ratio = _parse_choice(AspectRatio, "aspect_ratio", options.aspect_ratio)
        output_format = _parse_choice(OutputFormat, "output_format", options.output_format)

        # 5. audio
        audio_mix = self.audio_mix_planner.plan(assets, music=music, music_volume=options.music_volume)

        ordered_scenes = [resolution.scene for resolution in resolutions]
        durations = self.allocator.allocate(len(ordered_scenes), target_duration)
        starts = self.allocator.offsets(durations)
        transition = Transition(self.settings.default_transition)

        clips = [
            Clip(
                scene_number=resolution.scene.scene_number,
                kind="video" if resolution.asset.kind == AssetKind.VIDEO_CLIP else "image",
                source_url=resolution.asset.url,
                start_offset=start,
                duration=duration,
                transition_in=transition,
            )
            for resolution, start, duration in zip(resolutions, starts, durations)
        ]

        include_captions = captions_enabled(caption_settings, options.include_captions)
        caption_cues = self.caption_synchronizer.synchronize(ordered_scenes, durations, include_captions)

        width, height = output_dimensions(output_resolution, aspect_ratio)
        plan = CompositionPlan(
            project_id=project_id,
            clips=clips,
            caption_cues=caption_cues,
            caption_settings=caption_settings if caption_cues is not None else None,
            voiceover_url=audio_mix.voiceover_url,
            music_url=audio_mix.music_url,
            music_volume=audio_mix.music_volume,
            resolution=output_resolution,
            aspect_ratio=aspect_ratio,
            output_format=output_format,
            width=width,
            height=height,
            total_duration=target_duration,
        )

        self.logger.info(
            f"Built composition plan for project {project_id}: {len(clips)} clips, "
            f"{target_duration}s, {output_resolution.value} {aspect_ratio.value} ({width}x{height}), "
            f"captions={'on' if include_captions else 'off'}"
        )
        return plan

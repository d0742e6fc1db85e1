"""Pydantic models and schemas for the timeline composition engine."""

import hashlib
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ============================================================================
# Enums
# ============================================================================


class AssetKind(str, Enum):
    """Kind of generated media asset."""

    IMAGE = "image"
    VIDEO_CLIP = "video_clip"
    VOICEOVER = "voiceover"
    MUSIC = "music"


VISUAL_KINDS = (AssetKind.IMAGE, AssetKind.VIDEO_CLIP)


class Resolution(str, Enum):
    """Output resolution."""

    SD_480 = "480p"
    HD_720 = "720p"
    FHD_1080 = "1080p"
    UHD_4K = "4k"


class AspectRatio(str, Enum):
    """Output aspect ratio."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"
    SQUARE = "square"


class OutputFormat(str, Enum):
    """Output container format."""

    MP4 = "mp4"
    MOV = "mov"


class Transition(str, Enum):
    """Transition played at the start of a clip."""

    FADE = "fade"
    ZOOM = "zoom"
    SLIDE = "slide"


class MatchOrigin(str, Enum):
    """How a scene was matched to its visual asset."""

    MATCHED_BY_ID = "matched_by_id"
    MATCHED_BY_HINT = "matched_by_hint"
    UNRESOLVED = "unresolved"


class MusicSource(str, Enum):
    """Where the selected music track came from."""

    PRESET = "preset"
    LIBRARY = "library"
    GENERATED = "generated"
    LATEST_ASSET = "latest_asset"


# Landscape base dimensions per resolution
RESOLUTION_DIMENSIONS: dict[Resolution, tuple[int, int]] = {
    Resolution.SD_480: (854, 480),
    Resolution.HD_720: (1280, 720),
    Resolution.FHD_1080: (1920, 1080),
    Resolution.UHD_4K: (3840, 2160),
}


def output_dimensions(resolution: Resolution, aspect_ratio: AspectRatio) -> tuple[int, int]:
    """Return (width, height) in pixels for a resolution and aspect ratio."""
    width, height = RESOLUTION_DIMENSIONS[resolution]
    if aspect_ratio == AspectRatio.PORTRAIT:
        # 9:16, half-up rounding
        return int(height * 9 / 16 + 0.5), height
    if aspect_ratio == AspectRatio.SQUARE:
        size = min(width, height)
        return size, size
    return width, height


# ============================================================================
# Project Store Models
# ============================================================================


class Project(BaseModel):
    """A wizard project as stored in the project store."""

    id: str = Field(..., description="Project identifier")
    name: str = Field(default="", description="Project name")
    current_step: str = Field(default="product", description="Current wizard step")
    settings: dict[str, Any] = Field(default_factory=dict, description="Free-form project settings")


class Scene(BaseModel):
    """One narrative beat of the ad."""

    id: str = Field(..., description="Scene identifier")
    scene_number: int = Field(..., ge=1, description="1-based scene number, unique within a project")
    script_text: str = Field(..., description="Script text spoken/captioned during the scene")
    visual_description: str = Field(default="", description="Description used to generate the scene visual")


class MediaAsset(BaseModel):
    """A generated media asset (image, video clip, voiceover or music)."""

    id: str = Field(..., description="Asset identifier")
    kind: AssetKind = Field(..., description="Asset kind")
    url: str = Field(..., description="Asset URL")
    scene_id: Optional[str] = Field(default=None, description="Owning scene ID (None for project-level assets)")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Free-form metadata bag")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")

    @property
    def scene_number_hint(self) -> Optional[int]:
        """Scene number carried in metadata by the legacy association path."""
        value = self.metadata.get("sceneNumber")
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return None


# ============================================================================
# Caption Models
# ============================================================================

# Stored and sent to the renderer in camelCase (fontFamily, wordsPerLine, ...)
CAPTION_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CaptionStyleFlags(BaseModel):
    """Text decoration flags for captions."""

    model_config = CAPTION_MODEL_CONFIG

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False


class CaptionEffects(BaseModel):
    """Caption effect parameters."""

    model_config = CAPTION_MODEL_CONFIG

    outline_color: Optional[str] = None
    outline_width: Optional[float] = Field(default=None, ge=1, le=10)
    shadow_color: Optional[str] = None
    shadow_offset: Optional[float] = Field(default=None, ge=0, le=20)
    glow_color: Optional[str] = None
    glow_size: Optional[float] = Field(default=None, ge=0, le=20)
    highlight_color: Optional[str] = None


class CaptionSettings(BaseModel):
    """Project-level caption styling."""

    model_config = CAPTION_MODEL_CONFIG

    enabled: bool = Field(default=True, description="Whether captions are burned into the video")
    font_family: str = Field(default="Arial", description="Caption font family")
    font_size: int = Field(default=48, ge=20, le=120, description="Caption font size")
    font_color: str = Field(default="#FFFFFF", description="Caption font color")
    position: float = Field(default=80, ge=10, le=90, description="Vertical position in percent of frame height")
    words_per_line: int = Field(default=0, ge=0, le=10, description="Words per visual line (0 = no wrapping limit)")
    style: CaptionStyleFlags = Field(default_factory=CaptionStyleFlags)
    effects: CaptionEffects = Field(default_factory=CaptionEffects)


# ============================================================================
# Composition Models
# ============================================================================


class SceneResolution(BaseModel):
    """Tagged result of resolving one scene to a visual asset."""

    model_config = ConfigDict(frozen=True)

    scene: Scene
    origin: MatchOrigin
    asset: Optional[MediaAsset] = None

    @property
    def resolved(self) -> bool:
        return self.origin != MatchOrigin.UNRESOLVED


class Clip(BaseModel):
    """One scene's visual asset and its time slice."""

    model_config = ConfigDict(frozen=True)

    scene_number: int = Field(..., description="Scene this clip represents")
    kind: str = Field(..., description="'image' or 'video'")
    source_url: str = Field(..., description="URL of the visual asset")
    start_offset: float = Field(..., ge=0.0, description="Start time in seconds")
    duration: float = Field(..., gt=0.0, description="Duration in seconds")
    transition_in: Transition = Field(default=Transition.FADE, description="Transition at clip start")


class CaptionCue(BaseModel):
    """One scene's caption text and its time slice."""

    model_config = ConfigDict(frozen=True)

    scene_number: int = Field(..., description="Scene this cue belongs to")
    text: str = Field(..., description="Caption text")
    start: float = Field(..., ge=0.0, description="Start time in seconds")
    duration: float = Field(..., gt=0.0, description="Duration in seconds")


class MusicSelection(BaseModel):
    """Music chosen during the authoring step. At most one field may be set."""

    preset_track_url: Optional[str] = Field(default=None, description="URL of a preset library track")
    library_asset_id: Optional[str] = Field(default=None, description="ID of a music asset from the project library")
    generated_asset_id: Optional[str] = Field(default=None, description="ID of a freshly generated music asset")

    def chosen(self) -> list[str]:
        """Names of the populated selection fields."""
        return [name for name, value in self.model_dump().items() if value]


class AudioMix(BaseModel):
    """Voiceover and music references plus music level."""

    model_config = ConfigDict(frozen=True)

    voiceover_url: Optional[str] = None
    music_url: Optional[str] = None
    music_source: Optional[MusicSource] = None
    music_volume: float = Field(..., ge=0.0, le=1.0)


class CompileOptions(BaseModel):
    """
    Caller-supplied compile options.

    Values are kept raw so the composition builder can validate them in a fixed order.
    """

    target_duration: Any = Field(default=30.0, description="Target total duration in seconds")
    resolution: str = Field(default="1080p", description="480p, 720p, 1080p or 4k")
    aspect_ratio: str = Field(default="portrait", description="portrait, landscape or square")
    output_format: str = Field(default="mp4", description="mp4 or mov")
    include_captions: Optional[bool] = Field(
        default=None, description="Override for caption inclusion (None = follow caption settings)"
    )
    music_volume: Optional[float] = Field(default=None, description="Music level 0-1 (None = default)")


class CompositionPlan(BaseModel):
    """Complete, validated description of a video to be encoded. Immutable."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    clips: tuple[Clip, ...]
    caption_cues: Optional[tuple[CaptionCue, ...]] = None
    caption_settings: Optional[CaptionSettings] = None
    voiceover_url: Optional[str] = None
    music_url: Optional[str] = None
    music_volume: float = Field(..., ge=0.0, le=1.0)
    resolution: Resolution
    aspect_ratio: AspectRatio
    output_format: OutputFormat
    width: int
    height: int
    total_duration: float

    @property
    def includes_captions(self) -> bool:
        return self.caption_cues is not None

    def to_render_request(self) -> dict[str, Any]:
        """Serialize as the structured request expected by the renderer."""
        request: dict[str, Any] = {
            "clips": [
                {
                    "sceneNumber": clip.scene_number,
                    "type": clip.kind,
                    "url": clip.source_url,
                    "start": clip.start_offset,
                    "duration": clip.duration,
                    "transition": clip.transition_in.value,
                }
                for clip in self.clips
            ],
            "musicVolume": self.music_volume,
            "resolution": self.resolution.value,
            "aspectRatio": self.aspect_ratio.value,
            "outputFormat": self.output_format.value,
            "width": self.width,
            "height": self.height,
        }
        if self.caption_cues is not None:
            request["captionCues"] = [
                {"text": cue.text, "start": cue.start, "duration": cue.duration} for cue in self.caption_cues
            ]
            if self.caption_settings is not None:
                request["captionStyle"] = self.caption_settings.model_dump(mode="json", by_alias=True)
        if self.voiceover_url:
            request["voiceoverUrl"] = self.voiceover_url
        if self.music_url:
            request["musicUrl"] = self.music_url
        return request

    def fingerprint(self) -> str:
        """Stable content hash of the plan, usable as a render cache key."""
        return hashlib.sha256(self.model_dump_json().encode("utf-8")).hexdigest()


class ProjectSnapshot(BaseModel):
    """Complete upstream data for one compile, read in a single pass."""

    project: Project
    scenes: list[Scene]
    assets: list[MediaAsset]
    caption_settings: CaptionSettings = Field(default_factory=CaptionSettings)
    music: Optional[MusicSelection] = None


# ============================================================================
# Render & Persistence Models
# ============================================================================


class RenderOutput(BaseModel):
    """Handle returned by the renderer for an encoded file."""

    url: str = Field(..., description="Where the encoded file can be fetched")
    duration_seconds: Optional[float] = Field(default=None, description="Duration reported by the renderer")


class UsageRecord(BaseModel):
    """Usage accounting entry for a render."""

    project_id: str
    usage_type: str = "video_render"
    units: int = Field(..., ge=1)
    cost: float = Field(..., ge=0.0)


class FinalVideo(BaseModel):
    """Persisted record of a compiled video."""

    id: str
    project_id: str
    url: str
    duration_seconds: int
    resolution: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None


class CompileResult(BaseModel):
    """Outcome of a successful submission."""

    final_video: FinalVideo
    usage: UsageRecord
    plan_fingerprint: str


# ============================================================================
# API Request/Response Models
# ============================================================================


class CompileRequest(BaseModel):
    """Request body for compiling a project."""

    duration: Optional[float] = Field(default=None, description="Target duration in seconds")
    resolution: Optional[str] = Field(default=None, description="480p, 720p, 1080p or 4k")
    aspect_ratio: Optional[str] = Field(default=None, description="portrait, landscape or square")
    output_format: Optional[str] = Field(default=None, description="mp4 or mov")
    include_captions: Optional[bool] = Field(default=None, description="Include captions")
    music_volume: Optional[float] = Field(default=None, description="Music level 0-1")


class CompileResponse(BaseModel):
    """Response from a successful compile."""

    video: FinalVideo
    plan_fingerprint: str
    usage: UsageRecord

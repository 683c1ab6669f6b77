"""
Production Models
=================

Core data models for long-video requests, scenes, clips and results.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Union

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


# Model value meaning "let the router decide"
AUTO_MODEL = "auto"


class SceneType(Enum):
    """Kind of content a scene shows; drives model routing."""

    LANDSCAPE = "landscape"
    ESTABLISHING = "establishing"
    FACE_CLOSEUP = "face_closeup"
    PEOPLE = "people"
    DIALOGUE = "dialogue"
    ARTISTIC = "artistic"
    ANIMATION = "animation"
    PRODUCT = "product"
    OBJECT_CLOSEUP = "object_closeup"
    ACTION = "action"
    FAST_MOTION = "fast_motion"
    TRANSITION = "transition"
    GENERIC_FOOTAGE = "generic_footage"
    TEXT_OVERLAY = "text_overlay"


class VideoStyle(Enum):
    """Overall look requested for the video."""

    CINEMATIC = "cinematic"
    DOCUMENTARY = "documentary"
    TUTORIAL = "tutorial"
    PROMOTIONAL = "promotional"
    ENTERTAINMENT = "entertainment"
    ARTISTIC = "artistic"


class QualityTier(Enum):
    """Target output resolution tier."""

    HD = "720p"
    FULL_HD = "1080p"
    UHD = "4k"


class StepStatus(Enum):
    """Status of a pipeline stage."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


def style_value(style: Union[VideoStyle, str, None]) -> str:
    """Return the plain string key of a style (enum or free string)."""
    if isinstance(style, VideoStyle):
        return style.value
    return style or ""


@dataclass(frozen=True)
class Scene:
    """
    A single unit of generation work.

    Scenes are immutable once planned. The router and the regeneration
    manager produce updated copies with ``dataclasses.replace`` when they
    assign a model.
    """

    scene_id: str
    index: int
    scene_type: SceneType
    description: str
    prompt: str
    duration: float = 5

    # Routing
    model: Optional[str] = None

    # Presentation metadata
    style: Optional[str] = None
    camera_movement: Optional[str] = None
    transition_in: Optional[str] = None
    transition_out: Optional[str] = None

    def __post_init__(self):
        if not self.duration or self.duration <= 0:
            raise ValidationError(
                f"Scene {self.scene_id} duration must be positive",
                field="duration",
                value=self.duration,
                constraint="> 0",
            )
        if not self.prompt or not self.prompt.strip():
            raise ValidationError(
                f"Scene {self.scene_id} prompt must not be empty",
                field="prompt",
                constraint="non-empty",
            )

    @property
    def needs_routing(self) -> bool:
        """Whether the router should pick a model for this scene."""
        return not self.model or self.model == AUTO_MODEL

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "scene_id": self.scene_id,
            "index": self.index,
            "scene_type": self.scene_type.value,
            "description": self.description,
            "prompt": self.prompt,
            "duration": self.duration,
            "model": self.model,
            "style": self.style,
            "camera_movement": self.camera_movement,
            "transition_in": self.transition_in,
            "transition_out": self.transition_out,
        }


@dataclass
class GeneratedClip:
    """Outcome of one attempt to generate a scene."""

    scene_id: str
    scene_index: int
    model: str
    duration: float
    resolution: str
    quality: float

    # Media handle: exactly one is set on success, neither on failure
    video_url: Optional[str] = None
    video_base64: Optional[str] = None

    continuity_score: Optional[float] = None
    generation_time: float = 0.0
    retry_count: int = 0
    error: Optional[str] = None

    @property
    def has_media(self) -> bool:
        """Whether the clip carries a usable media handle."""
        return bool(self.video_url or self.video_base64)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (inline payloads are summarized, not dumped)."""
        return {
            "scene_id": self.scene_id,
            "scene_index": self.scene_index,
            "video_url": self.video_url,
            "has_inline_video": self.video_base64 is not None,
            "model": self.model,
            "duration": self.duration,
            "resolution": self.resolution,
            "quality": self.quality,
            "continuity_score": self.continuity_score,
            "generation_time": self.generation_time,
            "retry_count": self.retry_count,
            "error": self.error,
        }


@dataclass
class ProcessingStep:
    """A named pipeline stage and its progress."""

    step: str
    status: StepStatus = StepStatus.PENDING
    progress: int = 0
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "status": self.status.value,
            "progress": self.progress,
            "details": self.details,
        }


@dataclass
class LongVideoRequest:
    """Public input contract for a long-video run."""

    title: str
    description: str = ""
    total_duration: float = 30
    style: Union[VideoStyle, str] = VideoStyle.CINEMATIC
    aspect_ratio: str = "16:9"
    target_quality: Union[QualityTier, str] = QualityTier.FULL_HD
    script: Optional[str] = None
    scenes: Optional[List[Scene]] = None

    # Carried through as metadata for downstream audio/branding passes
    voiceover_style: Optional[str] = None
    music_genre: Optional[str] = None
    brand_colors: List[str] = field(default_factory=list)

    VALID_ASPECT_RATIOS = {"16:9", "9:16", "1:1"}

    def __post_init__(self):
        if isinstance(self.style, str):
            try:
                self.style = VideoStyle(self.style)
            except ValueError:
                logger.warning(f"Unknown style '{self.style}', neutral defaults will be used")
        if isinstance(self.target_quality, str):
            try:
                self.target_quality = QualityTier(self.target_quality)
            except ValueError:
                raise ValidationError(
                    f"Invalid target quality: {self.target_quality}",
                    field="target_quality",
                    value=self.target_quality,
                    constraint="one of 720p, 1080p, 4k",
                )
        self.validate()

    def validate(self) -> None:
        """Validate request values."""
        if not self.total_duration or self.total_duration <= 0:
            raise ValidationError(
                f"total_duration must be positive, got {self.total_duration}",
                field="total_duration",
                value=self.total_duration,
                constraint="> 0",
            )
        if self.aspect_ratio not in self.VALID_ASPECT_RATIOS:
            raise ValidationError(
                f"Invalid aspect ratio: {self.aspect_ratio}",
                field="aspect_ratio",
                value=self.aspect_ratio,
            )
        if self.scenes is not None and len(self.scenes) == 0:
            raise ValidationError(
                "Explicit scene list must not be empty",
                field="scenes",
            )

    @property
    def style_key(self) -> str:
        return style_value(self.style)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "total_duration": self.total_duration,
            "style": self.style_key,
            "aspect_ratio": self.aspect_ratio,
            "target_quality": self.target_quality.value,
            "script": self.script,
            "scene_count": len(self.scenes) if self.scenes else None,
            "voiceover_style": self.voiceover_style,
            "music_genre": self.music_genre,
            "brand_colors": self.brand_colors,
        }


@dataclass(frozen=True)
class LongVideoResult:
    """Public output contract of a long-video run. Built once per run."""

    success: bool
    total_duration: float
    resolution: str
    total_clips: int
    successful_clips: int
    failed_clips: int
    average_quality: float
    generation_time: float
    processing_steps: List[ProcessingStep]
    clips: List[GeneratedClip]
    video_url: Optional[str] = None
    error: Optional[str] = None
    render_plans: List[Any] = field(default_factory=list)
    exhausted_scene_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": self.success,
            "video_url": self.video_url,
            "total_duration": self.total_duration,
            "resolution": self.resolution,
            "total_clips": self.total_clips,
            "successful_clips": self.successful_clips,
            "failed_clips": self.failed_clips,
            "average_quality": self.average_quality,
            "generation_time": self.generation_time,
            "processing_steps": [step.to_dict() for step in self.processing_steps],
            "clips": [clip.to_dict() for clip in self.clips],
            "render_plans": [plan.to_dict() for plan in self.render_plans],
            "exhausted_scene_ids": list(self.exhausted_scene_ids),
            "error": self.error,
        }


@dataclass
class GenerationEstimate:
    """Rough wall-clock estimate for a request, in minutes."""

    clip_count: int
    batch_count: int
    breakdown: Dict[str, float]

    @property
    def total_minutes(self) -> float:
        return sum(self.breakdown.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clip_count": self.clip_count,
            "batch_count": self.batch_count,
            "breakdown": dict(self.breakdown),
            "total_minutes": self.total_minutes,
        }

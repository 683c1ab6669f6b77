"""
Long Video
==========

Long-form video generation from short AI-generated clips.

Features:
- Scene planning from a script or a narrative arc
- Content-aware routing across five generative models
- Batched, cancellable, concurrent clip generation
- Continuity scoring with bounded regeneration
- Stitch, upscale and enhance render plans
- Progress events, CLI and HTTP API

Quick Start:
    from longvideo import LongVideoOrchestrator, LongVideoRequest

    request = LongVideoRequest(
        title="Alpine Journey",
        description="A hike across the Alps at sunrise",
        total_duration=30,
        style="cinematic",
        target_quality="1080p",
    )

    async with LongVideoOrchestrator(api_token="hf_...") as orchestrator:
        result = await orchestrator.generate_long_video(request)
        print(result.video_url, result.successful_clips)
"""

__version__ = "0.1.0"

# Data model
from .production.models import (
    SceneType,
    VideoStyle,
    QualityTier,
    StepStatus,
    Scene,
    GeneratedClip,
    ProcessingStep,
    LongVideoRequest,
    LongVideoResult,
    GenerationEstimate,
)
from .production.registry import ModelCapabilities, ModelRegistry, default_registry

# Core Utilities
from .core.config import Config, get_config
from .core.exceptions import (
    LongVideoError,
    ConfigurationError,
    ValidationError,
    ProviderError,
    GenerationError,
    GenerationCancelledError,
    AssemblyError,
)

# Pipeline
from .api import create_backends, list_backends
from .assembly import RenderOperation, RenderPlan
from .workflow import (
    LongVideoOrchestrator,
    CancellationToken,
    EventType,
    ProgressEvent,
)

__all__ = [
    # Version
    "__version__",

    # Data model
    "SceneType",
    "VideoStyle",
    "QualityTier",
    "StepStatus",
    "Scene",
    "GeneratedClip",
    "ProcessingStep",
    "LongVideoRequest",
    "LongVideoResult",
    "GenerationEstimate",
    "ModelCapabilities",
    "ModelRegistry",
    "default_registry",

    # Core
    "Config",
    "get_config",

    # Exceptions
    "LongVideoError",
    "ConfigurationError",
    "ValidationError",
    "ProviderError",
    "GenerationError",
    "GenerationCancelledError",
    "AssemblyError",

    # Pipeline
    "create_backends",
    "list_backends",
    "RenderOperation",
    "RenderPlan",
    "LongVideoOrchestrator",
    "CancellationToken",
    "EventType",
    "ProgressEvent",
]

"""
Production Models
=================

Data structures and static reference tables shared by the pipeline:

- Requests, scenes, clips, steps and results
- The model capability registry and scene-type routing table
- Prompt phrase tables and the scene-type keyword classifier
"""

from .models import (
    AUTO_MODEL,
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
from .registry import (
    ModelCapabilities,
    ModelRegistry,
    DEFAULT_MODELS,
    DEFAULT_SCENE_MODEL_MAP,
    default_registry,
    preferred_models,
)
from .prompts import detect_scene_type, build_scene_prompt

__all__ = [
    "AUTO_MODEL",
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
    "DEFAULT_MODELS",
    "DEFAULT_SCENE_MODEL_MAP",
    "default_registry",
    "preferred_models",
    "detect_scene_type",
    "build_scene_prompt",
]

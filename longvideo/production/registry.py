"""
Model Registry
==============

Static capability descriptors for every generative backend, and the ranked
scene-type to model routing table.

Both tables are read-only: the registry wraps its mapping in a
``MappingProxyType`` and every descriptor is a frozen dataclass, so a single
instance can be shared by concurrent jobs without locking. Tests build their
own registries instead of patching a global.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Tuple

from .models import SceneType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelCapabilities:
    """Static descriptor of one generative backend."""

    model: str
    name: str
    best_for: FrozenSet[SceneType]
    max_duration: float
    max_resolution: str
    quality_score: float
    speed_score: float
    endpoint: str
    requires_image: bool = False
    source_model: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "model": self.model,
            "name": self.name,
            "best_for": sorted(scene_type.value for scene_type in self.best_for),
            "max_duration": self.max_duration,
            "max_resolution": self.max_resolution,
            "quality_score": self.quality_score,
            "speed_score": self.speed_score,
            "endpoint": self.endpoint,
            "requires_image": self.requires_image,
            "source_model": self.source_model,
        }


class ModelRegistry:
    """Immutable lookup of model id -> ModelCapabilities."""

    def __init__(self, models: Iterable[ModelCapabilities]):
        table = {}
        for capabilities in models:
            if capabilities.model in table:
                raise ValueError(f"Duplicate model id in registry: {capabilities.model}")
            table[capabilities.model] = capabilities
        self._models: Mapping[str, ModelCapabilities] = MappingProxyType(table)

    def get(self, model: Optional[str]) -> Optional[ModelCapabilities]:
        if model is None:
            return None
        return self._models.get(model)

    def __getitem__(self, model: str) -> ModelCapabilities:
        return self._models[model]

    def __contains__(self, model: object) -> bool:
        return model in self._models

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    @property
    def models(self) -> Mapping[str, ModelCapabilities]:
        return self._models

    def capabilities(self, model: Optional[str] = None):
        """Return one descriptor, or the whole read-only table when no model is given."""
        if model is None:
            return self._models
        return self._models[model]


# =============================================================================
# Default Tables
# =============================================================================


DEFAULT_MODELS: Tuple[ModelCapabilities, ...] = (
    ModelCapabilities(
        model="open-sora",
        name="Open-Sora Plan 1.3",
        best_for=frozenset({
            SceneType.LANDSCAPE,
            SceneType.ESTABLISHING,
            SceneType.GENERIC_FOOTAGE,
            SceneType.TRANSITION,
        }),
        max_duration=16,
        max_resolution="768p",
        quality_score=85,
        speed_score=70,
        endpoint="https://hpcai-tech-open-sora.hf.space/api/predict",
        source_model="hpcai-tech/Open-Sora-Plan",
    ),
    ModelCapabilities(
        model="cogvideox",
        name="CogVideoX-5B",
        best_for=frozenset({SceneType.FACE_CLOSEUP, SceneType.PEOPLE, SceneType.DIALOGUE}),
        max_duration=10,
        max_resolution="768x1360",
        quality_score=88,
        speed_score=65,
        endpoint="https://api-inference.huggingface.co/models/THUDM/CogVideoX-5b",
        source_model="THUDM/CogVideoX-5b",
    ),
    ModelCapabilities(
        model="animatediff",
        name="AnimateDiff V3",
        best_for=frozenset({SceneType.ARTISTIC, SceneType.ANIMATION, SceneType.TEXT_OVERLAY}),
        max_duration=8,
        max_resolution="1024x1024",
        quality_score=90,
        speed_score=75,
        endpoint="https://api-inference.huggingface.co/models/guoyww/animatediff-motion-adapter-v1-5-3",
        requires_image=True,
        source_model="guoyww/animatediff-motion-adapter-v1-5-3",
    ),
    ModelCapabilities(
        model="stable-video",
        name="Stable Video Diffusion",
        best_for=frozenset({SceneType.PRODUCT, SceneType.OBJECT_CLOSEUP}),
        max_duration=4,
        max_resolution="1024x576",
        quality_score=82,
        speed_score=80,
        endpoint="https://api-inference.huggingface.co/models/stabilityai/stable-video-diffusion-img2vid-xt",
        requires_image=True,
        source_model="stabilityai/stable-video-diffusion-img2vid-xt",
    ),
    ModelCapabilities(
        model="zeroscope",
        name="ZeroScope V2 XL",
        best_for=frozenset({SceneType.ACTION, SceneType.FAST_MOTION}),
        max_duration=6,
        max_resolution="1024x576",
        quality_score=80,
        speed_score=85,
        endpoint="https://api-inference.huggingface.co/models/cerspense/zeroscope_v2_XL",
        source_model="cerspense/zeroscope_v2_XL",
    ),
)


DEFAULT_SCENE_MODEL_MAP: Mapping[SceneType, Tuple[str, ...]] = MappingProxyType({
    SceneType.LANDSCAPE: ("open-sora", "zeroscope"),
    SceneType.ESTABLISHING: ("open-sora", "cogvideox"),
    SceneType.FACE_CLOSEUP: ("cogvideox", "stable-video"),
    SceneType.PEOPLE: ("cogvideox", "zeroscope"),
    SceneType.DIALOGUE: ("cogvideox",),
    SceneType.ARTISTIC: ("animatediff", "stable-video"),
    SceneType.ANIMATION: ("animatediff",),
    SceneType.PRODUCT: ("stable-video", "cogvideox"),
    SceneType.OBJECT_CLOSEUP: ("stable-video", "open-sora"),
    SceneType.ACTION: ("zeroscope", "cogvideox"),
    SceneType.FAST_MOTION: ("zeroscope",),
    SceneType.TRANSITION: ("animatediff", "open-sora"),
    SceneType.GENERIC_FOOTAGE: ("open-sora", "stable-video"),
    SceneType.TEXT_OVERLAY: ("animatediff", "stable-video"),
})


def default_registry() -> ModelRegistry:
    """Build the registry of the five bundled backends."""
    return ModelRegistry(DEFAULT_MODELS)


def preferred_models(
    scene_type: SceneType,
    scene_model_map: Mapping[SceneType, Tuple[str, ...]],
    default_model: str,
) -> List[str]:
    """Ranked candidate models for a scene type (never empty)."""
    candidates = list(scene_model_map.get(scene_type, ()))
    return candidates or [default_model]

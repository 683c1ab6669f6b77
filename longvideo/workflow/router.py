"""
Model Router
============

Assigns each scene the generative model best suited to its content.

Scoring for every candidate of the scene's type::

    score = quality_score
          + best_for_bonus   (scene type listed in the model's best_for)
          + duration_bonus   (scene fits in the model's max_duration)
          + speed_weight * speed_score

The highest score wins; on a tie the earlier candidate in the ranked list
wins. Routing is pure: the same scenes always get the same models.
"""

import dataclasses
import logging
from typing import List, Mapping, Optional, Tuple

from ..core.config import RoutingConfig
from ..production.models import Scene, SceneType
from ..production.registry import (
    ModelCapabilities,
    ModelRegistry,
    DEFAULT_SCENE_MODEL_MAP,
    default_registry,
    preferred_models,
)

logger = logging.getLogger(__name__)


class ModelRouter:
    """Deterministic scene -> model assignment."""

    def __init__(
        self,
        registry: Optional[ModelRegistry] = None,
        scene_model_map: Optional[Mapping[SceneType, Tuple[str, ...]]] = None,
        config: Optional[RoutingConfig] = None,
    ):
        self.registry = registry or default_registry()
        self.scene_model_map = scene_model_map if scene_model_map is not None else DEFAULT_SCENE_MODEL_MAP
        self.config = config or RoutingConfig()

    def score(self, scene: Scene, capabilities: ModelCapabilities) -> float:
        """Routing score of one model for one scene."""
        score = capabilities.quality_score
        if scene.scene_type in capabilities.best_for:
            score += self.config.best_for_bonus
        if scene.duration <= capabilities.max_duration:
            score += self.config.duration_bonus
        score += capabilities.speed_score * self.config.speed_weight
        return score

    def candidates(self, scene_type: SceneType) -> List[str]:
        """Ranked candidate models for a scene type."""
        return preferred_models(scene_type, self.scene_model_map, self.config.default_model)

    def select_model(self, scene: Scene) -> str:
        """Pick the best model for an unpinned scene."""
        best_model = None
        best_score = float("-inf")
        for model in self.candidates(scene.scene_type):
            capabilities = self.registry.get(model)
            if capabilities is None:
                logger.warning(f"Routing table names unknown model '{model}', skipping")
                continue
            score = self.score(scene, capabilities)
            if score > best_score:
                best_model, best_score = model, score

        return best_model or self.config.default_model

    def route(self, scenes: List[Scene]) -> List[Scene]:
        """
        Assign models to scenes.

        Args:
            scenes: Planned scenes (not modified)

        Returns:
            New Scene objects with ``model`` set
        """
        routed = []
        for scene in scenes:
            if not scene.needs_routing:
                routed.append(scene)
                continue
            model = self.select_model(scene)
            logger.debug(f"Routed {scene.scene_id} ({scene.scene_type.value}) -> {model}")
            routed.append(dataclasses.replace(scene, model=model))
        return routed

"""
Regeneration Manager
====================

Re-generates flagged clips with an alternate model, bounded by a per-scene
retry cap. Regenerations run concurrently under a semaphore sized like a
scheduler batch.
"""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

from ..core.config import RegenerationConfig
from ..production.models import GeneratedClip, LongVideoRequest, Scene, SceneType
from ..production.registry import DEFAULT_SCENE_MODEL_MAP, preferred_models
from .events import CancellationToken
from .scheduler import ClipScheduler

logger = logging.getLogger(__name__)


@dataclass
class RegenerationReport:
    """What happened to each flagged scene."""

    regenerated: List[str] = field(default_factory=list)
    exhausted: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            "regenerated": list(self.regenerated),
            "exhausted": list(self.exhausted),
            "skipped": list(self.skipped),
        }


class RegenerationManager:
    """
    Retries flagged scenes on a different model.

    Usage:
        manager = RegenerationManager(scheduler)
        report = await manager.regenerate(flagged, scenes, clips, request)
    """

    def __init__(
        self,
        scheduler: ClipScheduler,
        scene_model_map: Optional[Mapping[SceneType, Tuple[str, ...]]] = None,
        config: Optional[RegenerationConfig] = None,
    ):
        self.scheduler = scheduler
        self.scene_model_map = scene_model_map if scene_model_map is not None else DEFAULT_SCENE_MODEL_MAP
        self.config = config or RegenerationConfig()

    def alternate_model(self, scene: Scene, current_model: Optional[str]) -> str:
        """First ranked model for the scene type that differs from the one just used."""
        candidates = preferred_models(
            scene.scene_type,
            self.scene_model_map,
            self.scheduler.default_model,
        )
        for model in candidates:
            if model != current_model:
                return model
        return current_model or candidates[0]

    async def regenerate(
        self,
        flagged_ids: List[str],
        scenes: List[Scene],
        clips: List[GeneratedClip],
        request: LongVideoRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RegenerationReport:
        """
        Regenerate flagged clips in place.

        ``clips`` and ``scenes`` are updated by scene id: a regenerated clip
        is replaced wholesale and its scene records the alternate model.

        Args:
            flagged_ids: Scene ids flagged by the continuity analyzer
            scenes: Scenes of the run
            clips: Clips of the run, same order as ``scenes``
            request: The originating request
            cancel_token: Run-level cancellation token

        Returns:
            RegenerationReport
        """
        report = RegenerationReport()
        clip_positions = {clip.scene_id: i for i, clip in enumerate(clips)}
        scene_positions = {scene.scene_id: i for i, scene in enumerate(scenes)}

        jobs = []
        for scene_id in dict.fromkeys(flagged_ids):
            if scene_id not in clip_positions or scene_id not in scene_positions:
                logger.warning(f"Flagged scene {scene_id} not found, skipping")
                report.skipped.append(scene_id)
                continue

            clip = clips[clip_positions[scene_id]]
            if clip.retry_count >= self.config.max_retries:
                logger.warning(
                    f"Max retries ({self.config.max_retries}) reached for {scene_id}, keeping last result"
                )
                report.exhausted.append(scene_id)
                continue

            jobs.append((scene_positions[scene_id], clip_positions[scene_id]))

        if not jobs:
            return report

        semaphore = asyncio.Semaphore(self.scheduler.config.batch_size)

        async def run(scene_position: int, clip_position: int) -> None:
            async with semaphore:
                try:
                    await self._regenerate_one(
                        scenes, clips, scene_position, clip_position, request, cancel_token,
                    )
                    report.regenerated.append(scenes[scene_position].scene_id)
                except Exception as e:
                    logger.error(f"Regeneration of {scenes[scene_position].scene_id} failed: {e}")

        logger.info(f"Regenerating {len(jobs)} clips")
        await asyncio.gather(*(run(s, c) for s, c in jobs))
        return report

    async def _regenerate_one(
        self,
        scenes: List[Scene],
        clips: List[GeneratedClip],
        scene_position: int,
        clip_position: int,
        request: LongVideoRequest,
        cancel_token: Optional[CancellationToken],
    ) -> None:
        scene = scenes[scene_position]
        previous = clips[clip_position]
        model = self.alternate_model(scene, previous.model)
        logger.info(f"Regenerating {scene.scene_id} with {model} (was {previous.model})")

        job_token = cancel_token.child(scene.scene_id) if cancel_token is not None else None
        try:
            clip = await self.scheduler.generate_clip(scene, request, model=model, cancel_token=job_token)
        finally:
            if cancel_token is not None:
                cancel_token.release(scene.scene_id)

        clip.retry_count = previous.retry_count + 1
        clips[clip_position] = clip
        scenes[scene_position] = dataclasses.replace(scene, model=model)

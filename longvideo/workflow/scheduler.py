"""
Clip Generation Scheduler
=========================

Generates one clip per scene in fixed-size concurrent batches.

- Jobs in a batch run concurrently; the batch ends when all of them finish
- A failing job becomes a failed clip and never affects its siblings
- A fixed delay separates batches to respect backend rate limits
- Output order always equals scene order
"""

import asyncio
import logging
import time
from typing import Callable, List, Mapping, Optional

from ..api.base import BaseVideoBackend, GenerationRequest
from ..core.config import SchedulerConfig
from ..core.exceptions import GenerationCancelledError, GenerationError
from ..production.models import GeneratedClip, LongVideoRequest, Scene, AUTO_MODEL
from ..production.registry import ModelRegistry, default_registry
from .events import CancellationToken

logger = logging.getLogger(__name__)


FAILED_RESOLUTION = "failed"

BatchStartedCallback = Callable[[int, int, List[str]], None]
ProgressCallback = Callable[[int, int], None]


class ClipScheduler:
    """
    Batch scheduler over a model-keyed table of backends.

    Usage:
        scheduler = ClipScheduler(backends, registry)
        clips = await scheduler.generate(scenes, request)
    """

    def __init__(
        self,
        backends: Mapping[str, BaseVideoBackend],
        registry: Optional[ModelRegistry] = None,
        config: Optional[SchedulerConfig] = None,
        default_model: str = "open-sora",
    ):
        self.backends = backends
        self.registry = registry or default_registry()
        self.config = config or SchedulerConfig()
        self.default_model = default_model

    def resolve_model(self, model: Optional[str]) -> str:
        """Map a requested model onto one that has a backend."""
        if model and model != AUTO_MODEL and model in self.backends:
            return model
        if model and model != AUTO_MODEL:
            logger.warning(f"No backend for model '{model}', falling back to {self.default_model}")
        return self.default_model

    async def generate(
        self,
        scenes: List[Scene],
        request: LongVideoRequest,
        cancel_token: Optional[CancellationToken] = None,
        on_batch_started: Optional[BatchStartedCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[GeneratedClip]:
        """
        Generate clips for all scenes.

        Args:
            scenes: Routed scenes
            request: The originating request
            cancel_token: Run-level cancellation token
            on_batch_started: Called with (batch_number, batch_count, scene_ids)
            on_progress: Called with (completed, total) after every batch

        Returns:
            One clip per scene, in scene order
        """
        batch_size = self.config.batch_size
        batches = [scenes[i:i + batch_size] for i in range(0, len(scenes), batch_size)]
        clips: List[GeneratedClip] = []

        for batch_number, batch in enumerate(batches, 1):
            if cancel_token is not None and cancel_token.cancelled:
                logger.warning(f"Run cancelled, skipping {len(scenes) - len(clips)} remaining scenes")
                error = GenerationCancelledError(cancel_token.reason or "Generation cancelled")
                for scene in scenes[len(clips):]:
                    clips.append(self._failed_clip(scene, self.resolve_model(scene.model), error))
                break

            logger.info(f"Generating batch {batch_number}/{len(batches)} ({len(batch)} clips)")
            if on_batch_started:
                on_batch_started(batch_number, len(batches), [scene.scene_id for scene in batch])

            outcomes = await asyncio.gather(
                *(self._run_job(scene, request, cancel_token) for scene in batch),
                return_exceptions=True,
            )

            for scene, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    outcome = self._failed_clip(scene, self.resolve_model(scene.model), outcome)
                clips.append(outcome)

            if on_progress:
                on_progress(len(clips), len(scenes))

            cancelled = cancel_token is not None and cancel_token.cancelled
            if batch_number < len(batches) and not cancelled:
                await asyncio.sleep(self.config.batch_delay)

        return clips

    async def generate_clip(
        self,
        scene: Scene,
        request: LongVideoRequest,
        model: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> GeneratedClip:
        """
        Generate a single clip. Never raises; failures become failed clips.

        Args:
            scene: Scene to generate
            request: The originating request
            model: Model override (defaults to the scene's model)
            cancel_token: Token for this job

        Returns:
            GeneratedClip with media on success, with ``error`` on failure
        """
        model = self.resolve_model(model or scene.model)
        backend = self.backends.get(model)
        start = time.monotonic()

        if backend is None:
            error = GenerationError(f"No backend available for model '{model}'", scene_id=scene.scene_id)
            return self._failed_clip(scene, model, error)

        generation_request = GenerationRequest(
            prompt=scene.prompt,
            duration=scene.duration,
            resolution=request.target_quality.value,
            aspect_ratio=request.aspect_ratio,
        )

        try:
            handle = await backend.generate(generation_request, cancel_token=cancel_token)
        except Exception as e:
            return self._failed_clip(scene, model, e, elapsed=time.monotonic() - start)

        capabilities = self.registry.get(model)
        elapsed = time.monotonic() - start
        logger.info(f"Generated {scene.scene_id} with {model} in {elapsed:.1f}s")

        return GeneratedClip(
            scene_id=scene.scene_id,
            scene_index=scene.index,
            model=model,
            duration=scene.duration,
            resolution=capabilities.max_resolution if capabilities else request.target_quality.value,
            quality=capabilities.quality_score if capabilities else 0,
            video_url=handle.url,
            video_base64=handle.payload,
            generation_time=elapsed,
            retry_count=0,
        )

    async def _run_job(
        self,
        scene: Scene,
        request: LongVideoRequest,
        cancel_token: Optional[CancellationToken],
    ) -> GeneratedClip:
        if cancel_token is None:
            return await self.generate_clip(scene, request)

        job_token = cancel_token.child(scene.scene_id)
        try:
            return await self.generate_clip(scene, request, cancel_token=job_token)
        finally:
            cancel_token.release(scene.scene_id)

    @staticmethod
    def _failed_clip(
        scene: Scene,
        model: str,
        error: BaseException,
        elapsed: float = 0.0,
    ) -> GeneratedClip:
        message = f"Failed to generate clip for scene {scene.scene_id}: {error}"
        logger.error(message)
        return GeneratedClip(
            scene_id=scene.scene_id,
            scene_index=scene.index,
            model=model,
            duration=scene.duration,
            resolution=FAILED_RESOLUTION,
            quality=0,
            generation_time=elapsed,
            error=message,
        )

"""
Long Video Orchestrator
=======================

Main orchestration class: turns one LongVideoRequest into one
LongVideoResult.

Pipeline:
    plan -> route -> generate -> analyze -> regenerate (if flagged)
         -> stitch -> upscale (1080p/4k) -> enhance -> summarize

Every run keeps its own state (steps, clips, plans, cancellation token), so
one orchestrator can serve concurrent runs. A run never raises to the
caller: any failure produces a failed result carrying the partial history.
"""

import logging
import math
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Mapping, Set, Tuple

from ..api.base import BaseVideoBackend
from ..api.factory import create_backends
from ..assembly import RenderEngine, RenderPlan, Stitcher, Upscaler, Enhancer
from ..core.config import Config, get_config
from ..production.models import (
    GeneratedClip,
    GenerationEstimate,
    LongVideoRequest,
    LongVideoResult,
    ProcessingStep,
    QualityTier,
    Scene,
    SceneType,
    StepStatus,
)
from ..production.registry import ModelRegistry, DEFAULT_SCENE_MODEL_MAP, default_registry
from ..utils.storage import save_inline_clip
from .continuity import ContinuityAnalyzer
from .events import CancellationToken, EventDispatcher, EventListener, EventType
from .planner import ScenePlanner
from .regeneration import RegenerationManager
from .router import ModelRouter
from .scheduler import ClipScheduler

logger = logging.getLogger(__name__)


UPSCALED_TIERS = (QualityTier.FULL_HD, QualityTier.UHD)


@dataclass(eq=False)
class RunState:
    """Mutable state of a single run."""

    request: LongVideoRequest
    token: CancellationToken
    started: float = field(default_factory=time.monotonic)
    steps: List[ProcessingStep] = field(default_factory=list)
    scenes: List[Scene] = field(default_factory=list)
    clips: List[GeneratedClip] = field(default_factory=list)
    plans: List[RenderPlan] = field(default_factory=list)
    exhausted: List[str] = field(default_factory=list)
    cancelled_scene_ids: Set[str] = field(default_factory=set)
    current_step: Optional[str] = None
    achieved_duration: float = 0.0
    run_id: str = field(default_factory=lambda: f"run_{uuid.uuid4().hex[:12]}")


class LongVideoOrchestrator:
    """
    Orchestrates long-form video generation across multiple backends.

    Handles:
    - Scene planning and model routing
    - Batched, cancellable clip generation
    - Continuity scoring and regeneration
    - Stitch, upscale and enhance render plans
    - Progress events for registered listeners

    Usage:
        async with LongVideoOrchestrator(api_token="hf_...") as orchestrator:
            result = await orchestrator.generate_long_video(request)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        api_token: Optional[str] = None,
        registry: Optional[ModelRegistry] = None,
        scene_model_map: Optional[Mapping[SceneType, Tuple[str, ...]]] = None,
        backends: Optional[Mapping[str, BaseVideoBackend]] = None,
        render_engine: Optional[RenderEngine] = None,
        listeners: Optional[List[EventListener]] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Pipeline configuration (global config if omitted)
            api_token: Bearer credential for the bundled backends
            registry: Model capability registry
            scene_model_map: Ranked scene-type -> models table
            backends: Model-keyed backends (built from the registry if omitted)
            render_engine: Optional executor for render plans
            listeners: Progress event listeners
        """
        self.config = config or get_config()
        self.registry = registry or default_registry()
        self.scene_model_map = scene_model_map if scene_model_map is not None else DEFAULT_SCENE_MODEL_MAP
        self.render_engine = render_engine

        self._owns_backends = backends is None
        if backends is None:
            backends = create_backends(
                self.registry,
                api_token=api_token,
                config=self.config.backends,
                timeout=self.config.scheduler.request_timeout,
            )
        self.backends = backends

        self.planner = ScenePlanner(self.config.planner)
        self.router = ModelRouter(self.registry, self.scene_model_map, self.config.routing)
        self.scheduler = ClipScheduler(
            self.backends,
            self.registry,
            self.config.scheduler,
            default_model=self.config.routing.default_model,
        )
        self.analyzer = ContinuityAnalyzer(self.config.continuity)
        self.regenerator = RegenerationManager(self.scheduler, self.scene_model_map, self.config.regeneration)
        self.stitcher = Stitcher(self.config.assembly)
        self.upscaler = Upscaler(self.config.assembly)
        self.enhancer = Enhancer(self.config.assembly)

        self.events = EventDispatcher(listeners)
        self._active_runs: List[RunState] = []

        logger.info(f"LongVideoOrchestrator initialized with {len(self.backends)} backends")

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: EventListener) -> None:
        self.events.add_listener(listener)

    def remove_listener(self, listener: EventListener) -> None:
        self.events.remove_listener(listener)

    # -------------------------------------------------------------------------
    # Main Entry Point
    # -------------------------------------------------------------------------

    async def generate_long_video(
        self,
        request: LongVideoRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> LongVideoResult:
        """
        Run the full pipeline for one request.

        Args:
            request: Validated request
            cancel_token: Optional externally owned cancellation token

        Returns:
            LongVideoResult (``success=False`` with partial history on failure)
        """
        run = RunState(request=request, token=cancel_token or CancellationToken())
        if run.token.name:
            run.run_id = run.token.name
        else:
            run.token.name = run.run_id
        self._active_runs.append(run)

        logger.info(f"Starting long video: {request.title} ({request.total_duration}s)")
        self.events.emit(EventType.ORCHESTRATION_STARTED, run=run.run_id, request=request.to_dict())

        try:
            result = await self._execute(run)
        except Exception as e:
            result = self._fail(run, e)
        finally:
            self._active_runs.remove(run)

        return result

    async def _execute(self, run: RunState) -> LongVideoResult:
        request = run.request

        # Step 1: Scene planning
        self._update_step(run, "script_analysis", StepStatus.IN_PROGRESS, 0, "Planning scenes...")
        run.scenes = self.planner.plan(request)
        self._update_step(
            run, "script_analysis", StepStatus.COMPLETED, 100, f"Planned {len(run.scenes)} scenes"
        )

        # Step 2: Model routing
        self._update_step(run, "model_routing", StepStatus.IN_PROGRESS, 0, "Selecting models...")
        run.scenes = self.router.route(run.scenes)
        self._update_step(
            run, "model_routing", StepStatus.COMPLETED, 100, self._describe_routing(run.scenes)
        )

        # Step 3: Clip generation
        run.token.raise_if_cancelled()
        self._update_step(
            run, "clip_generation", StepStatus.IN_PROGRESS, 0, f"Generating {len(run.scenes)} clips..."
        )
        run.clips = await self.scheduler.generate(
            run.scenes,
            request,
            cancel_token=run.token,
            on_batch_started=lambda number, count, scene_ids: self.events.emit(
                EventType.BATCH_STARTED,
                run=run.run_id,
                batch=number,
                batch_count=count,
                scene_ids=scene_ids,
            ),
            on_progress=lambda completed, total: self._update_step(
                run,
                "clip_generation",
                StepStatus.IN_PROGRESS,
                int(completed / total * 100),
                f"Generated {completed}/{total} clips",
            ),
        )
        run.token.raise_if_cancelled()
        successful = sum(1 for clip in run.clips if clip.has_media)
        self._update_step(
            run,
            "clip_generation",
            StepStatus.COMPLETED,
            100,
            f"Generated {successful}/{len(run.clips)} clips",
        )

        # Step 4: Continuity analysis
        self._update_step(run, "continuity_analysis", StepStatus.IN_PROGRESS, 0, "Scoring clips...")
        report = self.analyzer.analyze(run.clips)
        self._update_step(
            run,
            "continuity_analysis",
            StepStatus.COMPLETED,
            100,
            f"Average score {report.average_score:.1f}, {len(report.flagged_scene_ids)} flagged",
        )

        # Step 5: Regeneration
        flagged = self._regeneration_candidates(run, report.flagged_scene_ids)
        if flagged:
            await self._regenerate(run, flagged)
        run.token.raise_if_cancelled()

        # Step 6: Stitching
        self._update_step(run, "stitching", StepStatus.IN_PROGRESS, 0, "Stitching clips with crossfades...")
        stitch_plan = self.stitcher.stitch(run.clips, request, run_id=run.run_id)
        run.achieved_duration = stitch_plan.parameters["duration"]
        media = await self._render(run, stitch_plan)
        self._update_step(run, "stitching", StepStatus.COMPLETED, 100, f"Stitched video: {media}")

        # Step 7: Upscaling
        if request.target_quality in UPSCALED_TIERS:
            self._update_step(
                run, "upscaling", StepStatus.IN_PROGRESS, 0, f"Upscaling to {request.target_quality.value}..."
            )
            media = await self._render(run, self.upscaler.upscale(media, request.target_quality))
            self._update_step(run, "upscaling", StepStatus.COMPLETED, 100, f"Upscaled video: {media}")

        # Step 8: Enhancement
        self._update_step(run, "enhancement", StepStatus.IN_PROGRESS, 0, "Applying final enhancement...")
        media = await self._render(run, self.enhancer.enhance(media, request))
        self._update_step(run, "enhancement", StepStatus.COMPLETED, 100, f"Enhanced video: {media}")

        result = self._build_result(run, success=True, video_url=media)
        logger.info(
            f"Long video complete: {result.successful_clips}/{result.total_clips} clips, "
            f"{result.total_duration:g}s in {result.generation_time:.1f}s"
        )
        self.events.emit(EventType.ORCHESTRATION_COMPLETED, run=run.run_id, result=result.to_dict())
        return result

    async def _regenerate(self, run: RunState, flagged: List[str]) -> None:
        max_passes = self.config.regeneration.max_passes
        passes = 0

        while flagged and passes < max_passes:
            passes += 1
            self._update_step(
                run,
                "regeneration",
                StepStatus.IN_PROGRESS,
                int((passes - 1) / max_passes * 100),
                f"Regenerating {len(flagged)} clips (pass {passes}/{max_passes})...",
            )
            outcome = await self.regenerator.regenerate(
                flagged, run.scenes, run.clips, run.request, cancel_token=run.token
            )
            for scene_id in outcome.exhausted:
                if scene_id not in run.exhausted:
                    run.exhausted.append(scene_id)

            run.token.raise_if_cancelled()
            flagged = self._regeneration_candidates(run, self.analyzer.analyze(run.clips).flagged_scene_ids)

        for clip in run.clips:
            capped = clip.retry_count >= self.config.regeneration.max_retries
            if capped and not clip.has_media and clip.scene_id not in run.exhausted:
                run.exhausted.append(clip.scene_id)

        if passes:
            self._update_step(
                run,
                "regeneration",
                StepStatus.COMPLETED,
                100,
                f"{len(flagged)} clips still below threshold after {passes} pass(es)",
            )

    @staticmethod
    def _regeneration_candidates(run: RunState, flagged: List[str]) -> List[str]:
        """Flagged scenes, minus the ones the caller cancelled."""
        return [scene_id for scene_id in flagged if scene_id not in run.cancelled_scene_ids]

    async def _render(self, run: RunState, plan: RenderPlan) -> str:
        """Record a plan and hand it to the render engine, if any."""
        run.plans.append(plan)
        self.events.emit(EventType.RENDER_PLAN_READY, run=run.run_id, stage=plan.stage, plan=plan.to_dict())

        if self.render_engine is None or plan.is_passthrough:
            return plan.output

        for path, scene_id in plan.parameters.get("inline_inputs", {}).items():
            clip = next(clip for clip in run.clips if clip.scene_id == scene_id)
            save_inline_clip(clip.video_base64, path)

        return await self.render_engine.render(plan)

    # -------------------------------------------------------------------------
    # Steps & Results
    # -------------------------------------------------------------------------

    def _update_step(
        self,
        run: RunState,
        step: str,
        status: StepStatus,
        progress: int,
        details: Optional[str] = None,
    ) -> None:
        updated = ProcessingStep(step=step, status=status, progress=progress, details=details)
        for i, existing in enumerate(run.steps):
            if existing.step == step:
                run.steps[i] = updated
                break
        else:
            run.steps.append(updated)

        if status == StepStatus.IN_PROGRESS:
            run.current_step = step
        elif run.current_step == step:
            run.current_step = None

        self.events.emit(EventType.STEP_UPDATED, run=run.run_id, **updated.to_dict())

    @staticmethod
    def _describe_routing(scenes: List[Scene]) -> str:
        counts: Dict[str, int] = {}
        for scene in scenes:
            counts[scene.model] = counts.get(scene.model, 0) + 1
        return "Routed to " + ", ".join(f"{model} x{count}" for model, count in counts.items())

    def _build_result(
        self,
        run: RunState,
        success: bool,
        video_url: Optional[str] = None,
        error: Optional[str] = None,
    ) -> LongVideoResult:
        successful = [clip for clip in run.clips if clip.has_media]
        average_quality = (
            sum(clip.quality for clip in successful) / len(successful) if successful else 0.0
        )
        return LongVideoResult(
            success=success,
            video_url=video_url,
            total_duration=run.achieved_duration,
            resolution=run.request.target_quality.value,
            total_clips=len(run.clips),
            successful_clips=len(successful),
            failed_clips=len(run.clips) - len(successful),
            average_quality=average_quality,
            generation_time=time.monotonic() - run.started,
            processing_steps=list(run.steps),
            clips=list(run.clips),
            error=error,
            render_plans=list(run.plans),
            exhausted_scene_ids=list(run.exhausted),
        )

    def _fail(self, run: RunState, error: Exception) -> LongVideoResult:
        message = str(error) or error.__class__.__name__
        logger.error(f"Long video generation failed: {message}")

        if run.current_step:
            current = next(step for step in run.steps if step.step == run.current_step)
            self._update_step(run, current.step, StepStatus.FAILED, current.progress, message)

        result = self._build_result(run, success=False, error=message)
        self.events.emit(EventType.ORCHESTRATION_FAILED, run=run.run_id, error=message, result=result.to_dict())
        return result

    # -------------------------------------------------------------------------
    # Control & Introspection
    # -------------------------------------------------------------------------

    def cancel(self, scene_id: Optional[str] = None) -> bool:
        """
        Cancel every active run, or a single in-flight job.

        Args:
            scene_id: Scene whose job should be aborted (all runs if omitted)

        Returns:
            True if anything was cancelled
        """
        if scene_id is None:
            cancelled = bool(self._active_runs)
            for run in list(self._active_runs):
                run.token.cancel()
        else:
            cancelled = False
            for run in list(self._active_runs):
                if run.token.cancel_child(scene_id):
                    run.cancelled_scene_ids.add(scene_id)
                    cancelled = True

        if cancelled:
            self.events.emit(EventType.GENERATION_CANCELLED, scene_id=scene_id)
        return cancelled

    def estimate_generation_time(self, request: LongVideoRequest) -> GenerationEstimate:
        """
        Rough wall-clock estimate for a request.

        Args:
            request: Request to estimate

        Returns:
            GenerationEstimate with a per-stage breakdown in minutes
        """
        clip_count = len(request.scenes) if request.scenes else self.planner.clip_count(request)
        batch_count = math.ceil(clip_count / self.config.scheduler.batch_size)

        if request.target_quality == QualityTier.UHD:
            upscaling = 10.0
        elif request.target_quality == QualityTier.FULL_HD:
            upscaling = 5.0
        else:
            upscaling = 0.0

        return GenerationEstimate(
            clip_count=clip_count,
            batch_count=batch_count,
            breakdown={
                "script_analysis": 0.5,
                "clip_generation": batch_count * 3.0,
                "continuity_check": 0.5,
                "stitching": 2.0,
                "upscaling": upscaling,
                "enhancement": 3.0,
            },
        )

    def get_model_capabilities(self, model: Optional[str] = None):
        """Capabilities of one model, or the whole read-only table."""
        return self.registry.capabilities(model)

    @property
    def active_runs(self) -> int:
        return len(self._active_runs)

    async def close(self) -> None:
        """Close the HTTP clients of backends this orchestrator created."""
        if not self._owns_backends:
            return
        seed_providers = []
        for backend in self.backends.values():
            await backend.close()
            seed_images = getattr(backend, "seed_images", None)
            if seed_images is not None and seed_images not in seed_providers:
                seed_providers.append(seed_images)
        for provider in seed_providers:
            await provider.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

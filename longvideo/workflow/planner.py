"""
Scene Planner
=============

Turns a LongVideoRequest into an ordered list of Scenes.

Three sources, in priority order:
1. An explicit scene list on the request (used verbatim)
2. A script, split into sentence groups
3. The description, spread over a five-phase narrative arc
"""

import logging
import math
import re
from typing import List, Dict

from ..core.config import PlannerConfig
from ..production.models import LongVideoRequest, Scene, SceneType
from ..production.prompts import detect_scene_type, build_scene_prompt

logger = logging.getLogger(__name__)


SENTENCE_SPLIT = re.compile(r"[.!?]+")

# Used when a script yields no sentences at all
PLACEHOLDER_SEGMENT = "continuation of scene"


class ScenePlanner:
    """
    Decomposes a request into short, individually generatable scenes.

    Usage:
        planner = ScenePlanner()
        scenes = planner.plan(request)
    """

    def __init__(self, config: PlannerConfig = None):
        self.config = config or PlannerConfig()

    def clip_count(self, request: LongVideoRequest) -> int:
        """Number of scenes needed to cover the requested duration."""
        return max(1, math.ceil(request.total_duration / self.config.clip_duration))

    def plan(self, request: LongVideoRequest) -> List[Scene]:
        """
        Plan the scenes for a request.

        Args:
            request: Validated request

        Returns:
            Ordered scenes, indices 0..n-1
        """
        if request.scenes:
            logger.info(f"Using {len(request.scenes)} explicit scenes")
            return list(request.scenes)

        count = self.clip_count(request)
        if request.script:
            scenes = self._plan_from_script(request, count)
        else:
            scenes = self._plan_from_arc(request, count)

        logger.info(f"Planned {len(scenes)} scenes for {request.total_duration}s video")
        return scenes

    # -------------------------------------------------------------------------
    # Script segmentation
    # -------------------------------------------------------------------------

    def segment_script(self, script: str, count: int) -> List[str]:
        """Split a script into exactly ``count`` contiguous sentence groups."""
        sentences = [s.strip() for s in SENTENCE_SPLIT.split(script) if s.strip()]

        segments = []
        if sentences:
            group_size = math.ceil(len(sentences) / count)
            for start in range(0, len(sentences), group_size):
                segment = ". ".join(sentences[start:start + group_size]).strip()
                if segment:
                    segments.append(segment)

        while len(segments) < count:
            segments.append(segments[-1] if segments else PLACEHOLDER_SEGMENT)

        return segments[:count]

    def _plan_from_script(self, request: LongVideoRequest, count: int) -> List[Scene]:
        segments = self.segment_script(request.script, count)
        scenes = []
        for index, segment in enumerate(segments):
            scene_type = detect_scene_type(segment)
            scenes.append(self._make_scene(
                request,
                index=index,
                total=count,
                scene_type=scene_type,
                description=segment,
                prompt_base=segment,
            ))
        return scenes

    # -------------------------------------------------------------------------
    # Narrative arc
    # -------------------------------------------------------------------------

    def phase_counts(self, count: int) -> Dict[str, int]:
        """
        Apportion ``count`` scenes across the arc phases.

        Largest-remainder method: every phase gets the floor of its quota and
        the leftover scenes go to the largest fractional parts (earlier phase
        on ties), so the counts always sum to ``count``.
        """
        distribution = self.config.phase_distribution
        total_share = sum(distribution.values())

        quotas = {phase: count * share / total_share for phase, share in distribution.items()}
        counts = {phase: math.floor(quota) for phase, quota in quotas.items()}

        leftover = count - sum(counts.values())
        by_remainder = sorted(
            distribution,
            key=lambda phase: quotas[phase] - counts[phase],
            reverse=True,
        )
        for phase in by_remainder[:leftover]:
            counts[phase] += 1

        return counts

    @staticmethod
    def scene_type_for_phase(phase: str, index: int, phase_total: int) -> SceneType:
        """Scene type for the ``index``-th scene of a narrative phase."""
        if phase == "opening":
            return SceneType.ESTABLISHING if index == 0 else SceneType.LANDSCAPE
        if phase == "development":
            return (SceneType.PEOPLE, SceneType.DIALOGUE, SceneType.GENERIC_FOOTAGE)[index % 3]
        if phase == "climax":
            return (SceneType.ACTION, SceneType.FACE_CLOSEUP, SceneType.FAST_MOTION)[index % 3]
        if phase == "resolution":
            return (SceneType.PEOPLE, SceneType.DIALOGUE)[index % 2]
        if phase == "closing":
            return SceneType.LANDSCAPE if index == phase_total - 1 else SceneType.GENERIC_FOOTAGE
        return SceneType.GENERIC_FOOTAGE

    def _plan_from_arc(self, request: LongVideoRequest, count: int) -> List[Scene]:
        subject = (request.description or request.title).strip()
        scenes = []
        index = 0
        for phase, phase_total in self.phase_counts(count).items():
            for i in range(phase_total):
                part = i + 1
                scenes.append(self._make_scene(
                    request,
                    index=index,
                    total=count,
                    scene_type=self.scene_type_for_phase(phase, i, phase_total),
                    description=f"{phase}: {subject} - Part {part}",
                    prompt_base=f"{subject}, {phase} phase, segment {part}",
                ))
                index += 1
        return scenes

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _make_scene(
        self,
        request: LongVideoRequest,
        index: int,
        total: int,
        scene_type: SceneType,
        description: str,
        prompt_base: str,
    ) -> Scene:
        return Scene(
            scene_id=f"scene_{index}",
            index=index,
            scene_type=scene_type,
            description=description,
            prompt=build_scene_prompt(prompt_base, request.style, scene_type),
            duration=self.config.clip_duration,
            style=request.style_key,
            transition_in="fade_in" if index == 0 else "crossfade",
            transition_out="fade_out" if index == total - 1 else "crossfade",
        )

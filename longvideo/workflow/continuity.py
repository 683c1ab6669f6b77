"""
Continuity Analyzer
===================

Heuristic per-clip continuity scoring. A clip without media scores 0; a
clip with media scores its model quality, plus a bonus when the previous
clip was produced by the same model. Clips below the threshold are flagged
for regeneration.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.config import ContinuityConfig
from ..production.models import GeneratedClip

logger = logging.getLogger(__name__)


@dataclass
class ContinuityReport:
    """Scores and flags for one analysis pass."""

    average_score: float = 0.0
    flagged_scene_ids: List[str] = field(default_factory=list)
    scores: Dict[str, float] = field(default_factory=dict)

    @property
    def needs_regeneration(self) -> bool:
        return bool(self.flagged_scene_ids)


class ContinuityAnalyzer:
    """Scores clips and flags the ones that need regeneration."""

    def __init__(self, config: Optional[ContinuityConfig] = None):
        self.config = config or ContinuityConfig()

    def score_clip(self, clip: GeneratedClip, previous: Optional[GeneratedClip]) -> float:
        if not clip.has_media:
            return 0.0
        score = float(clip.quality)
        if previous is not None and previous.model == clip.model:
            score += self.config.same_model_bonus
        return score

    def analyze(self, clips: List[GeneratedClip]) -> ContinuityReport:
        """
        Score every clip and write the score to ``clip.continuity_score``.

        Args:
            clips: Clips in scene order (may be empty)

        Returns:
            ContinuityReport
        """
        report = ContinuityReport()
        media_scores = []

        previous = None
        for clip in clips:
            score = self.score_clip(clip, previous)
            clip.continuity_score = score
            report.scores[clip.scene_id] = score

            if clip.has_media:
                media_scores.append(score)
            if score < self.config.threshold:
                report.flagged_scene_ids.append(clip.scene_id)
            previous = clip

        if media_scores:
            report.average_score = sum(media_scores) / len(media_scores)

        logger.info(
            f"Continuity: average {report.average_score:.1f}, "
            f"{len(report.flagged_scene_ids)} of {len(clips)} clips flagged"
        )
        return report

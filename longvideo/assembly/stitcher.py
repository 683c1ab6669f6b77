"""
Stitcher
========

Plans the concatenation of generated clips into a single video, with a
crossfade between every adjacent pair and a global color correction.

For clips of durations d0..dn and crossfade c, the crossfade between clip i
and clip i+1 starts at::

    offset_i = (d0 + ... + di) - (i + 1) * c

and the stitched video lasts ``sum(d) - (n - 1) * c``. The crossfade is
clamped to the shortest clip so that offsets never decrease.

Inline payloads are planned under a per-run work directory,
``output_dir/<run_id>/clip_NNN.mp4``.
"""

import logging
import uuid
from pathlib import Path
from typing import List, Optional

from ..core.config import AssemblyConfig
from ..core.exceptions import AssemblyError
from ..core.security import sanitize_filename
from ..production.models import GeneratedClip, LongVideoRequest
from ..utils.storage import generate_filename
from .render_plan import FFMPEG, RenderOperation, RenderPlan

logger = logging.getLogger(__name__)


class Stitcher:
    """Builds the stitching render plan."""

    STAGE = "stitching"

    def __init__(self, config: Optional[AssemblyConfig] = None):
        self.config = config or AssemblyConfig()

    def clip_input(self, clip: GeneratedClip, run_id: Optional[str] = None) -> str:
        """Input locator for a clip: its URL, or a work-dir path for inline payloads."""
        if clip.video_url:
            return clip.video_url
        work_dir = Path(self.config.output_dir)
        if run_id:
            work_dir = work_dir / sanitize_filename(run_id)
        return str(work_dir / f"clip_{clip.scene_index:03d}.mp4")

    def effective_crossfade(self, durations: List[float]) -> float:
        """Configured crossfade, clamped to the shortest clip."""
        crossfade = self.config.crossfade_duration
        if len(durations) > 1 and crossfade > min(durations):
            return min(durations)
        return crossfade

    def crossfade_offsets(self, durations: List[float]) -> List[float]:
        """Start time of each crossfade on the output timeline."""
        crossfade = self.effective_crossfade(durations)
        offsets = []
        elapsed = 0.0
        for i, duration in enumerate(durations[:-1]):
            elapsed += duration
            offsets.append(round(elapsed - (i + 1) * crossfade, 3))
        return offsets

    def build_filter_complex(self, durations: List[float]) -> Optional[str]:
        """Chain an xfade per adjacent pair, then color-correct the result."""
        crossfade = self.effective_crossfade(durations)
        color = self.config.color_correction
        count = len(durations)

        if count == 1:
            return f"[0:v]{color}[vout]" if color else None

        filters = []
        last_label = "[0:v]"
        for i, offset in enumerate(self.crossfade_offsets(durations)):
            is_last = i == count - 2
            out_label = "[vout]" if is_last and not color else f"[v{i + 1}]"
            filters.append(
                f"{last_label}[{i + 1}:v]xfade=transition=fade:"
                f"duration={crossfade:g}:offset={offset:g}{out_label}"
            )
            last_label = out_label

        if color:
            filters.append(f"{last_label}{color}[vout]")
        return ";".join(filters)

    def stitch(
        self,
        clips: List[GeneratedClip],
        request: LongVideoRequest,
        run_id: Optional[str] = None,
    ) -> RenderPlan:
        """
        Plan the stitch of all clips that carry media.

        Args:
            clips: Clips in scene order (failed clips are left out)
            request: The originating request
            run_id: Names the work directory for inline payloads (random if omitted)

        Returns:
            RenderPlan for the stitching stage

        Raises:
            AssemblyError: If no clip carries media
        """
        valid = [clip for clip in clips if clip.has_media]
        if not valid:
            raise AssemblyError("No valid clips to stitch", stage=self.STAGE)

        skipped = [clip.scene_id for clip in clips if not clip.has_media]
        if skipped:
            logger.warning(f"Stitching without {len(skipped)} failed clips: {', '.join(skipped)}")

        run_id = run_id or f"run_{uuid.uuid4().hex[:12]}"
        inputs = [self.clip_input(clip, run_id) for clip in valid]
        inline_inputs = {
            self.clip_input(clip, run_id): clip.scene_id for clip in valid if not clip.video_url
        }
        durations = [clip.duration for clip in valid]
        crossfade = self.effective_crossfade(durations)
        if crossfade != self.config.crossfade_duration:
            logger.warning(
                f"Crossfade {self.config.crossfade_duration:g}s is longer than the shortest clip, "
                f"clamping to {crossfade:g}s"
            )
        total_duration = sum(durations) - (len(valid) - 1) * crossfade

        filter_complex = self.build_filter_complex(durations)
        arguments = ["-map", "[vout]"] if filter_complex else []
        arguments += [
            "-c:v", self.config.stitch_codec,
            "-preset", self.config.stitch_preset,
            "-crf", str(self.config.stitch_crf),
        ]

        output = str(
            Path(self.config.output_dir)
            / generate_filename(prefix=sanitize_filename(f"{request.title}_{run_id}"), suffix=".mp4")
        )

        operation = RenderOperation(
            tool=FFMPEG,
            inputs=inputs,
            output=output,
            filter_complex=filter_complex,
            arguments=arguments,
            parameters={"crossfade_count": len(valid) - 1},
        )

        logger.info(f"Planned stitch of {len(valid)} clips ({total_duration:g}s) -> {output}")
        return RenderPlan(
            stage=self.STAGE,
            operations=[operation],
            parameters={
                "clip_count": len(valid),
                "crossfade_duration": crossfade,
                "crossfade_offsets": self.crossfade_offsets(durations),
                "duration": total_duration,
                "concat_list": "\n".join(f"file '{source}'" for source in inputs),
                "inline_inputs": inline_inputs,
                "skipped_scene_ids": skipped,
            },
        )

"""
Enhancer
========

Plans the final style-dependent color grade, followed by a universal
denoise and sharpen pass.
"""

import logging
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from ..core.config import AssemblyConfig
from ..production.models import LongVideoRequest, VideoStyle
from ..utils.storage import derive_path
from .render_plan import FFMPEG, RenderOperation, RenderPlan

logger = logging.getLogger(__name__)


STYLE_FILTERS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    VideoStyle.CINEMATIC.value: (
        "curves=preset=cross_process",
        "eq=contrast=1.1:brightness=-0.02:saturation=0.95",
        "noise=alls=5:allf=t",
    ),
    VideoStyle.DOCUMENTARY.value: (
        "eq=contrast=1.05:saturation=0.9",
        "unsharp=5:5:0.8",
    ),
    VideoStyle.PROMOTIONAL.value: (
        "eq=contrast=1.15:saturation=1.2:brightness=0.02",
        "vibrance=intensity=0.2",
    ),
    VideoStyle.ARTISTIC.value: (
        "curves=preset=vintage",
        "vignette=PI/4",
    ),
})

NEUTRAL_FILTERS: Tuple[str, ...] = ("eq=contrast=1.05:saturation=1.05",)

# Applied after every style chain
UNIVERSAL_FILTERS: Tuple[str, ...] = ("hqdn3d=2:1:2:3", "unsharp=3:3:0.5")


class Enhancer:
    """Builds the enhancement render plan."""

    STAGE = "enhancement"

    def __init__(self, config: Optional[AssemblyConfig] = None):
        self.config = config or AssemblyConfig()

    @staticmethod
    def filter_chain(style: str) -> List[str]:
        return list(STYLE_FILTERS.get(style, NEUTRAL_FILTERS)) + list(UNIVERSAL_FILTERS)

    def enhance(self, media: str, request: LongVideoRequest) -> RenderPlan:
        """Plan the enhancement of ``media`` in the request's style."""
        filters = self.filter_chain(request.style_key)
        output = derive_path(media, "enhanced")

        operation = RenderOperation(
            tool=FFMPEG,
            inputs=[media],
            output=output,
            filters=filters,
            arguments=[
                "-c:v", self.config.stitch_codec,
                "-preset", self.config.enhance_preset,
                "-crf", str(self.config.enhance_crf),
            ],
        )

        logger.info(f"Planned {request.style_key or 'neutral'} enhancement -> {output}")
        return RenderPlan(
            stage=self.STAGE,
            operations=[operation],
            parameters={"style": request.style_key, "filters": filters},
            source=media,
        )

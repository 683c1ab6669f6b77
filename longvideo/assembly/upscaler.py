"""
Upscaler
========

Plans super-resolution followed by frame interpolation for the 1080p and
4k tiers. The 720p tier is a pass-through.
"""

import logging
from typing import Optional, Union

from ..core.config import AssemblyConfig
from ..production.models import QualityTier
from ..utils.storage import derive_path
from .render_plan import RenderOperation, RenderPlan

logger = logging.getLogger(__name__)


class Upscaler:
    """Builds the upscaling render plan."""

    STAGE = "upscaling"

    def __init__(self, config: Optional[AssemblyConfig] = None):
        self.config = config or AssemblyConfig()

    def scale_factor(self, quality: Union[QualityTier, str]) -> float:
        tier = quality.value if isinstance(quality, QualityTier) else quality
        return self.config.scale_factors.get(tier, 1.0)

    def upscale(self, media: str, quality: Union[QualityTier, str]) -> RenderPlan:
        """
        Plan upscaling of ``media`` to a quality tier.

        Args:
            media: Handle of the stitched video
            quality: Target tier

        Returns:
            RenderPlan; without operations when no scaling is needed
        """
        tier = quality.value if isinstance(quality, QualityTier) else quality
        scale = self.scale_factor(quality)

        if scale <= 1:
            logger.info(f"No upscaling needed for {tier}")
            return RenderPlan(
                stage=self.STAGE,
                parameters={"quality": tier, "scale_factor": scale},
                source=media,
            )

        fps = self.config.interpolation_fps
        upscaled = derive_path(media, "upscaled")
        interpolated = derive_path(media, f"{fps}fps")

        operations = [
            RenderOperation(
                tool=self.config.upscale_tool,
                inputs=[media],
                output=upscaled,
                arguments=["-s", f"{scale:g}", "-n", self.config.upscale_model],
                parameters={"scale_factor": scale, "model": self.config.upscale_model},
            ),
            RenderOperation(
                tool=self.config.interpolation_tool,
                inputs=[upscaled],
                output=interpolated,
                arguments=["-m", self.config.interpolation_model, "-x", "-f", str(fps)],
                parameters={"fps": fps, "model": self.config.interpolation_model},
            ),
        ]

        logger.info(f"Planned {scale:g}x upscale to {tier} at {fps}fps -> {interpolated}")
        return RenderPlan(
            stage=self.STAGE,
            operations=operations,
            parameters={"quality": tier, "scale_factor": scale, "fps": fps},
            source=media,
        )

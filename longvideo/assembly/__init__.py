"""
Assembly Pipeline
=================

Render plans for the three assembly stages:

- Stitch: crossfade every clip into one video
- Upscale: super-resolution and frame interpolation (1080p and 4k)
- Enhance: style grade, denoise and sharpen

Plans are data. Executing them is the job of an optional render engine,
any object with ``async render(plan) -> str``.
"""

from typing import Protocol

from .render_plan import RenderOperation, RenderPlan
from .stitcher import Stitcher
from .upscaler import Upscaler
from .enhancer import Enhancer, STYLE_FILTERS, UNIVERSAL_FILTERS


class RenderEngine(Protocol):
    """Executes a render plan and returns a handle to its output."""

    async def render(self, plan: RenderPlan) -> str:
        ...


__all__ = [
    "RenderOperation",
    "RenderPlan",
    "RenderEngine",
    "Stitcher",
    "Upscaler",
    "Enhancer",
    "STYLE_FILTERS",
    "UNIVERSAL_FILTERS",
]

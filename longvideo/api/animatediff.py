"""
AnimateDiff Backend
===================

AnimateDiff motion adapter. Animates a seed image, so every job first asks
the SeedImageProvider for a starting frame.
"""

import logging
from typing import Any, Dict

from .base import SeededVideoBackend, GenerationRequest, MediaHandle
from .factory import register_backend

logger = logging.getLogger(__name__)


@register_backend("animatediff")
class AnimateDiffBackend(SeededVideoBackend):
    """Image-to-video for artistic and animated scenes."""

    FPS = 8

    @property
    def model_id(self) -> str:
        return "animatediff"

    async def _generate(self, request: GenerationRequest) -> MediaHandle:
        seed_image = await self.seed_images.generate(request.prompt)
        response = await self._post(self.endpoint, self._build_payload(request, seed_image))
        return MediaHandle.from_bytes(response.content)

    def _build_payload(self, request: GenerationRequest, seed_image: str) -> Dict[str, Any]:
        return {
            "inputs": seed_image,
            "parameters": {
                "prompt": request.prompt,
                "num_frames": int(request.duration * self.FPS),
                "motion_bucket_id": 127,
            },
        }

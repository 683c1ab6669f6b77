"""
Stable Video Diffusion Backend
==============================

SVD img2vid-xt for products and object close-ups. Clip length is fixed by
the model at 25 frames regardless of the requested duration.
"""

import logging
from typing import Any, Dict

from .base import SeededVideoBackend, GenerationRequest, MediaHandle
from .factory import register_backend

logger = logging.getLogger(__name__)


@register_backend("stable-video")
class StableVideoBackend(SeededVideoBackend):
    """Image-to-video through the Stable Video Diffusion endpoint."""

    NUM_FRAMES = 25

    @property
    def model_id(self) -> str:
        return "stable-video"

    async def _generate(self, request: GenerationRequest) -> MediaHandle:
        seed_image = await self.seed_images.generate(request.prompt)
        response = await self._post(self.endpoint, self._build_payload(seed_image))
        return MediaHandle.from_bytes(response.content)

    def _build_payload(self, seed_image: str) -> Dict[str, Any]:
        return {
            "inputs": seed_image,
            "parameters": {
                "num_frames": self.NUM_FRAMES,
                "motion_bucket_id": 127,
                "noise_aug_strength": 0.02,
            },
        }

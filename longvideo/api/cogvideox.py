"""
CogVideoX Backend
=================

CogVideoX-5B on the Hugging Face Inference API. Strongest on faces,
people and dialogue. The API answers with raw video bytes.
"""

import logging
from typing import Any, Dict

from .base import BaseVideoBackend, GenerationRequest, MediaHandle
from .factory import register_backend

logger = logging.getLogger(__name__)


@register_backend("cogvideox")
class CogVideoXBackend(BaseVideoBackend):
    """Text-to-video through the CogVideoX inference endpoint."""

    FPS = 16
    MAX_FRAMES = 160

    @property
    def model_id(self) -> str:
        return "cogvideox"

    async def _generate(self, request: GenerationRequest) -> MediaHandle:
        response = await self._post(self.endpoint, self._build_payload(request))
        return MediaHandle.from_bytes(response.content)

    def _build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        return {
            "inputs": request.prompt,
            "parameters": {
                "num_frames": min(int(request.duration * self.FPS), self.MAX_FRAMES),
                "height": 768,
                "width": 1360,
                "guidance_scale": 7.5,
                "num_inference_steps": 50,
            },
        }

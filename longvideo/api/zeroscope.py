"""
ZeroScope Backend
=================

ZeroScope V2 XL for action and fast motion scenes.
"""

import logging
from typing import Any, Dict

from .base import BaseVideoBackend, GenerationRequest, MediaHandle
from .factory import register_backend

logger = logging.getLogger(__name__)


@register_backend("zeroscope")
class ZeroScopeBackend(BaseVideoBackend):
    """Text-to-video through the ZeroScope inference endpoint."""

    FPS = 8

    @property
    def model_id(self) -> str:
        return "zeroscope"

    async def _generate(self, request: GenerationRequest) -> MediaHandle:
        response = await self._post(self.endpoint, self._build_payload(request))
        return MediaHandle.from_bytes(response.content)

    def _build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        return {
            "inputs": request.prompt,
            "parameters": {
                "num_frames": int(request.duration * self.FPS),
                "height": 576,
                "width": 1024,
                "num_inference_steps": 40,
            },
        }

"""
Open-Sora Backend
=================

Open-Sora Plan served through a Gradio Space. Best for landscapes,
establishing shots and general footage.
"""

import logging
from typing import Any, Dict

from .base import BaseVideoBackend, GenerationRequest, MediaHandle
from .factory import register_backend
from ..core.exceptions import GenerationError

logger = logging.getLogger(__name__)


@register_backend("open-sora")
class OpenSoraBackend(BaseVideoBackend):
    """Text-to-video through the Open-Sora Gradio predict endpoint."""

    WIDTH = 768
    HEIGHT = 432
    FPS = 16
    STEPS = 50
    GUIDANCE_SCALE = 7.5

    @property
    def model_id(self) -> str:
        return "open-sora"

    @property
    def requires_auth(self) -> bool:
        return False

    async def _generate(self, request: GenerationRequest) -> MediaHandle:
        response = await self._post(self.endpoint, self._build_payload(request))
        return self._parse_response(response.json())

    def _build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        """Gradio positional inputs."""
        return {
            "data": [
                request.prompt,
                request.negative_prompt or self.negative_prompt or "",
                None,
                self.WIDTH,
                self.HEIGHT,
                min(request.duration, self.capabilities.max_duration),
                self.FPS,
                request.resolved_seed(),
                self.STEPS,
                self.GUIDANCE_SCALE,
            ]
        }

    def _parse_response(self, data: Dict[str, Any]) -> MediaHandle:
        outputs = data.get("data") or []
        if not outputs:
            raise GenerationError("Open-Sora returned no outputs", model=self.model_id)

        video = outputs[0]
        if isinstance(video, str):
            if video.startswith(("http://", "https://")):
                return MediaHandle(url=video)
            return MediaHandle(payload=video)
        if isinstance(video, dict):
            return MediaHandle(url=video.get("url"), payload=video.get("data"))

        raise GenerationError(
            f"Unexpected Open-Sora output type: {type(video).__name__}",
            model=self.model_id,
        )

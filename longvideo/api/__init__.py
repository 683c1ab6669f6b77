"""
API Integration Layer
=====================

Provides uniform access to the generative video backends.

Supported Backends:
- Open-Sora Plan (Gradio Space)
- CogVideoX-5B
- AnimateDiff V3 (seed-image conditioned)
- Stable Video Diffusion (seed-image conditioned)
- ZeroScope V2 XL

Usage:
    from longvideo.api import create_backends
    from longvideo.production import default_registry

    backends = create_backends(default_registry(), api_token="hf_...")
    handle = await backends["open-sora"].generate(
        GenerationRequest(prompt="A mountain lake at dawn", duration=5)
    )
"""

from .base import BaseVideoBackend, SeededVideoBackend, GenerationRequest, MediaHandle
from .seed_image import SeedImageProvider
from .factory import register_backend, get_backend, list_backends, create_backends

__all__ = [
    "BaseVideoBackend",
    "SeededVideoBackend",
    "GenerationRequest",
    "MediaHandle",
    "SeedImageProvider",
    "register_backend",
    "get_backend",
    "list_backends",
    "create_backends",
]

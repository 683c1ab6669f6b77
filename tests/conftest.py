"""
Pytest configuration and fixtures.
"""

import asyncio
from typing import Dict, Iterable, Optional

import pytest

from longvideo.api.base import BaseVideoBackend, GenerationRequest, MediaHandle
from longvideo.core.config import AssemblyConfig, Config, RegenerationConfig, SchedulerConfig
from longvideo.core.exceptions import ProviderError
from longvideo.production.models import LongVideoRequest, Scene, SceneType
from longvideo.production.registry import ModelRegistry, default_registry


class FakeBackend(BaseVideoBackend):
    """Backend with scripted failures and latency; never touches the network."""

    def __init__(
        self,
        capabilities,
        fail_on: Iterable[str] = (),
        slow_on: Iterable[str] = (),
        delay: float = 0.0,
        slow_delay: float = 30.0,
    ):
        super().__init__(capabilities, api_token="hf_testtoken123")
        self.fail_on = tuple(fail_on)
        self.slow_on = tuple(slow_on)
        self.delay = delay
        self.slow_delay = slow_delay
        self.calls = []

    @property
    def model_id(self) -> str:
        return self.capabilities.model

    async def _generate(self, request: GenerationRequest) -> MediaHandle:
        self.calls.append(request)
        if any(marker in request.prompt for marker in self.slow_on):
            await asyncio.sleep(self.slow_delay)
        else:
            await asyncio.sleep(self.delay)
        if any(marker in request.prompt for marker in self.fail_on):
            raise ProviderError("API error: 500", provider=self.model_id, status_code=500)
        return MediaHandle(url=f"https://cdn.test/{self.model_id}/{len(self.calls)}.mp4")


def make_backends(registry: ModelRegistry, **kwargs) -> Dict[str, FakeBackend]:
    return {model: FakeBackend(capabilities, **kwargs) for model, capabilities in registry.models.items()}


def make_scene(
    index: int,
    scene_type: SceneType = SceneType.LANDSCAPE,
    prompt: Optional[str] = None,
    model: Optional[str] = None,
    duration: float = 5,
) -> Scene:
    return Scene(
        scene_id=f"scene_{index}",
        index=index,
        scene_type=scene_type,
        description=f"scene {index}",
        prompt=prompt or f"prompt for scene {index}",
        duration=duration,
        model=model,
    )


def make_request(**overrides) -> LongVideoRequest:
    values = {
        "title": "Test Video",
        "description": "a calm mountain valley",
        "total_duration": 15,
        "style": "cinematic",
        "target_quality": "720p",
    }
    values.update(overrides)
    return LongVideoRequest(**values)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def backends(registry):
    return make_backends(registry)


@pytest.fixture
def config(tmp_path):
    """Default config without inter-batch delay, writing under tmp_path."""
    return Config(
        scheduler=SchedulerConfig(batch_delay=0),
        regeneration=RegenerationConfig(),
        assembly=AssemblyConfig(output_dir=str(tmp_path / "output")),
    )


@pytest.fixture
def request_15s():
    return make_request()

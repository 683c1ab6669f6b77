"""
Tests for regeneration of flagged clips.
"""

import pytest

from longvideo.core.config import RegenerationConfig, SchedulerConfig
from longvideo.production.models import GeneratedClip, SceneType
from longvideo.workflow.regeneration import RegenerationManager
from longvideo.workflow.scheduler import ClipScheduler

from conftest import make_backends, make_request, make_scene


def _failed_clip(scene, model, retry_count=0):
    return GeneratedClip(
        scene_id=scene.scene_id,
        scene_index=scene.index,
        model=model,
        duration=scene.duration,
        resolution="failed",
        quality=0,
        retry_count=retry_count,
        error=f"Failed to generate clip for scene {scene.scene_id}: API error: 500",
    )


def _manager(registry, backends, max_retries=3):
    scheduler = ClipScheduler(backends, registry, SchedulerConfig(batch_delay=0))
    return RegenerationManager(scheduler, config=RegenerationConfig(max_retries=max_retries))


@pytest.mark.asyncio
async def test_flagged_clip_regenerated_with_alternate_model(registry, backends):
    scenes = [make_scene(0, SceneType.PEOPLE, model="cogvideox")]
    clips = [_failed_clip(scenes[0], "cogvideox")]

    report = await _manager(registry, backends).regenerate(["scene_0"], scenes, clips, make_request())

    assert report.regenerated == ["scene_0"]
    assert clips[0].has_media
    assert clips[0].model == "zeroscope"
    assert clips[0].retry_count == 1
    assert scenes[0].model == "zeroscope"
    assert len(backends["zeroscope"].calls) == 1
    assert backends["cogvideox"].calls == []


@pytest.mark.asyncio
async def test_single_candidate_reuses_same_model(registry, backends):
    scenes = [make_scene(0, SceneType.DIALOGUE, model="cogvideox")]
    clips = [_failed_clip(scenes[0], "cogvideox")]

    await _manager(registry, backends).regenerate(["scene_0"], scenes, clips, make_request())

    assert clips[0].model == "cogvideox"
    assert clips[0].retry_count == 1


@pytest.mark.asyncio
async def test_capped_scene_not_regenerated(registry, backends):
    scenes = [make_scene(0, SceneType.PEOPLE, model="cogvideox")]
    capped = _failed_clip(scenes[0], "cogvideox", retry_count=3)
    clips = [capped]

    report = await _manager(registry, backends, max_retries=3).regenerate(
        ["scene_0"], scenes, clips, make_request()
    )

    assert report.exhausted == ["scene_0"]
    assert report.regenerated == []
    assert clips[0] is capped
    assert clips[0].error
    assert all(backend.calls == [] for backend in backends.values())


@pytest.mark.asyncio
async def test_unknown_scene_id_skipped(registry, backends):
    scenes = [make_scene(0)]
    clips = [_failed_clip(scenes[0], "open-sora")]

    report = await _manager(registry, backends).regenerate(["scene_9"], scenes, clips, make_request())

    assert report.skipped == ["scene_9"]
    assert clips[0].retry_count == 0


@pytest.mark.asyncio
async def test_persistent_failure_keeps_error_and_counts_retry(registry):
    backends = make_backends(registry, fail_on=["BROKEN"])
    scenes = [make_scene(0, SceneType.PEOPLE, prompt="BROKEN people", model="cogvideox")]
    clips = [_failed_clip(scenes[0], "cogvideox")]

    report = await _manager(registry, backends, max_retries=1).regenerate(
        ["scene_0"], scenes, clips, make_request()
    )

    assert report.regenerated == ["scene_0"]
    assert not clips[0].has_media
    assert clips[0].retry_count == 1
    assert clips[0].error

    second = await _manager(registry, backends, max_retries=1).regenerate(
        ["scene_0"], scenes, clips, make_request()
    )
    assert second.exhausted == ["scene_0"]
    assert len(backends["zeroscope"].calls) == 1


@pytest.mark.asyncio
async def test_many_regenerations_run_concurrently(registry, backends):
    scenes = [make_scene(i, SceneType.ACTION, model="zeroscope") for i in range(8)]
    clips = [_failed_clip(scene, "zeroscope") for scene in scenes]

    report = await _manager(registry, backends).regenerate(
        [scene.scene_id for scene in scenes], scenes, clips, make_request(total_duration=40)
    )

    assert sorted(report.regenerated) == sorted(scene.scene_id for scene in scenes)
    assert all(clip.model == "cogvideox" and clip.has_media for clip in clips)
    assert [clip.scene_id for clip in clips] == [scene.scene_id for scene in scenes]

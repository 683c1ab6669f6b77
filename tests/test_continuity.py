"""
Tests for continuity scoring.
"""

from longvideo.core.config import ContinuityConfig
from longvideo.production.models import GeneratedClip
from longvideo.workflow.continuity import ContinuityAnalyzer


def _clip(index, model="open-sora", quality=85, url=True):
    return GeneratedClip(
        scene_id=f"scene_{index}",
        scene_index=index,
        model=model,
        duration=5,
        resolution="768p" if url else "failed",
        quality=quality if url else 0,
        video_url=f"https://cdn.test/{index}.mp4" if url else None,
        error=None if url else "boom",
    )


def test_empty_clip_list():
    report = ContinuityAnalyzer().analyze([])
    assert report.average_score == 0
    assert report.flagged_scene_ids == []
    assert not report.needs_regeneration


def test_clip_without_media_scores_zero_and_is_flagged():
    clips = [_clip(0), _clip(1, url=False)]
    report = ContinuityAnalyzer().analyze(clips)
    assert clips[1].continuity_score == 0
    assert report.flagged_scene_ids == ["scene_1"]


def test_same_model_bonus():
    clips = [_clip(0, "open-sora"), _clip(1, "open-sora"), _clip(2, "zeroscope", quality=80)]
    report = ContinuityAnalyzer().analyze(clips)
    assert report.scores == {"scene_0": 85, "scene_1": 90, "scene_2": 80}
    assert [clip.continuity_score for clip in clips] == [85, 90, 80]


def test_bonus_follows_previous_clip_even_if_it_failed():
    clips = [_clip(0, "cogvideox", url=False), _clip(1, "cogvideox", quality=88)]
    report = ContinuityAnalyzer().analyze(clips)
    assert report.scores["scene_1"] == 93


def test_below_threshold_flagged():
    clips = [_clip(0, quality=60), _clip(1, "zeroscope", quality=80)]
    report = ContinuityAnalyzer(ContinuityConfig(threshold=70)).analyze(clips)
    assert report.flagged_scene_ids == ["scene_0"]


def test_average_over_clips_with_media_only():
    clips = [_clip(0, quality=80), _clip(1, url=False), _clip(2, "zeroscope", quality=90)]
    report = ContinuityAnalyzer().analyze(clips)
    assert report.average_score == 85


def test_all_failed_average_is_zero():
    clips = [_clip(0, url=False), _clip(1, url=False)]
    report = ContinuityAnalyzer().analyze(clips)
    assert report.average_score == 0
    assert report.flagged_scene_ids == ["scene_0", "scene_1"]

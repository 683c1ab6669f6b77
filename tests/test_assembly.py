"""
Tests for stitch, upscale and enhance render plans.
"""

import pytest

from longvideo.assembly import Enhancer, RenderOperation, RenderPlan, Stitcher, Upscaler
from longvideo.assembly.enhancer import UNIVERSAL_FILTERS
from longvideo.core.config import AssemblyConfig
from longvideo.core.exceptions import AssemblyError
from longvideo.production.models import GeneratedClip, QualityTier

from conftest import make_request


def _clip(index, url=True, payload=None, duration=5):
    has_media = url or payload
    return GeneratedClip(
        scene_id=f"scene_{index}",
        scene_index=index,
        model="open-sora",
        duration=duration,
        resolution="768p" if has_media else "failed",
        quality=85 if has_media else 0,
        video_url=f"https://cdn.test/{index}.mp4" if url else None,
        video_base64=payload,
    )


@pytest.fixture
def assembly_config(tmp_path):
    return AssemblyConfig(output_dir=str(tmp_path))


def test_stitch_rejects_all_failed_clips(assembly_config):
    with pytest.raises(AssemblyError, match="No valid clips to stitch"):
        Stitcher(assembly_config).stitch([_clip(0, url=False), _clip(1, url=False)], make_request())


def test_stitch_rejects_empty_list(assembly_config):
    with pytest.raises(AssemblyError):
        Stitcher(assembly_config).stitch([], make_request())


def test_stitch_three_clips(assembly_config):
    plan = Stitcher(assembly_config).stitch([_clip(0), _clip(1), _clip(2)], make_request())
    operation = plan.operations[0]

    assert plan.stage == "stitching"
    assert plan.inputs == ["https://cdn.test/0.mp4", "https://cdn.test/1.mp4", "https://cdn.test/2.mp4"]
    assert operation.filter_complex.count("xfade") == 2
    assert operation.filter_complex == (
        "[0:v][1:v]xfade=transition=fade:duration=0.5:offset=4.5[v1];"
        "[v1][2:v]xfade=transition=fade:duration=0.5:offset=9[v2];"
        "[v2]eq=contrast=1.05:saturation=1.1[vout]"
    )
    assert plan.parameters["duration"] == 14
    assert plan.parameters["crossfade_offsets"] == [4.5, 9.0]
    assert plan.parameters["concat_list"].splitlines()[0] == "file 'https://cdn.test/0.mp4'"
    assert plan.output.startswith(assembly_config.output_dir)
    assert plan.output.endswith(".mp4")
    assert "Test_Video" in plan.output


def test_stitch_offsets_follow_clip_durations(assembly_config):
    clips = [_clip(0, duration=4), _clip(1, duration=6), _clip(2, duration=5)]
    plan = Stitcher(assembly_config).stitch(clips, make_request())
    assert plan.parameters["crossfade_offsets"] == [3.5, 9.0]
    assert plan.parameters["duration"] == 14


def test_stitch_skips_failed_clips(assembly_config):
    plan = Stitcher(assembly_config).stitch([_clip(0), _clip(1, url=False), _clip(2)], make_request())
    assert plan.parameters["clip_count"] == 2
    assert plan.parameters["skipped_scene_ids"] == ["scene_1"]
    assert plan.operations[0].filter_complex.count("xfade") == 1


def test_stitch_single_clip_has_no_crossfade(assembly_config):
    plan = Stitcher(assembly_config).stitch([_clip(0)], make_request())
    assert "xfade" not in plan.operations[0].filter_complex
    assert plan.parameters["duration"] == 5


def test_stitch_inline_payload_uses_work_dir_path(assembly_config):
    plan = Stitcher(assembly_config).stitch([_clip(0), _clip(3, url=False, payload="AAAA")], make_request())
    inline_path = plan.inputs[1]
    assert inline_path.endswith("clip_003.mp4")
    assert plan.parameters["inline_inputs"] == {inline_path: "scene_3"}


def test_stitch_inline_payloads_are_per_run(assembly_config):
    clips = [_clip(0, url=False, payload="AAAA"), _clip(1, url=False, payload="BBBB")]
    stitcher = Stitcher(assembly_config)

    first = stitcher.stitch(clips, make_request(), run_id="run_a")
    second = stitcher.stitch(clips, make_request(), run_id="run_b")
    unnamed = stitcher.stitch(clips, make_request())

    assert first.inputs[0].endswith("run_a/clip_000.mp4")
    assert not set(first.inputs) & set(second.inputs)
    assert not set(unnamed.inputs) & (set(first.inputs) | set(second.inputs))
    assert first.output != second.output


def test_stitch_clamps_crossfade_to_shortest_clip(assembly_config):
    assembly_config.crossfade_duration = 2.0
    clips = [_clip(0, duration=5), _clip(1, duration=1), _clip(2, duration=5)]

    plan = Stitcher(assembly_config).stitch(clips, make_request())

    offsets = plan.parameters["crossfade_offsets"]
    assert plan.parameters["crossfade_duration"] == 1
    assert offsets == [4.0, 4.0]
    assert all(offset >= 0 for offset in offsets)
    assert offsets == sorted(offsets)
    assert plan.parameters["duration"] == 9
    assert "duration=1:" in plan.operations[0].filter_complex


def test_stitch_command(assembly_config):
    plan = Stitcher(assembly_config).stitch([_clip(0), _clip(1)], make_request())
    command = plan.operations[0].to_command()
    assert command[:2] == ["ffmpeg", "-y"]
    assert command.count("-i") == 2
    assert "-filter_complex" in command
    assert command[command.index("-map") + 1] == "[vout]"
    assert command[command.index("-c:v") + 1] == "libx264"
    assert command[command.index("-preset") + 1] == "medium"
    assert command[command.index("-crf") + 1] == "23"
    assert command[-1] == plan.output


def test_upscale_720p_is_passthrough():
    plan = Upscaler().upscale("/out/video.mp4", QualityTier.HD)
    assert plan.is_passthrough
    assert plan.output == "/out/video.mp4"
    assert plan.inputs == ["/out/video.mp4"]


@pytest.mark.parametrize("quality,scale", [(QualityTier.FULL_HD, "1.5"), (QualityTier.UHD, "3")])
def test_upscale_plans_super_resolution_then_interpolation(quality, scale):
    plan = Upscaler().upscale("/out/video.mp4", quality)

    assert not plan.is_passthrough
    upscale, interpolate = plan.operations
    assert upscale.tool == "realesrgan-ncnn-vulkan"
    assert upscale.to_command() == [
        "realesrgan-ncnn-vulkan", "-i", "/out/video.mp4", "-o", "/out/video_upscaled.mp4",
        "-s", scale, "-n", "realesrgan-x4plus",
    ]
    assert interpolate.tool == "rife-ncnn-vulkan"
    assert interpolate.inputs == [upscale.output]
    assert interpolate.to_command()[-5:] == ["-m", "rife-v4", "-x", "-f", "60"]
    assert plan.output == "/out/video_60fps.mp4"


def test_upscale_accepts_tier_string():
    assert Upscaler().scale_factor("4k") == 3.0


def test_enhance_cinematic_filter_order():
    plan = Enhancer().enhance("/out/video_60fps.mp4", make_request(style="cinematic"))
    operation = plan.operations[0]
    assert operation.filters == [
        "curves=preset=cross_process",
        "eq=contrast=1.1:brightness=-0.02:saturation=0.95",
        "noise=alls=5:allf=t",
        "hqdn3d=2:1:2:3",
        "unsharp=3:3:0.5",
    ]
    assert operation.inputs == ["/out/video_60fps.mp4"]
    assert plan.output == "/out/video_60fps_enhanced.mp4"
    command = operation.to_command()
    assert command[command.index("-vf") + 1] == ",".join(operation.filters)
    assert command[command.index("-preset") + 1] == "slow"
    assert command[command.index("-crf") + 1] == "18"


@pytest.mark.parametrize("style", ["tutorial", "entertainment", "vaporwave"])
def test_enhance_other_styles_use_neutral_grade(style):
    plan = Enhancer().enhance("/out/video.mp4", make_request(style=style))
    assert plan.operations[0].filters == ["eq=contrast=1.05:saturation=1.05", *UNIVERSAL_FILTERS]


def test_enhance_keeps_url_handles_intact():
    plan = Enhancer().enhance("https://render.test/jobs/42/out.mp4", make_request(style="artistic"))
    assert plan.output == "https://render.test/jobs/42/out_enhanced.mp4"
    assert plan.operations[0].filters[:2] == ["curves=preset=vintage", "vignette=PI/4"]


def test_plan_to_dict():
    operation = RenderOperation(tool="ffmpeg", inputs=["a.mp4"], output="b.mp4", filters=["eq=contrast=1"])
    data = RenderPlan(stage="enhancement", operations=[operation]).to_dict()
    assert data["stage"] == "enhancement"
    assert data["inputs"] == ["a.mp4"]
    assert data["output"] == "b.mp4"
    assert data["operations"][0]["command"] == ["ffmpeg", "-y", "-i", "a.mp4", "-vf", "eq=contrast=1", "b.mp4"]

"""
Tests for storage helpers.
"""

import base64
import json

import yaml

from longvideo.utils.storage import (
    derive_path,
    ensure_dir,
    generate_filename,
    load_metadata,
    save_inline_clip,
    save_metadata,
)


def test_save_inline_clip(tmp_path):
    path = save_inline_clip(base64.b64encode(b"video").decode(), tmp_path / "clips" / "clip_000.mp4")
    with open(path, "rb") as f:
        assert f.read() == b"video"


def test_save_metadata_json(tmp_path):
    path = save_metadata({"title": "Alpine"}, tmp_path / "run.json")
    with open(path) as f:
        data = json.load(f)
    assert data["title"] == "Alpine"
    assert "saved_at" in data


def test_save_metadata_yaml_roundtrip(tmp_path):
    path = save_metadata({"clips": [1, 2]}, tmp_path / "run.yaml")
    with open(path) as f:
        assert yaml.safe_load(f)["clips"] == [1, 2]
    assert load_metadata(path)["clips"] == [1, 2]


def test_load_metadata_missing_or_corrupt(tmp_path):
    assert load_metadata(tmp_path / "missing.json") is None
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert load_metadata(broken) is None


def test_ensure_dir(tmp_path):
    path = ensure_dir(tmp_path / "a" / "b")
    assert path.is_dir()


def test_generate_filename():
    assert generate_filename("clip", ".mp4").startswith("clip_")
    name = generate_filename("clip", ".mp4", include_timestamp=False)
    assert name.endswith(".mp4") and len(name) == len("clip_") + 8 + 4


def test_derive_path():
    assert derive_path("/out/video.mp4", "enhanced") == "/out/video_enhanced.mp4"
    assert derive_path("https://cdn.test/v/final", "60fps") == "https://cdn.test/v/final_60fps.mp4"
    assert derive_path("https://cdn.test/v.1/final.webm", "upscaled") == "https://cdn.test/v.1/final_upscaled.mp4"

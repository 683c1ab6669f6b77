"""
Tests for the configuration system.
"""

import pytest
import yaml

from longvideo.core.config import (
    AssemblyConfig,
    Config,
    PlannerConfig,
    SchedulerConfig,
    get_config,
    reset_config,
    set_config,
)
from longvideo.core.exceptions import ConfigurationError


class TestConfigDefaults:
    def test_heuristic_defaults(self):
        config = Config()
        assert config.planner.clip_duration == 5
        assert config.routing.best_for_bonus == 10.0
        assert config.routing.duration_bonus == 5.0
        assert config.routing.speed_weight == 0.1
        assert config.scheduler.batch_size == 5
        assert config.scheduler.batch_delay == 2.0
        assert config.continuity.threshold == 70.0
        assert config.regeneration.max_retries == 3
        assert config.assembly.crossfade_duration == 0.5

    def test_phase_distribution_sums_to_one(self):
        assert sum(PlannerConfig().phase_distribution.values()) == pytest.approx(1.0)


class TestConfigValidation:
    def test_rejects_zero_batch_size(self):
        with pytest.raises(ConfigurationError) as excinfo:
            SchedulerConfig(batch_size=0)
        assert excinfo.value.details["config_key"] == "scheduler.batch_size"

    def test_rejects_non_positive_clip_duration(self):
        with pytest.raises(ConfigurationError):
            PlannerConfig(clip_duration=0)

    def test_rejects_negative_phase_share(self):
        with pytest.raises(ConfigurationError):
            PlannerConfig(phase_distribution={"opening": -1, "closing": 2})

    @pytest.mark.parametrize("scale_factors", [
        {"720p": 1.0, "1080p": 1.0, "4k": 3.0},
        {"720p": 1.0, "1080p": 1.5},
        {"720p": 1.0, "1080p": 1.5, "4k": 0.5},
    ])
    def test_rejects_upscale_tiers_without_scaling(self, scale_factors):
        with pytest.raises(ConfigurationError) as excinfo:
            AssemblyConfig(scale_factors=scale_factors)
        assert excinfo.value.details["config_key"] == "assembly.scale_factors"

    def test_unknown_key_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            Config.from_dict({"scheduler": {"workers": 3}})

    def test_from_dict_overrides_section(self):
        config = Config.from_dict({"scheduler": {"batch_size": 2}, "continuity": {"threshold": 80}})
        assert config.scheduler.batch_size == 2
        assert config.continuity.threshold == 80
        assert config.regeneration.max_retries == 3


class TestConfigLoading:
    def test_load_yaml_with_env_interpolation(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LONGVIDEO_TEST_DIR", "/tmp/renders")
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            "assembly": {"output_dir": "${LONGVIDEO_TEST_DIR}"},
            "backends": {"api_token": "${LONGVIDEO_TEST_TOKEN:-hf_fallback}"},
        }))

        config = Config.load(path)

        assert config.assembly.output_dir == "/tmp/renders"
        assert config.backends.api_token == "hf_fallback"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("scheduler: [unclosed")
        with pytest.raises(ConfigurationError):
            Config.load(path)

    def test_to_dict_hides_token(self):
        config = Config.from_dict({"backends": {"api_token": "hf_supersecret"}})
        data = config.to_dict()
        assert data["backends"]["api_token"] is None
        assert set(data) == set(Config.SECTIONS)


def test_global_config_roundtrip():
    custom = Config.from_dict({"scheduler": {"batch_size": 1}})
    set_config(custom)
    try:
        assert get_config() is custom
    finally:
        reset_config()

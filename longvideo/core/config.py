"""
Configuration System
====================

Centralized, validated configuration management with typed dataclasses.

Every heuristic constant of the pipeline (routing bonuses, continuity
threshold, batch size, retry cap, ...) lives here so that it can be
overridden from YAML or in code without touching the pipeline modules.
"""

import os
import re
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any, Union
import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class PlannerConfig:
    """Scene planning settings."""

    clip_duration: int = 5

    # Share of the scene count given to each narrative phase
    phase_distribution: Dict[str, float] = field(default_factory=lambda: {
        "opening": 0.15,
        "development": 0.30,
        "climax": 0.25,
        "resolution": 0.20,
        "closing": 0.10,
    })

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if self.clip_duration <= 0:
            raise ConfigurationError(
                f"clip_duration must be positive, got {self.clip_duration}",
                config_key="planner.clip_duration",
            )
        if not self.phase_distribution:
            raise ConfigurationError(
                "phase_distribution must define at least one phase",
                config_key="planner.phase_distribution",
            )
        if any(share < 0 for share in self.phase_distribution.values()):
            raise ConfigurationError(
                "phase_distribution shares must be non-negative",
                config_key="planner.phase_distribution",
            )
        if sum(self.phase_distribution.values()) <= 0:
            raise ConfigurationError(
                "phase_distribution shares must sum to a positive value",
                config_key="planner.phase_distribution",
            )


@dataclass
class RoutingConfig:
    """Model routing score weights."""

    best_for_bonus: float = 10.0
    duration_bonus: float = 5.0
    speed_weight: float = 0.1
    default_model: str = "open-sora"


@dataclass
class SchedulerConfig:
    """Batch scheduling settings."""

    batch_size: int = 5
    batch_delay: float = 2.0
    request_timeout: int = 300

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if self.batch_size < 1:
            raise ConfigurationError(
                f"batch_size must be >= 1, got {self.batch_size}",
                config_key="scheduler.batch_size",
            )
        if self.batch_delay < 0:
            raise ConfigurationError(
                f"batch_delay must be >= 0, got {self.batch_delay}",
                config_key="scheduler.batch_delay",
            )


@dataclass
class ContinuityConfig:
    """Continuity scoring settings."""

    threshold: float = 70.0
    same_model_bonus: float = 5.0


@dataclass
class RegenerationConfig:
    """Regeneration settings."""

    max_retries: int = 3
    max_passes: int = 1

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must be >= 0, got {self.max_retries}",
                config_key="regeneration.max_retries",
            )
        if self.max_passes < 0:
            raise ConfigurationError(
                f"max_passes must be >= 0, got {self.max_passes}",
                config_key="regeneration.max_passes",
            )


@dataclass
class AssemblyConfig:
    """Stitch, upscale and enhancement settings."""

    output_dir: str = "./output"
    crossfade_duration: float = 0.5
    color_correction: str = "eq=contrast=1.05:saturation=1.1"

    # Stitch encoding
    stitch_codec: str = "libx264"
    stitch_preset: str = "medium"
    stitch_crf: int = 23

    # Upscaling
    upscale_tool: str = "realesrgan-ncnn-vulkan"
    upscale_model: str = "realesrgan-x4plus"
    interpolation_tool: str = "rife-ncnn-vulkan"
    interpolation_model: str = "rife-v4"
    interpolation_fps: int = 60
    scale_factors: Dict[str, float] = field(default_factory=lambda: {
        "720p": 1.0,
        "1080p": 1.5,
        "4k": 3.0,
    })

    # Enhancement encoding
    enhance_preset: str = "slow"
    enhance_crf: int = 18

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Validate configuration values."""
        if self.crossfade_duration < 0:
            raise ConfigurationError(
                f"crossfade_duration must be >= 0, got {self.crossfade_duration}",
                config_key="assembly.crossfade_duration",
            )
        if self.interpolation_fps <= 0:
            raise ConfigurationError(
                f"interpolation_fps must be positive, got {self.interpolation_fps}",
                config_key="assembly.interpolation_fps",
            )
        # 1080p and 4k always get a real upscale plan
        for tier in ("1080p", "4k"):
            factor = self.scale_factors.get(tier)
            if factor is None or factor <= 1:
                raise ConfigurationError(
                    f"scale_factors['{tier}'] must be greater than 1, got {factor}",
                    config_key="assembly.scale_factors",
                )


@dataclass
class BackendConfig:
    """Generative backend settings."""

    api_token: Optional[str] = None
    seed_image_endpoint: str = (
        "https://api-inference.huggingface.co/models/stabilityai/stable-diffusion-xl-base-1.0"
    )
    seed_image_timeout: int = 60
    negative_prompt: str = "blurry, low quality, distorted, watermark, ugly, deformed"


# =============================================================================
# Main Configuration Class
# =============================================================================


@dataclass
class Config:
    """
    Main configuration container with validation and loading.

    Provides a unified interface to all configuration settings with:
    - Type-safe access to configuration values
    - Validation on load and modification
    - Environment variable interpolation
    - Sensible defaults for all values
    """

    planner: PlannerConfig = field(default_factory=PlannerConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    continuity: ContinuityConfig = field(default_factory=ContinuityConfig)
    regeneration: RegenerationConfig = field(default_factory=RegenerationConfig)
    assembly: AssemblyConfig = field(default_factory=AssemblyConfig)
    backends: BackendConfig = field(default_factory=BackendConfig)

    SECTIONS = ("planner", "routing", "scheduler", "continuity", "regeneration", "assembly", "backends")

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "Config":
        """
        Load configuration from file with environment variable interpolation.

        Args:
            path: Path to YAML config file (defaults.yaml)

        Returns:
            Validated Config instance
        """
        search_paths = [
            Path("./config/defaults.yaml"),
            Path("./defaults.yaml"),
            Path.home() / ".longvideo" / "config.yaml",
        ]

        if path:
            search_paths.insert(0, Path(path))

        config_data = {}

        for search_path in search_paths:
            if search_path.exists():
                logger.info(f"Loading config from: {search_path}")
                try:
                    with open(search_path, "r") as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except yaml.YAMLError as e:
                    raise ConfigurationError(
                        f"Invalid YAML in config file: {e}",
                        config_key=str(search_path),
                    )
        else:
            logger.info("No config file found, using defaults")

        config_data = cls._interpolate_env_vars(config_data)

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary with validation."""
        try:
            return cls(
                planner=PlannerConfig(**(data.get("planner") or {})),
                routing=RoutingConfig(**(data.get("routing") or {})),
                scheduler=SchedulerConfig(**(data.get("scheduler") or {})),
                continuity=ContinuityConfig(**(data.get("continuity") or {})),
                regeneration=RegenerationConfig(**(data.get("regeneration") or {})),
                assembly=AssemblyConfig(**(data.get("assembly") or {})),
                backends=BackendConfig(**(data.get("backends") or {})),
            )
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    @staticmethod
    def _interpolate_env_vars(data: Any) -> Any:
        """Recursively interpolate ${VAR} patterns with environment variables."""
        if isinstance(data, str):
            # Handle ${VAR} and ${VAR:-default} patterns
            pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

            def replace(match):
                var_name = match.group(1)
                default = match.group(2) or ""
                return os.environ.get(var_name, default)

            return re.sub(pattern, replace, data)
        elif isinstance(data, dict):
            return {k: Config._interpolate_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [Config._interpolate_env_vars(item) for item in data]
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        result = {}
        for section in self.SECTIONS:
            result[section] = asdict(getattr(self, section))
        # Never serialize the bearer credential
        result["backends"]["api_token"] = None
        return result


# =============================================================================
# Convenience Functions
# =============================================================================


_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance (lazily loaded)."""
    global _global_config
    if _global_config is None:
        _global_config = Config.load()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset global configuration to None (forces reload on next access)."""
    global _global_config
    _global_config = None

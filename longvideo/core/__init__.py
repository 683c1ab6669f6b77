"""
Core Module
===========

Core utilities, configuration, and exceptions for long-video orchestration.
"""

from .config import (
    Config,
    PlannerConfig,
    RoutingConfig,
    SchedulerConfig,
    ContinuityConfig,
    RegenerationConfig,
    AssemblyConfig,
    BackendConfig,
    get_config,
    set_config,
    reset_config,
)
from .exceptions import (
    LongVideoError,
    ConfigurationError,
    ValidationError,
    ProviderError,
    RateLimitError,
    GenerationError,
    GenerationCancelledError,
    AssemblyError,
    TimeoutError,
)
from .security import sanitize_filename, sanitize_prompt, redact_api_key

__all__ = [
    # Configuration
    "Config",
    "PlannerConfig",
    "RoutingConfig",
    "SchedulerConfig",
    "ContinuityConfig",
    "RegenerationConfig",
    "AssemblyConfig",
    "BackendConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Exceptions
    "LongVideoError",
    "ConfigurationError",
    "ValidationError",
    "ProviderError",
    "RateLimitError",
    "GenerationError",
    "GenerationCancelledError",
    "AssemblyError",
    "TimeoutError",
    # Security
    "sanitize_filename",
    "sanitize_prompt",
    "redact_api_key",
]

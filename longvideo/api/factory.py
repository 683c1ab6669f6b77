"""
Backend Factory
===============

Registry of backend classes and construction of the model-keyed dispatch
table the scheduler routes jobs through.
"""

import logging
from typing import Optional, List, Dict, Type

from .base import BaseVideoBackend, DEFAULT_TIMEOUT
from .seed_image import SeedImageProvider
from ..core.config import BackendConfig
from ..production.registry import ModelRegistry

logger = logging.getLogger(__name__)

# Registry of available backends
_BACKENDS: Dict[str, Type[BaseVideoBackend]] = {}


def register_backend(model: str):
    """Decorator to register a backend class for a model id."""
    def decorator(cls: Type[BaseVideoBackend]):
        _BACKENDS[model.lower()] = cls
        return cls
    return decorator


def _load_builtin_backends() -> None:
    """Import the bundled backend modules so their decorators run."""
    from . import open_sora, cogvideox, animatediff, stable_video, zeroscope  # noqa: F401


def get_backend(
    model: str,
    registry: ModelRegistry,
    api_token: Optional[str] = None,
    **kwargs,
) -> BaseVideoBackend:
    """
    Get a backend instance for one model.

    Args:
        model: Model id (e.g., 'open-sora', 'cogvideox')
        registry: Registry holding the model's capabilities
        api_token: Optional bearer credential
        **kwargs: Additional backend-specific arguments

    Returns:
        Configured backend instance

    Raises:
        ValueError: If the model is unknown or has no backend class
    """
    _load_builtin_backends()

    model_lower = model.lower()
    backend_class = _BACKENDS.get(model_lower)
    if backend_class is None:
        raise ValueError(f"Backend '{model}' not registered")

    capabilities = registry.get(model_lower)
    if capabilities is None:
        raise ValueError(f"Unknown model: {model}")

    return backend_class(capabilities, api_token=api_token, **kwargs)


def list_backends() -> List[str]:
    """
    List all available backend model ids.

    Returns:
        List of model ids
    """
    _load_builtin_backends()
    return list(_BACKENDS.keys())


def create_backends(
    registry: ModelRegistry,
    api_token: Optional[str] = None,
    config: Optional[BackendConfig] = None,
    timeout: int = DEFAULT_TIMEOUT,
    seed_images: Optional[SeedImageProvider] = None,
) -> Dict[str, BaseVideoBackend]:
    """
    Build the dispatch table for every model in the registry.

    Models that need a seed image share one SeedImageProvider. Registry
    entries without a backend class are skipped with a warning.

    Args:
        registry: Models to build backends for
        api_token: Bearer credential (overrides the config value)
        config: Backend settings
        timeout: Per-request timeout in seconds
        seed_images: Optional pre-built seed image provider

    Returns:
        Mapping of model id to backend
    """
    _load_builtin_backends()
    config = config or BackendConfig()
    token = api_token or config.api_token

    backends: Dict[str, BaseVideoBackend] = {}
    for model, capabilities in registry.models.items():
        backend_class = _BACKENDS.get(model.lower())
        if backend_class is None:
            logger.warning(f"No backend registered for model '{model}', skipping")
            continue

        kwargs = {
            "api_token": token,
            "timeout": timeout,
            "negative_prompt": config.negative_prompt,
        }
        if capabilities.requires_image:
            if seed_images is None:
                seed_images = SeedImageProvider(
                    endpoint=config.seed_image_endpoint,
                    api_token=token,
                    timeout=config.seed_image_timeout,
                )
            kwargs["seed_images"] = seed_images

        backends[model] = backend_class(capabilities, **kwargs)

    logger.info(f"Created {len(backends)} backends: {', '.join(backends)}")
    return backends

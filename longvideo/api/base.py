"""
Base Video Backend
==================

Abstract base class for all generative video backends.

Every backend implements the same contract::

    generate(request, cancel_token=None) -> MediaHandle

so the scheduler never depends on a vendor's request/response shape.
Adding a backend means adding one subclass plus one ModelCapabilities entry.
"""

import asyncio
import base64
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any

import httpx

from ..core.exceptions import GenerationError, ProviderError, RateLimitError, TimeoutError
from ..core.security import sanitize_prompt, redact_api_key
from ..production.registry import ModelCapabilities

logger = logging.getLogger(__name__)


# Default request timeout in seconds
DEFAULT_TIMEOUT = 300


@dataclass
class GenerationRequest:
    """Request parameters for one clip."""

    prompt: str
    duration: float = 5
    resolution: str = "720p"
    aspect_ratio: str = "16:9"
    seed: Optional[int] = None
    negative_prompt: Optional[str] = None

    def __post_init__(self):
        """Validate and sanitize request."""
        self.prompt = sanitize_prompt(self.prompt)
        if self.negative_prompt:
            self.negative_prompt = sanitize_prompt(self.negative_prompt)

    def resolved_seed(self) -> int:
        """The explicit seed, or a fresh random one."""
        if self.seed is not None:
            return self.seed
        return random.randint(0, 999_999)


@dataclass
class MediaHandle:
    """Opaque reference to generated media: a URL or an inline base64 payload."""

    url: Optional[str] = None
    payload: Optional[str] = None

    def __post_init__(self):
        # A URL wins when a backend returns both
        if self.url:
            self.payload = None

    @property
    def is_empty(self) -> bool:
        return not (self.url or self.payload)

    @classmethod
    def from_bytes(cls, content: bytes) -> "MediaHandle":
        return cls(payload=base64.b64encode(content).decode("utf-8"))


class BaseVideoBackend(ABC):
    """
    Abstract base class for generative video backends.

    All backend implementations must inherit from this class
    and implement the required abstract methods.
    """

    def __init__(
        self,
        capabilities: ModelCapabilities,
        api_token: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        negative_prompt: Optional[str] = None,
    ):
        """
        Initialize the backend.

        Args:
            capabilities: Static descriptor (endpoint, limits) of this model
            api_token: Optional bearer credential
            timeout: Request timeout in seconds
            negative_prompt: Default negative prompt for backends that accept one
        """
        self.capabilities = capabilities
        self.api_token = api_token
        self.timeout = timeout
        self.negative_prompt = negative_prompt

        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

        self._validate_config()

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Return the registry id this backend serves."""
        pass

    @abstractmethod
    async def _generate(self, request: GenerationRequest) -> MediaHandle:
        """
        Perform the backend-specific generation call.

        Args:
            request: Generation request parameters

        Returns:
            MediaHandle pointing at the generated clip
        """
        pass

    @property
    def endpoint(self) -> str:
        return self.capabilities.endpoint

    @property
    def requires_auth(self) -> bool:
        """Whether requests are rejected without a bearer token."""
        return True

    # -------------------------------------------------------------------------
    # Shared Implementation
    # -------------------------------------------------------------------------

    async def generate(
        self,
        request: GenerationRequest,
        cancel_token=None,
    ) -> MediaHandle:
        """
        Generate one clip, honouring an optional cancellation token.

        Args:
            request: Generation request parameters
            cancel_token: Optional CancellationToken for this job

        Returns:
            Non-empty MediaHandle

        Raises:
            ProviderError, TimeoutError, GenerationError, GenerationCancelledError
        """
        logger.info(f"Generating {request.duration}s clip with {self.capabilities.name}")
        logger.debug(f"Prompt: {request.prompt}")

        if cancel_token is not None:
            handle = await cancel_token.run(self._generate(request))
        else:
            handle = await self._generate(request)

        if handle is None or handle.is_empty:
            raise GenerationError(
                f"Invalid response from {self.capabilities.name}: no media returned",
                model=self.model_id,
                prompt=request.prompt,
            )
        return handle

    async def _post(self, url: str, payload: Dict[str, Any], timeout: Optional[float] = None) -> httpx.Response:
        """POST JSON and map transport/HTTP failures onto the exception hierarchy."""
        client = await self._get_client()
        try:
            response = await client.post(
                url,
                json=payload,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.TimeoutException:
            raise TimeoutError(
                f"{self.capabilities.name} request timed out",
                operation="generate",
                timeout_seconds=timeout or self.timeout,
            )
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{self.capabilities.name} request failed: {redact_api_key(str(e))}",
                provider=self.model_id,
            )

        if response.status_code == 429:
            retry_after = response.headers.get("retry-after")
            raise RateLimitError(
                f"{self.capabilities.name} rate limit exceeded",
                provider=self.model_id,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code >= 400:
            raise ProviderError(
                f"API error: {response.status_code}",
                provider=self.model_id,
                status_code=response.status_code,
                response_body=response.text,
            )
        return response

    # -------------------------------------------------------------------------
    # Helper Methods
    # -------------------------------------------------------------------------

    def _validate_config(self) -> None:
        """Validate the backend configuration."""
        if not self.api_token and self.requires_auth:
            logger.warning(
                f"No API token configured for {self.capabilities.name}. "
                f"Requests may be rejected or rate limited."
            )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (safe under concurrent jobs)."""
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout),
                    headers=self._get_headers(),
                )
            return self._client

    def _get_headers(self) -> Dict[str, str]:
        """Get default headers for requests."""
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def close(self) -> None:
        """Close the HTTP client."""
        async with self._client_lock:
            if self._client:
                await self._client.aclose()
                self._client = None

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


class SeededVideoBackend(BaseVideoBackend):
    """Backend that animates a seed image produced by a SeedImageProvider."""

    def __init__(self, capabilities: ModelCapabilities, seed_images=None, **kwargs):
        super().__init__(capabilities, **kwargs)
        if seed_images is None:
            raise GenerationError(
                f"{capabilities.name} requires a seed image provider",
                model=capabilities.model,
            )
        self.seed_images = seed_images

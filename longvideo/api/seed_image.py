"""
Seed Image Provider
===================

Text-to-image call used by image-conditioned backends (AnimateDiff,
Stable Video Diffusion) to obtain their starting frame.
"""

import asyncio
import base64
import logging
from typing import Optional

import httpx

from ..core.exceptions import ProviderError, TimeoutError
from ..core.security import sanitize_prompt

logger = logging.getLogger(__name__)


class SeedImageProvider:
    """
    Generates a base64 encoded seed image from a prompt.

    One provider is shared by every backend that needs seed images, so the
    HTTP client is created lazily under a lock.
    """

    def __init__(
        self,
        endpoint: str,
        api_token: Optional[str] = None,
        timeout: int = 60,
    ):
        self.endpoint = endpoint
        self.api_token = api_token
        self.timeout = timeout

        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

    async def generate(self, prompt: str) -> str:
        """
        Generate a seed image.

        Args:
            prompt: Scene prompt

        Returns:
            Base64 encoded image bytes
        """
        client = await self._get_client()
        try:
            response = await client.post(
                self.endpoint,
                json={"inputs": sanitize_prompt(prompt)},
            )
        except httpx.TimeoutException:
            raise TimeoutError(
                "Seed image request timed out",
                operation="seed_image",
                timeout_seconds=self.timeout,
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"Seed image request failed: {e}", provider="seed-image")

        if response.status_code >= 400:
            raise ProviderError(
                f"Seed image API error: {response.status_code}",
                provider="seed-image",
                status_code=response.status_code,
                response_body=response.text,
            )

        logger.debug(f"Seed image generated ({len(response.content)} bytes)")
        return base64.b64encode(response.content).decode("utf-8")

    async def _get_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                headers = {"Content-Type": "application/json"}
                if self.api_token:
                    headers["Authorization"] = f"Bearer {self.api_token}"
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout),
                    headers=headers,
                )
            return self._client

    async def close(self) -> None:
        async with self._client_lock:
            if self._client:
                await self._client.aclose()
                self._client = None

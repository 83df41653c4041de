"""
Image Generation Service
Black Forest Labs FLUX 1.1 [pro] job submission and result polling
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import aiohttp

from app.core.exceptions import (
    ImageJobCancelled,
    ImageJobError,
    ImageJobTimeout,
    ImageProviderError,
    MissingImageUrlError,
    MissingJobIdError,
)

logger = logging.getLogger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


class ImageGenerationService:
    """Submits a logo-style image job and waits for it to become ready"""

    PROMPT_TEMPLATE = (
        "{stock_name} logo with futuristic city, blue and purple color, neon glow, "
        "detailed, high quality. Modern,high tech,soft,bold aesthetic,using dark "
        "shades of purple, blue, and black in a gradient"
    )
    WIDTH = 896
    HEIGHT = 1152

    STATUS_READY = "Ready"
    FAILED_STATUSES = frozenset({"Error", "Content Moderated", "Request Moderated", "Task not found"})

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.bfl.ml/v1",
        poll_interval: float = 0.5,
        max_attempts: int = 120,
        http_timeout: float = 30.0,
    ):
        if not api_key:
            raise ValueError("BFL API key is required. Set the BFL_API_KEY environment variable.")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.http_timeout = http_timeout

    def build_prompt(self, stock_name: str) -> str:
        return self.PROMPT_TEMPLATE.format(stock_name=stock_name)

    async def generate(self, stock_name: str, is_disconnected: Optional[DisconnectCheck] = None) -> str:
        """
        Generate an image for a stock and return its URL

        Args:
            stock_name: Company or ticker embedded in the prompt
            is_disconnected: Awaitable check polled before each status request;
                when it returns True the wait is abandoned

        Raises:
            MissingJobIdError: submission returned no job id
            MissingImageUrlError: job became ready without a result URL
            ImageJobTimeout: job not ready within max_attempts polls
            ImageJobCancelled: the caller went away while waiting
            ImageJobError: provider reported a terminal failure status
            ImageProviderError: provider answered with an HTTP error
        """
        prompt = self.build_prompt(stock_name)
        timeout = aiohttp.ClientTimeout(total=self.http_timeout)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            job_id = await self.submit(session, prompt)
            logger.info("Image generation started, waiting for the result...")
            return await self.wait_for_result(session, job_id, is_disconnected)

    async def submit(self, session: aiohttp.ClientSession, prompt: str) -> str:
        data = await self._request(
            session,
            "POST",
            f"{self.base_url}/flux-pro-1.1",
            json={"prompt": prompt, "width": self.WIDTH, "height": self.HEIGHT},
            headers={**self._headers(), "Content-Type": "application/json"},
        )

        job_id = data.get("id") if isinstance(data, dict) else None
        if not job_id:
            raise MissingJobIdError("No request ID received from BFL API")
        return job_id

    async def fetch_result(self, session: aiohttp.ClientSession, job_id: str) -> Dict[str, Any]:
        data = await self._request(
            session,
            "GET",
            f"{self.base_url}/get_result",
            params={"id": job_id},
            headers=self._headers(),
        )
        if not isinstance(data, dict):
            raise ImageJobError(f"Unexpected result payload for job {job_id}")
        return data

    async def wait_for_result(
        self,
        session: aiohttp.ClientSession,
        job_id: str,
        is_disconnected: Optional[DisconnectCheck] = None,
    ) -> str:
        """Poll until the job is ready; at most max_attempts status requests"""
        for attempt in range(1, self.max_attempts + 1):
            await asyncio.sleep(self.poll_interval)

            if is_disconnected is not None and await is_disconnected():
                raise ImageJobCancelled(job_id)

            data = await self.fetch_result(session, job_id)
            status = data.get("status")

            if status == self.STATUS_READY:
                result = data.get("result")
                image_url = result.get("sample") if isinstance(result, dict) else None
                if not image_url:
                    raise MissingImageUrlError(f"Job {job_id} is ready but has no image URL")
                logger.info(f"Image ready after {attempt} polls")
                return image_url

            if status in self.FAILED_STATUSES:
                raise ImageJobError(f"Image job {job_id} ended with status: {status}")

            logger.info(f"Status: {status}")

        raise ImageJobTimeout(job_id, self.max_attempts)

    def _headers(self) -> Dict[str, str]:
        return {"accept": "application/json", "x-key": self.api_key}

    async def _request(self, session: aiohttp.ClientSession, method: str, url: str, **kwargs) -> Any:
        async with session.request(method, url, **kwargs) as response:
            if response.status >= 400:
                payload = await self._read_error_payload(response)
                raise ImageProviderError(
                    f"BFL API returned HTTP {response.status}",
                    status=response.status,
                    payload=payload,
                )
            return await response.json(content_type=None)

    @staticmethod
    async def _read_error_payload(response: aiohttp.ClientResponse) -> Any:
        text = await response.text()
        try:
            return json.loads(text)
        except ValueError:
            return text

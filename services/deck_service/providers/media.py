"""
Image and video generation.

Provides:
- MediaGenerationClient: async httpx client for the media generation REST API
- GeneratedImage: one generated still, usable as a data URL
- poll_video_operation: bounded, cancellable polling of a started video operation
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.deck_service.errors import ExternalServiceError

logger = get_logger(__name__)


@dataclass
class VideoOperation:
    """State of a video generation operation."""

    name: str
    done: bool = False
    video_uri: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_response(cls, data: dict) -> "VideoOperation":
        samples = (
            data.get("response", {})
            .get("generateVideoResponse", {})
            .get("generatedSamples", [])
        )
        uri = samples[0].get("video", {}).get("uri") if samples else None
        error = data.get("error")
        return cls(
            name=data.get("name", ""),
            done=bool(data.get("done")),
            video_uri=uri,
            error=error.get("message") if isinstance(error, dict) else error,
        )


@dataclass
class GeneratedImage:
    """A generated still image, base64 encoded."""

    image_base64: str
    mime_type: str = "image/jpeg"

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.image_base64}"

    @classmethod
    def from_response(cls, data: dict, mime_type: str = "image/jpeg") -> "GeneratedImage":
        predictions = data.get("predictions") or []
        encoded = predictions[0].get("bytesBase64Encoded") if predictions else None
        if not encoded:
            raise ExternalServiceError("Image generation returned no image")
        return cls(image_base64=encoded, mime_type=predictions[0].get("mimeType") or mime_type)


class MediaGenerationClient:
    """Async client for image generation and video generation operations."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        image_model: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.AI_API_KEY
        if not self.api_key:
            raise ExternalServiceError("AI_API_KEY is not configured")
        self.base_url = (base_url or settings.AI_API_BASE_URL).rstrip("/")
        self.model = model or settings.AI_VIDEO_MODEL
        self.image_model = image_model or settings.AI_IMAGE_MODEL
        self.timeout = timeout
        self.transport = transport
        self._headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, endpoint: str, json_data: dict = None) -> dict:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    method=method, url=url, headers=self._headers, json=json_data
                )
        except httpx.HTTPError as e:
            logger.error("Media generation request failed: %s", e)
            raise ExternalServiceError(f"Media generation request failed: {e}") from e

        data = response.json() if response.content else {}
        if not response.is_success:
            logger.error("Media generation API error: %s - %s", response.status_code, data)
            message = data.get("error", {}).get("message", "Unknown media generation error")
            raise ExternalServiceError(message, response_data=data)
        return data

    async def generate_image(
        self, prompt: str, mime_type: str = "image/jpeg", aspect_ratio: str = "1:1"
    ) -> GeneratedImage:
        """Generate one still image from a text prompt."""
        data = await self._request(
            "POST",
            f"models/{self.image_model}:predict",
            json_data={
                "instances": [{"prompt": prompt}],
                "parameters": {
                    "sampleCount": 1,
                    "aspectRatio": aspect_ratio,
                    "outputOptions": {"mimeType": mime_type},
                },
            },
        )
        return GeneratedImage.from_response(data, mime_type)

    async def start_video(
        self, prompt: str, image_base64: Optional[str] = None, mime_type: str = "image/png"
    ) -> VideoOperation:
        """Start generating one video, optionally animating a still image."""
        instance: dict = {"prompt": prompt}
        if image_base64:
            instance["image"] = {"bytesBase64Encoded": image_base64, "mimeType": mime_type}
        data = await self._request(
            "POST",
            f"models/{self.model}:predictLongRunning",
            json_data={"instances": [instance], "parameters": {"sampleCount": 1}},
        )
        operation = VideoOperation.from_response(data)
        logger.info("Started video operation %s", operation.name)
        return operation

    async def get_operation(self, operation: VideoOperation) -> VideoOperation:
        data = await self._request("GET", operation.name)
        return VideoOperation.from_response(data)


async def poll_video_operation(
    start: Callable[[], Awaitable[VideoOperation]],
    fetch: Callable[[VideoOperation], Awaitable[VideoOperation]],
    interval: Optional[float] = None,
    max_attempts: Optional[int] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> VideoOperation:
    """
    Start an operation and poll it until it is done.

    Args:
        start: Coroutine function starting the operation
        fetch: Coroutine function refreshing an operation
        interval: Seconds between polls; defaults to ``VIDEO_POLL_INTERVAL_SECONDS``
        max_attempts: Poll limit; defaults to ``VIDEO_POLL_MAX_ATTEMPTS``
        cancel_event: When set, polling stops at the next wait

    Raises:
        asyncio.CancelledError: cancel_event was set
        ExternalServiceError: the operation failed, produced no video, or
            did not finish within ``max_attempts`` polls
    """
    settings = get_settings()
    interval = settings.VIDEO_POLL_INTERVAL_SECONDS if interval is None else interval
    max_attempts = settings.VIDEO_POLL_MAX_ATTEMPTS if max_attempts is None else max_attempts
    cancel_event = cancel_event or asyncio.Event()

    operation = await start()
    attempts = 0
    while not operation.done:
        if attempts >= max_attempts:
            logger.warning(
                "Video operation %s still running after %d polls", operation.name, attempts
            )
            raise ExternalServiceError("Video generation timed out")
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass
        else:
            logger.info("Video operation %s cancelled", operation.name)
            raise asyncio.CancelledError()
        operation = await fetch(operation)
        attempts += 1

    if operation.error:
        raise ExternalServiceError(f"Video generation failed: {operation.error}")
    if not operation.video_uri:
        raise ExternalServiceError("Video generation completed but no download link was provided")
    return operation

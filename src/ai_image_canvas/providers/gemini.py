"""
Google Gemini Provider - Imagen, Gemini Image and Veo models.

Supports:
- Imagen 4: Text-to-image via :predict endpoint
- Gemini 2.5 Flash Image: Editing and combining via :generateContent
- Veo 3.1: Image-to-video via :predictLongRunning plus operation polling

API References:
- https://ai.google.dev/gemini-api/docs/imagen
- https://ai.google.dev/gemini-api/docs/image-generation
- https://ai.google.dev/gemini-api/docs/video
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import aiohttp

from ai_image_canvas.providers.base import (
    ImageProvider,
    GenerationRequest,
    GenerationResult,
    ProviderConfig,
    GenerationError,
    AuthenticationError,
    RateLimitError,
)


logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10.0


class GeminiProvider(ImageProvider):
    """
    Google Gemini/Imagen/Veo provider.

    Imagen models handle text-to-image, Gemini Image models handle edit and
    combine (one or more inline images plus a text part), Veo handles
    image-to-video.
    """

    id = "gemini"
    name = "Google Gemini"
    base_url = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.poll_interval = float(config.extra.get("poll_interval", DEFAULT_POLL_INTERVAL))

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate an image using Google's APIs."""
        started = time.monotonic()
        if request.images:
            result = await self._generate_gemini(request)
        else:
            result = await self._generate_imagen(request)
        result.generation_time = time.monotonic() - started
        return result

    async def _generate_imagen(self, request: GenerationRequest) -> GenerationResult:
        """Generate an image using Imagen models via :predict endpoint.

        Imagen is used for text-to-image only.
        """
        url = f"{self.base_url}/models/{request.model.id}:predict"

        body = {
            "instances": [
                {"prompt": request.prompt}
            ],
            "parameters": {
                "sampleCount": 1,
                "outputOptions": {"mimeType": request.param("outputMimeType", "image/png")},
                "aspectRatio": request.param("aspectRatio", "1:1"),
            },
        }

        response = await self._post(url, body)
        return self._parse_imagen_response(response, request)

    async def _generate_gemini(self, request: GenerationRequest) -> GenerationResult:
        """Edit or combine images using Gemini models via :generateContent endpoint."""
        if not request.images:
            raise GenerationError("At least one image is required for editing or combining.")

        url = f"{self.base_url}/models/{request.model.id}:generateContent"

        # Image parts first, text prompt last
        parts: list[dict[str, Any]] = [
            {
                "inlineData": {
                    "mimeType": img.mime_type,
                    "data": img.data,
                }
            }
            for img in request.images
        ]
        parts.append({"text": request.prompt})

        body = {
            "contents": [{"parts": parts}],
            "generationConfig": {"responseModalities": ["IMAGE"]},
        }

        response = await self._post(url, body)
        return self._parse_gemini_response(response, request)

    async def generate_video(self, request: GenerationRequest) -> GenerationResult:
        """Generate a video from one image and a prompt using Veo."""
        if len(request.images) != 1:
            raise GenerationError("Video generation needs exactly one input image.")

        image = request.images[0]
        url = f"{self.base_url}/models/{request.model.id}:predictLongRunning"
        body = {
            "instances": [
                {
                    "prompt": request.prompt,
                    "image": {
                        "bytesBase64Encoded": image.data,
                        "mimeType": image.mime_type,
                    },
                }
            ],
            "parameters": {
                "sampleCount": 1,
                "resolution": request.param("resolution", "720p"),
                "aspectRatio": request.param("aspectRatio", "1:1"),
            },
        }

        started = time.monotonic()
        try:
            operation = await self._post(url, body)
            operation = await self._poll_operation(operation)
        except GenerationError as e:
            if "Requested entity was not found." in str(e):
                raise AuthenticationError(
                    "API key may be invalid. Please select a valid key and try again."
                ) from e
            raise

        samples = (
            operation.get("response", {})
            .get("generateVideoResponse", {})
            .get("generatedSamples", [])
        )
        download_link = samples[0].get("video", {}).get("uri") if samples else None
        if not download_link:
            raise GenerationError("Video generation completed, but no download link was found.")

        return GenerationResult(
            url=f"{download_link}&key={self.api_key}",
            model_id=request.model.id,
            prompt=request.prompt,
            generation_time=time.monotonic() - started,
        )

    async def _poll_operation(self, operation: dict) -> dict:
        """Poll a long-running operation at a fixed interval until it is done."""
        name = operation.get("name")
        if not name:
            raise GenerationError("No operation name in Veo response")

        url = f"{self.base_url}/{name}"
        async with aiohttp.ClientSession() as session:
            while not operation.get("done"):
                await asyncio.sleep(self.poll_interval)
                logger.debug("Polling video operation %s", name)
                async with session.get(url, headers=self._headers()) as resp:
                    operation = await resp.json(content_type=None)
                    self._check_error(resp.status, operation)

        if "error" in operation:
            raise GenerationError(
                f"Google API error: {operation['error'].get('message', 'Unknown error')}"
            )
        return operation

    async def validate_credentials(self) -> bool:
        """Listing models succeeds only with a valid key."""
        try:
            url = f"{self.base_url}/models"
            async with aiohttp.ClientSession() as session:
                async with session.get(url, headers=self._headers()) as resp:
                    return resp.status == 200
        except aiohttp.ClientError:
            return False

    def _parse_imagen_response(self, data: dict, request: GenerationRequest) -> GenerationResult:
        """Take the first base64 prediction."""
        for prediction in data.get("predictions", []):
            encoded = prediction.get("bytesBase64Encoded")
            if encoded:
                mime_type = prediction.get("mimeType", "image/png")
                return GenerationResult(
                    url=f"data:{mime_type};base64,{encoded}",
                    model_id=request.model.id,
                    prompt=request.prompt,
                )
        raise GenerationError("No image generated")

    def _parse_gemini_response(self, data: dict, request: GenerationRequest) -> GenerationResult:
        """Take the first inline image of the first candidate."""
        candidates = data.get("candidates") or []
        parts = candidates[0].get("content", {}).get("parts") if candidates else None
        if not parts:
            raise GenerationError("No image was returned from the edit/combine operation.")

        text_response = None
        for part in parts:
            if "text" in part and not text_response:
                text_response = part["text"]
            inline_data = part.get("inlineData")
            if inline_data:
                encoded = inline_data.get("data")
                mime_type = inline_data.get("mimeType")
                if not encoded or not mime_type:
                    raise GenerationError(
                        "No image data was returned from the edit/combine operation."
                    )
                return GenerationResult(
                    url=f"data:{mime_type};base64,{encoded}",
                    model_id=request.model.id,
                    prompt=request.prompt,
                    text=text_response,
                )

        raise GenerationError("No image was returned from the edit/combine operation.")

    def _headers(self) -> dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    async def _post(self, url: str, body: dict) -> dict:
        """POST `body` as JSON with the API key header; returns the decoded reply."""
        if not self.is_configured:
            raise AuthenticationError("Google API key is not configured")

        async with aiohttp.ClientSession() as session:
            async with session.post(url, json=body, headers=self._headers()) as resp:
                data = await resp.json(content_type=None)
                self._check_error(resp.status, data)
                return data

    def _check_error(self, status: int, data: dict) -> None:
        """Map an HTTP error status to the matching ProviderError."""
        if status == 401 or status == 403:
            raise AuthenticationError("Invalid Google API key")
        elif status == 429:
            error = RateLimitError("Google API rate limit exceeded")
            error.retry_after = 60
            raise error
        elif status >= 400:
            error_msg = (data or {}).get("error", {}).get("message", "Unknown error")
            raise GenerationError(f"Google API error: {error_msg}")


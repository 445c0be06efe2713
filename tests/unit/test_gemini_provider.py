"""
Unit tests for GeminiProvider request building and response parsing.

HTTP is never touched: `_post` is replaced per test.
"""

import asyncio

import pytest

from ai_image_canvas.core.data_types import ImagePart
from ai_image_canvas.providers.base import (
    AuthenticationError,
    GenerationError,
    GenerationMode,
    GenerationRequest,
    ProviderConfig,
    RateLimitError,
)
from ai_image_canvas.providers.gemini import GeminiProvider
from ai_image_canvas.providers.registry import (
    BUILTIN_MODEL_CARDS,
    IMAGE_EDIT_MODEL,
    IMAGE_TO_VIDEO_MODEL,
    TEXT_TO_IMAGE_MODEL,
)


@pytest.fixture
def provider():
    return GeminiProvider(ProviderConfig(api_key="secret", extra={"poll_interval": 0}))


def _request(model_id, images=(), mode=GenerationMode.TEXT_TO_IMAGE):
    return GenerationRequest(
        model=BUILTIN_MODEL_CARDS[model_id],
        prompt="a red kite",
        mode=mode,
        images=list(images),
    )


def _capture(provider, response):
    sent = []

    async def fake_post(url, body):
        sent.append((url, body))
        return response

    provider._post = fake_post
    return sent


def test_text_to_image_uses_imagen(provider):
    sent = _capture(provider, {"predictions": [{"bytesBase64Encoded": "QUJD"}]})

    result = asyncio.run(provider.generate(_request(TEXT_TO_IMAGE_MODEL)))

    url, body = sent[0]
    assert url.endswith("/models/imagen-4.0-generate-001:predict")
    assert body["parameters"]["sampleCount"] == 1
    assert body["parameters"]["aspectRatio"] == "1:1"
    assert body["parameters"]["outputOptions"]["mimeType"] == "image/png"
    assert result.url == "data:image/png;base64,QUJD"


def test_edit_sends_images_before_text(provider):
    response = {
        "candidates": [
            {"content": {"parts": [{"inlineData": {"mimeType": "image/jpeg", "data": "WFla"}}]}}
        ]
    }
    sent = _capture(provider, response)
    images = [ImagePart("QUJD", "image/png"), ImagePart("REVG", "image/webp")]

    result = asyncio.run(provider.generate(_request(IMAGE_EDIT_MODEL, images, GenerationMode.IMAGE_COMBINE)))

    url, body = sent[0]
    assert url.endswith("/models/gemini-2.5-flash-image:generateContent")
    parts = body["contents"][0]["parts"]
    assert parts[0]["inlineData"] == {"mimeType": "image/png", "data": "QUJD"}
    assert parts[1]["inlineData"] == {"mimeType": "image/webp", "data": "REVG"}
    assert parts[2] == {"text": "a red kite"}
    assert body["generationConfig"]["responseModalities"] == ["IMAGE"]
    assert result.url == "data:image/jpeg;base64,WFla"


def test_edit_without_inline_data_fails(provider):
    _capture(provider, {"candidates": [{"content": {"parts": [{"text": "sorry"}]}}]})
    request = _request(IMAGE_EDIT_MODEL, [ImagePart("QUJD")], GenerationMode.IMAGE_EDIT)

    with pytest.raises(GenerationError):
        asyncio.run(provider.generate(request))


def test_video_appends_key_to_uri(provider):
    _capture(provider, {
        "name": "operations/abc",
        "done": True,
        "response": {
            "generateVideoResponse": {
                "generatedSamples": [{"video": {"uri": "https://files.example/v?alt=media"}}]
            }
        },
    })
    request = _request(IMAGE_TO_VIDEO_MODEL, [ImagePart("QUJD")], GenerationMode.IMAGE_TO_VIDEO)

    result = asyncio.run(provider.generate_video(request))

    assert result.url == "https://files.example/v?alt=media&key=secret"


def test_video_not_found_means_bad_key(provider):
    async def fake_post(url, body):
        raise GenerationError("Google API error: Requested entity was not found.")

    provider._post = fake_post
    request = _request(IMAGE_TO_VIDEO_MODEL, [ImagePart("QUJD")], GenerationMode.IMAGE_TO_VIDEO)

    with pytest.raises(AuthenticationError, match="API key may be invalid"):
        asyncio.run(provider.generate_video(request))


def test_video_needs_one_image(provider):
    with pytest.raises(GenerationError):
        asyncio.run(provider.generate_video(_request(IMAGE_TO_VIDEO_MODEL)))


def test_missing_key_is_authentication_error():
    provider = GeminiProvider(ProviderConfig())
    with pytest.raises(AuthenticationError):
        asyncio.run(provider.generate(_request(TEXT_TO_IMAGE_MODEL)))


@pytest.mark.parametrize(
    "status, error",
    [(401, AuthenticationError), (403, AuthenticationError), (429, RateLimitError), (500, GenerationError)],
)
def test_check_error(provider, status, error):
    with pytest.raises(error):
        provider._check_error(status, {"error": {"message": "nope"}})

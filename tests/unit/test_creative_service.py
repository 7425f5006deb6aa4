"""Unit tests for the AI collaborator: video scripts, scene images and video polling.

The LLM and the media generation API are replaced with fakes; nothing here
touches the network.
"""

import asyncio
import json

import httpx
import pytest
from libs.common.config import get_settings
from services.deck_service.errors import EntityNotFound, ExternalServiceError, PermissionDenied
from services.deck_service.providers.base import AIProviderResponse
from services.deck_service.providers.media import (
    GeneratedImage,
    MediaGenerationClient,
    VideoOperation,
    poll_video_operation,
)
from services.deck_service.services import creative_service
from services.deck_service.services.creative_service import (
    build_scene_image_prompt,
    deck_products,
    find_own_deck,
    generate_scene_image,
    generate_scene_video,
    require_seller,
    generate_video_script,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fake_llm(content: str, calls: list | None = None):
    async def fake_call_llm(system_prompt, user_prompt, **kwargs):
        if calls is not None:
            calls.append({"user_prompt": user_prompt, **kwargs})
        return AIProviderResponse(content=content, model="test-model", provider="test")

    return fake_call_llm


class FakeMediaClient:
    """Operation finishes after ``polls_needed`` fetches."""

    def __init__(self, polls_needed=2, video_uri="https://media.test/video.mp4", error=None):
        self.polls_needed = polls_needed
        self.video_uri = video_uri
        self.error = error
        self.fetches = 0
        self.started_with = None

    async def start_video(self, prompt, image_base64=None, mime_type="image/png"):
        self.started_with = (prompt, image_base64, mime_type)
        return VideoOperation(name="operations/op-1")

    async def get_operation(self, operation):
        self.fetches += 1
        if self.fetches < self.polls_needed:
            return VideoOperation(name=operation.name)
        return VideoOperation(
            name=operation.name, done=True, video_uri=self.video_uri, error=self.error
        )


# ---------------------------------------------------------------------------
# Video scripts
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_script_keeps_only_deck_images(brand_store, monkeypatch):
    deck = find_own_deck(brand_store, "deck1")
    products = deck_products(brand_store, deck)
    good_url = products[1].variants[0].media_url
    scenes = [
        {"imageUrl": good_url, "duration": 3000, "textOverlay": "New season", "animationStyle": "pan-left"},
        {"imageUrl": "https://elsewhere.test/x.jpg", "duration": 3000, "textOverlay": "Nope"},
        {"imageUrl": good_url, "duration": -1, "textOverlay": "Bad duration"},
    ]
    calls = []
    monkeypatch.setattr(creative_service, "call_llm", _fake_llm(json.dumps(scenes), calls))

    result = await generate_video_script(deck, products, style="energetic", music_title="Runway")

    assert len(result) == 1
    assert result[0].image_url == good_url
    assert result[0].animation_style == "pan-left"
    assert good_url in calls[0]["user_prompt"]
    assert "Video style: energetic" in calls[0]["user_prompt"]
    assert calls[0]["temperature"] == 0.7


@pytest.mark.asyncio
@pytest.mark.unit
async def test_script_accepts_fenced_json(brand_store, monkeypatch):
    deck = find_own_deck(brand_store, "deck2")
    products = deck_products(brand_store, deck)
    url = products[0].variants[1].media_url
    content = "```json\n" + json.dumps([{"imageUrl": url, "duration": 2500}]) + "\n```"
    monkeypatch.setattr(creative_service, "call_llm", _fake_llm(content))

    [scene] = await generate_video_script(deck, products)

    assert scene.animation_style == "zoom-in"


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("content", ["not json", "{}", "[]"])
async def test_script_rejects_bad_format(brand_store, monkeypatch, content):
    deck = find_own_deck(brand_store, "deck1")
    monkeypatch.setattr(creative_service, "call_llm", _fake_llm(content))

    with pytest.raises(ExternalServiceError):
        await generate_video_script(deck, deck_products(brand_store, deck))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_script_with_no_valid_scenes(brand_store, monkeypatch):
    deck = find_own_deck(brand_store, "deck1")
    content = json.dumps([{"imageUrl": "https://elsewhere.test/x.jpg", "duration": 3000}])
    monkeypatch.setattr(creative_service, "call_llm", _fake_llm(content))

    with pytest.raises(ExternalServiceError):
        await generate_video_script(deck, deck_products(brand_store, deck))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_script_needs_assets(brand_store):
    deck = find_own_deck(brand_store, "deck1")

    with pytest.raises(ExternalServiceError):
        await generate_video_script(deck, [])


@pytest.mark.unit
def test_find_own_deck_rejects_other_brands(brand_store):
    with pytest.raises(EntityNotFound):
        find_own_deck(brand_store, "deck3")


# ---------------------------------------------------------------------------
# Scene video polling
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_poll_until_done():
    client = FakeMediaClient(polls_needed=3)

    operation = await poll_video_operation(
        lambda: client.start_video("p"),
        client.get_operation,
        interval=0,
        max_attempts=5,
    )

    assert operation.done is True
    assert operation.video_uri == "https://media.test/video.mp4"
    assert client.fetches == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_poll_gives_up_after_max_attempts():
    client = FakeMediaClient(polls_needed=100)

    with pytest.raises(ExternalServiceError, match="timed out"):
        await poll_video_operation(
            lambda: client.start_video("p"), client.get_operation, interval=0, max_attempts=2
        )

    assert client.fetches == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_poll_stops_when_cancelled():
    client = FakeMediaClient(polls_needed=100)
    cancel_event = asyncio.Event()
    cancel_event.set()

    with pytest.raises(asyncio.CancelledError):
        await poll_video_operation(
            lambda: client.start_video("p"),
            client.get_operation,
            interval=5,
            max_attempts=10,
            cancel_event=cancel_event,
        )

    assert client.fetches == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_poll_reports_operation_error():
    client = FakeMediaClient(polls_needed=1, video_uri=None, error="quota exhausted")

    with pytest.raises(ExternalServiceError, match="quota exhausted"):
        await poll_video_operation(
            lambda: client.start_video("p"), client.get_operation, interval=0, max_attempts=3
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_poll_requires_video_link():
    client = FakeMediaClient(polls_needed=1, video_uri=None)

    with pytest.raises(ExternalServiceError, match="no download link"):
        await poll_video_operation(
            lambda: client.start_video("p"), client.get_operation, interval=0, max_attempts=3
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_generate_scene_video_passes_image(monkeypatch):
    monkeypatch.setattr(get_settings(), "VIDEO_POLL_INTERVAL_SECONDS", 0)
    client = FakeMediaClient(polls_needed=1)

    operation = await generate_scene_video("slow zoom", "aGVsbG8=", "image/jpeg", client=client)

    assert operation.video_uri == "https://media.test/video.mp4"
    assert client.started_with == ("slow zoom", "aGVsbG8=", "image/jpeg")


@pytest.mark.unit
def test_operation_from_response():
    data = {
        "name": "operations/op-9",
        "done": True,
        "response": {
            "generateVideoResponse": {
                "generatedSamples": [{"video": {"uri": "https://media.test/op-9.mp4"}}]
            }
        },
    }

    operation = VideoOperation.from_response(data)

    assert operation == VideoOperation(
        name="operations/op-9", done=True, video_uri="https://media.test/op-9.mp4"
    )
    assert VideoOperation.from_response({"name": "x", "error": {"message": "boom"}}).error == "boom"


# ---------------------------------------------------------------------------
# Scene images
# ---------------------------------------------------------------------------


def _image_client(handler) -> MediaGenerationClient:
    return MediaGenerationClient(
        api_key="test-key",
        base_url="https://media.test/v1beta",
        image_model="imagen-test",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    "kind, expected",
    [
        ("background", "Scene: marble counter."),
        ("pattern", "Style: art deco."),
        ("sticker", 'sticker of "lemon"'),
    ],
)
def test_scene_image_prompts(kind, expected):
    prompt = {"background": "marble counter", "pattern": "art deco", "sticker": "lemon"}[kind]

    assert expected in build_scene_image_prompt(kind, f"  {prompt} ")


@pytest.mark.unit
def test_unknown_scene_image_kind():
    with pytest.raises(ValueError):
        build_scene_image_prompt("poster", "anything")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_generate_scene_image_request_and_result():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"predictions": [{"bytesBase64Encoded": "aW1n"}]})

    image = await generate_scene_image("pattern", "art deco", client=_image_client(handler))

    assert image == GeneratedImage(image_base64="aW1n", mime_type="image/jpeg")
    assert image.data_url == "data:image/jpeg;base64,aW1n"
    [request] = requests
    assert request.url == "https://media.test/v1beta/models/imagen-test:predict"
    assert request.headers["x-goog-api-key"] == "test-key"
    body = json.loads(request.content)
    assert body["instances"] == [
        {"prompt": "A seamless, abstract, visually pleasing pattern. Style: art deco."}
    ]
    assert body["parameters"] == {
        "sampleCount": 1,
        "aspectRatio": "1:1",
        "outputOptions": {"mimeType": "image/jpeg"},
    }


@pytest.mark.asyncio
@pytest.mark.unit
async def test_generate_scene_image_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "quota exhausted"}})

    with pytest.raises(ExternalServiceError, match="quota exhausted"):
        await generate_scene_image("sticker", "lemon", client=_image_client(handler))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_generate_scene_image_without_image():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"predictions": []})

    with pytest.raises(ExternalServiceError, match="no image"):
        await generate_scene_image("background", "beach", client=_image_client(handler))


@pytest.mark.unit
def test_media_client_requires_api_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "AI_API_KEY", "")

    with pytest.raises(ExternalServiceError):
        MediaGenerationClient()


@pytest.mark.unit
def test_studio_is_for_sellers(customer_store):
    with pytest.raises(PermissionDenied):
        require_seller(customer_store)

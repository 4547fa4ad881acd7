import asyncio
import base64
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from google.genai import types

from atelier.config import Settings
from atelier.errors import (
    ConfigurationError,
    EmptyResponse,
    GenerationError,
    NoAudioData,
    UnexpectedTextResponse,
    VideoEntitlementError,
)
from atelier.models import AtelierProfile, GenerationConfig, UploadedImage, VideoRequest
from atelier.service import CAPTION_EMPTY, CAPTION_ERROR, GeminiService

PROFILE = AtelierProfile(name="Ateliê Teste", description="Peças feitas à mão")
IMAGE_URI = "data:image/png;base64," + base64.b64encode(b"still").decode()


@pytest.fixture
def mock_genai_client():
    with patch("atelier.service.genai.Client") as mock:
        yield mock


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(default_api_key="default-key", media_dir=tmp_path, poll_interval=0)


def _response(*parts) -> SimpleNamespace:
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=types.Content(role="model", parts=list(parts)))],
    )


def _product() -> UploadedImage:
    return UploadedImage(base64_data=base64.b64encode(b"bag").decode())


def test_generate_image_success(mock_genai_client, settings) -> None:
    generate = AsyncMock(
        return_value=_response(
            types.Part(text="Here it is"),
            types.Part(inline_data=types.Blob(data=b"png-bytes", mime_type="image/png")),
        ),
    )
    mock_genai_client.return_value.aio.models.generate_content = generate

    service = GeminiService(settings)
    config = GenerationConfig(environment="garden")
    result = asyncio.run(service.generate_image([_product()], config, PROFILE))

    assert result.kind == "image"
    assert result.data_uri == "data:image/png;base64," + base64.b64encode(b"png-bytes").decode()
    mock_genai_client.assert_called_with(api_key="default-key")

    kwargs = generate.call_args.kwargs
    assert kwargs["model"] == settings.image_model
    parts = kwargs["contents"][0].parts
    assert parts[0].inline_data.data == b"bag"
    assert "garden" in parts[-1].text
    assert PROFILE.name in kwargs["config"].system_instruction


def test_generate_image_text_only(mock_genai_client, settings) -> None:
    chatter = "I cannot draw that, but let me describe it. " * 10
    mock_genai_client.return_value.aio.models.generate_content = AsyncMock(
        return_value=_response(types.Part(text=chatter)),
    )

    service = GeminiService(settings)
    with pytest.raises(UnexpectedTextResponse) as excinfo:
        asyncio.run(service.generate_image([_product()], GenerationConfig(), PROFILE))

    assert excinfo.value.snippet == chatter.strip()[:100]


@pytest.mark.parametrize(
    "response",
    [
        SimpleNamespace(candidates=[]),
        SimpleNamespace(candidates=None),
        SimpleNamespace(candidates=[SimpleNamespace(content=None)]),
    ],
)
def test_generate_image_empty(mock_genai_client, settings, response) -> None:
    mock_genai_client.return_value.aio.models.generate_content = AsyncMock(
        return_value=response,
    )

    service = GeminiService(settings)
    with pytest.raises(EmptyResponse):
        asyncio.run(service.generate_image([_product()], GenerationConfig(), PROFILE))


def test_generate_image_transport_error(mock_genai_client, settings) -> None:
    mock_genai_client.return_value.aio.models.generate_content = AsyncMock(
        side_effect=Exception("503 UNAVAILABLE"),
    )

    service = GeminiService(settings)
    with pytest.raises(GenerationError, match="Failed to generate image"):
        asyncio.run(service.generate_image([_product()], GenerationConfig(), PROFILE))


def test_generate_image_without_credential(mock_genai_client, tmp_path) -> None:
    service = GeminiService(Settings(default_api_key=None, media_dir=tmp_path))

    with pytest.raises(ConfigurationError):
        asyncio.run(service.generate_image([_product()], GenerationConfig(), PROFILE))
    mock_genai_client.assert_not_called()


def test_refine_image(mock_genai_client, settings) -> None:
    generate = AsyncMock(
        return_value=_response(
            types.Part(inline_data=types.Blob(data=b"edited", mime_type="image/png")),
        ),
    )
    mock_genai_client.return_value.aio.models.generate_content = generate

    service = GeminiService(settings)
    result = asyncio.run(service.refine_image(IMAGE_URI, "fundo azul", PROFILE))

    assert result.data_uri.endswith(base64.b64encode(b"edited").decode())
    parts = generate.call_args.kwargs["contents"][0].parts
    assert parts[0].inline_data.data == b"still"


def test_generate_captions(mock_genai_client, settings) -> None:
    generate = AsyncMock(
        return_value=SimpleNamespace(parsed=None, text='["um", "dois", "três", "quatro"]'),
    )
    mock_genai_client.return_value.aio.models.generate_content = generate

    service = GeminiService(settings)
    result = asyncio.run(service.generate_captions(GenerationConfig(), PROFILE))

    assert result.captions == ["um", "dois", "três", "quatro"]
    assert result.fallback is False
    config = generate.call_args.kwargs["config"]
    assert config.response_mime_type == "application/json"
    assert config.response_schema.type == types.Type.ARRAY


def test_generate_captions_uses_parsed(mock_genai_client, settings) -> None:
    mock_genai_client.return_value.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(parsed=["a", "b", "c"], text=None),
    )

    service = GeminiService(settings)
    result = asyncio.run(service.generate_captions(GenerationConfig(), PROFILE))

    assert result.captions == ["a", "b", "c"]


@pytest.mark.parametrize(
    "outcome",
    [
        Exception("network down"),
        SimpleNamespace(parsed=None, text="not json"),
        SimpleNamespace(parsed=None, text='{"caption": "x"}'),
    ],
)
def test_generate_captions_never_raises(mock_genai_client, settings, outcome) -> None:
    if isinstance(outcome, Exception):
        generate = AsyncMock(side_effect=outcome)
    else:
        generate = AsyncMock(return_value=outcome)
    mock_genai_client.return_value.aio.models.generate_content = generate

    service = GeminiService(settings)
    result = asyncio.run(service.generate_captions(GenerationConfig(), PROFILE))

    assert result.captions == [CAPTION_ERROR]
    assert result.fallback is True


def test_generate_captions_empty_text(mock_genai_client, settings) -> None:
    mock_genai_client.return_value.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(parsed=None, text=""),
    )

    service = GeminiService(settings)
    result = asyncio.run(service.generate_captions(GenerationConfig(), PROFILE))

    assert result.captions == [CAPTION_EMPTY]


def test_generate_captions_without_credential(tmp_path) -> None:
    service = GeminiService(Settings(default_api_key=None, media_dir=tmp_path))
    result = asyncio.run(service.generate_captions(GenerationConfig(), PROFILE))
    assert result.captions == [CAPTION_ERROR]


def _operation(done: bool, uri: str | None = None) -> SimpleNamespace:
    response = None
    if uri:
        response = SimpleNamespace(
            generated_videos=[SimpleNamespace(video=SimpleNamespace(uri=uri))],
        )
    return SimpleNamespace(name="operations/v1", done=done, error=None, response=response)


def test_generate_video(mock_genai_client, settings) -> None:
    uri = "https://example.test/v1beta/files/abc:download?alt=media"
    aio = mock_genai_client.return_value.aio
    aio.models.generate_videos = AsyncMock(return_value=_operation(False))
    aio.operations.get = AsyncMock(side_effect=[_operation(False), _operation(True, uri)])

    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, content=b"mp4-bytes")

    service = GeminiService(settings, transport=httpx.MockTransport(handler))
    request = VideoRequest(style="cinematic", motion_style="slow_pan", environment="beach")
    result = asyncio.run(service.generate_video(IMAGE_URI, request, PROFILE))

    assert result.kind == "video"
    assert result.path.read_bytes() == b"mp4-bytes"
    assert result.path.parent == settings.media_dir
    assert result.source_uri == uri
    assert aio.operations.get.await_count == 2

    assert seen[0].params["key"] == "default-key"
    assert seen[0].params["alt"] == "media"
    assert "alt=media" in str(seen[0])

    kwargs = aio.models.generate_videos.call_args.kwargs
    assert kwargs["image"].image_bytes == b"still"
    assert kwargs["config"].number_of_videos == 1
    assert kwargs["config"].aspect_ratio == "9:16"
    assert kwargs["config"].resolution == "720p"
    assert "slow pan" in kwargs["prompt"]


def test_generate_video_uses_dedicated_key(mock_genai_client, settings) -> None:
    uri = "https://example.test/files/abc:download?alt=media"
    aio = mock_genai_client.return_value.aio
    aio.models.generate_videos = AsyncMock(return_value=_operation(True, uri))

    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, content=b"mp4")

    profile = PROFILE.model_copy(update={"video_api_key": "veo-key"})
    service = GeminiService(settings, transport=httpx.MockTransport(handler))
    asyncio.run(service.generate_video(IMAGE_URI, VideoRequest(), profile))

    mock_genai_client.assert_called_with(api_key="veo-key")
    assert seen[0].params["key"] == "veo-key"


def test_generate_video_not_found_is_entitlement(mock_genai_client, settings) -> None:
    aio = mock_genai_client.return_value.aio
    aio.models.generate_videos = AsyncMock(
        side_effect=Exception("404 NOT_FOUND. Requested entity was not found."),
    )

    service = GeminiService(settings)
    with pytest.raises(VideoEntitlementError):
        asyncio.run(service.generate_video(IMAGE_URI, VideoRequest(), PROFILE))


def test_generate_video_download_404_is_entitlement(mock_genai_client, settings) -> None:
    aio = mock_genai_client.return_value.aio
    aio.models.generate_videos = AsyncMock(
        return_value=_operation(True, "https://example.test/files/x"),
    )
    transport = httpx.MockTransport(lambda request: httpx.Response(404))

    service = GeminiService(settings, transport=transport)
    with pytest.raises(VideoEntitlementError):
        asyncio.run(service.generate_video(IMAGE_URI, VideoRequest(), PROFILE))


def test_generate_video_other_failure(mock_genai_client, settings) -> None:
    aio = mock_genai_client.return_value.aio
    aio.models.generate_videos = AsyncMock(side_effect=Exception("500 INTERNAL"))

    service = GeminiService(settings)
    with pytest.raises(GenerationError, match="Failed to generate video") as excinfo:
        asyncio.run(service.generate_video(IMAGE_URI, VideoRequest(), PROFILE))
    assert not isinstance(excinfo.value, VideoEntitlementError)


def test_generate_video_without_uri(mock_genai_client, settings) -> None:
    aio = mock_genai_client.return_value.aio
    aio.models.generate_videos = AsyncMock(return_value=_operation(True))

    service = GeminiService(settings)
    with pytest.raises(EmptyResponse, match="No video URI"):
        asyncio.run(service.generate_video(IMAGE_URI, VideoRequest(), PROFILE))


def test_generate_speech(mock_genai_client, settings) -> None:
    pcm = b"\x01\x00\x02\x00" * 10
    generate = AsyncMock(
        return_value=_response(
            types.Part(inline_data=types.Blob(data=pcm, mime_type="audio/L16;rate=24000")),
        ),
    )
    mock_genai_client.return_value.aio.models.generate_content = generate

    service = GeminiService(settings)
    result = asyncio.run(service.generate_speech("Olá, bem-vindos!", PROFILE))

    wav = result.path.read_bytes()
    assert result.kind == "speech"
    assert wav[:4] == b"RIFF"
    assert wav[44:] == pcm
    config = generate.call_args.kwargs["config"]
    assert config.response_modalities == ["AUDIO"]
    voice = config.speech_config.voice_config.prebuilt_voice_config.voice_name
    assert voice == settings.narrator_voice


def test_generate_speech_base64_payload(mock_genai_client, settings) -> None:
    pcm = b"\x00\x01" * 8
    part = SimpleNamespace(
        inline_data=SimpleNamespace(data=base64.b64encode(pcm).decode()),
        text=None,
    )
    mock_genai_client.return_value.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))],
        ),
    )

    service = GeminiService(settings)
    result = asyncio.run(service.generate_speech("Olá", PROFILE))

    assert result.path.read_bytes()[44:] == pcm


def test_generate_speech_no_audio(mock_genai_client, settings) -> None:
    mock_genai_client.return_value.aio.models.generate_content = AsyncMock(
        return_value=_response(types.Part(text="sorry")),
    )

    service = GeminiService(settings)
    with pytest.raises(NoAudioData):
        asyncio.run(service.generate_speech("Olá", PROFILE))

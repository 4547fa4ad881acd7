"""Tests for the Pydantic models."""

import base64
from pathlib import Path

import pytest
from pydantic import TypeAdapter, ValidationError

from atelier.models import (
    DEFAULT_PROFILE,
    GenerationConfig,
    GenerationResult,
    SpeechResult,
    UploadedImage,
    VideoBundle,
    VideoRequest,
    VideoResult,
)


def test_models_instantiation() -> None:
    config = GenerationConfig(environment="garden", style="social_media")
    assert config.character == "none"
    assert config.has_character is False
    assert config.has_narration is False
    assert config.pattern_reference is None

    with pytest.raises(ValidationError):
        config.environment = "beach"

    assert DEFAULT_PROFILE.video_api_key is None


def test_uploaded_image_from_path(tmp_path) -> None:
    path = tmp_path / "bag.jpg"
    path.write_bytes(b"jpeg bytes")

    image = UploadedImage.from_path(path)

    assert image.filename == "bag.jpg"
    assert image.mime_type == "image/jpeg"
    assert image.raw_bytes() == b"jpeg bytes"
    assert image.preview_url == "data:image/jpeg;base64," + base64.b64encode(b"jpeg bytes").decode()


def test_uploaded_image_unknown_type(tmp_path) -> None:
    path = tmp_path / "scan.bin"
    path.write_bytes(b"x")
    assert UploadedImage.from_path(path).mime_type == "image/png"


def test_with_theme() -> None:
    config = GenerationConfig(character="woman", environment="gym")
    themed = config.with_theme({"environment": "living_room", "lighting": "natural"})

    assert themed.environment == "living_room"
    assert themed.lighting == "natural"
    assert themed.character == "woman"
    assert config.environment == "gym"


def test_video_request_from_config() -> None:
    config = GenerationConfig(style="vintage", motion_style="zoom_in", environment="beach")
    assert VideoRequest.from_config(config) == VideoRequest(
        style="vintage",
        motion_style="zoom_in",
        environment="beach",
    )


def test_result_union_discriminates() -> None:
    adapter = TypeAdapter(GenerationResult)
    result = adapter.validate_python({"kind": "speech", "path": "/tmp/a.wav"})
    assert isinstance(result, SpeechResult)

    with pytest.raises(ValidationError):
        adapter.validate_python({"kind": "hologram"})


def test_video_bundle_rejects_stale_narration() -> None:
    video = VideoResult(path=Path("v.mp4"), request_id="new")
    stale = SpeechResult(path=Path("a.wav"), request_id="old")

    with pytest.raises(ValidationError, match="belongs to request old"):
        VideoBundle(request_id="new", video=video, narration=stale)

    fresh = stale.model_copy(update={"request_id": "new"})
    assert VideoBundle(request_id="new", video=video, narration=fresh).narration == fresh

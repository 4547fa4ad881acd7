"""Service for interacting with the Google Gemini API."""

import json
import logging
import uuid
from pathlib import Path
from typing import Any

import httpx
from google import genai
from google.genai import types

from .audio import pcm_to_wav
from .config import Settings
from .credentials import resolve_credential
from .errors import (
    AtelierError,
    EmptyResponse,
    GenerationError,
    NoAudioData,
    UnexpectedTextResponse,
    VideoEntitlementError,
)
from .media import decode_data_uri, part_bytes, session_media_dir, to_data_uri, write_media
from .models import (
    AtelierProfile,
    CaptionsResult,
    GenerationConfig,
    ImageResult,
    SpeechResult,
    UploadedImage,
    VideoRequest,
    VideoResult,
)
from .polling import JobPoller
from .prompts import (
    CAPTION_SCHEMA,
    REFINE_SYSTEM_INSTRUCTION,
    build_caption_prompt,
    build_refine_parts,
    build_speech_prompt,
    build_video_prompt,
    compose_image_parts,
    image_system_instruction,
)

logger = logging.getLogger(__name__)

CAPTION_ERROR = "Erro ao gerar legendas."
CAPTION_EMPTY = "Não foi possível gerar legendas."
SNIPPET_LENGTH = 100


def _first_parts(response: Any) -> list:
    candidates = getattr(response, "candidates", None)
    if not candidates:
        return []
    content = candidates[0].content
    if content is None or not content.parts:
        return []
    return list(content.parts)


def _first_inline_data(parts: list) -> Any | None:
    for part in parts:
        if part.inline_data and part.inline_data.data:
            return part.inline_data
    return None


def _is_entitlement_failure(error: Exception) -> bool:
    """Video access denied shows up as a 'not found' error."""
    code = getattr(error, "code", None)
    response = getattr(error, "response", None)
    if code is None and isinstance(response, httpx.Response):
        code = response.status_code
    if code == 404:
        return True
    status = getattr(error, "status", None)
    if isinstance(status, str) and status.upper() == "NOT_FOUND":
        return True
    message = str(error).lower()
    return "not found" in message or "not_found" in message


class GeminiService:
    """Service to interact with Google Gemini API."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the service with explicit settings."""
        self.settings = settings
        self._transport = transport
        self._media_dir: Path | None = None

    @property
    def media_dir(self) -> Path:
        if self._media_dir is None:
            self._media_dir = session_media_dir(self.settings.media_dir)
        return self._media_dir

    def _client(self, profile: AtelierProfile) -> tuple[genai.Client, str]:
        api_key = resolve_credential(profile, self.settings)
        return genai.Client(api_key=api_key), api_key

    def _image_from_response(self, response: Any) -> ImageResult:
        parts = _first_parts(response)
        inline = _first_inline_data(parts)
        if inline is not None:
            return ImageResult(data_uri=to_data_uri(part_bytes(inline.data)))

        text = "".join(part.text for part in parts if part.text)
        if text.strip():
            raise UnexpectedTextResponse(text.strip()[:SNIPPET_LENGTH])
        raise EmptyResponse

    async def generate_image(
        self,
        images: list[UploadedImage],
        config: GenerationConfig,
        profile: AtelierProfile,
    ) -> ImageResult:
        """Compose products, references and scene into one UGC still.

        Args:
            images: Product images; the first one is the subject.
            config: Scene parameters.
            profile: Brand identity.

        Returns:
            ImageResult: The generated image as a PNG data URI.

        Raises:
            ConfigurationError: If no credential is available.
            UnexpectedTextResponse: If the model replied with text only.
            EmptyResponse: If the response holds neither image nor text.
            GenerationError: On any other failure.

        """
        client, _ = self._client(profile)
        parts = compose_image_parts(images, config)

        logger.info("Generating image from %d product image(s)", len(images))
        try:
            response = await client.aio.models.generate_content(
                model=self.settings.image_model,
                contents=[types.Content(role="user", parts=parts)],
                config=types.GenerateContentConfig(
                    system_instruction=image_system_instruction(profile),
                ),
            )
        except Exception as e:
            msg = f"Failed to generate image: {e}"
            raise GenerationError(msg) from e

        return self._image_from_response(response)

    async def refine_image(
        self,
        image_data_uri: str,
        instruction: str,
        profile: AtelierProfile,
    ) -> ImageResult:
        """Edit a previously generated still following a free-text instruction."""
        if not instruction.strip():
            msg = "Refine instruction is empty."
            raise ValueError(msg)
        client, _ = self._client(profile)

        try:
            response = await client.aio.models.generate_content(
                model=self.settings.image_model,
                contents=[
                    types.Content(
                        role="user",
                        parts=build_refine_parts(image_data_uri, instruction),
                    ),
                ],
                config=types.GenerateContentConfig(
                    system_instruction=REFINE_SYSTEM_INSTRUCTION,
                ),
            )
        except Exception as e:
            msg = f"Failed to refine image: {e}"
            raise GenerationError(msg) from e

        return self._image_from_response(response)

    async def generate_captions(
        self,
        config: GenerationConfig,
        profile: AtelierProfile,
    ) -> CaptionsResult:
        """Ask for three caption variants. Never raises.

        Any failure is logged and replaced by a single placeholder caption so
        that the image can still be delivered.
        """
        bundle = build_caption_prompt(config, profile)
        try:
            client, _ = self._client(profile)
            response = await client.aio.models.generate_content(
                model=self.settings.text_model,
                contents=bundle.text,
                config=types.GenerateContentConfig(
                    system_instruction=bundle.system_instruction,
                    response_mime_type="application/json",
                    response_schema=CAPTION_SCHEMA,
                ),
            )

            parsed = getattr(response, "parsed", None)
            if not isinstance(parsed, list):
                text = response.text
                if not text:
                    return CaptionsResult(captions=[CAPTION_EMPTY], fallback=True)
                parsed = json.loads(text)
            if not isinstance(parsed, list):
                msg = f"Expected a list of captions, got {type(parsed).__name__}"
                raise TypeError(msg)
        except Exception as e:  # noqa: BLE001
            logger.warning("Caption generation failed: %s", e)
            return CaptionsResult(captions=[CAPTION_ERROR], fallback=True)

        return CaptionsResult(captions=[str(caption) for caption in parsed])

    async def _download(self, uri: str, api_key: str) -> bytes:
        async with httpx.AsyncClient(
            transport=self._transport,
            follow_redirects=True,
            timeout=300.0,
        ) as http:
            url = httpx.URL(uri).copy_add_param("key", api_key)
            response = await http.get(url)
            response.raise_for_status()
            return response.content

    async def generate_video(
        self,
        image_data_uri: str,
        request: VideoRequest,
        profile: AtelierProfile,
    ) -> VideoResult:
        """Animate a still into a vertical social video.

        Args:
            image_data_uri: Source still, with or without a data URI prefix.
            request: Style, motion and environment labels.
            profile: Brand identity and optional dedicated video credential.

        Returns:
            VideoResult: Path of the downloaded MP4 in the session media directory.

        Raises:
            ConfigurationError: If no credential is available.
            VideoEntitlementError: If the credential cannot use the video model.
            GenerationTimeout: If the job outlives the polling deadline.
            GenerationError: On any other failure.

        """
        client, api_key = self._client(profile)
        prompt = build_video_prompt(
            request.style,
            request.motion_style,
            request.environment,
            profile.name,
        )
        poller = JobPoller(
            fetch=lambda operation: client.aio.operations.get(operation),
            interval=self.settings.poll_interval,
            timeout=self.settings.poll_timeout,
            max_attempts=self.settings.poll_max_attempts,
        )

        logger.info("Starting video generation (%s)", self.settings.video_model)
        try:
            operation = await client.aio.models.generate_videos(
                model=self.settings.video_model,
                prompt=prompt,
                image=types.Image(
                    image_bytes=decode_data_uri(image_data_uri),
                    mime_type="image/png",
                ),
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution="720p",
                    aspect_ratio="9:16",
                ),
            )
            operation = await poller.wait(operation)

            generated = operation.response.generated_videos if operation.response else None
            uri = generated[0].video.uri if generated and generated[0].video else None
            if not uri:
                msg = "No video URI returned."
                raise EmptyResponse(msg)

            video_bytes = await self._download(uri, api_key)
        except AtelierError:
            raise
        except Exception as e:
            if _is_entitlement_failure(e):
                msg = f"The active credential has no access to the video model: {e}"
                raise VideoEntitlementError(msg) from e
            msg = f"Failed to generate video: {e}"
            raise GenerationError(msg) from e

        path = write_media(video_bytes, self.media_dir / f"video-{uuid.uuid4().hex}.mp4")
        logger.info("Video saved to %s", path)
        return VideoResult(path=path, source_uri=uri)

    async def generate_speech(self, text: str, profile: AtelierProfile) -> SpeechResult:
        """Narrate a script with the fixed studio voice.

        Raises:
            NoAudioData: If the response carries no audio part.
            GenerationError: On any other failure.

        """
        if not text.strip():
            msg = "Narration script is empty."
            raise ValueError(msg)
        client, _ = self._client(profile)

        try:
            response = await client.aio.models.generate_content(
                model=self.settings.speech_model,
                contents=build_speech_prompt(text),
                config=types.GenerateContentConfig(
                    response_modalities=["AUDIO"],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(
                                voice_name=self.settings.narrator_voice,
                            ),
                        ),
                    ),
                ),
            )
        except Exception as e:
            msg = f"Failed to generate speech: {e}"
            raise GenerationError(msg) from e

        inline = _first_inline_data(_first_parts(response))
        if inline is None:
            raise NoAudioData

        wav = pcm_to_wav(
            part_bytes(inline.data),
            sample_rate=self.settings.speech_sample_rate,
        )
        path = write_media(wav, self.media_dir / f"narration-{uuid.uuid4().hex}.wav")
        return SpeechResult(path=path, sample_rate=self.settings.speech_sample_rate)

"""Orchestration of the image, caption, video and narration flows."""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable

from .errors import AtelierError, VideoEntitlementError
from .models import (
    AtelierProfile,
    CaptionsResult,
    GenerationConfig,
    GenerationOutcome,
    ImageResult,
    UploadedImage,
    VideoBundle,
    VideoRequest,
)
from .profile import ProfileStore
from .service import CAPTION_ERROR, GeminiService

logger = logging.getLogger(__name__)

ENTITLEMENT_MESSAGE = (
    "Falha ao gerar o vídeo: sua chave de API não tem acesso ao modelo Veo. "
    "Use uma chave de um projeto pago (com faturamento ativo) nas configurações."
)
NO_PRODUCT_MESSAGE = "Por favor, faça upload de pelo menos uma imagem do produto."

CredentialReselector = Callable[[], Awaitable[str | None]]


class Studio:
    """Sequence the generation calls for one session.

    Args:
        service: Client for the remote capabilities.
        profiles: Store holding the session profile.
        reselect_credential: Interaction asking the user for another video
            credential. Returns the new credential, or None when cancelled.
        open_settings: Called when the user must fix the settings by hand.

    """

    def __init__(
        self,
        service: GeminiService,
        profiles: ProfileStore,
        reselect_credential: CredentialReselector | None = None,
        open_settings: Callable[[], None] | None = None,
    ) -> None:
        self.service = service
        self.profiles = profiles
        self.reselect_credential = reselect_credential
        self.open_settings = open_settings

    async def generate(
        self,
        images: list[UploadedImage],
        config: GenerationConfig,
        auto_video: bool = False,
    ) -> GenerationOutcome:
        """Generate the still and its captions, then optionally the video.

        Raises:
            ValueError: If no product image was given.
            AtelierError: If the image generation failed.

        """
        if not images:
            raise ValueError(NO_PRODUCT_MESSAGE)
        profile = self.profiles.snapshot()

        image, captions = await asyncio.gather(
            self.service.generate_image(images, config, profile),
            self.service.generate_captions(config, profile),
            return_exceptions=True,
        )
        if isinstance(image, BaseException):
            raise image
        if isinstance(captions, BaseException):
            logger.warning("Caption generation raised: %s", captions)
            captions = CaptionsResult(captions=[CAPTION_ERROR], fallback=True)

        if not auto_video:
            return GenerationOutcome(image=image, captions=captions)

        try:
            bundle = await self.create_video(image.data_uri, config, profile)
        except AtelierError as e:
            logger.warning("Video generation failed: %s", e)
            return GenerationOutcome(image=image, captions=captions, video_error=str(e))
        return GenerationOutcome(image=image, captions=captions, video=bundle)

    async def refine(self, image_data_uri: str, instruction: str) -> ImageResult:
        return await self.service.refine_image(
            image_data_uri,
            instruction,
            self.profiles.snapshot(),
        )

    async def create_video(
        self,
        image_data_uri: str,
        config: GenerationConfig,
        profile: AtelierProfile | None = None,
    ) -> VideoBundle:
        """Generate the video (and narration) with one credential-reselection retry.

        Raises:
            VideoEntitlementError: If no entitled credential could be used.
            AtelierError: If the generation failed for another reason.

        """
        if profile is None:
            profile = self.profiles.snapshot()

        try:
            return await self._video_bundle(image_data_uri, config, profile)
        except VideoEntitlementError as e:
            logger.warning("Video model not available for this credential: %s", e)
            first_error = e

        credential = None
        if self.reselect_credential is not None:
            credential = await self.reselect_credential()
        if not credential or not credential.strip():
            self._signal_settings()
            raise VideoEntitlementError(ENTITLEMENT_MESSAGE) from first_error

        retry_profile = profile.model_copy(update={"video_api_key": credential.strip()})
        try:
            return await self._video_bundle(image_data_uri, config, retry_profile)
        except VideoEntitlementError as e:
            self._signal_settings()
            raise VideoEntitlementError(ENTITLEMENT_MESSAGE) from e
        except AtelierError:
            self._signal_settings()
            raise

    async def _video_bundle(
        self,
        image_data_uri: str,
        config: GenerationConfig,
        profile: AtelierProfile,
    ) -> VideoBundle:
        # Video and narration succeed or fail together.
        request_id = uuid.uuid4().hex
        video_call = self.service.generate_video(
            image_data_uri,
            VideoRequest.from_config(config),
            profile,
        )

        if not config.has_narration:
            video = await video_call
            return VideoBundle(
                request_id=request_id,
                video=video.model_copy(update={"request_id": request_id}),
            )

        video, narration = await asyncio.gather(
            video_call,
            self.service.generate_speech(config.narration_script, profile),
            return_exceptions=True,
        )
        if isinstance(video, BaseException):
            raise video
        if isinstance(narration, BaseException):
            raise narration
        return VideoBundle(
            request_id=request_id,
            video=video.model_copy(update={"request_id": request_id}),
            narration=narration.model_copy(update={"request_id": request_id}),
        )

    def _signal_settings(self) -> None:
        if self.open_settings is not None:
            self.open_settings()

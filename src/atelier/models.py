"""Pydantic data models for Atelier Studio."""

import base64
import mimetypes
import uuid
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

CLEAN_STUDIO_STYLE = "studio_clean"
NO_CHARACTER = "none"

ENVIRONMENTS = [
    ("living_room", "Sala de Estar Aconchegante"),
    ("kitchen", "Cozinha Moderna"),
    ("outdoor_park", "Parque ao Ar Livre"),
    ("studio_minimal", "Estúdio Minimalista"),
    ("beach", "Praia Ensolarada"),
    ("urban_street", "Rua Urbana"),
    ("luxury_bedroom", "Quarto de Luxo"),
    ("gym", "Academia"),
    ("garden", "Jardim Florido"),
]

CHARACTERS = [
    (NO_CHARACTER, "Apenas o Produto"),
    ("woman", "Mulher"),
    ("man", "Homem"),
    ("child", "Criança"),
    ("dog", "Cachorro"),
    ("cat", "Gato"),
    ("hand_model", "Mãos (Segurando o produto)"),
]

STYLES = [
    ("hyper_realistic", "Hiper Realista (Foto)"),
    ("social_media", "Estilo Instagram/TikTok"),
    ("cinematic", "Cinematográfico"),
    ("vintage", "Vintage / Retrô"),
    ("studio_product", "Fotografia de Produto (Clean)"),
    ("editorial", "Editorial de Moda"),
    (CLEAN_STUDIO_STYLE, "Estúdio Mágico (Fundo Branco/Limpo)"),
]

LIGHTING = [
    ("natural", "Luz Natural"),
    ("golden_hour", "Golden Hour (Pôr do sol)"),
    ("studio_soft", "Estúdio Suave"),
    ("neon", "Neon / Cyberpunk"),
    ("moody", "Dramático / Escuro"),
]

MOTION_STYLES = [
    ("slow_motion", "Câmera Lenta Elegante"),
    ("slow_pan", "Panorâmica Suave"),
    ("zoom_in", "Aproximação Lenta"),
    ("orbit_360", "Giro 360°"),
    ("handheld", "Câmera na Mão (UGC)"),
    ("fabric_flow", "Tecido ao Vento"),
]


class UploadedImage(BaseModel):
    """An uploaded asset, carried by value into generation requests."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    filename: str = ""
    path: Path | None = None
    preview_url: str = ""
    base64_data: str
    mime_type: str = "image/png"

    @classmethod
    def from_path(cls, path: Path) -> "UploadedImage":
        """Read an image file into an upload."""
        with path.open("rb") as f:
            data = f.read()

        mime_type, _ = mimetypes.guess_type(path)
        if not mime_type or not mime_type.startswith("image/"):
            mime_type = "image/png"

        encoded = base64.b64encode(data).decode("ascii")
        return cls(
            filename=path.name,
            path=path,
            preview_url=f"data:{mime_type};base64,{encoded}",
            base64_data=encoded,
            mime_type=mime_type,
        )

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.base64_data)


class GenerationConfig(BaseModel):
    """Scene parameters for one generation request."""

    model_config = ConfigDict(frozen=True)

    environment: str = ""
    character: str = NO_CHARACTER
    character_style: str = ""
    lighting: str = ""
    style: str = ""
    motion_style: str = ""
    narration_script: str = ""
    custom_prompt: str = ""
    pattern_reference: UploadedImage | None = None
    style_reference: UploadedImage | None = None

    @property
    def has_character(self) -> bool:
        return bool(self.character) and self.character != NO_CHARACTER

    @property
    def has_narration(self) -> bool:
        return bool(self.narration_script.strip())

    def with_theme(self, theme_config: dict) -> "GenerationConfig":
        """Return a copy with a seasonal theme's fields applied."""
        return self.model_copy(update=theme_config)


class AtelierProfile(BaseModel):
    """Brand identity steering every generation."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    video_api_key: str | None = None


DEFAULT_PROFILE = AtelierProfile(
    name="Glorinha Ateliê",
    description=(
        "Ateliê de costura e artesanato tradicional comandado por Mãe e Filha, "
        "que trabalham juntas há mais de 40 anos. Tom acolhedor, familiar e "
        "afetivo, enfatizando o feito à mão, a tradição e o amor em cada peça."
    ),
)


class VideoRequest(BaseModel):
    """Labels that shape the video prompt."""

    style: str = ""
    motion_style: str = ""
    environment: str = ""

    @classmethod
    def from_config(cls, config: GenerationConfig) -> "VideoRequest":
        return cls(
            style=config.style,
            motion_style=config.motion_style,
            environment=config.environment,
        )


class ImageResult(BaseModel):
    """A generated still, as a data URI."""

    kind: Literal["image"] = "image"
    data_uri: str


class CaptionsResult(BaseModel):
    """Caption variants, in the order the model returned them."""

    kind: Literal["captions"] = "captions"
    captions: list[str]
    fallback: bool = False


class VideoResult(BaseModel):
    """A generated video stored in the session media directory."""

    kind: Literal["video"] = "video"
    path: Path
    source_uri: str | None = None
    request_id: str | None = None


class SpeechResult(BaseModel):
    """Narration audio stored in the session media directory."""

    kind: Literal["speech"] = "speech"
    path: Path
    sample_rate: int = 24000
    request_id: str | None = None


GenerationResult = Annotated[
    Union[ImageResult, CaptionsResult, VideoResult, SpeechResult],
    Field(discriminator="kind"),
]


class VideoBundle(BaseModel):
    """A video and its narration, produced by the same request."""

    request_id: str
    video: VideoResult
    narration: SpeechResult | None = None

    @model_validator(mode="after")
    def check_pairing(self) -> "VideoBundle":
        """Reject members stamped by another request."""
        members = [self.video, self.narration] if self.narration else [self.video]
        for member in members:
            if member.request_id != self.request_id:
                msg = (
                    f"{member.kind} belongs to request {member.request_id}, "
                    f"not {self.request_id}"
                )
                raise ValueError(msg)
        return self


class GenerationOutcome(BaseModel):
    """Everything a main generation produced."""

    image: ImageResult
    captions: CaptionsResult
    video: VideoBundle | None = None
    video_error: str | None = None

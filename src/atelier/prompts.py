"""Prompt composition for every generation modality.

Everything here is a pure function of its inputs: the service sends exactly
what these functions return.
"""

from google.genai import types
from pydantic import BaseModel

from .media import decode_data_uri
from .models import CLEAN_STUDIO_STYLE, AtelierProfile, GenerationConfig, UploadedImage

FINAL_DIRECTIVE = (
    "ACTION: Generate the image now. Output only the image, "
    "with no commentary, description or text reply."
)

CLEAN_BACKGROUND_CLAUSE = (
    "- SPECIAL INSTRUCTION: Isolate the product on a clean, solid white or "
    "neutral background. Professional e-commerce studio lighting. "
    "Sharp focus. No clutter."
)

PATTERN_CLAUSE = (
    "INSTRUCTION: The NEXT image is a PATTERN/TEXTURE. Apply this texture to "
    "the clothing/material of the product in the first image. Replace the "
    "original pattern but keep the object's shape, folds, shadows and draping."
)

STYLE_REFERENCE_CLAUSE = (
    "INSTRUCTION: The NEXT image is a STYLE REFERENCE (Moodboard). "
    "Use its lighting, colors, and mood."
)

CAPTION_PERSONAS = (
    "curta e impactante, com um gancho forte na primeira linha",
    "storytelling, contando a história por trás da peça e do ateliê",
    "venda suave, convidando a encomendar sem soar insistente",
)

CAPTION_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(type=types.Type.STRING),
)


class PromptBundle(BaseModel):
    """User prompt plus its system framing."""

    text: str
    system_instruction: str


def _label(value: str) -> str:
    return value.replace("_", " ").strip()


def image_system_instruction(profile: AtelierProfile) -> str:
    return (
        "You are an expert UGC (User Generated Content) creator AI and "
        f'professional product photographer working for "{profile.name}".\n'
        "Your SOLE task is to generate a photorealistic image based on the "
        "input images and configuration.\n\n"
        "CRITICAL RULES:\n"
        "1. You MUST generate an image. Do not describe the image or reply "
        "conversationally.\n"
        "2. The FIRST image provided is always the PRODUCT (Subject).\n"
        "3. If a PATTERN/TEXTURE image is provided, apply it to the fabric or "
        "material of the product.\n"
        "4. If a STYLE REFERENCE image is provided, use its lighting, colors "
        "and mood.\n"
        "5. Blend everything seamlessly into the requested environment.\n"
        f"Brand context: {profile.description}"
    )


def build_image_instruction(config: GenerationConfig) -> str:
    """Build the instruction text that follows the image attachments."""
    clauses = ["Generate a high-quality, photorealistic image."]

    if config.pattern_reference:
        clauses.append(PATTERN_CLAUSE)
    if config.style_reference:
        clauses.append(STYLE_REFERENCE_CLAUSE)

    scene = ["SCENE CONFIGURATION:"]
    if config.environment:
        scene.append(f"- Environment: {_label(config.environment)}")
    if config.has_character:
        character = f"- Character: {_label(config.character)}"
        if config.character_style.strip():
            character += f" ({config.character_style.strip()})"
        scene.append(character)
    if config.style:
        scene.append(f"- Style: {_label(config.style)} aesthetic")
    if config.lighting:
        scene.append(f"- Lighting: {_label(config.lighting)}")
    clauses.append("\n".join(scene))

    if config.style == CLEAN_STUDIO_STYLE:
        clauses.append(CLEAN_BACKGROUND_CLAUSE)
    if config.custom_prompt.strip():
        clauses.append(f"- Additional Instructions: {config.custom_prompt.strip()}")

    clauses.append(FINAL_DIRECTIVE)
    return "\n\n".join(clauses)


def _image_part(image: UploadedImage) -> types.Part:
    return types.Part.from_bytes(data=image.raw_bytes(), mime_type=image.mime_type)


def compose_image_parts(
    images: list[UploadedImage],
    config: GenerationConfig,
) -> list[types.Part]:
    """Order attachments as products, pattern, style reference, then the text."""
    if not images:
        msg = "At least one product image is required."
        raise ValueError(msg)

    parts = [_image_part(img) for img in images]
    if config.pattern_reference:
        parts.append(_image_part(config.pattern_reference))
    if config.style_reference:
        parts.append(_image_part(config.style_reference))

    parts.append(types.Part.from_text(text=build_image_instruction(config)))
    return parts


def build_caption_prompt(
    config: GenerationConfig,
    profile: AtelierProfile,
) -> PromptBundle:
    personas = "\n".join(
        f"  {i}. Legenda {persona}." for i, persona in enumerate(CAPTION_PERSONAS, 1)
    )
    character = _label(config.character) if config.has_character else "Foco no produto"
    lines = [
        "Crie exatamente 3 opções de legendas para o Instagram para uma foto "
        "com as seguintes características:",
        f"- Ambiente: {_label(config.environment) or 'Estúdio do Ateliê'}",
        f"- Personagem: {character}",
        f"- Estilo: {_label(config.style) or 'Livre'}",
        f"- Detalhes extras: {config.custom_prompt.strip() or 'Nenhum'}",
    ]
    if config.pattern_reference:
        lines.append("- Destaque: A peça está com uma NOVA ESTAMPA exclusiva.")
    lines += [
        "",
        "Cada opção deve seguir uma persona diferente, nesta ordem:",
        personas,
        "",
        "As legendas devem convidar o cliente a conhecer o ateliê ou encomendar "
        "a peça. Inclua hashtags relevantes.",
    ]

    system = (
        f'Você é a gerente de mídias sociais do "{profile.name}".\n\n'
        "CONTEXTO DA MARCA:\n"
        f"{profile.description}\n\n"
        "REGRAS DE TOM:\n"
        "- Siga o tom de voz descrito no contexto da marca.\n"
        "- Valorize o feito à mão e o cuidado em cada peça.\n"
        "- Use emojis adequados ao universo da marca, sem exagero.\n"
        "- Responda apenas com a lista de legendas."
    )
    return PromptBundle(text="\n".join(lines), system_instruction=system)


def build_video_prompt(
    style: str,
    motion_style: str,
    environment: str,
    brand_name: str,
) -> str:
    motion = _label(motion_style) or "slow elegant"
    setting = _label(environment) or "studio"
    aesthetic = _label(style) or "natural"
    return (
        f"Vertical 9:16 product video for {brand_name}, framed for mobile "
        f"social feeds, with {motion} camera motion around the product in a "
        f"{setting} setting and a {aesthetic} aesthetic, "
        "authentic UGC look, high resolution, smooth motion."
    )


def build_speech_prompt(script: str) -> str:
    return f"Say warmly and naturally, like a proud artisan: {script.strip()}"


def build_refine_parts(image_data_uri: str, instruction: str) -> list[types.Part]:
    return [
        types.Part.from_bytes(data=decode_data_uri(image_data_uri), mime_type="image/png"),
        types.Part.from_text(
            text=(
                f"INSTRUCTION: {instruction.strip()}. "
                "Maintain the product look and high quality."
            ),
        ),
    ]


REFINE_SYSTEM_INSTRUCTION = (
    "You are a professional photo editor. Modify the image according to the "
    "instruction. Keep the main subject (product) identical."
)

"""Seasonal theme suggestions."""

import datetime

from pydantic import BaseModel


class SeasonalTheme(BaseModel):
    """A dated preset; months are 1-12 and ranges may wrap the year end."""

    id: str
    name: str
    description: str
    start_month: int
    start_day: int
    end_month: int
    end_day: int
    config: dict[str, str]

    def contains(self, day: datetime.date) -> bool:
        current = (day.month, day.day)
        start = (self.start_month, self.start_day)
        end = (self.end_month, self.end_day)
        if start <= end:
            return start <= current <= end
        return current >= start or current <= end


SEASONAL_THEMES = [
    SeasonalTheme(
        id="carnaval",
        name="Carnaval",
        description="Crie peças coloridas e vibrantes para a folia!",
        start_month=1, start_day=15,
        end_month=2, end_day=28,
        config={
            "environment": "outdoor_park",
            "lighting": "natural",
            "style": "social_media",
            "custom_prompt": (
                "Atmosfera de carnaval, confetes coloridos voando, fitas "
                "brilhantes, cores vibrantes, alegria, verão brasileiro."
            ),
        },
    ),
    SeasonalTheme(
        id="pascoa",
        name="Páscoa",
        description="Tons pastéis e coelhinhos para encantar.",
        start_month=3, start_day=1,
        end_month=4, end_day=15,
        config={
            "environment": "living_room",
            "lighting": "studio_soft",
            "style": "studio_product",
            "custom_prompt": (
                "Decoração de Páscoa, ovos de chocolate artesanais ao fundo, "
                "coelhinhos de pelúcia, flores de primavera, tons pastéis suaves."
            ),
        },
    ),
    SeasonalTheme(
        id="dia_maes",
        name="Dia das Mães",
        description="A data mais importante do ano! Amor e carinho.",
        start_month=4, start_day=16,
        end_month=5, end_day=15,
        config={
            "environment": "living_room",
            "lighting": "natural",
            "style": "social_media",
            "custom_prompt": (
                "Cenário emocionante de Dia das Mães, buquê de rosas cor de rosa, "
                "cartão de presente, iluminação suave e acolhedora."
            ),
        },
    ),
    SeasonalTheme(
        id="festas_juninas",
        name="Festa Junina",
        description="Hora do Xadrez! Bandeirinhas e clima rústico.",
        start_month=5, start_day=16,
        end_month=7, end_day=30,
        config={
            "environment": "outdoor_park",
            "lighting": "golden_hour",
            "style": "vintage",
            "custom_prompt": (
                "Festa Junina tradicional, bandeirinhas coloridas, fogueira ao "
                "fundo desfocada, tecido de chita, clima rústico de fazenda."
            ),
        },
    ),
    SeasonalTheme(
        id="dia_pais",
        name="Dia dos Pais",
        description="Estilo sóbrio e elegante para eles.",
        start_month=8, start_day=1,
        end_month=8, end_day=15,
        config={
            "environment": "studio_minimal",
            "lighting": "moody",
            "style": "editorial",
            "custom_prompt": (
                "Dia dos Pais, elementos em couro e madeira, paleta azul "
                "marinho e marrom, sofisticado."
            ),
        },
    ),
    SeasonalTheme(
        id="natal",
        name="Natal",
        description="A magia do Natal nas suas fotos.",
        start_month=11, start_day=1,
        end_month=12, end_day=26,
        config={
            "environment": "living_room",
            "lighting": "studio_soft",
            "style": "cinematic",
            "custom_prompt": (
                "Decoração de Natal clássica, árvore iluminada ao fundo, luzes "
                "em bokeh, presentes em vermelho e dourado, clima mágico."
            ),
        },
    ),
]

DEFAULT_THEME = SeasonalTheme(
    id="default",
    name="Coleção Atual",
    description="Destaque seus produtos com luz natural.",
    start_month=1, start_day=1,
    end_month=1, end_day=1,
    config={
        "environment": "studio_minimal",
        "lighting": "natural",
        "style": "social_media",
        "custom_prompt": (
            "Fundo clean e organizado, planta verde decorativa no canto, luz "
            "da manhã suave, foco total no produto."
        ),
    },
)


def current_season(today: datetime.date | None = None) -> SeasonalTheme:
    """Return the first theme covering ``today``, or the default collection."""
    if today is None:
        today = datetime.date.today()
    for theme in SEASONAL_THEMES:
        if theme.contains(today):
            return theme
    return DEFAULT_THEME

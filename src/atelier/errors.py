"""Error taxonomy for Atelier Studio."""


class AtelierError(RuntimeError):
    """Base class for every error raised by the studio."""


class ConfigurationError(AtelierError):
    """No usable credential. Fix it in the settings; never retried."""


class GenerationError(AtelierError):
    """Generic remote failure."""


class UnexpectedTextResponse(GenerationError):
    """The image model answered with commentary instead of an image."""

    def __init__(self, snippet: str) -> None:
        self.snippet = snippet
        super().__init__(
            f'The model returned text instead of an image: "{snippet}..." '
            "Please try again.",
        )


class EmptyResponse(GenerationError):
    """No usable media part in the response."""

    def __init__(self, msg: str = "No image data found in response.") -> None:
        super().__init__(msg)


class NoAudioData(GenerationError):
    """The speech model returned no audio part."""

    def __init__(self, msg: str = "No audio data found in response.") -> None:
        super().__init__(msg)


class VideoEntitlementError(GenerationError):
    """The active credential cannot access the video model."""


class GenerationTimeout(GenerationError):
    """A long-running job did not finish before its deadline."""

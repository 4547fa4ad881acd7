"""Runtime configuration for Atelier Studio."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_PROFILE_PATH = Path.home() / ".atelier" / "profile.json"


class Settings(BaseModel):
    """Explicit configuration passed to the service and the credential resolver."""

    default_api_key: str | None = None
    image_model: str = "gemini-2.5-flash-image"
    text_model: str = "gemini-2.5-flash"
    video_model: str = "veo-3.1-fast-generate-preview"
    speech_model: str = "gemini-2.5-flash-preview-tts"
    narrator_voice: str = "Kore"
    speech_sample_rate: int = 24000
    poll_interval: float = 5.0
    poll_timeout: float = 600.0
    poll_max_attempts: int = 240
    media_dir: Path | None = None
    profile_path: Path = DEFAULT_PROFILE_PATH

    @classmethod
    def from_env(cls, api_key: str | None = None) -> "Settings":
        """Build settings from the environment (and a local .env file)."""
        load_dotenv()
        if not api_key:
            api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")

        values: dict = {"default_api_key": api_key or None}
        if profile_path := os.getenv("ATELIER_PROFILE_PATH"):
            values["profile_path"] = Path(profile_path)
        if media_dir := os.getenv("ATELIER_MEDIA_DIR"):
            values["media_dir"] = Path(media_dir)
        if poll_interval := os.getenv("ATELIER_POLL_INTERVAL"):
            values["poll_interval"] = float(poll_interval)
        if poll_timeout := os.getenv("ATELIER_POLL_TIMEOUT"):
            values["poll_timeout"] = float(poll_timeout)
        if max_attempts := os.getenv("ATELIER_POLL_MAX_ATTEMPTS"):
            values["poll_max_attempts"] = int(max_attempts)
        return cls(**values)

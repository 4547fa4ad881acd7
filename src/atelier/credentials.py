"""Credential resolution."""

from .config import Settings
from .errors import ConfigurationError
from .models import AtelierProfile


def resolve_credential(profile: AtelierProfile, settings: Settings) -> str:
    """Pick the credential for a call.

    The profile's dedicated key wins over the default one. Having neither is
    a configuration problem for the user to fix in the settings.

    Raises:
        ConfigurationError: If no credential is available.

    """
    if profile.video_api_key and profile.video_api_key.strip():
        return profile.video_api_key.strip()
    if settings.default_api_key and settings.default_api_key.strip():
        return settings.default_api_key.strip()
    msg = "credential missing"
    raise ConfigurationError(msg)

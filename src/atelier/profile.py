"""Persisted brand profile."""

import logging
from pathlib import Path

from pydantic import ValidationError

from .models import DEFAULT_PROFILE, AtelierProfile

logger = logging.getLogger(__name__)


class ProfileStore:
    """Holds the session's single profile and its JSON slot on disk.

    The profile is immutable, so ``snapshot()`` hands callers an instance a
    later ``save()`` cannot change under them.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._profile = DEFAULT_PROFILE

    def load(self) -> AtelierProfile:
        """Read the stored profile, falling back to the default brand."""
        if not self.path.exists():
            self._profile = DEFAULT_PROFILE
            return self._profile

        try:
            with self.path.open("rb") as f:
                self._profile = AtelierProfile.model_validate_json(f.read())
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logger.warning("Ignoring unreadable profile at %s: %s", self.path, e)
            self._profile = DEFAULT_PROFILE
        return self._profile

    def save(self, profile: AtelierProfile) -> AtelierProfile:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            f.write(profile.model_dump_json(indent=2))
        self._profile = profile
        logger.info("Profile saved to %s", self.path)
        return profile

    def snapshot(self) -> AtelierProfile:
        return self._profile

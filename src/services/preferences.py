"""
Local Preferences Storage

Key-value preferences that survive a restart: the selected currency,
the theme, and a cached session hint (token + user id).

DESIGN DECISION: The cached token is only a hint for the first paint
(e.g. whether to show the login page straight away). It never grants
access to anything; the live session state decides that.
"""

import json
import os
from pathlib import Path
from typing import Optional

import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.models.transaction import Theme


logger = structlog.get_logger(__name__)


class Preferences(BaseModel):
    """Everything persisted locally between runs."""

    currency: str = Field(default="USD", min_length=3, max_length=3)
    theme: Theme = Theme.LIGHT
    session_token: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()


class PreferencesStore:
    """JSON-file backed preferences with atomic writes."""

    def __init__(self, path: Path, default_currency: str = "USD"):
        self._path = Path(path)
        self._default_currency = default_currency

    @property
    def path(self) -> Path:
        return self._path

    def _defaults(self) -> Preferences:
        return Preferences(currency=self._default_currency)

    def load(self) -> Preferences:
        """Read preferences; a missing or corrupt file yields defaults."""
        if not self._path.exists():
            return self._defaults()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return Preferences(**{"currency": self._default_currency, **data})
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning("preferences_unreadable", path=str(self._path), error=str(e))
            return self._defaults()

    def save(self, preferences: Preferences) -> None:
        """Write via a temp file + os.replace so a crash never leaves half a file."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(
            json.dumps(preferences.model_dump(mode="json"), indent=2),
            encoding="utf-8",
        )
        os.replace(tmp, self._path)

    def update(self, **fields) -> Preferences:
        """Load, change the given fields, validate, save."""
        current = self.load()
        updated = Preferences(**{**current.model_dump(), **fields})
        self.save(updated)
        return updated

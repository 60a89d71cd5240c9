"""
Application configuration manager.
Stores settings in a JSON file under the user config directory.
Secrets (API keys) are read from the environment and never persisted.
"""

import os
import json
import logging
from pathlib import Path

from transcript_chain.core.constants import (
    CONFIG_PATH, CookiesMode, DEFAULT_COOKIES_PATH,
    DEFAULT_TRANSCRIPT_LANGUAGES, DEFAULT_SUBTITLE_LANGUAGES,
    WHISPER_MODEL, WHISPER_LANGUAGE, MAX_RETRIES, RETRY_BASE_DELAY_SEC,
    MAX_TRANSCRIPT_LENGTH, SUPADATA_API_KEY_ENV, DISABLE_STT_ENV,
)

# Validation bounds
_MAX_RETRIES_MAX = 10
_RETRY_DELAY_MAX = 120.0
_TRANSCRIPT_LENGTH_MIN = 300
_WHISPER_MODELS = ("tiny", "base", "small", "medium", "large", "turbo")

logger = logging.getLogger(__name__)

_DEFAULTS = {
    'transcript_languages': list(DEFAULT_TRANSCRIPT_LANGUAGES),
    'subtitle_languages': list(DEFAULT_SUBTITLE_LANGUAGES),
    'whisper_model': WHISPER_MODEL,
    'whisper_language': WHISPER_LANGUAGE,
    'speech_to_text_enabled': True,
    'max_retries': MAX_RETRIES,
    'retry_base_delay_sec': RETRY_BASE_DELAY_SEC,
    'max_transcript_length': MAX_TRANSCRIPT_LENGTH,
    'cookies_mode': CookiesMode.OFF,
    'cookies_path': str(DEFAULT_COOKIES_PATH),
}

_TRUTHY = ("1", "true", "yes", "on")


class AppConfig:
    """Manages application configuration stored as JSON."""

    def __init__(self, config_path: Path | None = None, load: bool = True):
        self.path = config_path or CONFIG_PATH
        self._data: dict = dict(_DEFAULTS)
        if load:
            self.load()

    def load(self):
        """Load config from disk, merging with defaults."""
        self._data = dict(_DEFAULTS)
        if self.path.exists():
            try:
                with open(self.path, 'r') as f:
                    saved = json.load(f)
                for key, value in saved.items():
                    self._data[key] = self._validate(key, value)
            except Exception as e:
                logger.warning("Failed to load config: %s", e)

    def save(self):
        """Persist config to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self._data, f, indent=2)

    def get(self, key: str, default=None):
        return self._data.get(key, default)

    def set(self, key: str, value, persist: bool = True):
        value = self._validate(key, value)
        self._data[key] = value
        if persist:
            self.save()

    def _validate(self, key: str, value):
        """Validate and coerce config values to safe ranges."""
        if key in ('transcript_languages', 'subtitle_languages'):
            if isinstance(value, str):
                value = value.split(',')
            if not isinstance(value, (list, tuple)):
                logger.warning("Invalid %s %r, using default", key, value)
                return list(_DEFAULTS[key])
            langs = [str(v).strip() for v in value if str(v).strip()]
            return langs or list(_DEFAULTS[key])

        if key == 'max_retries':
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("Invalid max_retries %r, using default", value)
                return MAX_RETRIES
            return max(0, min(_MAX_RETRIES_MAX, value))

        if key == 'retry_base_delay_sec':
            try:
                value = float(value)
            except (TypeError, ValueError):
                logger.warning("Invalid retry_base_delay_sec %r, using default", value)
                return RETRY_BASE_DELAY_SEC
            return max(0.0, min(_RETRY_DELAY_MAX, value))

        if key == 'max_transcript_length':
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("Invalid max_transcript_length %r, using default", value)
                return MAX_TRANSCRIPT_LENGTH
            return max(_TRANSCRIPT_LENGTH_MIN, value)

        if key == 'whisper_model':
            if value not in _WHISPER_MODELS:
                logger.warning("Unknown whisper_model %r, using %s", value, WHISPER_MODEL)
                return WHISPER_MODEL

        if key == 'cookies_mode':
            if value not in (CookiesMode.OFF, CookiesMode.USE_FILE):
                logger.warning("Invalid cookies_mode %r, using OFF", value)
                return CookiesMode.OFF

        if key == 'speech_to_text_enabled':
            return bool(value)

        return value

    def as_dict(self) -> dict:
        return dict(self._data)

    # ── Typed accessors ───────────────────────────────────────────────

    @property
    def transcript_languages(self) -> list[str]:
        return list(self._data['transcript_languages'])

    @property
    def subtitle_languages(self) -> list[str]:
        return list(self._data['subtitle_languages'])

    @property
    def whisper_model(self) -> str:
        return self._data['whisper_model']

    @property
    def whisper_language(self) -> str:
        return self._data['whisper_language']

    @property
    def speech_to_text_enabled(self) -> bool:
        if os.environ.get(DISABLE_STT_ENV, "").strip().lower() in _TRUTHY:
            return False
        return self._data['speech_to_text_enabled']

    @property
    def max_retries(self) -> int:
        return self._data['max_retries']

    @property
    def retry_base_delay_sec(self) -> float:
        return self._data['retry_base_delay_sec']

    @property
    def max_transcript_length(self) -> int:
        return self._data['max_transcript_length']

    @property
    def cookies_mode(self) -> str:
        return self._data['cookies_mode']

    @property
    def cookies_path(self) -> Path:
        return Path(self._data['cookies_path'])

    @property
    def supadata_api_key(self) -> str | None:
        key = os.environ.get(SUPADATA_API_KEY_ENV, "").strip()
        return key or None

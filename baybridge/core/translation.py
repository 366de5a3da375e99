"""
Localization engine (Lingo.dev SDK).
Translates a single text; every failure surfaces as TranslationError.
"""

import asyncio
from typing import Any, Optional

import httpx
from lingodotdev import LingoDotDevEngine

from . import config


class TranslationError(Exception):
    """Raised when the localization service fails or returns an unusable payload."""
    pass


class LocalizationEngine:
    """
    Wraps LingoDotDevEngine for one request's worth of translations.

    localize_text(text, target_locale, source_locale=None, fast=True), where a
    None source means auto-detect. Calls are bounded by UPSTREAM_TIMEOUT_SEC.
    """

    def __init__(self, api_key: str, api_url: str = None, timeout: float = None, sdk: Any = None):
        if not api_key:
            raise ValueError("api_key is required")
        self.api_url = (api_url or config.get_translation_api_url()).rstrip("/")
        self.timeout = timeout if timeout is not None else config.get_upstream_timeout()
        if sdk is None:
            sdk = LingoDotDevEngine({"api_key": api_key, "api_url": self.api_url})
        self._sdk = sdk

    async def localize_text(self, text: str, target_locale: str,
                            source_locale: Optional[str] = None, fast: bool = True) -> str:
        """Translate text into target_locale."""
        params = {"source_locale": source_locale, "target_locale": target_locale, "fast": fast}

        try:
            translated = await asyncio.wait_for(self._sdk.localize_text(text, params), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise TranslationError(f"Localization timed out after {self.timeout}s") from e
        # The SDK reports HTTP failures as RuntimeError and bad requests as ValueError
        except (RuntimeError, ValueError, httpx.HTTPError) as e:
            raise TranslationError(f"Localization failed: {e}") from e
        finally:
            await self._sdk.close()

        if not isinstance(translated, str):
            raise TranslationError("Malformed localization response: text is not a string")
        if text and not translated:
            raise TranslationError("Malformed localization response: empty text")
        return translated


def get_localization_engine() -> Optional[LocalizationEngine]:
    """Get the configured engine. Returns None when no API key is set."""
    api_key = config.get_translation_api_key()
    if not api_key:
        return None
    return LocalizationEngine(api_key)

"""
Viewer-side translation with a per-viewer cache.
"""

import asyncio
from typing import Dict, Iterable, List, NamedTuple, Optional

from .classroom import ClassroomClient, TimelineItem
from util.logging import logger

STATUS_IDLE = "idle"
STATUS_OK = "ok"
STATUS_MISSING_KEY = "missing_key"
STATUS_ERROR = "error"


class CacheKey(NamedTuple):
    locale: str
    at: Optional[int]
    text: str


class TranslationCache:
    """
    (locale, timestamp, text) -> translated text.

    Process-local and unbounded: sized for a demo timeline, cleared when the
    viewer restarts. A miss followed by a put overwrites any earlier value.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, str] = {}

    def get(self, key: CacheKey) -> Optional[str]:
        return self._entries.get(key)

    def put(self, key: CacheKey, translated: str) -> None:
        self._entries[key] = translated

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ViewerTranslator:
    """
    Translates timeline items for a parent viewer and tracks the overall status.

    Each cache key reaches the translate endpoint at most once while a request
    for it is in flight; items sharing a key await the same request.
    """

    def __init__(self, client: ClassroomClient, cache: TranslationCache = None):
        self.client = client
        self.cache = cache if cache is not None else TranslationCache()
        self.status = STATUS_IDLE
        self._in_flight: Dict[CacheKey, asyncio.Task] = {}

    def reset_status(self) -> None:
        self.status = STATUS_IDLE

    def _request(self, key: CacheKey) -> asyncio.Task:
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self.client.translate(key.text, key.locale))
            self._in_flight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        return task

    def _forget(self, key: CacheKey, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def translate_item(self, item: TimelineItem, locale: str) -> Optional[str]:
        """Set item.view_text; returns it, or None when the item has no text."""
        text = item.text
        if not text:
            return None

        key = CacheKey(locale, item.at, text)
        cached = self.cache.get(key)
        if cached is not None:
            item.view_text = cached
            self.status = STATUS_OK
            return cached

        result = await self._request(key)
        if not result.ok:
            self.status = STATUS_MISSING_KEY if result.reason == "missing_key" else STATUS_ERROR
            # Degrade to raw text
            item.view_text = text
            return text

        self.cache.put(key, result.text)
        self.status = STATUS_OK
        item.view_text = result.text
        return result.text

    async def translate_items(self, items: Iterable[TimelineItem], locale: str) -> List[Optional[str]]:
        """Translate every item concurrently; completion order is not guaranteed."""
        items = list(items)
        results = await asyncio.gather(*(self.translate_item(item, locale) for item in items))
        logger.debug(f"Translated {sum(1 for r in results if r is not None)} of {len(items)} items to {locale}")
        return list(results)

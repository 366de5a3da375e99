"""Client side of the classroom bridge: poster, subscriber and viewer translation."""

from .classroom import AppendResult, ClassroomClient, SSEParser, TimelineItem, TranslateResult, parse_batch
from .viewer import CacheKey, TranslationCache, ViewerTranslator

__all__ = [
    'AppendResult',
    'ClassroomClient',
    'SSEParser',
    'TimelineItem',
    'TranslateResult',
    'parse_batch',
    'CacheKey',
    'TranslationCache',
    'ViewerTranslator'
]

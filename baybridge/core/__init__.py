"""
Core of the classroom updates bridge: configuration, records, stream store,
upstream clients and SSE framing.
"""

from .schema import Record, SequencedRecord, stream_name
from .store import IStreamStore, InMemoryStreamStore, get_stream_store
from .s2 import StreamServiceClient, StreamServiceError, StreamTail, get_stream_client
from .sse import StubSubscription, comment, data_event
from .translation import LocalizationEngine, TranslationError, get_localization_engine

__all__ = [
    'Record',
    'SequencedRecord',
    'stream_name',
    'IStreamStore',
    'InMemoryStreamStore',
    'get_stream_store',
    'StreamServiceClient',
    'StreamServiceError',
    'StreamTail',
    'get_stream_client',
    'StubSubscription',
    'comment',
    'data_event',
    'LocalizationEngine',
    'TranslationError',
    'get_localization_engine'
]

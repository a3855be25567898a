"""
Content Handlers

Generic and per-type handlers that retrieve and store content objects, the
taglink handler, and the registry that maps content types to handlers.
"""

from tuskfish.content_handlers.base import ContentHandler, SearchResult
from tuskfish.content_handlers.registry import HandlerRegistry
from tuskfish.content_handlers.taglink import TaglinkHandler
from tuskfish.content_handlers.typed import (
    ArticleHandler,
    AudioHandler,
    BlockHandler,
    CollectionHandler,
    DownloadHandler,
    ImageHandler,
    StaticHandler,
    TagHandler,
    TypedContentHandler,
    VideoHandler,
)

__all__ = [
    'ArticleHandler',
    'AudioHandler',
    'BlockHandler',
    'CollectionHandler',
    'ContentHandler',
    'DownloadHandler',
    'HandlerRegistry',
    'ImageHandler',
    'SearchResult',
    'StaticHandler',
    'TagHandler',
    'TaglinkHandler',
    'TypedContentHandler',
    'VideoHandler',
]

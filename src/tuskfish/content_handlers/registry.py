"""
Handler Registry

Maps each content type to its handler. All handlers share one database,
one pair of criteria factories and one taglink handler.
"""

import logging
from typing import Dict, List, Optional, Union

from tuskfish.content.types import ContentType
from tuskfish.content_handlers.base import ContentHandler
from tuskfish.content_handlers.taglink import TaglinkHandler
from tuskfish.content_handlers.typed import TYPED_HANDLERS, TypedContentHandler
from tuskfish.core.config.models import SiteConfig
from tuskfish.core.exceptions import ContentError
from tuskfish.criteria.factory import CriteriaFactory, CriteriaItemFactory
from tuskfish.database.database import Database


class HandlerRegistry:
    """
    Registry of content handlers keyed by content type.

    ``get_handler('content')`` (or no argument) returns the generic handler.
    """

    def __init__(self, db: Database, site_config: Optional[SiteConfig] = None):
        self.db = db
        self.site_config = site_config or SiteConfig()
        self.criteria_factory = CriteriaFactory(db.validator)
        self.item_factory = CriteriaItemFactory(db.validator)
        self.taglink_handler = TaglinkHandler(db, self.criteria_factory, self.item_factory)
        self.logger = logging.getLogger(__name__)

        self._content_handler = self._build(ContentHandler)
        self._handlers: Dict[ContentType, TypedContentHandler] = {}
        for handler_class in TYPED_HANDLERS:
            self.register_handler(self._build(handler_class))

    def _build(self, handler_class):
        return handler_class(self.db, self.criteria_factory, self.item_factory,
                             self.site_config, self.taglink_handler)

    def register_handler(self, handler: TypedContentHandler) -> None:
        """Register a handler for its content type, replacing any existing one."""
        if handler.content_type in self._handlers:
            self.logger.debug("Replacing handler for %s", handler.content_type.value)
        self._handlers[handler.content_type] = handler

    def get_handler(self, content_type: Union[str, ContentType, None] = None) -> ContentHandler:
        """
        Get the handler for a content type.

        Raises:
            ContentError: If the type is not a sanctioned content type
        """
        if content_type is None or content_type == 'content':
            return self._content_handler
        clean_type = content_type if isinstance(content_type, ContentType) else ContentType.lookup(content_type)
        if clean_type is None or clean_type not in self._handlers:
            raise ContentError(
                f"No handler for content type {content_type!r}",
                content_type=str(content_type),
            )
        return self._handlers[clean_type]

    @property
    def content_handler(self) -> ContentHandler:
        return self._content_handler

    def list_handlers(self) -> List[TypedContentHandler]:
        return list(self._handlers.values())

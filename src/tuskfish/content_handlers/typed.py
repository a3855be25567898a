"""
Per-Type Content Handlers

Each handler serves exactly one content type. Whatever type condition the
caller puts in the criteria is replaced by the handler's own before the
query runs, so a VideoHandler never returns anything but videos.
"""

from typing import ClassVar, Dict, List, Optional

from tuskfish.content.objects import ContentObject
from tuskfish.content.types import ContentType
from tuskfish.content_handlers.base import ContentHandler
from tuskfish.criteria.base import Criteria
from tuskfish.criteria.type_filter import normalize_type_filter


class TypedContentHandler(ContentHandler):
    """Content handler restricted to ``content_type``."""

    content_type: ClassVar[ContentType]

    def _typed_criteria(self, criteria: Optional[Criteria]) -> Criteria:
        if criteria is None:
            criteria = self.criteria_factory.get_criteria()
        return normalize_type_filter(criteria, self.content_type.value)

    def get_objects(self, criteria: Optional[Criteria] = None) -> List[ContentObject]:
        return super().get_objects(self._typed_criteria(criteria))

    def get_count(self, criteria: Optional[Criteria] = None) -> int:
        return super().get_count(self._typed_criteria(criteria))

    def get_list(self, criteria: Optional[Criteria] = None) -> Dict[int, str]:
        return super().get_list(self._typed_criteria(criteria))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(content_type={self.content_type.value!r})"


class ArticleHandler(TypedContentHandler):
    content_type = ContentType.ARTICLE


class AudioHandler(TypedContentHandler):
    content_type = ContentType.AUDIO


class BlockHandler(TypedContentHandler):
    content_type = ContentType.BLOCK


class CollectionHandler(TypedContentHandler):
    content_type = ContentType.COLLECTION

    def get_parent_list(self) -> Dict[int, str]:
        """Collections that can act as a parent, by title, with 0 meaning none."""
        criteria = self.criteria_factory.get_criteria()
        criteria.set_order('title', 'ASC')
        parents = {0: '---'}
        parents.update(self.get_list(criteria))
        return parents

    def get_children(self, collection_id: int) -> List[ContentObject]:
        """Content objects of any type whose parent is this collection."""
        criteria = self.criteria_factory.get_criteria()
        criteria.add(self.item_factory.get_item('parent', self._clean_id(collection_id)))
        return ContentHandler.get_objects(self, criteria)


class DownloadHandler(TypedContentHandler):
    content_type = ContentType.DOWNLOAD


class ImageHandler(TypedContentHandler):
    content_type = ContentType.IMAGE


class StaticHandler(TypedContentHandler):
    content_type = ContentType.STATIC


class TagHandler(TypedContentHandler):
    content_type = ContentType.TAG


class VideoHandler(TypedContentHandler):
    content_type = ContentType.VIDEO


TYPED_HANDLERS = (
    ArticleHandler,
    AudioHandler,
    BlockHandler,
    CollectionHandler,
    DownloadHandler,
    ImageHandler,
    StaticHandler,
    TagHandler,
    VideoHandler,
)

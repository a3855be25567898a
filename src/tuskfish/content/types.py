"""
Content Types

The closed set of content types. Each type knows the template and module
that display it and which content fields it leaves unused.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple


CONTENT_FIELDS: Tuple[str, ...] = (
    'id', 'type', 'title', 'teaser', 'description', 'media', 'format',
    'file_size', 'creator', 'image', 'caption', 'date', 'parent', 'language',
    'rights', 'publisher', 'tags', 'online', 'submission_time', 'counter',
    'meta_title', 'meta_description', 'seo',
)

_BLOCK_FIELDS = frozenset({'id', 'type', 'title', 'description', 'tags', 'online',
                           'submission_time'})


class ContentType(str, Enum):
    """Permitted content types; the value is the stored discriminator."""

    ARTICLE = "Article"
    AUDIO = "Audio"
    BLOCK = "Block"
    COLLECTION = "Collection"
    DOWNLOAD = "Download"
    IMAGE = "Image"
    STATIC = "Static"
    TAG = "Tag"
    VIDEO = "Video"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def template(self) -> str:
        return _DISPLAY[self][0]

    @property
    def module(self) -> str:
        return _DISPLAY[self][1]

    @property
    def zeroed_fields(self) -> FrozenSet[str]:
        """Fields this type does not use; they are stored as NULL."""
        return _ZEROED.get(self, frozenset())

    def uses_field(self, field_name: str) -> bool:
        return field_name in CONTENT_FIELDS and field_name not in self.zeroed_fields

    @classmethod
    def lookup(cls, value: str) -> Optional['ContentType']:
        """Find a type by its stored value; None if it is not sanctioned."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip())
        except ValueError:
            return None

    @classmethod
    def values(cls) -> List[str]:
        return [content_type.value for content_type in cls]


_LABELS: Dict[ContentType, str] = {
    ContentType.ARTICLE: "Article",
    ContentType.AUDIO: "Audio",
    ContentType.BLOCK: "Block",
    ContentType.COLLECTION: "Collection",
    ContentType.DOWNLOAD: "Download",
    ContentType.IMAGE: "Image",
    ContentType.STATIC: "Static page",
    ContentType.TAG: "Tag",
    ContentType.VIDEO: "Video",
}

# (template, module)
_DISPLAY: Dict[ContentType, Tuple[str, str]] = {
    ContentType.ARTICLE: ("article", "articles"),
    ContentType.AUDIO: ("audio", "soundtracks"),
    ContentType.BLOCK: ("block", "blocks"),
    ContentType.COLLECTION: ("collection", "collections"),
    ContentType.DOWNLOAD: ("download", "downloads"),
    ContentType.IMAGE: ("image", "images"),
    ContentType.STATIC: ("static", "staticpage"),
    ContentType.TAG: ("tag", "tags"),
    ContentType.VIDEO: ("video", "videos"),
}

_ZEROED: Dict[ContentType, FrozenSet[str]] = {
    ContentType.TAG: frozenset({'format', 'file_size', 'creator', 'media', 'date',
                                'language', 'rights', 'publisher', 'tags'}),
    ContentType.BLOCK: frozenset(CONTENT_FIELDS) - _BLOCK_FIELDS,
}

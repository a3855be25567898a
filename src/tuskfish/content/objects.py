"""
Content Objects

One dataclass models every content type; the ``type`` field selects the
template, module and the set of fields that are stored as NULL.

Every assignment is checked, so an object never holds a value that could
not be stored.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from tuskfish.content.types import CONTENT_FIELDS, ContentType
from tuskfish.core.exceptions import ContentError, InvalidArgument
from tuskfish.core.validation import DataValidator


DATE_FORMAT = "%Y-%m-%d"

_validator = DataValidator()

_TEXT_FIELDS = frozenset({
    'title', 'teaser', 'description', 'media', 'format', 'creator', 'image',
    'caption', 'publisher', 'meta_title', 'meta_description', 'seo',
})


def _invalid(field_name: str, value: Any, expected: str) -> InvalidArgument:
    return InvalidArgument(
        f"{field_name} must be {expected}, got {value!r}",
        field_name=field_name,
        field_value=value,
    )


def _check_int(field_name: str, value: Any, min_value: int,
               max_value: Optional[int] = None) -> Optional[int]:
    if value is None:
        return None
    if not _validator.is_int(value, min_value, max_value):
        bounds = f"between {min_value} and {max_value}" if max_value is not None else f">= {min_value}"
        raise _invalid(field_name, value, f"an integer {bounds}")
    return value


def _check_text(field_name: str, value: Any) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise _invalid(field_name, value, "a string")
    return value


def _check_type(value: Any) -> ContentType:
    content_type = value if isinstance(value, ContentType) else ContentType.lookup(value)
    if content_type is None:
        raise ContentError(f"Illegal content type: {value!r}", content_type=str(value))
    return content_type


def _check_date(value: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        clean_date = _validator.trim_string(value) if isinstance(value, str) else None
        datetime.strptime(clean_date, DATE_FORMAT)
    except (TypeError, ValueError):
        raise _invalid('date', value, "a date in YYYY-MM-DD format")
    return clean_date


def _check_language(value: Any) -> Optional[str]:
    if value is None:
        return None
    clean_language = _validator.trim_string(value) if isinstance(value, str) else ''
    if not _validator.is_alnum_underscore(clean_language):
        raise _invalid('language', value, "a language key")
    return clean_language


def _check_online(value: Any) -> int:
    if not _validator.is_int(value, 0, 1):
        raise _invalid('online', value, "0 (offline) or 1 (online)")
    return value


def _check_tags(value: Any) -> List[int]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set)):
        raise _invalid('tags', value, "a list of tag ids")
    clean_tags = []
    for tag_id in value:
        if not _validator.is_int(tag_id, 1):
            raise _invalid('tags', value, "a list of positive integer tag ids")
        clean_tags.append(tag_id)
    return clean_tags


_SETTERS: Dict[str, Callable[[Any], Any]] = {
    'type': _check_type,
    'id': lambda value: _check_int('id', value, 1),
    'file_size': lambda value: _check_int('file_size', value, 0),
    'date': _check_date,
    'parent': lambda value: _check_int('parent', value, 0),
    'language': _check_language,
    'rights': lambda value: _check_int('rights', value, 1),
    'tags': _check_tags,
    'online': _check_online,
    'submission_time': lambda value: _check_int('submission_time', value, 0),
    'counter': lambda value: _check_int('counter', value, 0),
}


@dataclass
class ContentObject:
    """
    A row of the content table plus its tag ids.

    ``template``, ``module`` and ``handler`` are derived from the type and
    never persisted. Fields that a type leaves unused may be None.

    Raises:
        ContentError: If the type is not a sanctioned content type
        InvalidArgument: If a field is given a value it cannot hold, or the
            object is made its own parent
    """

    type: Union[ContentType, str] = ContentType.ARTICLE
    id: Optional[int] = None
    title: Optional[str] = ""
    teaser: Optional[str] = ""
    description: Optional[str] = ""
    media: Optional[str] = None
    format: Optional[str] = None
    file_size: Optional[int] = None
    creator: Optional[str] = ""
    image: Optional[str] = None
    caption: Optional[str] = ""
    date: Optional[str] = None
    parent: Optional[int] = 0
    language: Optional[str] = None
    rights: Optional[int] = 1
    publisher: Optional[str] = ""
    tags: List[int] = field(default_factory=list)
    online: int = 1
    submission_time: Optional[int] = None
    counter: Optional[int] = 0
    meta_title: Optional[str] = ""
    meta_description: Optional[str] = ""
    seo: Optional[str] = ""

    def __setattr__(self, name: str, value: Any) -> None:
        setter = _SETTERS.get(name)
        if setter is not None:
            value = setter(value)
        elif name in _TEXT_FIELDS:
            value = _check_text(name, value)

        if name in ('id', 'parent'):
            content_id = value if name == 'id' else getattr(self, 'id', None)
            parent = value if name == 'parent' else getattr(self, 'parent', None)
            if content_id is not None and parent == content_id:
                raise InvalidArgument(
                    f"Circular parent reference: content {content_id} cannot be its own parent",
                    field_name='parent',
                    field_value=parent,
                )
        super().__setattr__(name, value)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], tags: Optional[List[int]] = None) -> 'ContentObject':
        """
        Hydrate a content object from a database row.

        Columns that are not content fields are ignored.

        Raises:
            ContentError: If the row's type is not a sanctioned content type
        """
        data = {key: row[key] for key in row.keys() if key in CONTENT_FIELDS and key != 'tags'}
        return cls(tags=list(tags or []), **data)

    def to_row(self) -> Dict[str, Any]:
        """Column values for the content table; unused fields become NULL."""
        row = {}
        for name in CONTENT_FIELDS:
            if name == 'tags':
                continue
            row[name] = None if name in self.type.zeroed_fields else getattr(self, name)
        row['type'] = self.type.value
        return row

    def uses_field(self, field_name: str) -> bool:
        return self.type.uses_field(field_name)

    @property
    def template(self) -> str:
        return self.type.template

    @property
    def module(self) -> str:
        return self.type.module

    @property
    def handler(self) -> str:
        return f"{self.type.value}Handler"

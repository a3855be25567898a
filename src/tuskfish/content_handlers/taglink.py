"""
Taglink Handler

Taglinks record which tags are attached to which content objects. They live
in their own table so that content can be filtered by tag with a join.
"""

import logging
from typing import Dict, Iterable, List, Optional

from tuskfish.content.objects import ContentObject
from tuskfish.content.types import ContentType
from tuskfish.core.exceptions import InvalidArgument
from tuskfish.criteria.factory import CriteriaFactory, CriteriaItemFactory
from tuskfish.database.database import Database


TAGLINK_TABLE = "taglink"

# content ids bound per lookup; SQLite builds before 3.32 allow 999 variables
ID_BATCH_SIZE = 500


class TaglinkHandler:
    """Inserts, replaces, deletes and looks up taglinks."""

    def __init__(self, db: Database, criteria_factory: CriteriaFactory,
                 item_factory: CriteriaItemFactory):
        self.db = db
        self.criteria_factory = criteria_factory
        self.item_factory = item_factory
        self.logger = logging.getLogger(__name__)

    def _clean_content_id(self, content_id: int) -> int:
        if not self.db.validator.is_int(content_id, 1):
            raise InvalidArgument(
                f"Content id must be a positive integer, got {content_id!r}",
                field_name='content_id',
                field_value=content_id,
            )
        return content_id

    def _clean_type(self, content_type) -> ContentType:
        clean_type = content_type if isinstance(content_type, ContentType) else ContentType.lookup(content_type)
        if clean_type is None:
            raise InvalidArgument(
                f"Illegal content type: {content_type!r}",
                field_name='content_type',
                field_value=content_type,
            )
        return clean_type

    def clean_tags(self, tags: Optional[Iterable[int]]) -> List[int]:
        """Validated tag ids with duplicates removed, in their original order."""
        if tags is None:
            return []
        clean_tags = []
        for tag_id in tags:
            if not self.db.validator.is_int(tag_id, 1):
                raise InvalidArgument(
                    f"Tag id must be a positive integer, got {tag_id!r}",
                    field_name='tags',
                    field_value=tags,
                )
            if tag_id not in clean_tags:
                clean_tags.append(tag_id)
        return clean_tags

    def insert_taglinks(self, content_id: int, content_type, tags: Iterable[int]) -> int:
        """
        Link a content object to tags.

        All tag ids are validated before anything is written. Tags cannot
        themselves be tagged, so nothing is inserted for Tag objects.

        Returns:
            Number of taglinks inserted
        """
        clean_id = self._clean_content_id(content_id)
        clean_type = self._clean_type(content_type)
        clean_tags = self.clean_tags(tags)

        if clean_type is ContentType.TAG:
            return 0

        for tag_id in clean_tags:
            self.db.insert(TAGLINK_TABLE, {
                'tag_id': tag_id,
                'content_type': clean_type.value,
                'content_id': clean_id,
            })
        return len(clean_tags)

    def update_taglinks(self, content_id: int, content_type,
                        tags: Optional[Iterable[int]] = None) -> int:
        """Replace the taglinks of a content object; returns the number inserted."""
        clean_id = self._clean_content_id(content_id)
        clean_type = self._clean_type(content_type)
        clean_tags = self.clean_tags(tags)

        criteria = self.criteria_factory.get_criteria()
        criteria.add(self.item_factory.get_item('content_id', clean_id))
        with self.db.transaction():
            self.db.delete_all(TAGLINK_TABLE, criteria)
            return self.insert_taglinks(clean_id, clean_type, clean_tags)

    def delete_taglinks(self, obj: ContentObject) -> int:
        """
        Delete the taglinks of a content object.

        For a tag, the links that refer to it are deleted instead.
        """
        clean_id = self._clean_content_id(obj.id)
        criteria = self.criteria_factory.get_criteria()
        if obj.type is ContentType.TAG:
            criteria.add(self.item_factory.get_item('tag_id', clean_id))
        else:
            criteria.add(self.item_factory.get_item('content_id', clean_id))
        deleted = self.db.delete_all(TAGLINK_TABLE, criteria)
        self.logger.debug("Deleted %d taglinks for %s %d", deleted, obj.type.value, clean_id)
        return deleted

    def get_tags_for(self, content_ids: Iterable[int]) -> Dict[int, List[int]]:
        """
        Tag ids attached to each content id (ids without tags are omitted).

        Ids are looked up in batches of ``ID_BATCH_SIZE``.
        """
        ids = list(dict.fromkeys(self._clean_content_id(content_id) for content_id in content_ids))

        taglinks: Dict[int, List[int]] = {}
        for start in range(0, len(ids), ID_BATCH_SIZE):
            criteria = self.criteria_factory.get_criteria()
            criteria.add(self.item_factory.get_item('content_id', ids[start:start + ID_BATCH_SIZE], 'IN'))
            criteria.set_order('id', 'ASC')
            for row in self.db.select(TAGLINK_TABLE, criteria, ['content_id', 'tag_id']):
                taglinks.setdefault(row['content_id'], []).append(row['tag_id'])
        return taglinks

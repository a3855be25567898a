"""
Content Handler

Generic handler for the content table: retrieval with criteria, counting,
writes that keep taglinks and parent references consistent, tag lists and
free-text search.
"""

import html
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from tuskfish.content.objects import ContentObject
from tuskfish.content.types import ContentType
from tuskfish.content_handlers.taglink import TaglinkHandler
from tuskfish.core.config.models import SiteConfig
from tuskfish.core.exceptions import ContentError, ErrorCode, InvalidArgument
from tuskfish.criteria.base import Criteria
from tuskfish.criteria.factory import CriteriaFactory, CriteriaItemFactory
from tuskfish.database.database import Database


CONTENT_TABLE = "content"
SEARCH_MODES = ('AND', 'OR', 'exact')


@dataclass
class SearchResult:
    """Total number of matches plus the objects on the requested page."""
    count: int = 0
    objects: List[ContentObject] = field(default_factory=list)


class ContentHandler:
    """
    Manipulates content objects of every type.

    Per-type handlers subclass this and restrict ``get_objects`` and
    ``get_count`` to their own type.
    """

    def __init__(self, db: Database, criteria_factory: CriteriaFactory,
                 item_factory: CriteriaItemFactory,
                 site_config: Optional[SiteConfig] = None,
                 taglink_handler: Optional[TaglinkHandler] = None):
        """
        Initialize the handler.

        Args:
            db: Database the content table lives in
            criteria_factory: Factory for criteria objects
            item_factory: Factory for criteria items
            site_config: Pagination and search preferences
            taglink_handler: Shared taglink handler (one is created if omitted)
        """
        self.db = db
        self.criteria_factory = criteria_factory
        self.item_factory = item_factory
        self.site_config = site_config or SiteConfig()
        self.taglink_handler = taglink_handler or TaglinkHandler(db, criteria_factory, item_factory)
        self.logger = logging.getLogger(__name__)

    def _clean_id(self, content_id: Any) -> int:
        if not self.db.validator.is_int(content_id, 1):
            raise InvalidArgument(
                f"Content id must be a positive integer, got {content_id!r}",
                field_name='id',
                field_value=content_id,
            )
        return content_id

    def _default_order(self, criteria: Criteria) -> None:
        if not criteria.order:
            criteria.set_order('date', 'DESC')
            criteria.set_secondary_order('submission_time', 'DESC')

    def _hydrate(self, rows) -> List[ContentObject]:
        objects = [ContentObject.from_row(row) for row in rows]
        if objects:
            taglinks = self.taglink_handler.get_tags_for([obj.id for obj in objects])
            for obj in objects:
                obj.tags = taglinks.get(obj.id, [])
        return objects

    # Retrieval

    def get_objects(self, criteria: Optional[Criteria] = None) -> List[ContentObject]:
        """
        Get content objects matching criteria, with their tags attached.

        Results are ordered by date then submission time (newest first) when
        the criteria specify no order. The caller's criteria are not modified.
        """
        criteria = criteria.copy() if criteria is not None else self.criteria_factory.get_criteria()
        self._default_order(criteria)
        rows = self.db.select(CONTENT_TABLE, criteria)
        return self._hydrate(rows)

    def get_count(self, criteria: Optional[Criteria] = None) -> int:
        """Count content objects matching criteria; limit, offset and order are ignored."""
        return self.db.select_count(CONTENT_TABLE, criteria)

    def get_object(self, content_id: int) -> Optional[ContentObject]:
        clean_id = self._clean_id(content_id)
        criteria = self.criteria_factory.get_criteria()
        criteria.add(self.item_factory.get_item('id', clean_id))
        objects = self._hydrate(self.db.select(CONTENT_TABLE, criteria))
        return objects[0] if objects else None

    def get_list(self, criteria: Optional[Criteria] = None) -> Dict[int, str]:
        """Titles of matching content objects keyed by id."""
        criteria = criteria.copy() if criteria is not None else self.criteria_factory.get_criteria()
        self._default_order(criteria)
        rows = self.db.select(CONTENT_TABLE, criteria, ['id', 'title'])
        return {row['id']: row['title'] for row in rows}

    # Writes

    def _validate_for_write(self, obj: ContentObject) -> List[int]:
        """
        Check what the object itself cannot: the language whitelist and tags.

        Returns:
            The tag ids to link, empty for types that are not tagged
        """
        if (obj.uses_field('language') and obj.language is not None
                and obj.language not in self.site_config.languages):
            raise InvalidArgument(
                f"Language {obj.language!r} is not one of: {', '.join(self.site_config.languages)}",
                field_name='language',
                field_value=obj.language,
            )
        if not obj.uses_field('tags'):
            return []
        return self.taglink_handler.clean_tags(obj.tags)

    def insert(self, obj: ContentObject) -> int:
        """
        Insert a content object and its taglinks.

        The submission time is set automatically and the id is assigned by
        the database; both are written back to ``obj``. The row and its
        taglinks are written in one transaction.

        Returns:
            The new content id
        """
        tags = self._validate_for_write(obj)
        row = obj.to_row()
        row.pop('id', None)
        row['submission_time'] = int(time.time())

        with self.db.transaction():
            content_id = self.db.insert(CONTENT_TABLE, row)
            if not content_id:
                raise ContentError(
                    "Insert did not return a content id",
                    error_code=ErrorCode.CONTENT_WRITE_FAILED,
                    content_type=obj.type.value,
                )
            if tags:
                self.taglink_handler.insert_taglinks(content_id, obj.type, tags)

        obj.id = content_id
        obj.submission_time = row['submission_time']
        self.logger.info("Inserted %s %d", obj.type.value, content_id)
        return content_id

    def update(self, obj: ContentObject) -> bool:
        """
        Update a stored content object and replace its taglinks.

        The original submission time is kept. If the object used to be a
        collection and no longer is, its children lose their parent reference.
        Nothing is written unless every step succeeds.

        Raises:
            ContentError: If no object with this id exists
        """
        clean_id = self._clean_id(obj.id)
        tags = self._validate_for_write(obj)
        saved = self.get_object(clean_id)
        if saved is None:
            raise ContentError(
                f"No content object with id {clean_id}",
                error_code=ErrorCode.CONTENT_NOT_FOUND,
                content_type=obj.type.value,
                content_id=clean_id,
            )

        row = obj.to_row()
        row.pop('id', None)
        row.pop('submission_time', None)
        with self.db.transaction():
            updated = self.db.update(CONTENT_TABLE, clean_id, row)
            self.taglink_handler.update_taglinks(clean_id, obj.type, tags)
            if saved.type is ContentType.COLLECTION and obj.type is not ContentType.COLLECTION:
                self.delete_parental_references(clean_id)

        self.logger.info("Updated %s %d", obj.type.value, clean_id)
        return updated

    def delete(self, content_id: int) -> bool:
        """
        Delete a content object together with its taglinks.

        Deleting a collection resets the parent of its children to 0.

        Returns:
            False if there was no such object
        """
        clean_id = self._clean_id(content_id)
        obj = self.get_object(clean_id)
        if obj is None:
            self.logger.warning("Cannot delete content %d: not found", clean_id)
            return False

        with self.db.transaction():
            self.taglink_handler.delete_taglinks(obj)
            if obj.type is ContentType.COLLECTION:
                self.delete_parental_references(clean_id)
            deleted = self.db.delete(CONTENT_TABLE, clean_id)

        self.logger.info("Deleted %s %d", obj.type.value, clean_id)
        return deleted

    def delete_parental_references(self, content_id: int) -> int:
        """Detach the children of a collection; returns the number of children."""
        clean_id = self._clean_id(content_id)
        criteria = self.criteria_factory.get_criteria()
        criteria.add(self.item_factory.get_item('parent', clean_id))
        return self.db.update_all(CONTENT_TABLE, {'parent': 0}, criteria)

    def toggle_online_status(self, content_id: int) -> bool:
        return self.db.toggle_boolean(CONTENT_TABLE, self._clean_id(content_id), 'online')

    def update_counter(self, content_id: int) -> bool:
        return self.db.update_counter(CONTENT_TABLE, self._clean_id(content_id), 'counter')

    # Types and tags

    @staticmethod
    def get_types() -> Dict[str, str]:
        """Sanctioned content types as stored value -> label."""
        return {content_type.value: content_type.label for content_type in ContentType}

    @staticmethod
    def is_sanctioned_type(content_type: str) -> bool:
        return ContentType.lookup(content_type) is not None

    def get_tag_list(self, online_only: bool = True) -> Dict[int, str]:
        """Tag titles keyed by id, in alphabetical order."""
        criteria = self.criteria_factory.get_criteria()
        criteria.add(self.item_factory.get_item('type', ContentType.TAG.value))
        if online_only:
            criteria.add(self.item_factory.get_item('online', 1))

        rows = self.db.select(CONTENT_TABLE, criteria, ['id', 'title'])
        tags = {row['id']: row['title'] or '' for row in rows}
        return dict(sorted(tags.items(), key=lambda tag: tag[1].lower()))

    def get_active_tag_list(self, content_type: Optional[str] = None,
                            online_only: bool = True) -> Dict[int, str]:
        """
        Tags actually linked to content, optionally only from one content type.

        An unknown content type is ignored rather than rejected.
        """
        tags = self.get_tag_list(online_only)
        if not tags:
            return {}

        criteria = self.criteria_factory.get_criteria()
        clean_type = ContentType.lookup(content_type) if content_type else None
        if clean_type is not None:
            criteria.add(self.item_factory.get_item('content_type', clean_type.value))

        rows = self.db.select_distinct('taglink', ['tag_id'], criteria)
        active_ids = {row['tag_id'] for row in rows}
        return {tag_id: title for tag_id, title in tags.items() if tag_id in active_ids}

    def get_tags(self) -> List[ContentObject]:
        criteria = self.criteria_factory.get_criteria()
        criteria.add(self.item_factory.get_item('type', ContentType.TAG.value))
        return self.get_objects(criteria)

    # Search

    def _split_terms(self, terms: str, andor: str) -> List[str]:
        pieces = [terms] if andor == 'exact' else terms.split(' ')
        clean_terms = []
        for piece in pieces:
            term = self.db.validator.trim_string(piece)
            if term and len(term) >= self.site_config.min_search_length:
                clean_terms.append(term)
        return clean_terms

    def search_content(self, terms: str, andor: str = 'AND', limit: int = 0,
                       offset: int = 0) -> SearchResult:
        """
        Search online content (blocks excluded) for terms.

        Args:
            terms: Space-separated search terms, or a phrase in 'exact' mode
            andor: 'AND' (all terms), 'OR' (any term) or 'exact' (whole phrase)
            limit: Results per page, the configured search pagination if 0
            offset: Results to skip

        Returns:
            SearchResult with the total match count and the requested page
        """
        if andor not in SEARCH_MODES:
            raise InvalidArgument(
                f"Search mode must be one of: {', '.join(SEARCH_MODES)}",
                field_name='andor',
                field_value=andor,
            )
        self.db.validator.validate_non_negative_int(limit, 'limit')
        self.db.validator.validate_non_negative_int(offset, 'offset')

        clean_terms = self._split_terms(terms or '', andor)
        if not clean_terms:
            self.logger.debug("No usable search terms in %r", terms)
            return SearchResult()

        # teaser and description store entity-encoded HTML
        escaped_terms = [html.escape(term, quote=False) for term in clean_terms]
        count, rows = self.db.search(
            CONTENT_TABLE,
            clean_terms,
            escaped_terms,
            'AND' if andor == 'exact' else andor,
            ContentType.BLOCK.value,
            limit or self.site_config.search_pagination,
            offset,
        )
        return SearchResult(count=count, objects=self._hydrate(rows))

"""
Type Filter

Per-type content handlers only ever return objects of their own type. Before
delegating to the generic handler they replace whatever type condition the
caller supplied with their own.
"""

import logging
from typing import Optional

from tuskfish.criteria.base import Criteria


logger = logging.getLogger(__name__)


def find_type_index(criteria: Criteria) -> Optional[int]:
    """Index of the first item filtering on the type column, or None."""
    return criteria.find_type_index()


def normalize_type_filter(criteria: Criteria, content_type: str) -> Criteria:
    """
    Return a copy of ``criteria`` whose type condition is ``type = content_type``.

    The first existing type item (if any) is removed together with its
    joiner, then the new type item is appended with AND. The caller's
    criteria object is not modified.

    Args:
        criteria: Criteria supplied by the caller
        content_type: Stored type discriminator, e.g. 'Video'

    Returns:
        A new Criteria object
    """
    normalized = criteria.copy()
    index = normalized.find_type_index()
    if index is not None:
        logger.debug("Replacing type condition %s with type = %r",
                     normalized.items[index], content_type)
        normalized.kill_type(index)
    normalized.set_type(content_type)
    return normalized

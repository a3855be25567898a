"""
Content

Content types and the content object model.
"""

from tuskfish.content.objects import ContentObject
from tuskfish.content.types import CONTENT_FIELDS, ContentType

__all__ = ['CONTENT_FIELDS', 'ContentObject', 'ContentType']

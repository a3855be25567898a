"""
Criteria

A criteria object collects criteria items, the boolean joiners between them,
and the grouping, ordering, pagination, tag and type settings of one query.
It is built per request, handed to the query layer once, and discarded.
"""

import logging
from enum import Enum
from typing import Any, Iterable, List, Optional, Union

from tuskfish.core.exceptions import InvalidArgument, ValidationError
from tuskfish.core.validation import has_validator_capabilities
from tuskfish.criteria.item import CriteriaItem


logger = logging.getLogger(__name__)

TYPE_COLUMN = "type"


class Joiner(str, Enum):
    """How a criteria item is combined with the one before it."""
    AND = "AND"
    OR = "OR"


class OrderType(str, Enum):
    """Sort direction."""
    ASC = "ASC"
    DESC = "DESC"


class Criteria:
    """
    Ordered collection of criteria items plus query modifiers.

    ``joiners[i]`` joins ``items[i]`` to ``items[i + 1]``, so there is always
    one joiner fewer than there are items (and none for an empty set).

    Attributes:
        items: Criteria items in insertion order
        joiners: AND/OR joiners between consecutive items
        group_by: Optional GROUP BY column
        order: Optional primary sort column
        order_type: Primary sort direction (DESC by default)
        secondary_order: Optional secondary sort column
        secondary_order_type: Secondary sort direction (DESC by default)
        limit: Maximum rows, 0 for no limit
        offset: Rows to skip, 0 for none
        tags: Tag ids the results must be linked to
        type: Content type discriminator, the value of the last type item
    """

    def __init__(self, validator):
        """
        Initialize an empty criteria object.

        Args:
            validator: Validator capability used by every setter

        Raises:
            ValidationError: If the validator lacks the required methods
        """
        if not has_validator_capabilities(validator):
            raise ValidationError("Criteria requires a validator with the full validation capability")
        self.validator = validator
        self.items: List[CriteriaItem] = []
        self.joiners: List[Joiner] = []
        self.group_by: Optional[str] = None
        self.order: Optional[str] = None
        self.order_type: OrderType = OrderType.DESC
        self.secondary_order: Optional[str] = None
        self.secondary_order_type: OrderType = OrderType.DESC
        self.limit: int = 0
        self.offset: int = 0
        self.tags: List[int] = []

    def add(self, item: CriteriaItem, joiner: Union[str, Joiner] = Joiner.AND) -> None:
        """
        Append a criteria item.

        The joiner is validated even for the first item, but only stored when
        there is a preceding item for it to join to.

        Args:
            item: Criteria item to append
            joiner: 'AND' or 'OR'

        Raises:
            InvalidArgument: If item is not a CriteriaItem
            InvalidJoiner: If joiner is not AND or OR
        """
        if not isinstance(item, CriteriaItem):
            raise InvalidArgument(
                f"Expected a CriteriaItem, got {type(item).__name__}",
                field_name='item',
                field_value=item,
            )
        raw_joiner = joiner.value if isinstance(joiner, Joiner) else joiner
        clean_joiner = Joiner(self.validator.validate_joiner(raw_joiner))

        if self.items:
            self.joiners.append(clean_joiner)
        self.items.append(item)

    def set_type(self, type_name: str) -> None:
        """
        Filter on a content type.

        Adds a ``type = type_name`` item, which becomes the discriminator.
        Any existing type item is left in place; remove it first with
        ``kill_type(find_type_index())``.
        """
        if not isinstance(type_name, str) or not self.validator.trim_string(type_name):
            raise InvalidArgument(
                f"Type name must be a non-empty string, got {type_name!r}",
                field_name='type',
                field_value=type_name,
            )
        self.add(CriteriaItem.create(self.validator, TYPE_COLUMN, type_name))

    def kill_type(self, index: Optional[int]) -> None:
        """
        Remove the item at ``index`` together with its joiner.

        The joiner removed is the one preceding the item, or the one
        following it when the first item is removed. Does nothing when
        ``index`` is None or out of range.
        """
        if index is None or isinstance(index, bool) or not isinstance(index, int):
            return
        if index < 0 or index >= len(self.items):
            logger.debug("kill_type: no item at index %s, nothing removed", index)
            return

        self.items.pop(index)
        if self.joiners:
            self.joiners.pop(index - 1 if index > 0 else 0)

    @property
    def type(self) -> Optional[Any]:
        """Value of the last item on the type column, or None if there is none."""
        for item in reversed(self.items):
            if item.is_column(TYPE_COLUMN):
                return item.value
        return None

    def find_type_index(self) -> Optional[int]:
        """Index of the first item on the type column, or None."""
        for index, item in enumerate(self.items):
            if item.is_column(TYPE_COLUMN):
                return index
        return None

    def set_group_by(self, column: str) -> None:
        """Set the GROUP BY column."""
        self.group_by = self.validator.validate_column_name(column)

    def set_limit(self, limit: int) -> None:
        """Set the maximum number of rows (0 = no limit)."""
        self.limit = self.validator.validate_non_negative_int(limit, 'limit')

    def set_offset(self, offset: int) -> None:
        """Set the number of rows to skip (0 = none)."""
        self.offset = self.validator.validate_non_negative_int(offset, 'offset')

    def set_order(self, column: str, direction: Union[str, OrderType] = OrderType.DESC) -> None:
        """
        Set the primary sort column and direction.

        Raises:
            InvalidColumnName: If the column name is invalid
            InvalidArgument: If direction is not ASC or DESC
        """
        self.order = self.validator.validate_column_name(column)
        self.order_type = self._clean_direction(direction)

    def set_secondary_order(self, column: str,
                            direction: Union[str, OrderType] = OrderType.DESC) -> None:
        """Set the secondary sort column and direction."""
        self.secondary_order = self.validator.validate_column_name(column)
        self.secondary_order_type = self._clean_direction(direction)

    def set_tag(self, tags: Iterable[int]) -> None:
        """
        Restrict results to content linked to any of the given tag ids.

        Raises:
            InvalidArgument: If tags is not a list of positive integers
        """
        if isinstance(tags, (str, bytes)) or not isinstance(tags, (list, tuple, set)):
            raise InvalidArgument(
                "Tags must be a list of tag ids",
                field_name='tags',
                field_value=tags,
            )
        clean_tags = []
        for tag in tags:
            if not self.validator.is_int(tag, 1):
                raise InvalidArgument(
                    f"Tag id must be a positive integer, got {tag!r}",
                    field_name='tags',
                    field_value=tags,
                )
            clean_tags.append(tag)
        self.tags = clean_tags

    def _clean_direction(self, direction: Any) -> OrderType:
        if isinstance(direction, OrderType):
            return direction
        clean_direction = self.validator.trim_string(direction).upper() if isinstance(direction, str) else None
        try:
            return OrderType(clean_direction)
        except ValueError:
            raise InvalidArgument(
                f"Sort direction must be ASC or DESC, got {direction!r}",
                field_name='direction',
                field_value=direction,
            )

    def copy(self) -> 'Criteria':
        """Independent copy; items are immutable and shared."""
        clone = Criteria(self.validator)
        clone.items = list(self.items)
        clone.joiners = list(self.joiners)
        clone.group_by = self.group_by
        clone.order = self.order
        clone.order_type = self.order_type
        clone.secondary_order = self.secondary_order
        clone.secondary_order_type = self.secondary_order_type
        clone.limit = self.limit
        clone.offset = self.offset
        clone.tags = list(self.tags)
        return clone

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        parts = []
        for index, item in enumerate(self.items):
            if index:
                parts.append(self.joiners[index - 1].value)
            parts.append(str(item))
        return f"Criteria({' '.join(parts)!r}, limit={self.limit}, offset={self.offset})"

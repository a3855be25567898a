"""
Criteria Factories

Factories hand out fresh criteria objects and criteria items with the
validator already injected, so callers never wire the validator themselves.
"""

import logging
from typing import Any, Union

from tuskfish.core.exceptions import ValidationError
from tuskfish.core.validation import has_validator_capabilities
from tuskfish.criteria.base import Criteria
from tuskfish.criteria.item import CriteriaItem, Operator


def _require_validator(validator: Any, factory_name: str) -> None:
    if not has_validator_capabilities(validator):
        raise ValidationError(
            f"{factory_name} requires a validator exposing trim_string, is_int "
            "and the validate_* methods",
            field_name='validator',
            field_value=type(validator).__name__,
        )


class CriteriaFactory:
    """Builds empty criteria objects."""

    def __init__(self, validator):
        _require_validator(validator, 'CriteriaFactory')
        self.validator = validator
        self.logger = logging.getLogger(__name__)

    def get_criteria(self) -> Criteria:
        return Criteria(self.validator)


class CriteriaItemFactory:
    """Builds validated criteria items."""

    def __init__(self, validator):
        _require_validator(validator, 'CriteriaItemFactory')
        self.validator = validator
        self.logger = logging.getLogger(__name__)

    def get_item(self, column: str, value: Any,
                 operator: Union[str, Operator] = "=") -> CriteriaItem:
        """
        Create a criteria item.

        Args:
            column: Column name
            value: Value to compare against (a list for IN/NOT IN/BETWEEN,
                None for IS NULL/IS NOT NULL)
            operator: Comparison operator, '=' by default

        Returns:
            A validated CriteriaItem

        Raises:
            InvalidColumnName: If the column name is invalid
            InvalidOperator: If the operator is not permitted
            InvalidArgument: If the value does not suit the operator
        """
        return CriteriaItem.create(self.validator, column, value, operator)

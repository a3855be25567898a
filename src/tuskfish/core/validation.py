"""
Input Validation

Provides the validator capability injected into criteria objects and used by
the query layer: whitespace trimming, identifier whitelisting, integer range
checks and operator/joiner membership tests.
"""

import logging
import re
import unicodedata
from typing import Any, Iterable, Optional

from tuskfish.core.exceptions import (
    ErrorCode,
    InvalidArgument,
    InvalidColumnName,
    InvalidJoiner,
    InvalidOperator,
)


ALNUM_PATTERN = re.compile(r'^[A-Za-z0-9]+$')
ALNUM_UNDERSCORE_PATTERN = re.compile(r'^[A-Za-z0-9_]+$')
ALPHA_PATTERN = re.compile(r'^[A-Za-z]+$')

# Capability methods a validator must expose to be injected into factories.
REQUIRED_CAPABILITIES = (
    'trim_string',
    'is_int',
    'validate_column_name',
    'validate_operator',
    'validate_joiner',
    'validate_non_negative_int',
)


class DataValidator:
    """
    Stateless validator for identifiers, integers and SQL vocabulary.

    The ``is_*`` methods answer yes/no; the ``validate_*`` methods return a
    cleaned value or raise the matching ``ValidationError`` subclass.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def trim_string(value: Any) -> str:
        """Cast to string, normalise to NFC and strip surrounding whitespace."""
        return unicodedata.normalize('NFC', str(value)).strip()

    def is_alnum(self, value: Any) -> bool:
        return isinstance(value, str) and bool(ALNUM_PATTERN.match(value))

    def is_alnum_underscore(self, value: Any) -> bool:
        return isinstance(value, str) and bool(ALNUM_UNDERSCORE_PATTERN.match(value))

    def is_alpha(self, value: Any) -> bool:
        return isinstance(value, str) and bool(ALPHA_PATTERN.match(value))

    @staticmethod
    def is_int(value: Any, min_value: Optional[int] = None,
               max_value: Optional[int] = None) -> bool:
        """
        Check that value is an integer within an optional inclusive range.

        Booleans are rejected even though ``bool`` subclasses ``int``.
        """
        if isinstance(value, bool) or not isinstance(value, int):
            return False
        if min_value is not None and value < min_value:
            return False
        if max_value is not None and value > max_value:
            return False
        return True

    def validate_column_name(self, column: Any) -> str:
        """
        Validate a column (or other SQL identifier) name.

        Args:
            column: Candidate column name

        Returns:
            The trimmed column name

        Raises:
            InvalidColumnName: If the name contains anything but
                letters, digits and underscores
        """
        if not isinstance(column, str):
            raise InvalidColumnName(
                f"Column name must be a string, got {type(column).__name__}",
                field_name='column',
                field_value=column,
            )
        clean_column = self.trim_string(column)
        if not self.is_alnum_underscore(clean_column):
            raise InvalidColumnName(
                f"Column name '{column}' may only contain letters, digits and underscores",
                field_name='column',
                field_value=column,
            )
        return clean_column

    def validate_table_name(self, table: Any) -> str:
        """Validate a table name (alphanumeric only)."""
        clean_table = self.trim_string(table) if isinstance(table, str) else table
        if not self.is_alnum(clean_table):
            raise InvalidArgument(
                f"Table name '{table}' may only contain letters and digits",
                error_code=ErrorCode.VALIDATION_FORMAT_ERROR,
                field_name='table',
                field_value=table,
            )
        return clean_table

    def validate_operator(self, operator: Any, permitted: Iterable[str]) -> str:
        """
        Validate an operator against a permitted set.

        Word operators are compared case-insensitively with internal
        whitespace collapsed, so ``'not  in'`` is accepted as ``'NOT IN'``.

        Raises:
            InvalidOperator: If the operator is not permitted
        """
        if not isinstance(operator, str):
            raise InvalidOperator(
                f"Operator must be a string, got {type(operator).__name__}",
                field_name='operator',
                field_value=operator,
            )
        clean_operator = ' '.join(self.trim_string(operator).split()).upper()
        if clean_operator not in set(permitted):
            raise InvalidOperator(
                f"Operator '{operator}' is not permitted",
                field_name='operator',
                field_value=operator,
            )
        return clean_operator

    def validate_joiner(self, joiner: Any, permitted: Iterable[str] = ('AND', 'OR')) -> str:
        """
        Validate a boolean joiner.

        Raises:
            InvalidJoiner: If the joiner is not AND or OR
        """
        clean_joiner = self.trim_string(joiner) if isinstance(joiner, str) else None
        if clean_joiner not in set(permitted):
            raise InvalidJoiner(
                f"Joiner '{joiner}' must be one of: {', '.join(permitted)}",
                field_name='joiner',
                field_value=joiner,
            )
        return clean_joiner

    def validate_non_negative_int(self, value: Any, field_name: str = 'value') -> int:
        """
        Validate a non-negative integer (limit, offset, ids of zero allowed).

        Raises:
            InvalidArgument: If value is not an int or is negative
        """
        if not self.is_int(value, 0):
            raise InvalidArgument(
                f"{field_name} must be a non-negative integer, got {value!r}",
                field_name=field_name,
                field_value=value,
            )
        return value

    def validate_positive_int(self, value: Any, field_name: str = 'value') -> int:
        """Validate an integer >= 1 (database ids, tag ids)."""
        if not self.is_int(value, 1):
            raise InvalidArgument(
                f"{field_name} must be a positive integer, got {value!r}",
                field_name=field_name,
                field_value=value,
            )
        return value


def has_validator_capabilities(validator: Any) -> bool:
    """Check that an object exposes every method the criteria layer calls."""
    if validator is None:
        return False
    return all(callable(getattr(validator, name, None)) for name in REQUIRED_CAPABILITIES)

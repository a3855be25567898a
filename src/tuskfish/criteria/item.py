"""
Criteria Items

A criteria item is a single column/operator/value predicate. Items are
immutable once constructed; the column, operator and value are validated up
front and a binding type is inferred so the query layer can bind the value as
a parameter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from tuskfish.core.exceptions import ErrorCode, InvalidArgument


Scalar = Union[str, int, float, bool]


class Operator(str, Enum):
    """Permitted comparison operators."""

    EQ = "="
    EQ_ALT = "=="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    NE = "!="
    NE_ALT = "<>"
    LIKE = "LIKE"
    NOT_LIKE = "NOT LIKE"
    IN = "IN"
    NOT_IN = "NOT IN"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"
    BETWEEN = "BETWEEN"

    @classmethod
    def permitted(cls) -> Tuple[str, ...]:
        return tuple(op.value for op in cls)

    @property
    def takes_list(self) -> bool:
        return self in (Operator.IN, Operator.NOT_IN, Operator.BETWEEN)

    @property
    def takes_no_value(self) -> bool:
        return self in (Operator.IS_NULL, Operator.IS_NOT_NULL)


class BindType(Enum):
    """Parameter binding type inferred from a criteria value."""

    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BOOLEAN = "boolean"
    NULL = "null"


def infer_bind_type(value: Any) -> BindType:
    """
    Infer the binding type of a scalar value.

    Raises:
        InvalidArgument: If the value is not a bindable scalar
    """
    # bool before int: bool subclasses int
    if value is None:
        return BindType.NULL
    if isinstance(value, bool):
        return BindType.BOOLEAN
    if isinstance(value, int):
        return BindType.INTEGER
    if isinstance(value, float):
        return BindType.REAL
    if isinstance(value, str):
        return BindType.TEXT
    raise InvalidArgument(
        f"Illegal value type for a criteria item: {type(value).__name__}",
        error_code=ErrorCode.VALIDATION_TYPE_MISMATCH,
        field_name='value',
        field_value=value,
    )


@dataclass(frozen=True)
class CriteriaItem:
    """
    A single predicate: ``column operator value``.

    Build items through ``CriteriaItem.create`` (or a ``CriteriaItemFactory``)
    so that column, operator and value are validated; the dataclass
    constructor itself performs no checks.

    Attributes:
        column: Column name (letters, digits, underscores)
        operator: Comparison operator
        value: Scalar, tuple of scalars (IN/NOT IN/BETWEEN) or None
        bind_type: Binding type of the value (or of its elements)
    """
    column: str
    operator: Operator
    value: Union[Scalar, Tuple[Scalar, ...], None]
    bind_type: BindType

    @classmethod
    def create(cls, validator, column: str, value: Any,
               operator: Union[str, Operator] = "=") -> 'CriteriaItem':
        """
        Validate the inputs and construct an item.

        Args:
            validator: Validator capability (see ``DataValidator``)
            column: Column name
            value: Value to compare against
            operator: Comparison operator, '=' by default

        Returns:
            A validated CriteriaItem

        Raises:
            InvalidColumnName: If the column name is not alphanumeric/underscore
            InvalidOperator: If the operator is not permitted
            InvalidArgument: If the value does not suit the operator
        """
        clean_column = validator.validate_column_name(column)
        raw_operator = operator.value if isinstance(operator, Operator) else operator
        clean_operator = Operator(validator.validate_operator(raw_operator, Operator.permitted()))
        clean_value, bind_type = cls._clean_value(validator, clean_operator, value)
        return cls(column=clean_column, operator=clean_operator,
                   value=clean_value, bind_type=bind_type)

    @staticmethod
    def _clean_value(validator, operator: Operator, value: Any):
        """Check the value shape against the operator and infer its binding type."""
        if operator.takes_no_value:
            if value is not None:
                raise InvalidArgument(
                    f"Operator '{operator.value}' does not take a value",
                    field_name='value',
                    field_value=value,
                )
            return None, BindType.NULL

        if operator.takes_list:
            if not isinstance(value, (list, tuple)):
                raise InvalidArgument(
                    f"Operator '{operator.value}' requires a list of values",
                    field_name='value',
                    field_value=value,
                )
            if not value:
                raise InvalidArgument(
                    f"Operator '{operator.value}' requires at least one value",
                    field_name='value',
                    field_value=value,
                )
            if operator is Operator.BETWEEN and len(value) != 2:
                raise InvalidArgument(
                    "Operator 'BETWEEN' requires exactly two values",
                    field_name='value',
                    field_value=value,
                )
            clean_values: List[Scalar] = []
            bind_types = set()
            for element in value:
                if element is None or isinstance(element, (list, tuple, dict)):
                    raise InvalidArgument(
                        f"Operator '{operator.value}' requires scalar values",
                        field_name='value',
                        field_value=value,
                    )
                bind_types.add(infer_bind_type(element))
                clean_values.append(
                    validator.trim_string(element) if isinstance(element, str) else element
                )
            if len(bind_types) > 1:
                raise InvalidArgument(
                    f"Values for '{operator.value}' must all share one type",
                    error_code=ErrorCode.VALIDATION_TYPE_MISMATCH,
                    field_name='value',
                    field_value=value,
                )
            return tuple(clean_values), bind_types.pop()

        if value is None:
            raise InvalidArgument(
                f"Operator '{operator.value}' requires a value; use 'IS NULL' to match NULL",
                field_name='value',
                field_value=value,
            )
        if isinstance(value, (list, tuple)):
            raise InvalidArgument(
                f"Operator '{operator.value}' takes a single value, not a list",
                field_name='value',
                field_value=value,
            )
        bind_type = infer_bind_type(value)
        if bind_type is BindType.TEXT:
            value = validator.trim_string(value)
        return value, bind_type

    @property
    def values(self) -> Tuple[Optional[Scalar], ...]:
        """The value(s) to bind, always as a tuple."""
        if self.operator.takes_no_value:
            return ()
        if isinstance(self.value, tuple):
            return self.value
        return (self.value,)

    def is_column(self, column: str) -> bool:
        """Case-insensitive column comparison (SQLite identifiers are case-insensitive)."""
        return self.column.lower() == column.lower()

    def __str__(self) -> str:
        if self.operator.takes_no_value:
            return f"{self.column} {self.operator.value}"
        return f"{self.column} {self.operator.value} {self.value!r}"

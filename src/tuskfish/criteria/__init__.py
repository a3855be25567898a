"""
Criteria

Safe construction of query conditions: validated criteria items, criteria
objects with joiners, ordering and pagination, the factories that build them
and the type-filter helper used by per-type handlers.
"""

from tuskfish.criteria.base import TYPE_COLUMN, Criteria, Joiner, OrderType
from tuskfish.criteria.factory import CriteriaFactory, CriteriaItemFactory
from tuskfish.criteria.item import BindType, CriteriaItem, Operator, infer_bind_type
from tuskfish.criteria.type_filter import find_type_index, normalize_type_filter

__all__ = [
    'TYPE_COLUMN',
    'BindType',
    'Criteria',
    'CriteriaFactory',
    'CriteriaItem',
    'CriteriaItemFactory',
    'Joiner',
    'Operator',
    'OrderType',
    'find_type_index',
    'infer_bind_type',
    'normalize_type_filter',
]

"""
SQL Rendering

Turns criteria objects into parameterised SQLite statements. Identifiers are
validated and double-quoted; every value is bound through a named
placeholder and never interpolated into the statement text.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from tuskfish.core.exceptions import InvalidArgument
from tuskfish.criteria.base import Criteria
from tuskfish.criteria.item import BindType, CriteriaItem, Operator


TABLE_ALIAS = "t1"
TAGLINK_TABLE = "taglink"

# Columns matched by a free-text search, and whether the HTML-escaped copy of
# the term is bound (teaser and description hold entity-encoded HTML).
SEARCH_COLUMNS: Tuple[Tuple[str, bool], ...] = (
    ("title", False),
    ("teaser", True),
    ("description", True),
    ("caption", False),
    ("creator", False),
    ("publisher", False),
)


@dataclass(frozen=True)
class CompiledQuery:
    """A statement plus the named parameters to bind to it."""
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)


def bind_value(value: Any, bind_type: BindType) -> Any:
    """Convert a criteria value to the form sqlite3 binds for its type."""
    if bind_type is BindType.BOOLEAN:
        return int(value)
    return value


class SqlRenderer:
    """
    Renders SELECT, COUNT, DISTINCT, INSERT, UPDATE and DELETE statements.

    Placeholders are ``:placeholderN`` for criteria items (``:placeholderN_M``
    for list operators), ``:tagN`` for tag ids and ``:limit``/``:offset`` for
    pagination.
    """

    def __init__(self, validator):
        self.validator = validator

    def escape_identifier(self, identifier: str) -> str:
        """Quote an identifier, doubling any embedded double quotes."""
        return '"' + str(identifier).replace('"', '""') + '"'

    def quote_table(self, table: str) -> str:
        return self.escape_identifier(self.validator.validate_table_name(table))

    def quote_column(self, column: str, alias: Optional[str] = None) -> str:
        clean_column = self.escape_identifier(self.validator.validate_column_name(column))
        if alias:
            return f"{self.escape_identifier(alias)}.{clean_column}"
        return clean_column

    def render_item(self, item: CriteriaItem, index: int,
                    alias: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
        """Render one criteria item and its bound parameters."""
        column = self.quote_column(item.column, alias)
        operator = item.operator
        name = f"placeholder{index}"

        if operator.takes_no_value:
            return f"{column} {operator.value}", {}

        if operator is Operator.BETWEEN:
            low, high = item.values
            params = {
                f"{name}_0": bind_value(low, item.bind_type),
                f"{name}_1": bind_value(high, item.bind_type),
            }
            return f"{column} BETWEEN :{name}_0 AND :{name}_1", params

        if operator.takes_list:
            params = {
                f"{name}_{position}": bind_value(value, item.bind_type)
                for position, value in enumerate(item.values)
            }
            placeholders = ", ".join(f":{key}" for key in params)
            return f"{column} {operator.value} ({placeholders})", params

        return f"{column} {operator.value} :{name}", {name: bind_value(item.value, item.bind_type)}

    def render_items(self, criteria: Criteria,
                     alias: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
        """Render the criteria items as one parenthesised group."""
        if not criteria.items:
            return "", {}

        parts: List[str] = []
        params: Dict[str, Any] = {}
        for index, item in enumerate(criteria.items):
            if index:
                parts.append(criteria.joiners[index - 1].value)
            sql, item_params = self.render_item(item, index, alias)
            parts.append(sql)
            params.update(item_params)
        return "(" + " ".join(parts) + ")", params

    def render_tag_join(self) -> str:
        taglink = self.escape_identifier(TAGLINK_TABLE)
        return (f"INNER JOIN {taglink} ON {self.escape_identifier(TABLE_ALIAS)}.\"id\" "
                f"= {taglink}.\"content_id\"")

    def render_tags(self, tags: Sequence[int]) -> Tuple[str, Dict[str, Any]]:
        """Render the tag filter (``tag_id = :tag0`` or ``tag_id IN (...)``)."""
        if not tags:
            return "", {}
        column = f"{self.escape_identifier(TAGLINK_TABLE)}.\"tag_id\""
        params = {f"tag{index}": int(tag) for index, tag in enumerate(tags)}
        if len(tags) == 1:
            return f"{column} = :tag0", params
        placeholders = ", ".join(f":{key}" for key in params)
        return f"{column} IN ({placeholders})", params

    def render_where(self, criteria: Optional[Criteria],
                     alias: Optional[str] = TABLE_ALIAS) -> Tuple[str, Dict[str, Any]]:
        """
        Render the WHERE clause (items ANDed with the tag filter).

        Returns an empty string when there is nothing to filter on.
        """
        if criteria is None:
            return "", {}
        conditions = []
        params: Dict[str, Any] = {}

        items_sql, items_params = self.render_items(criteria, alias)
        if items_sql:
            conditions.append(items_sql)
            params.update(items_params)

        tags_sql, tag_params = self.render_tags(criteria.tags)
        if tags_sql:
            conditions.append(tags_sql)
            params.update(tag_params)

        if not conditions:
            return "", {}
        return " WHERE " + " AND ".join(conditions), params

    def render_modifiers(self, criteria: Optional[Criteria]) -> Tuple[str, Dict[str, Any]]:
        """Render GROUP BY, ORDER BY, LIMIT and OFFSET."""
        if criteria is None:
            return "", {}
        sql = ""
        params: Dict[str, Any] = {}

        if criteria.group_by:
            sql += " GROUP BY " + self.quote_column(criteria.group_by, TABLE_ALIAS)

        if criteria.order:
            sql += (" ORDER BY " + self.quote_column(criteria.order, TABLE_ALIAS)
                    + " " + criteria.order_type.value)
            if criteria.secondary_order and criteria.secondary_order != criteria.order:
                sql += (", " + self.quote_column(criteria.secondary_order, TABLE_ALIAS)
                        + " " + criteria.secondary_order_type.value)

        if criteria.limit:
            sql += " LIMIT :limit"
            params['limit'] = criteria.limit
        elif criteria.offset:
            # SQLite needs a LIMIT clause before OFFSET; -1 means unbounded
            sql += " LIMIT -1"
        if criteria.offset:
            sql += " OFFSET :offset"
            params['offset'] = criteria.offset

        return sql, params

    def _from_clause(self, table: str, criteria: Optional[Criteria]) -> str:
        sql = f" FROM {self.quote_table(table)} AS {self.escape_identifier(TABLE_ALIAS)}"
        if criteria is not None and criteria.tags:
            sql += " " + self.render_tag_join()
        return sql

    def _column_list(self, columns: Optional[Iterable[str]]) -> str:
        if not columns:
            return f"{self.escape_identifier(TABLE_ALIAS)}.*"
        return ", ".join(self.quote_column(column, TABLE_ALIAS) for column in columns)

    def select(self, table: str, criteria: Optional[Criteria] = None,
               columns: Optional[Iterable[str]] = None) -> CompiledQuery:
        where_sql, params = self.render_where(criteria)
        modifier_sql, modifier_params = self.render_modifiers(criteria)
        params.update(modifier_params)
        sql = ("SELECT " + self._column_list(columns) + self._from_clause(table, criteria)
               + where_sql + modifier_sql)
        return CompiledQuery(sql, params)

    def select_distinct(self, table: str, columns: Iterable[str],
                        criteria: Optional[Criteria] = None) -> CompiledQuery:
        columns = list(columns)
        if not columns:
            raise InvalidArgument("select_distinct requires at least one column",
                                  field_name='columns', field_value=columns)
        where_sql, params = self.render_where(criteria)
        modifier_sql, modifier_params = self.render_modifiers(criteria)
        params.update(modifier_params)
        sql = ("SELECT DISTINCT " + self._column_list(columns)
               + self._from_clause(table, criteria) + where_sql + modifier_sql)
        return CompiledQuery(sql, params)

    def select_count(self, table: str, criteria: Optional[Criteria] = None,
                     column: Optional[str] = None) -> CompiledQuery:
        """COUNT over the same FROM/JOIN/WHERE as ``select``; modifiers are ignored."""
        target = self.quote_column(column, TABLE_ALIAS) if column else "*"
        where_sql, params = self.render_where(criteria)
        sql = f"SELECT COUNT({target})" + self._from_clause(table, criteria) + where_sql
        return CompiledQuery(sql, params)

    def insert(self, table: str, values: Dict[str, Any]) -> CompiledQuery:
        if not values:
            raise InvalidArgument("insert requires at least one column",
                                  field_name='values', field_value=values)
        columns = [self.validator.validate_column_name(column) for column in values]
        sql = (f"INSERT INTO {self.quote_table(table)} ("
               + ", ".join(self.escape_identifier(column) for column in columns)
               + ") VALUES ("
               + ", ".join(f":{column}" for column in columns) + ")")
        return CompiledQuery(sql, dict(zip(columns, values.values())))

    def _set_clause(self, values: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
        if not values:
            raise InvalidArgument("update requires at least one column",
                                  field_name='values', field_value=values)
        parts = []
        params = {}
        for column, value in values.items():
            clean_column = self.validator.validate_column_name(column)
            parts.append(f"{self.escape_identifier(clean_column)} = :set_{clean_column}")
            params[f"set_{clean_column}"] = value
        return ", ".join(parts), params

    def update(self, table: str, row_id: int, values: Dict[str, Any]) -> CompiledQuery:
        set_sql, params = self._set_clause(values)
        params['id'] = row_id
        sql = f"UPDATE {self.quote_table(table)} SET {set_sql} WHERE \"id\" = :id"
        return CompiledQuery(sql, params)

    def update_all(self, table: str, values: Dict[str, Any],
                   criteria: Optional[Criteria] = None) -> CompiledQuery:
        set_sql, params = self._set_clause(values)
        where_sql, where_params = self.render_items(criteria, None) if criteria else ("", {})
        params.update(where_params)
        sql = f"UPDATE {self.quote_table(table)} SET {set_sql}"
        if where_sql:
            sql += " WHERE " + where_sql
        return CompiledQuery(sql, params)

    def delete(self, table: str, row_id: int) -> CompiledQuery:
        return CompiledQuery(f"DELETE FROM {self.quote_table(table)} WHERE \"id\" = :id",
                             {'id': row_id})

    def delete_all(self, table: str, criteria: Criteria) -> CompiledQuery:
        """
        Delete rows matching criteria.

        Raises:
            InvalidArgument: If the criteria has no items (refuses to empty a table)
        """
        if criteria is None or not criteria.items:
            raise InvalidArgument("delete_all requires criteria with at least one condition",
                                  field_name='criteria', field_value=criteria)
        where_sql, params = self.render_items(criteria, None)
        return CompiledQuery(f"DELETE FROM {self.quote_table(table)} WHERE {where_sql}", params)

    def toggle_boolean(self, table: str, row_id: int, column: str) -> CompiledQuery:
        quoted = self.quote_column(column)
        sql = (f"UPDATE {self.quote_table(table)} SET {quoted} = "
               f"CASE WHEN {quoted} = 1 THEN 0 ELSE 1 END WHERE \"id\" = :id")
        return CompiledQuery(sql, {'id': row_id})

    def update_counter(self, table: str, row_id: int, column: str) -> CompiledQuery:
        quoted = self.quote_column(column)
        sql = (f"UPDATE {self.quote_table(table)} SET {quoted} = "
               f"COALESCE({quoted}, 0) + 1 WHERE \"id\" = :id")
        return CompiledQuery(sql, {'id': row_id})

    def search(self, table: str, terms: Sequence[str], escaped_terms: Sequence[str],
               andor: str, excluded_type: str, limit: int = 0,
               offset: int = 0) -> Tuple[CompiledQuery, CompiledQuery]:
        """
        Render the free-text search and its count.

        Each term produces a ``LIKE`` group across the search columns; the
        groups are joined with ``andor`` and restricted to online content not
        of ``excluded_type``.

        Returns:
            (count query, select query)
        """
        clean_andor = self.validator.validate_joiner(andor)
        if len(terms) != len(escaped_terms):
            raise InvalidArgument("Each search term needs an escaped counterpart",
                                  field_name='escaped_terms', field_value=escaped_terms)

        groups = []
        params: Dict[str, Any] = {}
        for index, (term, escaped) in enumerate(zip(terms, escaped_terms)):
            params[f"search_term{index}"] = f"%{term}%"
            params[f"escaped_search_term{index}"] = f"%{escaped}%"
            likes = []
            for column, uses_escaped in SEARCH_COLUMNS:
                placeholder = f"escaped_search_term{index}" if uses_escaped else f"search_term{index}"
                likes.append(f"{self.quote_column(column)} LIKE :{placeholder}")
            groups.append("(" + " OR ".join(likes) + ")")

        where = ""
        if groups:
            where = "(" + f" {clean_andor} ".join(groups) + ") AND "
        where += "\"online\" = 1 AND \"type\" != :excluded_type"
        params['excluded_type'] = excluded_type

        from_where = f" FROM {self.quote_table(table)} WHERE {where}"
        count_query = CompiledQuery("SELECT COUNT(*)" + from_where, dict(params))

        sql = "SELECT *" + from_where + " ORDER BY \"date\" DESC, \"submission_time\" DESC"
        if limit:
            sql += " LIMIT :limit"
            params['limit'] = limit
        elif offset:
            sql += " LIMIT -1"
        if offset:
            sql += " OFFSET :offset"
            params['offset'] = offset
        return count_query, CompiledQuery(sql, params)

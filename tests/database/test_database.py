"""
Tests for the SQLite content database.
"""

import pytest

from tuskfish.core.config.models import DatabaseConfig
from tuskfish.core.exceptions import DatabaseError, ErrorCode, InvalidArgument, InvalidColumnName
from tuskfish.database.database import Database


def _insert(database, **values):
    row = {'type': 'Article', 'title': 'Untitled', 'online': 1}
    row.update(values)
    return database.insert('content', row)


class TestDatabaseSetup:
    """Test connection handling and schema creation."""

    def test_schema_creates_tables(self, database):
        assert 'submission_time' in database.get_columns('content')
        assert database.get_columns('taglink') == ['id', 'tag_id', 'content_type', 'content_id']

    def test_initialize_schema_is_repeatable(self, database):
        _insert(database, title='Kept')
        database.initialize_schema()
        assert database.select_count('content') == 1

    def test_path_override(self, tmp_path):
        db = Database(DatabaseConfig(path=tmp_path / "a.db"), path=tmp_path / "b.db")
        assert db.path == tmp_path / "b.db"

    def test_in_memory_database(self):
        with Database(DatabaseConfig(path=':memory:')) as db:
            db.initialize_schema()
            assert db.select_count('content') == 0

    def test_context_manager_closes_connection(self, db_path):
        with Database(path=db_path) as db:
            db.initialize_schema()
            assert db._connection is not None
        assert db._connection is None

    def test_missing_table(self, db_path):
        db = Database(path=db_path)
        with pytest.raises(DatabaseError) as exc_info:
            db.get_columns('content')
        assert exc_info.value.error_code == ErrorCode.DATABASE_SCHEMA_ERROR
        assert exc_info.value.suggestions[0].command == "tuskfish db init"
        db.close()

    def test_query_before_init_is_schema_error(self, db_path):
        db = Database(path=db_path)
        with pytest.raises(DatabaseError) as exc_info:
            db.select('content')
        assert exc_info.value.error_code == ErrorCode.DATABASE_SCHEMA_ERROR
        db.close()


class TestDatabaseReads:
    """Test select, count and distinct against real rows."""

    def test_select_with_criteria(self, database, criteria, item_factory):
        _insert(database, title='First', type='Video')
        _insert(database, title='Second')
        criteria.add(item_factory.get_item('type', 'Video'))

        rows = database.select('content', criteria)

        assert [row['title'] for row in rows] == ['First']

    def test_select_order_limit_offset(self, database, criteria):
        for index in range(5):
            _insert(database, title=f"Item {index}", submission_time=index)
        criteria.set_order('submission_time', 'DESC')
        criteria.set_limit(2)
        criteria.set_offset(1)

        rows = database.select('content', criteria)

        assert [row['submission_time'] for row in rows] == [3, 2]

    def test_offset_without_limit(self, database, criteria):
        for index in range(4):
            _insert(database, submission_time=index)
        criteria.set_order('submission_time', 'ASC')
        criteria.set_offset(2)
        assert [row['submission_time'] for row in database.select('content', criteria)] == [2, 3]

    def test_select_columns(self, database):
        _insert(database, title='Only')
        row = database.select('content', columns=['id', 'title'])[0]
        assert row.keys() == ['id', 'title']

    def test_count_ignores_limit(self, database, criteria):
        for _ in range(3):
            _insert(database)
        criteria.set_limit(1)
        assert database.select_count('content', criteria) == 3

    def test_tag_filter(self, database, criteria):
        tagged = _insert(database, title='Tagged')
        _insert(database, title='Untagged')
        database.insert('taglink', {'tag_id': 7, 'content_type': 'Article', 'content_id': tagged})
        criteria.set_tag([7])

        rows = database.select('content', criteria)

        assert [row['id'] for row in rows] == [tagged]
        assert database.select_count('content', criteria) == 1

    def test_select_distinct(self, database):
        _insert(database, type='Video')
        _insert(database, type='Video')
        _insert(database, type='Image')
        rows = database.select_distinct('content', ['type'])
        assert sorted(row['type'] for row in rows) == ['Image', 'Video']

    def test_unknown_column_in_criteria(self, database, criteria, item_factory):
        criteria.add(item_factory.get_item('colour', 'red'))
        with pytest.raises(InvalidColumnName):
            database.select('content', criteria)

    def test_unknown_order_column(self, database, criteria):
        criteria.set_order('colour')
        with pytest.raises(InvalidColumnName):
            database.select_count('content', criteria)

    def test_column_check_ignores_case(self, database, criteria, item_factory):
        _insert(database, type='Video')
        criteria.add(item_factory.get_item('Type', 'Video'))
        assert database.select_count('content', criteria) == 1


class TestDatabaseWrites:
    """Test insert, update, delete, toggle and counter."""

    def test_insert_returns_id(self, database):
        first = _insert(database)
        second = _insert(database)
        assert second == first + 1

    def test_insert_unknown_column(self, database):
        with pytest.raises(InvalidColumnName):
            database.insert('content', {'type': 'Article', 'colour': 'red'})

    def test_update(self, database, criteria, item_factory):
        row_id = _insert(database, title='Old')
        assert database.update('content', row_id, {'title': 'New'}) is True
        criteria.add(item_factory.get_item('id', row_id))
        assert database.select('content', criteria)[0]['title'] == 'New'

    def test_update_missing_row(self, database):
        assert database.update('content', 999, {'title': 'Ghost'}) is False

    def test_update_rejects_bad_id(self, database):
        with pytest.raises(InvalidArgument):
            database.update('content', 0, {'title': 'x'})

    def test_update_all(self, database, criteria, item_factory):
        _insert(database, parent=4)
        _insert(database, parent=4)
        _insert(database, parent=2)
        criteria.add(item_factory.get_item('parent', 4))

        assert database.update_all('content', {'parent': 0}, criteria) == 2

    def test_delete(self, database):
        row_id = _insert(database)
        assert database.delete('content', row_id) is True
        assert database.delete('content', row_id) is False
        assert database.select_count('content') == 0

    def test_delete_all(self, database, criteria, item_factory):
        _insert(database, type='Video')
        _insert(database, type='Video')
        keep = _insert(database, type='Image')
        criteria.add(item_factory.get_item('type', 'Video'))

        assert database.delete_all('content', criteria) == 2
        assert [row['id'] for row in database.select('content')] == [keep]

    def test_delete_all_refuses_empty_criteria(self, database, criteria):
        _insert(database)
        with pytest.raises(InvalidArgument):
            database.delete_all('content', criteria)
        assert database.select_count('content') == 1

    def test_toggle_boolean(self, database, criteria, item_factory):
        row_id = _insert(database, online=1)
        criteria.add(item_factory.get_item('id', row_id))

        database.toggle_boolean('content', row_id, 'online')
        assert database.select('content', criteria)[0]['online'] == 0
        database.toggle_boolean('content', row_id, 'online')
        assert database.select('content', criteria)[0]['online'] == 1

    def test_update_counter(self, database, criteria, item_factory):
        row_id = _insert(database, counter=None)
        criteria.add(item_factory.get_item('id', row_id))

        database.update_counter('content', row_id, 'counter')
        database.update_counter('content', row_id, 'counter')

        assert database.select('content', criteria)[0]['counter'] == 2

    def test_values_with_quotes_are_stored_verbatim(self, database, criteria, item_factory):
        title = "O'Brien\"; DROP TABLE content; --"
        row_id = _insert(database, title=title)
        criteria.add(item_factory.get_item('id', row_id))
        assert database.select('content', criteria)[0]['title'] == title


class TestDatabaseTransactions:
    """Test grouping several writes into one transaction."""

    def test_grouped_writes_commit_together(self, database, db_path):
        with database.transaction():
            _insert(database, title='One')
            _insert(database, title='Two')

        with Database(DatabaseConfig(path=db_path)) as other:
            assert other.select_count('content') == 2

    def test_error_rolls_back_every_write(self, database):
        with pytest.raises(RuntimeError):
            with database.transaction():
                _insert(database, title='One')
                _insert(database, title='Two')
                raise RuntimeError("abort")
        assert database.select_count('content') == 0

    def test_failed_statement_rolls_back_earlier_ones(self, database):
        keep = _insert(database, title='Kept')
        with pytest.raises(InvalidColumnName):
            with database.transaction():
                database.update('content', keep, {'title': 'Changed'})
                database.insert('content', {'type': 'Article', 'colour': 'red'})

        rows = database.select('content')
        assert [(row['id'], row['title']) for row in rows] == [(keep, 'Kept')]

    def test_writes_after_a_group_commit_on_their_own(self, database, db_path):
        with pytest.raises(RuntimeError):
            with database.transaction():
                raise RuntimeError("abort")
        _insert(database)

        with Database(DatabaseConfig(path=db_path)) as other:
            assert other.select_count('content') == 1


class TestDatabaseSearch:
    """Test the raw search query."""

    def test_search_counts_and_pages(self, database):
        for index in range(3):
            _insert(database, title=f"Fish {index}", date=f"2024-01-0{index + 1}")
        _insert(database, title="Fish block", type='Block')
        _insert(database, title="Offline fish", online=0)

        count, rows = database.search('content', ['fish'], ['fish'], 'AND', 'Block', limit=2)

        assert count == 3
        assert [row['title'] for row in rows] == ['Fish 2', 'Fish 1']

    def test_search_uses_escaped_term_for_teaser(self, database):
        _insert(database, title="Care", teaser="tusks &amp; care")
        count, _ = database.search('content', ['tusks & care'], ['tusks &amp; care'],
                                   'AND', 'Block')
        assert count == 1

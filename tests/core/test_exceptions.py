"""
Tests for the Tuskfish exception hierarchy.
"""

import pytest

from tuskfish.core.exceptions import (
    ConfigurationError,
    ContentError,
    DatabaseError,
    ErrorCode,
    ErrorContext,
    InvalidArgument,
    InvalidColumnName,
    InvalidJoiner,
    InvalidOperator,
    RecoverySuggestion,
    TuskfishError,
    ValidationError,
    config_error,
    database_error,
    validation_error,
)


class TestTuskfishError:
    """Test the base error."""

    def test_defaults(self):
        error = TuskfishError("Something broke")
        assert str(error) == "Something broke"
        assert error.error_code == ErrorCode.UNKNOWN_ERROR
        assert len(error.context.correlation_id) == 8
        assert 'platform' in error.context.system_info

    def test_user_message_lists_suggestions(self):
        error = TuskfishError("Broken", error_code=ErrorCode.INTERNAL_ERROR)
        error.add_suggestion(RecoverySuggestion("Second", "later", priority=2))
        error.add_suggestion(RecoverySuggestion("First", "sooner", command="fix it", priority=1))

        message = error.get_user_message()

        assert message.startswith("Error: Broken\nError Code: 9001")
        assert message.index("First") < message.index("Second")
        assert "Command: fix it" in message

    def test_debug_info(self):
        cause = ValueError("bad")
        error = TuskfishError("Wrapped", cause=cause, context=ErrorContext(operation="select"))
        info = error.get_debug_info()
        assert info['error_type'] == 'TuskfishError'
        assert info['cause'] == {'type': 'ValueError', 'message': 'bad'}
        assert info['context']['operation'] == 'select'


class TestValidationErrors:
    """Test the criteria-facing validation errors."""

    @pytest.mark.parametrize("error_class,code", [
        (InvalidArgument, ErrorCode.VALIDATION_RANGE_ERROR),
        (InvalidColumnName, ErrorCode.VALIDATION_INVALID_COLUMN),
        (InvalidOperator, ErrorCode.VALIDATION_INVALID_OPERATOR),
        (InvalidJoiner, ErrorCode.VALIDATION_INVALID_JOINER),
    ])
    def test_default_codes(self, error_class, code):
        error = error_class("bad", field_name='column', field_value='x y')
        assert error.error_code == code
        assert isinstance(error, ValidationError)
        assert error.context.user_context == {'field_name': 'column', 'field_value': 'x y'}

    def test_column_name_is_an_invalid_argument(self):
        assert issubclass(InvalidColumnName, InvalidArgument)
        assert InvalidColumnName("bad").suggestions

    def test_helper(self):
        error = validation_error("Missing", field='title')
        assert error.field_name == 'title'


class TestDomainErrors:
    """Test configuration, database and content errors."""

    def test_config_file_not_found_suggestion(self):
        error = ConfigurationError("missing", error_code=ErrorCode.CONFIG_FILE_NOT_FOUND)
        assert error.suggestions[0].command == "tuskfish config init"

    def test_config_helper(self):
        error = config_error("bad value", key='site.search_pagination')
        assert error.context.user_context['config_key'] == 'site.search_pagination'

    def test_database_error_context(self):
        error = DatabaseError("failed", table='content', sql='SELECT 1')
        assert error.context.table == 'content'
        assert error.context.user_context['sql'] == 'SELECT 1'
        assert error.suggestions == []

    def test_schema_error_suggests_init(self):
        error = DatabaseError("no such table", error_code=ErrorCode.DATABASE_SCHEMA_ERROR)
        assert error.suggestions[0].command == "tuskfish db init"

    def test_database_helper_keeps_cause(self):
        cause = RuntimeError("locked")
        assert database_error("failed", cause=cause).cause is cause

    def test_content_error(self):
        error = ContentError("gone", error_code=ErrorCode.CONTENT_NOT_FOUND,
                             content_type='Video', content_id=0)
        assert error.context.content_type == 'Video'
        assert error.context.content_id == 0
        assert isinstance(error, TuskfishError)

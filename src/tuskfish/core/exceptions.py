"""
Core Exception Hierarchy for Tuskfish

Provides error classification with error codes, recovery suggestions and
context information. Criteria and query errors are caller-contract
violations: they are raised at construction or mutation time and are never
retried.
"""

import sys
import time
import traceback
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """Standard error codes for different error categories."""

    # Configuration errors (3000-3999)
    CONFIG_INVALID_FORMAT = 3001
    CONFIG_MISSING_REQUIRED = 3002
    CONFIG_INVALID_VALUE = 3003
    CONFIG_FILE_NOT_FOUND = 3004

    # Content errors (4000-4999)
    CONTENT_UNKNOWN_TYPE = 4001
    CONTENT_NOT_FOUND = 4002
    CONTENT_WRITE_FAILED = 4003

    # Validation errors (5000-5999)
    VALIDATION_INVALID_INPUT = 5001
    VALIDATION_MISSING_FIELD = 5002
    VALIDATION_TYPE_MISMATCH = 5003
    VALIDATION_RANGE_ERROR = 5004
    VALIDATION_FORMAT_ERROR = 5005
    VALIDATION_INVALID_COLUMN = 5006
    VALIDATION_INVALID_OPERATOR = 5007
    VALIDATION_INVALID_JOINER = 5008

    # Database errors (6000-6999)
    DATABASE_CONNECTION_FAILED = 6001
    DATABASE_QUERY_FAILED = 6002
    DATABASE_SCHEMA_ERROR = 6003

    # Generic/unknown errors (9000-9999)
    UNKNOWN_ERROR = 9000
    INTERNAL_ERROR = 9001


@dataclass
class ErrorContext:
    """Contextual information about an error occurrence."""

    operation: str = ""
    table: Optional[str] = None
    content_id: Optional[int] = None
    content_type: Optional[str] = None
    correlation_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
    system_info: Dict[str, Any] = field(default_factory=dict)
    user_context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary for serialization."""
        return {
            'operation': self.operation,
            'table': self.table,
            'content_id': self.content_id,
            'content_type': self.content_type,
            'correlation_id': self.correlation_id,
            'timestamp': self.timestamp,
            'system_info': self.system_info,
            'user_context': self.user_context,
        }


@dataclass
class RecoverySuggestion:
    """Structured recovery suggestion for error resolution."""

    action: str
    description: str
    command: Optional[str] = None
    priority: int = 1  # 1 = highest

    def to_dict(self) -> Dict[str, Any]:
        """Convert suggestion to dictionary."""
        return {
            'action': self.action,
            'description': self.description,
            'command': self.command,
            'priority': self.priority,
        }


class TuskfishError(Exception):
    """
    Base exception for all Tuskfish errors.

    Carries an error code, the context the error occurred in, the original
    cause (if any) and a list of recovery suggestions.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        suggestions: Optional[List[RecoverySuggestion]] = None
    ):
        """
        Initialize Tuskfish error.

        Args:
            message: Human-readable error description
            error_code: Standardized error code
            context: Contextual information about the error
            cause: Original exception that caused this error
            suggestions: List of recovery suggestions
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self.suggestions = suggestions or []
        self.stack_trace = traceback.format_exc()

        if not self.context.correlation_id:
            self.context.correlation_id = str(uuid.uuid4())[:8]

        if not self.context.system_info:
            self.context.system_info = {
                'platform': sys.platform,
                'python_version': sys.version,
            }

    def add_suggestion(self, suggestion: RecoverySuggestion) -> None:
        """Add a recovery suggestion to the error."""
        self.suggestions.append(suggestion)
        self.suggestions.sort(key=lambda s: s.priority)

    def get_user_message(self) -> str:
        """Get user-friendly error message with suggestions."""
        lines = [f"Error: {self.message}"]

        if self.error_code != ErrorCode.UNKNOWN_ERROR:
            lines.append(f"Error Code: {self.error_code.value}")

        if self.suggestions:
            lines.append("\nSuggested solutions:")
            for i, suggestion in enumerate(self.suggestions[:3], 1):
                lines.append(f"  {i}. {suggestion.action}")
                lines.append(f"     {suggestion.description}")
                if suggestion.command:
                    lines.append(f"     Command: {suggestion.command}")

        return "\n".join(lines)

    def get_debug_info(self) -> Dict[str, Any]:
        """Get comprehensive debug information."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'error_code': self.error_code.value,
            'context': self.context.to_dict(),
            'cause': {
                'type': type(self.cause).__name__ if self.cause else None,
                'message': str(self.cause) if self.cause else None,
            },
            'suggestions': [s.to_dict() for s in self.suggestions],
            'stack_trace': self.stack_trace,
        }


class ValidationError(TuskfishError):
    """Exception for input validation errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.VALIDATION_INVALID_INPUT,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext()
        if field_name:
            context.user_context['field_name'] = field_name
            context.user_context['field_value'] = field_value

        kwargs['context'] = context
        kwargs['error_code'] = error_code

        super().__init__(message, **kwargs)
        self.field_name = field_name
        self.field_value = field_value


class InvalidArgument(ValidationError):
    """A setter or constructor received an out-of-range or malformed argument."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('error_code', ErrorCode.VALIDATION_RANGE_ERROR)
        super().__init__(message, **kwargs)


class InvalidColumnName(InvalidArgument):
    """A column name is not alphanumeric/underscore or does not exist."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('error_code', ErrorCode.VALIDATION_INVALID_COLUMN)
        super().__init__(message, **kwargs)
        self.add_suggestion(RecoverySuggestion(
            action="Check the column name",
            description="Column names may only contain letters, digits and underscores.",
        ))


class InvalidOperator(ValidationError):
    """An operator is not in the permitted operator set."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('error_code', ErrorCode.VALIDATION_INVALID_OPERATOR)
        super().__init__(message, **kwargs)


class InvalidJoiner(ValidationError):
    """A boolean joiner other than AND/OR was supplied."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('error_code', ErrorCode.VALIDATION_INVALID_JOINER)
        super().__init__(message, **kwargs)


class ConfigurationError(TuskfishError):
    """Exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIG_INVALID_FORMAT,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext()
        if config_key:
            context.user_context['config_key'] = config_key
            context.user_context['config_value'] = config_value

        kwargs['context'] = context
        kwargs['error_code'] = error_code

        super().__init__(message, **kwargs)

        if error_code == ErrorCode.CONFIG_FILE_NOT_FOUND:
            self.add_suggestion(RecoverySuggestion(
                action="Create configuration file",
                description="Create a configuration file using the default template.",
                command="tuskfish config init",
            ))
        elif error_code == ErrorCode.CONFIG_INVALID_VALUE:
            self.add_suggestion(RecoverySuggestion(
                action="Check configuration values",
                description="Review the configuration file for invalid values and correct them.",
                command="tuskfish config show",
            ))


class DatabaseError(TuskfishError):
    """Exception for failures reported by the database driver."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_QUERY_FAILED,
        table: Optional[str] = None,
        sql: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext()
        if table:
            context.table = table
        if sql:
            context.user_context['sql'] = sql

        kwargs['context'] = context
        kwargs['error_code'] = error_code

        super().__init__(message, **kwargs)

        if error_code == ErrorCode.DATABASE_SCHEMA_ERROR:
            self.add_suggestion(RecoverySuggestion(
                action="Initialise the database",
                description="Create the content and taglink tables before querying.",
                command="tuskfish db init",
            ))


class ContentError(TuskfishError):
    """Exception for content object errors (unknown types, failed writes)."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONTENT_UNKNOWN_TYPE,
        content_type: Optional[str] = None,
        content_id: Optional[int] = None,
        **kwargs
    ):
        context = kwargs.get('context') or ErrorContext()
        if content_type:
            context.content_type = content_type
        if content_id is not None:
            context.content_id = content_id

        kwargs['context'] = context
        kwargs['error_code'] = error_code

        super().__init__(message, **kwargs)


# Convenience functions for creating common errors
def config_error(message: str, key: Optional[str] = None, **kwargs) -> ConfigurationError:
    """Create a configuration error with standard suggestions."""
    return ConfigurationError(message, config_key=key, **kwargs)


def validation_error(message: str, field: Optional[str] = None, **kwargs) -> ValidationError:
    """Create a validation error with field context."""
    return ValidationError(message, field_name=field, **kwargs)


def database_error(message: str, cause: Optional[Exception] = None, **kwargs) -> DatabaseError:
    """Create a database error wrapping a driver exception."""
    return DatabaseError(message, cause=cause, **kwargs)

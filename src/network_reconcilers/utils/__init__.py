"""Utility modules for logging, AWS client management, and helpers."""

from network_reconcilers.utils.aws_client import AWSClientManager
from network_reconcilers.utils.retry import RetryStrategy
from network_reconcilers.utils.errors import (
    ErrorCategory,
    ErrorSeverity,
    ErrorContext,
    ReconcileError,
    ConfigurationError,
    NetworkServiceError,
    RouteNotFound,
    ErrorHandler,
    error_handler,
    error_code,
    is_not_found,
)
from network_reconcilers.utils.logging import get_logger, setup_logging, LogContext

__all__ = [
    # AWS Client
    'AWSClientManager',

    # Retry
    'RetryStrategy',

    # Errors
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorContext',
    'ReconcileError',
    'ConfigurationError',
    'NetworkServiceError',
    'RouteNotFound',
    'ErrorHandler',
    'error_handler',
    'error_code',
    'is_not_found',

    # Logging
    'get_logger',
    'setup_logging',
    'LogContext',
]

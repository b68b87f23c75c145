"""Error handling framework for reconciliation passes."""

from typing import Optional, Dict, Any, List
from enum import Enum
from dataclasses import dataclass
from botocore.exceptions import ClientError, NoCredentialsError, PartialCredentialsError
from network_reconcilers.utils.logging import get_logger

logger = get_logger(__name__)


# EC2 codes that mean the target is already gone
NOT_FOUND_ERROR_CODES = frozenset({
    'InvalidRoute.NotFound',
    'InvalidNetworkInterfaceID.NotFound',
    'InvalidGroup.NotFound',
    'InvalidGroupId.NotFound',
})


class ErrorCategory(Enum):
    """Categories of errors that can occur during reconciliation."""
    CONFIGURATION = "configuration"
    AWS = "aws"
    NETWORK = "network"
    DEPENDENCY = "dependency"
    CREDENTIAL = "credential"
    PERMISSION = "permission"
    RESOURCE_LIMIT = "resource_limit"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    CRITICAL = "critical"  # Invocation cannot continue
    ERROR = "error"  # Resource failed but the pass can continue
    WARNING = "warning"
    INFO = "info"


@dataclass
class ErrorContext:
    """Context information for an error."""
    resource_id: Optional[str] = None
    resource_type: Optional[str] = None
    operation: Optional[str] = None
    aws_operation: Optional[str] = None
    request_id: Optional[str] = None
    additional_info: Optional[Dict[str, Any]] = None


class ReconcileError(Exception):
    """Base exception for reconciliation errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        suggestions: Optional[List[str]] = None
    ):
        """Initialize reconcile error.

        Args:
            message: Human-readable error message
            category: Error category
            severity: Error severity
            context: Additional context about the error
            cause: Original exception that caused this error
            suggestions: List of suggested fixes
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.cause = cause
        self.suggestions = suggestions or []

    def to_user_message(self) -> str:
        """Convert error to a readable multi-line message.

        Returns:
            Formatted error message for the logs
        """
        lines = [f"{self.severity.value.upper()}: {self.message}"]

        if self.context.resource_id:
            lines.append(f"   Resource: {self.context.resource_id}")
        if self.context.operation:
            lines.append(f"   Operation: {self.context.operation}")

        if self.cause:
            lines.append(f"   Cause: {str(self.cause)}")

        if self.suggestions:
            lines.append("   Suggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error
        """
        return {
            'message': self.message,
            'category': self.category.value,
            'severity': self.severity.value,
            'context': {
                'resource_id': self.context.resource_id,
                'resource_type': self.context.resource_type,
                'operation': self.context.operation,
                'aws_operation': self.context.aws_operation,
                'request_id': self.context.request_id,
                'additional_info': self.context.additional_info
            },
            'cause': str(self.cause) if self.cause else None,
            'suggestions': self.suggestions
        }


class ConfigurationError(ReconcileError):
    """Invalid resource properties or handler settings."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )


class NetworkServiceError(ReconcileError):
    """An EC2 call failed."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('category', ErrorCategory.AWS)
        super().__init__(message, **kwargs)


class RouteNotFound(NetworkServiceError):
    """EC2 reported the route as already absent."""

    def __init__(self, route_table_id: str, destination_cidr_block: str, **kwargs):
        super().__init__(
            f"No route to {destination_cidr_block} on route table {route_table_id}",
            category=ErrorCategory.NOT_FOUND,
            severity=ErrorSeverity.INFO,
            **kwargs
        )
        self.route_table_id = route_table_id
        self.destination_cidr_block = destination_cidr_block


def error_code(error: Exception) -> Optional[str]:
    """Return the AWS error code of a botocore ClientError, if any."""
    if isinstance(error, ClientError):
        return error.response.get('Error', {}).get('Code')
    return None


def is_not_found(error: Exception) -> bool:
    """Check whether an error means the target resource no longer exists."""
    if isinstance(error, RouteNotFound):
        return True
    return error_code(error) in NOT_FOUND_ERROR_CODES


class ErrorHandler:
    """Handles and categorizes errors from EC2 and other sources."""

    # Mapping of EC2 error codes to error categories and suggestions
    AWS_ERROR_MAPPING = {
        # Credential errors
        'AuthFailure': {
            'category': ErrorCategory.CREDENTIAL,
            'message': 'AWS was not able to validate the provided credentials',
            'suggestions': [
                'Check the execution role attached to the function',
                'Verify the function runs in the expected account'
            ]
        },
        'ExpiredToken': {
            'category': ErrorCategory.CREDENTIAL,
            'message': 'AWS session token has expired',
            'suggestions': [
                'Retry the invocation so the runtime refreshes credentials'
            ]
        },

        # Permission errors
        'UnauthorizedOperation': {
            'category': ErrorCategory.PERMISSION,
            'message': 'Operation not authorized',
            'suggestions': [
                'Grant the execution role the required ec2:* permission',
                'Check service control policies for explicit denies',
                'Verify the operation targets the correct region'
            ]
        },

        # Dependency errors
        'DependencyViolation': {
            'category': ErrorCategory.DEPENDENCY,
            'message': 'Resource still has dependent objects',
            'suggestions': [
                'Delete network interfaces that reference the security group first',
                'Remove references from other security groups rules'
            ]
        },
        'InvalidNetworkInterface.InUse': {
            'category': ErrorCategory.DEPENDENCY,
            'message': 'Network interface is still attached',
            'suggestions': [
                'Wait for the owning service to detach the interface',
                'Run the teardown again once the cluster is gone'
            ]
        },
        'RouteAlreadyExists': {
            'category': ErrorCategory.DEPENDENCY,
            'message': 'A route to this destination already exists',
            'suggestions': [
                'Another process may be managing the same route table',
                'Retry the reconciliation pass so the route is re-read'
            ]
        },

        # Resource limit errors
        'RouteLimitExceeded': {
            'category': ErrorCategory.RESOURCE_LIMIT,
            'message': 'Route table has reached its route limit',
            'suggestions': [
                'Request a routes-per-table quota increase',
                'Consolidate destination CIDR blocks'
            ]
        },
        'RequestLimitExceeded': {
            'category': ErrorCategory.RESOURCE_LIMIT,
            'message': 'EC2 API rate limit exceeded',
            'suggestions': [
                'Reduce concurrent stack operations in the account',
                'Retry the operation (automatic retry enabled)'
            ]
        },

        # Not found
        'InvalidRouteTableID.NotFound': {
            'category': ErrorCategory.NOT_FOUND,
            'message': 'Route table not found',
            'suggestions': [
                'Check whether the route table was deleted outside the stack'
            ]
        },
        'InvalidVpcPeeringConnectionID.NotFound': {
            'category': ErrorCategory.NOT_FOUND,
            'message': 'VPC peering connection not found',
            'suggestions': [
                'Verify the peering connection exists and is active',
                'Check that the peering connection is in the same region'
            ]
        },

        # Validation errors
        'InvalidParameterValue': {
            'category': ErrorCategory.VALIDATION,
            'message': 'Invalid parameter value',
            'suggestions': [
                'Check the resource properties passed by the stack'
            ]
        },

        # Network errors
        'ServiceUnavailable': {
            'category': ErrorCategory.NETWORK,
            'message': 'EC2 temporarily unavailable',
            'suggestions': [
                'Wait a few moments and retry',
                'Check the AWS Health Dashboard'
            ]
        }
    }

    def __init__(self):
        """Initialize error handler."""
        self.logger = get_logger(__name__)

    def handle_exception(
        self,
        error: Exception,
        context: Optional[ErrorContext] = None
    ) -> ReconcileError:
        """Handle an exception and convert to ReconcileError.

        Args:
            error: The exception to handle
            context: Additional context about where the error occurred

        Returns:
            ReconcileError with categorization and suggestions
        """
        context = context or ErrorContext()

        if isinstance(error, ReconcileError):
            return error

        if isinstance(error, ClientError):
            return self._handle_aws_error(error, context)

        if isinstance(error, (NoCredentialsError, PartialCredentialsError)):
            return ReconcileError(
                message=f'Credential error: {str(error)}',
                category=ErrorCategory.CREDENTIAL,
                severity=ErrorSeverity.CRITICAL,
                context=context,
                cause=error,
                suggestions=['Check the execution role attached to the function']
            )

        if isinstance(error, (ConnectionError, TimeoutError)):
            return ReconcileError(
                message=f'Network error: {str(error)}',
                category=ErrorCategory.NETWORK,
                context=context,
                cause=error,
                suggestions=[
                    'Check that the function can reach the EC2 endpoint',
                    'Retry the operation (automatic retry enabled)'
                ]
            )

        return ReconcileError(
            message=str(error),
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.ERROR,
            context=context,
            cause=error,
            suggestions=['Check logs for more details']
        )

    def _handle_aws_error(
        self,
        error: ClientError,
        context: ErrorContext
    ) -> ReconcileError:
        """Handle AWS ClientError.

        Args:
            error: The ClientError
            context: Error context

        Returns:
            Categorized ReconcileError
        """
        code = error_code(error) or 'Unknown'
        error_message = error.response.get('Error', {}).get('Message', str(error))
        context.request_id = error.response.get('ResponseMetadata', {}).get('RequestId')
        context.aws_operation = getattr(error, 'operation_name', None)

        if code in NOT_FOUND_ERROR_CODES:
            return ReconcileError(
                message=f"Resource already absent ({code}): {error_message}",
                category=ErrorCategory.NOT_FOUND,
                severity=ErrorSeverity.INFO,
                context=context,
                cause=error
            )

        error_info = self.AWS_ERROR_MAPPING.get(code)
        if error_info:
            return ReconcileError(
                message=f"{error_info['message']}: {error_message}",
                category=error_info['category'],
                severity=ErrorSeverity.ERROR,
                context=context,
                cause=error,
                suggestions=error_info['suggestions']
            )

        return ReconcileError(
            message=f"AWS Error ({code}): {error_message}",
            category=ErrorCategory.AWS,
            severity=ErrorSeverity.ERROR,
            context=context,
            cause=error,
            suggestions=[
                'Check the EC2 API reference for this error code',
                f'AWS Request ID: {context.request_id}'
            ]
        )

    def log_error(self, error: ReconcileError):
        """Log an error with appropriate level.

        Args:
            error: The error to log
        """
        log_message = error.to_user_message()

        if error.severity in (ErrorSeverity.CRITICAL, ErrorSeverity.ERROR):
            self.logger.error(log_message)
        elif error.severity == ErrorSeverity.WARNING:
            self.logger.warning(log_message)
        else:
            self.logger.info(log_message)

        self.logger.debug(f"Error details: {error.to_dict()}")


# Global error handler instance
error_handler = ErrorHandler()

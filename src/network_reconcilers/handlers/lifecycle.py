"""CloudFormation custom resource request/response contract."""

import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type

import requests
from pydantic import BaseModel, ConfigDict, Field

from network_reconcilers.config.models import HandlerSettings, ResourceProperties
from network_reconcilers.config.parser import ConfigValidationError, parse_properties
from network_reconcilers.network.ec2 import EC2NetworkService
from network_reconcilers.utils.aws_client import AWSClientManager
from network_reconcilers.utils.errors import ErrorContext, ReconcileError, error_handler
from network_reconcilers.utils.logging import LogContext, get_logger
from network_reconcilers.utils.retry import RetryStrategy

logger = get_logger(__name__)

ServiceFactory = Callable[[Optional[str]], EC2NetworkService]

# Fields needed to answer a request, even one that fails validation
RESPONSE_FIELDS = ('ResponseURL', 'StackId', 'RequestId', 'LogicalResourceId')


class RequestType(Enum):
    """Lifecycle event of the custom resource."""
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class ResponseStatus(Enum):
    """Terminal status reported back to CloudFormation."""
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class LifecycleRequest(BaseModel):
    """Custom resource request event."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_type: RequestType = Field(..., alias="RequestType")
    response_url: str = Field(..., alias="ResponseURL", min_length=1)
    stack_id: str = Field(..., alias="StackId")
    request_id: str = Field(..., alias="RequestId")
    logical_resource_id: str = Field(..., alias="LogicalResourceId")
    physical_resource_id: Optional[str] = Field(None, alias="PhysicalResourceId")
    resource_type: Optional[str] = Field(None, alias="ResourceType")
    resource_properties: Dict[str, Any] = Field(default_factory=dict, alias="ResourceProperties")
    old_resource_properties: Optional[Dict[str, Any]] = Field(None, alias="OldResourceProperties")


def send_response(
    request: LifecycleRequest,
    context: Any,
    status: ResponseStatus,
    reason: Optional[str] = None,
    physical_resource_id: Optional[str] = None,
    data: Optional[Dict[str, Any]] = None,
    no_echo: bool = False,
    timeout: float = 10.0
) -> Dict[str, Any]:
    """PUT the response document to the pre-signed ResponseURL.

    The physical id is kept stable across updates: an explicit id wins, then
    the id CloudFormation already knows, then the Lambda log stream name.

    Args:
        request: The request being answered
        context: Lambda context object
        status: SUCCESS or FAILED
        reason: Reason shown in the stack events
        physical_resource_id: Explicit physical id
        data: Attributes exposed to Fn::GetAtt
        no_echo: Mask the data in stack output
        timeout: HTTP timeout in seconds

    Returns:
        The response body that was sent
    """
    log_stream_name = getattr(context, 'log_stream_name', None)
    body = {
        'Status': status.value,
        'Reason': reason or f"See the details in CloudWatch Log Stream: {log_stream_name}",
        'PhysicalResourceId': (
            physical_resource_id
            or request.physical_resource_id
            or log_stream_name
            or request.logical_resource_id
        ),
        'StackId': request.stack_id,
        'RequestId': request.request_id,
        'LogicalResourceId': request.logical_resource_id,
        'NoEcho': no_echo,
        'Data': data or {},
    }
    payload = json.dumps(body)

    try:
        response = requests.put(
            request.response_url,
            data=payload,
            headers={'content-type': '', 'content-length': str(len(payload))},
            timeout=timeout
        )
        response.raise_for_status()
        logger.info(f"Sent {status.value} response, status code: {response.status_code}")
    except requests.RequestException as e:
        logger.error(f"Failed to send {status.value} response to CloudFormation: {e}")

    return body


class LifecycleHandler(ABC):
    """Base class for custom resource handlers.

    Subclasses implement one method per request type. Exactly one response is
    sent per invocation; when anything fails, FAILED is sent first and the
    error is raised afterwards so the invocation itself fails too.
    """

    properties_model: Type[ResourceProperties] = ResourceProperties
    resource_noun: str = "resource"

    def __init__(
        self,
        settings: Optional[HandlerSettings] = None,
        client_manager: Optional[AWSClientManager] = None,
        service_factory: Optional[ServiceFactory] = None
    ):
        """Initialize handler.

        Args:
            settings: Handler settings (read from the environment when None)
            client_manager: Source of boto3 clients
            service_factory: Builds the EC2 service for a region; overrides client_manager
        """
        self.settings = settings or HandlerSettings.from_env()
        self.client_manager = client_manager or AWSClientManager()
        self.service_factory = service_factory or self._default_service

    def resolve_region(self, region: Optional[str]) -> Optional[str]:
        """Region the work runs in: the explicit one, else the session's."""
        return region or self.client_manager.session.region_name

    def _default_service(self, region: Optional[str]) -> EC2NetworkService:
        return EC2NetworkService(
            self.client_manager.get_client('ec2', region=region),
            RetryStrategy(max_retries=self.settings.ec2_max_retries)
        )

    def failure_message(self, request_type: RequestType) -> str:
        return f"Failed to {request_type.value.lower()} {self.resource_noun}!"

    def __call__(self, event: Dict[str, Any], context: Any) -> Dict[str, Any]:
        """Handle one lifecycle event.

        Args:
            event: Custom resource request
            context: Lambda context object

        Returns:
            The response body sent to CloudFormation

        Raises:
            ConfigValidationError: If the event itself is malformed, after reporting
                FAILED when the event carries enough to answer it
            ReconcileError: After reporting FAILED
        """
        try:
            request = parse_properties(LifecycleRequest, event)
        except ConfigValidationError as e:
            self.report_invalid_event(event, context, e)
            raise

        with LogContext(
            logger,
            request_id=request.request_id,
            resource_id=request.logical_resource_id,
            operation=request.request_type.value
        ):
            try:
                physical_resource_id = self.handle(request)
            except Exception as e:
                error = error_handler.handle_exception(
                    e,
                    ErrorContext(
                        resource_id=request.logical_resource_id,
                        resource_type=request.resource_type,
                        operation=request.request_type.value,
                        request_id=request.request_id
                    )
                )
                logger.exception(error.to_user_message())
                send_response(request, context, ResponseStatus.FAILED, timeout=self.settings.response_timeout)
                raise ReconcileError(
                    self.failure_message(request.request_type),
                    category=error.category,
                    severity=error.severity,
                    context=error.context,
                    cause=e
                ) from e

            return send_response(
                request,
                context,
                ResponseStatus.SUCCESS,
                physical_resource_id=physical_resource_id,
                timeout=self.settings.response_timeout
            )

    def report_invalid_event(self, event: Any, context: Any, error: ConfigValidationError) -> None:
        """Send FAILED for an event that did not validate, if it can be answered."""
        if not isinstance(event, dict) or not all(event.get(key) for key in RESPONSE_FIELDS):
            logger.error(f"Invalid request cannot be answered: {error}")
            return

        logger.error(f"Invalid request: {error}")
        request = LifecycleRequest.model_construct(
            PhysicalResourceId=event.get('PhysicalResourceId'),
            **{key: event[key] for key in RESPONSE_FIELDS}
        )
        send_response(
            request,
            context,
            ResponseStatus.FAILED,
            reason=error.message,
            timeout=self.settings.response_timeout
        )

    def physical_resource_id(self, properties: ResourceProperties) -> Optional[str]:
        """Physical id to report after a Create or Update.

        None keeps the id CloudFormation already has. Returning a new id on
        Update makes CloudFormation send a Delete with the old properties.
        """
        return None

    def handle(self, request: LifecycleRequest) -> Optional[str]:
        """Validate properties and dispatch on the request type.

        Returns:
            Physical id to report, None to keep the current one
        """
        try:
            properties = parse_properties(self.properties_model, request.resource_properties)
        except ConfigValidationError as e:
            if request.request_type == RequestType.DELETE:
                # A resource with invalid properties was never created
                logger.warning(f"Ignoring Delete with invalid properties: {e}")
                return None
            raise

        if request.request_type == RequestType.DELETE:
            self.on_delete(request, properties)
            return None

        if request.request_type == RequestType.CREATE:
            self.on_create(request, properties)
        else:
            self.on_update(request, properties)
        return self.physical_resource_id(properties)

    @abstractmethod
    def on_create(self, request: LifecycleRequest, properties: ResourceProperties) -> None:
        pass

    def on_update(self, request: LifecycleRequest, properties: ResourceProperties) -> None:
        """Updates converge the same way creates do unless overridden."""
        self.on_create(request, properties)

    @abstractmethod
    def on_delete(self, request: LifecycleRequest, properties: ResourceProperties) -> None:
        pass

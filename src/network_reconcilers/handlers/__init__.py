"""Custom resource Lambda handlers."""

from .lifecycle import (
    RequestType,
    ResponseStatus,
    LifecycleRequest,
    LifecycleHandler,
    send_response,
)
from .route_handler import RouteReconcilerHandler
from .cleanup_handler import DriftCleanerHandler

__all__ = [
    "RequestType",
    "ResponseStatus",
    "LifecycleRequest",
    "LifecycleHandler",
    "send_response",
    "RouteReconcilerHandler",
    "DriftCleanerHandler",
]

"""Configuration models for the reconciliation handlers."""

from .models import (
    ResourceProperties,
    RoutePeeringProperties,
    ClusterCleanupProperties,
    HandlerSettings,
    drift_prefix,
)
from .parser import ConfigValidationError, parse_properties

__all__ = [
    "ResourceProperties",
    "RoutePeeringProperties",
    "ClusterCleanupProperties",
    "HandlerSettings",
    "drift_prefix",
    "ConfigValidationError",
    "parse_properties",
]

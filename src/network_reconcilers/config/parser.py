"""Parsing of raw custom resource property bags."""

from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from network_reconcilers.utils.errors import ConfigurationError

M = TypeVar("M", bound=BaseModel)


class ConfigValidationError(ConfigurationError):
    """Exception raised when a property bag fails validation."""

    def __init__(self, message: str, errors: Optional[List[Dict]] = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        """Format validation errors for display."""
        if not self.errors:
            return self.message

        error_lines = [self.message]
        for error in self.errors:
            location = " -> ".join(str(loc) for loc in error.get("loc", []))
            msg = error.get("msg", "Unknown error")
            error_lines.append(f"  - {location}: {msg}")

        return "\n".join(error_lines)


def parse_properties(model: Type[M], properties: Optional[Mapping[str, Any]]) -> M:
    """Validate a property bag against a model.

    Args:
        model: Pydantic model class to validate against
        properties: Raw ResourceProperties from the lifecycle event

    Returns:
        Validated model instance

    Raises:
        ConfigValidationError: If any property is missing or invalid
    """
    try:
        return model.model_validate(dict(properties or {}))
    except ValidationError as e:
        errors = [{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()]
        raise ConfigValidationError(
            f"Invalid {model.__name__} with {len(errors)} error(s)", errors
        ) from e

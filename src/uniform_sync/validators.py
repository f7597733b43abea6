"""
Input validation for project credentials.

Checks run before any call to the Uniform API so malformed input never
reaches the network.
"""

import re

from .errors import InputValidationError

# RFC 4122 versions 1-5, any case
_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

API_KEY_MIN_LENGTH = 50
API_KEY_MAX_LENGTH = 150


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Project id")
        reason: Description of validation failure (e.g., "cannot be empty")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def is_valid_uuid(value: str) -> bool:
    return bool(value) and _UUID_PATTERN.match(value) is not None


def check_project_credentials(
    project_id: str | None, api_key: str | None
) -> dict[str, str]:
    """
    Collect validation problems for a project id / API key pair.

    Args:
        project_id: Uniform project id (must be a UUID)
        api_key: Uniform API key

    Returns:
        Dict of field name to error message. Empty when both are valid.
    """
    errors: dict[str, str] = {}

    if not project_id or not project_id.strip():
        errors["project_id"] = format_validation_error(
            "Project id", "is required"
        )
    elif not is_valid_uuid(project_id.strip()):
        errors["project_id"] = format_validation_error(
            "Project id", "must be a valid UUID"
        )

    if not api_key or not api_key.strip():
        errors["api_key"] = format_validation_error("API key", "is required")
    elif not (API_KEY_MIN_LENGTH <= len(api_key.strip()) <= API_KEY_MAX_LENGTH):
        errors["api_key"] = format_validation_error(
            "API key",
            f"must be between {API_KEY_MIN_LENGTH} and {API_KEY_MAX_LENGTH} characters",
        )

    return errors


def validate_project_credentials(
    project_id: str | None, api_key: str | None
) -> tuple[str, str]:
    """
    Validate a project id / API key pair and return them stripped, with
    the id lower-cased.

    Raises:
        InputValidationError: If either value is missing or malformed.
    """
    errors = check_project_credentials(project_id, api_key)
    if errors:
        raise InputValidationError("; ".join(errors.values()), fields=errors)
    return project_id.strip().lower(), api_key.strip()  # type: ignore[union-attr]


def require_component_id(component_id: str | None) -> str:
    """Return *component_id* stripped, or raise if it is empty."""
    if not component_id or not component_id.strip():
        raise InputValidationError(
            format_validation_error("Component id", "is required"),
            fields={"component_id": "is required"},
        )
    return component_id.strip()

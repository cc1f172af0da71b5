"""
Input validation for command-line arguments.

Checks machine names, entity types and module names before they reach
the filename builders and the permission codec.
"""

import re

from drupal_config_sync.sync.patterns import EntityType, to_entity_type

_MACHINE_NAME = re.compile(r"^[a-z0-9_]+$")


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Bundle")
        reason: Description of validation failure (e.g., "cannot be empty")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def validate_machine_name(
    value: str, field_name: str = "Machine name"
) -> tuple[bool, str]:
    """
    Validate a machine name (bundle, role or module id).

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Only lowercase letters, digits and underscores
    """
    if not value or not value.strip():
        return (False, format_validation_error(field_name, "cannot be empty"))

    if not _MACHINE_NAME.match(value):
        return (
            False,
            format_validation_error(
                field_name,
                f"'{value}' may only contain lowercase letters, "
                "digits and underscores",
            ),
        )

    return (True, "")


def validate_entity_type(value: str) -> tuple[bool, str]:
    """
    Validate an entity type name.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if to_entity_type(value) is None:
        known = ", ".join(et.value for et in EntityType)
        return (
            False,
            format_validation_error(
                "Entity type", f"'{value}' is not one of: {known}"
            ),
        )
    return (True, "")

"""Form input checks shared by the services and engines."""

from __future__ import annotations

from torchtime.core.exceptions import ValidationError


def check_length(value: str, max_length: int, *, field_name: str, label: str) -> str:
    """Reject text longer than the model allows.

    Args:
        value: Already stripped input.
        max_length: Largest accepted number of characters.
        field_name: Form field the value came from.
        label: Field name as shown to the user.

    Returns:
        The value unchanged.

    Raises:
        ValidationError: If the value is too long.
    """
    if len(value) > max_length:
        raise ValidationError(
            f"{label} must be at most {max_length} characters",
            field_name=field_name,
            details={"length": len(value), "max_length": max_length},
        )
    return value


__all__ = ["check_length"]

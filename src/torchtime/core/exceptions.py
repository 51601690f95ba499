"""Custom exception hierarchy for TorchTime.

All exceptions inherit from TorchTimeError, so the UI boundary can catch one
type and show the message to the user while keeping the structured details
for the log.

Example:
    >>> from torchtime.core.exceptions import PermissionDeniedError
    >>> raise PermissionDeniedError("Only the DM can finalize", user_id="u1", action="finalize")
"""

from __future__ import annotations

from typing import Any


class TorchTimeError(Exception):
    """Base exception for all TorchTime errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(TorchTimeError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(TorchTimeError):
    """Raised when user input fails validation.

    These are the errors a form shows back to the user before anything
    is written to the state.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Access Exceptions
# =============================================================================


class AuthenticationError(TorchTimeError):
    """Raised when a username/password pair does not match any user."""


class PermissionDeniedError(TorchTimeError):
    """Raised when a user attempts an operation reserved for someone else.

    Typically a player trying a DM-only action on a campaign.
    """

    def __init__(
        self,
        message: str,
        *,
        user_id: str | None = None,
        action: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if user_id:
            combined_details["user_id"] = user_id
        if action:
            combined_details["action"] = action
        super().__init__(message, details=combined_details)


class EntityNotFoundError(TorchTimeError):
    """Raised when a referenced user, campaign, proposal or character is missing."""

    def __init__(
        self,
        message: str,
        *,
        entity_type: str | None = None,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if entity_type:
            combined_details["entity_type"] = entity_type
        if entity_id:
            combined_details["entity_id"] = entity_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Scheduling Exceptions
# =============================================================================


class SchedulingError(TorchTimeError):
    """Base exception for proposal, voting and scheduling errors."""


class ProposalFinalizedError(SchedulingError):
    """Raised when a locked proposal is voted on, edited or refinalized."""

    def __init__(
        self,
        message: str,
        *,
        proposal_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if proposal_id:
            combined_details["proposal_id"] = proposal_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Game Exceptions
# =============================================================================


class LevelingError(TorchTimeError):
    """Raised when an experience award cannot be applied."""


class DiceRollError(TorchTimeError):
    """Raised when a dice expression cannot be parsed or rolled."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with expression context.

        Args:
            message: Human-readable error description.
            expression: The dice expression that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class StorageError(TorchTimeError):
    """Raised when the state document cannot be written."""


class ReferenceDataError(TorchTimeError):
    """Raised when a reference-data request fails.

    The reference client catches this itself and degrades to an empty
    result, so callers outside the client never see it.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if url:
            combined_details["url"] = url
        super().__init__(message, details=combined_details)


__all__ = [
    "TorchTimeError",
    "ConfigurationError",
    "ValidationError",
    "AuthenticationError",
    "PermissionDeniedError",
    "EntityNotFoundError",
    "SchedulingError",
    "ProposalFinalizedError",
    "LevelingError",
    "DiceRollError",
    "StorageError",
    "ReferenceDataError",
]

"""Error taxonomy for reservation, room-state and analytics operations."""

from typing import Any, Optional


class PMSError(Exception):
    """Base exception for property-management errors.

    Attributes:
        message: Human-readable description
        field: Input field the error is tied to, if any
        retryable: Whether retrying the same call may succeed
        details: Extra context for callers deciding how to recover
    """

    default_message = "Property management operation failed"
    field: Optional[str] = None
    retryable = False

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        if field is not None:
            self.field = field
        self.details: dict[str, Any] = dict(details or {})
        super().__init__(self.message)

    def to_user_message(self) -> dict[str, Any]:
        """Build the message shown to the user.

        Returns:
            Dictionary with the offending field, the message and retry guidance
        """
        return {
            "field": self.field,
            "message": self.message,
            "retry": self.retryable,
        }


class InvalidDateRange(PMSError):
    """Raised when check-out is not strictly after check-in."""

    default_message = "Check-out date must be after check-in date"
    field = "check_out_date"


class RoomUnavailable(PMSError):
    """Raised when the room is already booked for part of the requested range."""

    default_message = "The selected room is not available for these dates"
    field = "room_id"

    @property
    def conflicts(self) -> list[str]:
        """Confirmation numbers of the conflicting reservations."""
        return self.details.get("conflicts", [])


class ConfirmationCodeExhausted(PMSError):
    """Raised when no unused confirmation number was found within the attempt budget."""

    default_message = "Could not generate a unique confirmation number"
    retryable = True


class GuestCreationFailed(PMSError):
    """Raised when the guest record could not be stored."""

    default_message = "Could not save guest details, please try again"
    retryable = True


class ReservationInsertFailed(PMSError):
    """Raised when the reservation could not be stored after the guest was created."""

    default_message = "Could not save the reservation, please try again"
    retryable = True

    @property
    def guest_id(self) -> Optional[str]:
        return self.details.get("guest_id")

    @property
    def guest_rolled_back(self) -> bool:
        return bool(self.details.get("guest_rolled_back", False))


class FxRateUnavailable(PMSError):
    """Raised when no exchange rate exists for a month.

    Never surfaced to callers: conversion falls back to a 1:1 multiplier.
    """

    default_message = "No exchange rate recorded for the requested month"


class ReservationNotFound(PMSError):
    """Raised when a reservation id does not exist."""

    default_message = "Reservation not found"
    field = "reservation_id"


class RoomNotFound(PMSError):
    """Raised when a room id does not exist."""

    default_message = "Room not found"
    field = "room_id"


class InvalidStatusTransition(PMSError):
    """Raised when a reservation status change is not allowed."""

    default_message = "This status change is not allowed"
    field = "status"


class StorageError(PMSError):
    """Opaque wrapper for failures of the backing store."""

    default_message = "The booking system is temporarily unavailable, please retry"
    retryable = True


class StorageConflictError(StorageError):
    """Raised when the store rejects a write because of a constraint.

    Attributes:
        constraint: "confirmation_number", "room_overlap" or "unknown"
    """

    default_message = "The change conflicts with existing data"

    def __init__(self, message: Optional[str] = None, *, constraint: str = "unknown", **kwargs):
        super().__init__(message, **kwargs)
        self.constraint = constraint

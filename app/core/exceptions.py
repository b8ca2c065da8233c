# app/core/exceptions.py
"""
Typed errors raised by the booking engine.

Services raise these; routes stay thin and a single handler in app.main turns
them into JSON responses using the status_code / retryable attributes.
"""
from typing import Any, Dict, Iterable, Optional

# HTTP status codes for known error categories
STATUS_BAD_REQUEST = 400
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_SERVICE_UNAVAILABLE = 503
STATUS_INTERNAL_ERROR = 500


class BookTableError(Exception):
    """Base class for every error the booking engine reports to callers"""

    status_code: int = STATUS_INTERNAL_ERROR
    code: str = "internal_error"
    retryable: bool = False
    default_message: str = "Unexpected error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "code": self.code,
            "retryable": self.retryable,
        }


# ---------------------------------------------------------------------------
# Validation errors: reported immediately, nothing mutated
# ---------------------------------------------------------------------------

class InvalidRequestError(BookTableError):
    status_code = STATUS_BAD_REQUEST
    code = "invalid_request"
    default_message = "Invalid request"


class MissingFieldsError(InvalidRequestError):
    code = "missing_fields"
    default_message = "Missing required booking information."

    def __init__(self, fields: Iterable[str] = ()):
        self.fields = list(fields)
        message = self.default_message
        if self.fields:
            message = f"{message} Missing: {', '.join(self.fields)}"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["fields"] = self.fields
        return data


class InvalidPartySizeError(InvalidRequestError):
    code = "invalid_party_size"
    default_message = "Invalid party size."


class InvalidTimeFormatError(InvalidRequestError):
    code = "invalid_time_format"
    default_message = "Invalid time format. Expected format HH:mm."


class InvalidDateError(InvalidRequestError):
    code = "invalid_date"
    default_message = "Invalid date. Expected format YYYY-MM-DD."


class InvalidInventoryError(InvalidRequestError):
    code = "invalid_inventory"
    default_message = "Invalid table inventory."


# ---------------------------------------------------------------------------
# Matching failures: user-facing 400s
# ---------------------------------------------------------------------------

class NoAvailabilityForDateError(BookTableError):
    status_code = STATUS_BAD_REQUEST
    code = "no_availability_for_date"
    default_message = "No tables available for this date"


class NoSuitableTableError(BookTableError):
    status_code = STATUS_BAD_REQUEST
    code = "no_suitable_table"
    default_message = "No suitable table available for the requested time and party size"


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------

class NotFoundError(BookTableError):
    status_code = STATUS_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class RestaurantNotFoundError(NotFoundError):
    code = "restaurant_not_found"
    default_message = "Restaurant not found"


class BookingNotFoundError(NotFoundError):
    code = "booking_not_found"
    default_message = "Booking not found"


class TableDefinitionNotFoundError(NotFoundError):
    code = "table_definition_not_found"
    default_message = "Table definition not found"


# ---------------------------------------------------------------------------
# Authorization and state transitions
# ---------------------------------------------------------------------------

class NotAuthorizedError(BookTableError):
    status_code = STATUS_FORBIDDEN
    code = "not_authorized"
    default_message = "Not authorized to access this resource"


class AlreadyCancelledError(BookTableError):
    status_code = STATUS_CONFLICT
    code = "already_cancelled"
    default_message = "Booking is already cancelled"


class InventoryInUseError(BookTableError):
    """Seeding would drop a table that confirmed bookings still hold"""
    status_code = STATUS_CONFLICT
    code = "inventory_in_use"
    default_message = "Table definition is referenced by confirmed bookings"


# ---------------------------------------------------------------------------
# Concurrency and infrastructure: retryable
# ---------------------------------------------------------------------------

class SlotNotFoundError(BookTableError):
    """The slot is not (or no longer) present on the table definition"""
    status_code = STATUS_CONFLICT
    code = "slot_not_found"
    retryable = True
    default_message = "Time slot is not available on this table"


class SlotNoLongerAvailableError(BookTableError):
    status_code = STATUS_CONFLICT
    code = "slot_no_longer_available"
    retryable = True
    default_message = "The requested time slot was just taken. Please try again."


class PersistenceUnavailableError(BookTableError):
    status_code = STATUS_SERVICE_UNAVAILABLE
    code = "persistence_unavailable"
    retryable = True
    default_message = "The reservation store is temporarily unavailable"

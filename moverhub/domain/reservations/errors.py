"""
Reservation failure taxonomy.

Each error knows its HTTP status and the boolean discriminant the client
checks, so the router stays a thin mapping.
"""

from typing import Any, Optional


class ReservationError(Exception):
    status_code = 500
    discriminant = "internal"

    def __init__(self, message: str, details: Optional[str] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        self.details = details
        self.extra = extra

    def to_body(self) -> dict:
        body = {"error": self.message, self.discriminant: True}
        if self.details:
            body["details"] = self.details
        body.update(self.extra)
        return body


class InputError(ReservationError):
    """Required field missing or malformed; nothing was persisted"""

    status_code = 400
    discriminant = "invalid"


class CapacityBlocked(ReservationError):
    """Date (or slot) manually blocked by the provider"""

    status_code = 400
    discriminant = "blocked"


class CapacityExhausted(ReservationError):
    """Every capacity unit of the slot is taken"""

    status_code = 400
    discriminant = "fullyBooked"

    def to_body(self) -> dict:
        body = super().to_body()
        body["available"] = False
        return body


class SlotConflict(ReservationError):
    """Lost the insert race for the last capacity unit; re-check and retry"""

    status_code = 409
    discriminant = "conflict"


class ReservationFailed(ReservationError):
    """Unexpected failure before the job was committed"""

    status_code = 500
    discriminant = "internal"

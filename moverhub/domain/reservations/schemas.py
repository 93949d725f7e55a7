"""Reservation domain schemas - Pydantic models for validation"""

from typing import Any, Optional

from pydantic import BaseModel, Field

# Optional per-reservation service details, mirrored onto the booking
SERVICE_DETAIL_FIELDS = (
    "heavy_items",
    "stairs_flights",
    "packing_help",
    "packing_rooms",
    "packing_materials",
    "destination_fee",
    "double_drive_time",
    "trip_distance_miles",
    "trip_distance_duration",
    "trip_distances",
)


class ReservationRequest(BaseModel):
    """
    Body of POST /reservations.

    moveDate and timeSlot are checked by the orchestrator. Type and range
    failures on the other fields are turned into the same invalid body by
    the app-level validation handler.
    """

    providerId: Optional[int] = None
    businessId: Optional[int] = None
    quoteId: Optional[int] = None
    moveDate: Optional[str] = None
    timeSlot: Optional[str] = None
    fullName: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    pickupAddresses: Optional[list[str]] = None
    deliveryAddresses: Optional[list[str]] = None
    teamSize: Optional[int] = Field(default=None, ge=1, le=20)
    totalPriceCents: Optional[int] = Field(default=None, ge=0)

    heavy_items: Optional[list[dict[str, Any]]] = None
    stairs_flights: Optional[int] = Field(default=None, ge=0)
    packing_help: Optional[Any] = None
    packing_rooms: Optional[int] = Field(default=None, ge=0)
    packing_materials: Optional[list[Any]] = None
    destination_fee: Optional[float] = None
    double_drive_time: Optional[bool] = None
    trip_distance_miles: Optional[float] = None
    trip_distance_duration: Optional[Any] = None
    trip_distances: Optional[Any] = None

    quoteBreakdown: Optional[dict[str, Any]] = None
    # Availability as last seen by the client; advisory only
    available: Optional[bool] = None

    def service_details(self) -> dict[str, Any]:
        """Service-detail fields the caller actually sent"""
        return {
            name: getattr(self, name)
            for name in SERVICE_DETAIL_FIELDS
            if getattr(self, name) is not None
        }

"""Client and booking record models returned by the record stores."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Client(BaseModel):
    """Client identity record."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: str
    address: Optional[str] = None
    password_hash: str = Field(repr=False)
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()


class NewClient(BaseModel):
    """Fields needed to create a client."""
    first_name: str
    last_name: Optional[str] = None
    phone_number: Optional[str] = None
    email: str
    address: Optional[str] = None
    password_hash: str = Field(repr=False)


class Booking(BaseModel):
    """Rental booking owned by exactly one client."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    service_name: str
    booking_date: datetime
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingDetails(BaseModel):
    """A booking joined with its client, for listings and read-backs."""
    booking: Booking
    client: Optional[Client] = None

    @property
    def client_name(self) -> str:
        return self.client.full_name if self.client else ""

    @property
    def client_phone(self) -> Optional[str]:
        return self.client.phone_number if self.client else None


class ClientSummary(BaseModel):
    """Client with the number of bookings referencing it."""
    client: Client
    booking_count: int = 0


class ServiceCount(BaseModel):
    service_name: str
    count: int


class BookingStats(BaseModel):
    """Aggregate figures for the statistics command."""
    today: int = 0
    this_month: int = 0
    total_clients: int = 0
    popular_services: list[ServiceCount] = Field(default_factory=list)

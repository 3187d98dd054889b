"""
Record store boundary for clients and bookings.

``Repository`` is the protocol the dialogue engine consumes.
``InMemoryRepository`` backs tests and the console demo; the relational
implementation lives in ``rental_bot.store.sql_repository``. Both enforce
the same rules: unique client email, every booking references an existing
client, and a client cannot be deleted while bookings reference it.
"""

import asyncio
import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Optional, Protocol

from rental_bot.errors import ConstraintViolation, NotFound
from rental_bot.schemas.booking_schema import (
    Booking,
    BookingDetails,
    BookingStats,
    Client,
    ClientSummary,
    NewClient,
    ServiceCount,
)
from rental_bot.store.services import service_rank

logger = logging.getLogger(__name__)

POPULAR_SERVICES_LIMIT = 5
EMAIL_CONSTRAINT = "clients_email_key"
CLIENT_BOOKINGS_CONSTRAINT = "bookings_client_id_fkey"
# Record ids live in 32-bit signed integer columns.
MAX_RECORD_ID = 2**31 - 1


def is_storable_id(record_id: int) -> bool:
    """True when ``record_id`` could name a stored row at all."""
    return 0 < record_id <= MAX_RECORD_ID


class Repository(Protocol):
    """Async operations the dialogue engine and admin commands rely on."""

    async def create_client(
        self,
        first_name: str,
        last_name: Optional[str],
        phone_number: Optional[str],
        email: str,
        password_hash: str,
        address: Optional[str] = None,
    ) -> Client: ...

    async def create_booking(
        self,
        client_id: int,
        service_name: str,
        booking_date: datetime,
        address: Optional[str] = None,
    ) -> Booking: ...

    async def create_client_with_booking(
        self,
        new_client: NewClient,
        service_name: str,
        booking_date: datetime,
        address: Optional[str] = None,
    ) -> tuple[Client, Booking]: ...

    async def get_booking(self, booking_id: int) -> Optional[Booking]: ...

    async def get_client(self, client_id: int) -> Optional[Client]: ...

    async def find_client_by_phone(self, phone_number: str) -> Optional[Client]: ...

    async def delete_booking(self, booking_id: int) -> int: ...

    async def delete_client(self, client_id: int) -> int: ...

    async def list_bookings(self) -> list[BookingDetails]: ...

    async def list_bookings_on(self, day: date) -> list[BookingDetails]: ...

    async def list_recent_clients(self, limit: int = 10) -> list[ClientSummary]: ...

    async def get_stats(self, today: date) -> BookingStats: ...


def listing_sort_key(details: BookingDetails) -> tuple[int, float]:
    """Order by service rank, then newest booking date first."""
    return (service_rank(details.booking.service_name), -details.booking.booking_date.timestamp())


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open [start, end) datetime range covering one calendar day."""
    start = datetime.combine(day, datetime.min.time())
    return start, start + timedelta(days=1)


def month_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open [start, end) datetime range covering the month of ``day``."""
    start = datetime(day.year, day.month, 1)
    if day.month == 12:
        end = datetime(day.year + 1, 1, 1)
    else:
        end = datetime(day.year, day.month + 1, 1)
    return start, end


class InMemoryRepository:
    """
    Process-local record store.

    Writes are serialized by one asyncio lock so the combined client+booking
    insert is atomic with respect to other coroutines.
    """

    def __init__(self) -> None:
        self._clients: dict[int, Client] = {}
        self._bookings: dict[int, Booking] = {}
        self._next_client_id = 1
        self._next_booking_id = 1
        self._write_lock = asyncio.Lock()

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def _insert_client(self, new_client: NewClient) -> Client:
        if any(c.email == new_client.email for c in self._clients.values()):
            raise ConstraintViolation(
                f"duplicate key value violates unique constraint \"{EMAIL_CONSTRAINT}\"",
                constraint=EMAIL_CONSTRAINT,
            )
        client = Client(
            id=self._next_client_id,
            created_at=datetime.now(),
            **new_client.model_dump(),
        )
        self._clients[client.id] = client
        self._next_client_id += 1
        logger.info("Client created: %s (%s)", client.id, client.phone_number)
        return client

    def _insert_booking(
        self,
        client_id: int,
        service_name: str,
        booking_date: datetime,
        address: Optional[str],
    ) -> Booking:
        if client_id not in self._clients:
            raise NotFound(f"Client {client_id} not found")
        now = datetime.now()
        booking = Booking(
            id=self._next_booking_id,
            client_id=client_id,
            service_name=service_name,
            booking_date=booking_date,
            address=address,
            created_at=now,
            updated_at=now,
        )
        self._bookings[booking.id] = booking
        self._next_booking_id += 1
        logger.info("Booking created: %s for client %s on %s", booking.id, client_id, booking_date.date())
        return booking

    async def create_client(
        self,
        first_name: str,
        last_name: Optional[str],
        phone_number: Optional[str],
        email: str,
        password_hash: str,
        address: Optional[str] = None,
    ) -> Client:
        new_client = NewClient(
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number,
            email=email,
            address=address,
            password_hash=password_hash,
        )
        async with self._write_lock:
            return self._insert_client(new_client)

    async def create_booking(
        self,
        client_id: int,
        service_name: str,
        booking_date: datetime,
        address: Optional[str] = None,
    ) -> Booking:
        async with self._write_lock:
            return self._insert_booking(client_id, service_name, booking_date, address)

    async def create_client_with_booking(
        self,
        new_client: NewClient,
        service_name: str,
        booking_date: datetime,
        address: Optional[str] = None,
    ) -> tuple[Client, Booking]:
        async with self._write_lock:
            client = self._insert_client(new_client)
            try:
                booking = self._insert_booking(client.id, service_name, booking_date, address)
            except Exception:
                del self._clients[client.id]
                raise
            return client, booking

    async def delete_booking(self, booking_id: int) -> int:
        async with self._write_lock:
            if self._bookings.pop(booking_id, None) is None:
                return 0
        logger.info("Booking deleted: %s", booking_id)
        return 1

    async def delete_client(self, client_id: int) -> int:
        async with self._write_lock:
            if client_id not in self._clients:
                return 0
            if any(b.client_id == client_id for b in self._bookings.values()):
                raise ConstraintViolation(
                    f"Client {client_id} still has bookings",
                    constraint=CLIENT_BOOKINGS_CONSTRAINT,
                )
            del self._clients[client_id]
        logger.info("Client deleted: %s", client_id)
        return 1

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    async def get_client(self, client_id: int) -> Optional[Client]:
        return self._clients.get(client_id)

    async def find_client_by_phone(self, phone_number: str) -> Optional[Client]:
        for client in self._clients.values():
            if client.phone_number == phone_number:
                return client
        return None

    def _details(self, booking: Booking) -> BookingDetails:
        return BookingDetails(booking=booking, client=self._clients.get(booking.client_id))

    async def list_bookings(self) -> list[BookingDetails]:
        rows = [self._details(b) for b in self._bookings.values()]
        return sorted(rows, key=listing_sort_key)

    async def list_bookings_on(self, day: date) -> list[BookingDetails]:
        start, end = day_bounds(day)
        rows = [
            self._details(b)
            for b in self._bookings.values()
            if start <= b.booking_date < end
        ]
        return sorted(rows, key=lambda d: d.booking.booking_date)

    async def list_recent_clients(self, limit: int = 10) -> list[ClientSummary]:
        counts = Counter(b.client_id for b in self._bookings.values())
        newest = sorted(self._clients.values(), key=lambda c: c.id, reverse=True)[:limit]
        return [ClientSummary(client=c, booking_count=counts.get(c.id, 0)) for c in newest]

    async def get_stats(self, today: date) -> BookingStats:
        day_start, day_end = day_bounds(today)
        month_start, month_end = month_bounds(today)
        bookings = list(self._bookings.values())
        popular = Counter(b.service_name for b in bookings).most_common(POPULAR_SERVICES_LIMIT)
        return BookingStats(
            today=sum(1 for b in bookings if day_start <= b.booking_date < day_end),
            this_month=sum(1 for b in bookings if month_start <= b.booking_date < month_end),
            total_clients=len(self._clients),
            popular_services=[ServiceCount(service_name=n, count=c) for n, c in popular],
        )

    def reset(self) -> None:
        """Clear all records. Used by test fixtures for isolation."""
        self._clients.clear()
        self._bookings.clear()
        self._next_client_id = 1
        self._next_booking_id = 1

"""
Relational record store on SQLAlchemy's asyncio extension.

Works with any async driver URL; production uses PostgreSQL
(``postgresql+asyncpg://``), tests use in-memory SQLite
(``sqlite+aiosqlite://``). Driver errors are translated into the
package's repository error taxonomy at this boundary.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import AsyncIterator, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rental_bot.errors import ConstraintViolation, NotFound, TransientRepositoryFailure
from rental_bot.schemas.booking_schema import (
    Booking,
    BookingDetails,
    BookingStats,
    Client,
    ClientSummary,
    NewClient,
    ServiceCount,
)
from rental_bot.store.models import Base, BookingRow, ClientRow
from rental_bot.store.repository import (
    CLIENT_BOOKINGS_CONSTRAINT,
    EMAIL_CONSTRAINT,
    POPULAR_SERVICES_LIMIT,
    day_bounds,
    is_storable_id,
    listing_sort_key,
    month_bounds,
)

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine; in-memory SQLite shares one connection."""
    in_memory = database_url.startswith("sqlite") and (
        ":memory:" in database_url or database_url.rstrip("/").endswith(":")
    )
    if in_memory:
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(database_url, echo=echo, pool_pre_ping=True)


def _constraint_name(exc: IntegrityError) -> str:
    detail = str(exc.orig).lower()
    if "email" in detail:
        return EMAIL_CONSTRAINT
    if "foreign key" in detail or "client_id" in detail:
        return CLIENT_BOOKINGS_CONSTRAINT
    return ""


class SqlRepository:
    """Repository implementation over an async SQLAlchemy engine."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlRepository":
        return cls(build_engine(database_url, echo=echo))

    async def create_schema(self) -> None:
        """Create tables that do not exist yet."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def dispose(self) -> None:
        await self._engine.dispose()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session, translating driver errors on the way out."""
        async with self._session_factory() as session:
            try:
                yield session
            except IntegrityError as exc:
                await session.rollback()
                raise ConstraintViolation(str(exc.orig), constraint=_constraint_name(exc)) from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                logger.error("Database failure: %s", exc)
                raise TransientRepositoryFailure(str(exc)) from exc

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    async def create_client(
        self,
        first_name: str,
        last_name: Optional[str],
        phone_number: Optional[str],
        email: str,
        password_hash: str,
        address: Optional[str] = None,
    ) -> Client:
        async with self._session() as session:
            row = ClientRow(
                first_name=first_name,
                last_name=last_name,
                phone_number=phone_number,
                email=email,
                address=address,
                password_hash=password_hash,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            logger.info("Client created: %s (%s)", row.id, row.phone_number)
            return Client.model_validate(row)

    async def create_booking(
        self,
        client_id: int,
        service_name: str,
        booking_date: datetime,
        address: Optional[str] = None,
    ) -> Booking:
        async with self._session() as session:
            if not is_storable_id(client_id) or await session.get(ClientRow, client_id) is None:
                raise NotFound(f"Client {client_id} not found")
            row = BookingRow(
                client_id=client_id,
                service_name=service_name,
                booking_date=booking_date,
                address=address,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            logger.info("Booking created: %s for client %s on %s", row.id, client_id, booking_date.date())
            return Booking.model_validate(row)

    async def create_client_with_booking(
        self,
        new_client: NewClient,
        service_name: str,
        booking_date: datetime,
        address: Optional[str] = None,
    ) -> tuple[Client, Booking]:
        async with self._session() as session:
            client_row = ClientRow(**new_client.model_dump())
            session.add(client_row)
            await session.flush()
            booking_row = BookingRow(
                client_id=client_row.id,
                service_name=service_name,
                booking_date=booking_date,
                address=address,
            )
            session.add(booking_row)
            await session.commit()
            await session.refresh(client_row)
            await session.refresh(booking_row)
            logger.info(
                "Client %s and booking %s created in one transaction",
                client_row.id, booking_row.id,
            )
            return Client.model_validate(client_row), Booking.model_validate(booking_row)

    async def delete_booking(self, booking_id: int) -> int:
        if not is_storable_id(booking_id):
            return 0
        async with self._session() as session:
            result = await session.execute(delete(BookingRow).where(BookingRow.id == booking_id))
            await session.commit()
            if result.rowcount:
                logger.info("Booking deleted: %s", booking_id)
            return result.rowcount or 0

    async def delete_client(self, client_id: int) -> int:
        if not is_storable_id(client_id):
            return 0
        async with self._session() as session:
            owned = await session.scalar(
                select(func.count(BookingRow.id)).where(BookingRow.client_id == client_id)
            )
            if owned:
                raise ConstraintViolation(
                    f"Client {client_id} still has bookings",
                    constraint=CLIENT_BOOKINGS_CONSTRAINT,
                )
            result = await session.execute(delete(ClientRow).where(ClientRow.id == client_id))
            await session.commit()
            if result.rowcount:
                logger.info("Client deleted: %s", client_id)
            return result.rowcount or 0

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        if not is_storable_id(booking_id):
            return None
        async with self._session() as session:
            row = await session.get(BookingRow, booking_id)
            return Booking.model_validate(row) if row else None

    async def get_client(self, client_id: int) -> Optional[Client]:
        if not is_storable_id(client_id):
            return None
        async with self._session() as session:
            row = await session.get(ClientRow, client_id)
            return Client.model_validate(row) if row else None

    async def find_client_by_phone(self, phone_number: str) -> Optional[Client]:
        async with self._session() as session:
            stmt = (
                select(ClientRow)
                .where(ClientRow.phone_number == phone_number)
                .order_by(ClientRow.id)
                .limit(1)
            )
            row = (await session.execute(stmt)).scalar_one_or_none()
            return Client.model_validate(row) if row else None

    async def _select_details(self, *criteria) -> list[BookingDetails]:
        async with self._session() as session:
            stmt = select(BookingRow, ClientRow).outerjoin(
                ClientRow, BookingRow.client_id == ClientRow.id
            )
            if criteria:
                stmt = stmt.where(*criteria)
            result = await session.execute(stmt)
            return [
                BookingDetails(
                    booking=Booking.model_validate(booking_row),
                    client=Client.model_validate(client_row) if client_row else None,
                )
                for booking_row, client_row in result.all()
            ]

    async def list_bookings(self) -> list[BookingDetails]:
        return sorted(await self._select_details(), key=listing_sort_key)

    async def list_bookings_on(self, day: date) -> list[BookingDetails]:
        start, end = day_bounds(day)
        rows = await self._select_details(BookingRow.booking_date >= start, BookingRow.booking_date < end)
        return sorted(rows, key=lambda d: d.booking.booking_date)

    async def list_recent_clients(self, limit: int = 10) -> list[ClientSummary]:
        async with self._session() as session:
            stmt = (
                select(ClientRow, func.count(BookingRow.id))
                .outerjoin(BookingRow, BookingRow.client_id == ClientRow.id)
                .group_by(ClientRow.id)
                .order_by(ClientRow.id.desc())
                .limit(limit)
            )
            result = await session.execute(stmt)
            return [
                ClientSummary(client=Client.model_validate(row), booking_count=count)
                for row, count in result.all()
            ]

    async def get_stats(self, today: date) -> BookingStats:
        day_start, day_end = day_bounds(today)
        month_start, month_end = month_bounds(today)
        async with self._session() as session:
            today_count = await session.scalar(
                select(func.count(BookingRow.id)).where(
                    BookingRow.booking_date >= day_start, BookingRow.booking_date < day_end
                )
            )
            month_count = await session.scalar(
                select(func.count(BookingRow.id)).where(
                    BookingRow.booking_date >= month_start, BookingRow.booking_date < month_end
                )
            )
            total_clients = await session.scalar(select(func.count(ClientRow.id)))
            popular = await session.execute(
                select(BookingRow.service_name, func.count(BookingRow.id))
                .group_by(BookingRow.service_name)
                .order_by(func.count(BookingRow.id).desc())
                .limit(POPULAR_SERVICES_LIMIT)
            )
            return BookingStats(
                today=today_count or 0,
                this_month=month_count or 0,
                total_clients=total_clients or 0,
                popular_services=[
                    ServiceCount(service_name=name, count=count) for name, count in popular.all()
                ],
            )

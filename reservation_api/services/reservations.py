"""
Reservation Service

Creates, updates, cancels and lists table reservations.

Slot rule: for a given table and exact timestamp at most one reservation
may be active (pending or confirmed). The service checks for an active
booking before writing so the caller gets a clear message, and the
partial unique index uq_reservations_active_slot rejects the write when
two requests pass that check concurrently; both paths raise ConflictError.

Times are compared as naive UTC: aware datetimes are converted, naive
ones are taken to already be UTC.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from reservation_api.core.errors import ConflictError, NotFoundError, ValidationError
from reservation_api.models import (
    ACTIVE_RESERVATION_STATUSES,
    DiningTable,
    Reservation,
    ReservationStatus,
    User,
)
from reservation_api.services.identity import require_owner_or_admin

logger = logging.getLogger(__name__)

SLOT_TAKEN = "Table is already booked at this time"


def to_utc_naive(value: datetime) -> datetime:
    """Normalise a datetime to naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open UTC range [day 00:00, day+1 00:00)."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


class ReservationService:
    """Reservation lifecycle backed by one database session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        table_id: int,
        name: str,
        phone: str,
        guests: int,
        when: datetime,
    ) -> Reservation:
        """
        Book a table at an instant.

        Raises:
            ValidationError: a field is missing, guests < 1, or the table
                does not exist
            ConflictError: the table already has an active reservation at
                exactly this time
        """
        if table_id is None or when is None:
            raise ValidationError("table, name, phone, guests and time are required")
        if not name or not name.strip() or not phone or not phone.strip():
            raise ValidationError("table, name, phone, guests and time are required")
        if guests is None or guests < 1:
            raise ValidationError("guests must be at least 1")

        if await self.db.get(DiningTable, table_id) is None:
            raise ValidationError(f"Table #{table_id} does not exist")

        when = to_utc_naive(when)
        if await self._find_active(table_id, when) is not None:
            logger.warning(f"Slot conflict: table #{table_id} @ {when.isoformat()}")
            raise ConflictError(SLOT_TAKEN)

        reservation = Reservation(
            table_id=table_id,
            name=name.strip(),
            phone=phone.strip(),
            guests=guests,
            time=when,
            status=ReservationStatus.PENDING,
        )
        self.db.add(reservation)
        await self._commit_slot(table_id, when)

        logger.info(
            f"Reservation #{reservation.id} created: table #{table_id} "
            f"@ {when.isoformat()} for {guests}"
        )
        return await self.get(reservation.id)

    async def update_status(
        self,
        reservation_id: int,
        status: ReservationStatus,
    ) -> Reservation:
        """
        Set any of the three statuses; transitions are not restricted.

        Moving a reservation back to an active status still has to respect
        the slot rule.
        """
        reservation = await self.get(reservation_id)
        status = ReservationStatus(status)

        if (
            status in ACTIVE_RESERVATION_STATUSES
            and reservation.status not in ACTIVE_RESERVATION_STATUSES
            and reservation.table_id is not None
        ):
            clash = await self._find_active(
                reservation.table_id, reservation.time, exclude_id=reservation.id
            )
            if clash is not None:
                logger.warning(
                    f"Slot conflict re-activating reservation #{reservation.id} "
                    f"(held by #{clash.id})"
                )
                raise ConflictError(SLOT_TAKEN)

        reservation.status = status
        await self._commit_slot(reservation.table_id, reservation.time)

        logger.info(f"Reservation #{reservation_id} status -> {status.value}")
        return await self.get(reservation_id)

    async def cancel(self, reservation_id: int, actor: User) -> Reservation:
        """Cancel unconditionally; allowed for the owner (by phone) or an admin."""
        reservation = await self.get(reservation_id)
        require_owner_or_admin(actor, reservation.phone)

        reservation.status = ReservationStatus.CANCELLED
        await self.db.commit()

        logger.info(f"Reservation #{reservation_id} cancelled by user #{actor.id}")
        return await self.get(reservation_id)

    async def list(
        self,
        day: Optional[date] = None,
        status: Optional[ReservationStatus] = None,
        phone: Optional[str] = None,
        name: Optional[str] = None,
        owner_phone: Optional[str] = None,
    ) -> list[Reservation]:
        """
        List reservations, ordered by time.

        day selects the half-open range [day, day + 1); phone and name are
        case-insensitive substring matches. owner_phone is an exact match
        used to scope a customer to their own bookings.
        """
        query = (
            select(Reservation)
            .options(joinedload(Reservation.table))
            .order_by(Reservation.time, Reservation.id)
            .execution_options(populate_existing=True)
        )

        if day is not None:
            start, end = day_bounds(day)
            query = query.where(Reservation.time >= start, Reservation.time < end)
        if status is not None:
            query = query.where(Reservation.status == ReservationStatus(status))
        if phone:
            query = query.where(Reservation.phone.icontains(phone, autoescape=True))
        if name:
            query = query.where(Reservation.name.icontains(name, autoescape=True))
        if owner_phone is not None:
            query = query.where(Reservation.phone == owner_phone)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get(self, reservation_id: int) -> Reservation:
        query = (
            select(Reservation)
            .options(joinedload(Reservation.table))
            .where(Reservation.id == reservation_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        reservation = result.scalar_one_or_none()
        if reservation is None:
            raise NotFoundError(f"Reservation #{reservation_id} not found")
        return reservation

    async def delete(self, reservation_id: int) -> None:
        reservation = await self.get(reservation_id)
        await self.db.delete(reservation)
        await self.db.commit()
        logger.info(f"Reservation #{reservation_id} deleted")

    async def _find_active(
        self,
        table_id: int,
        when: datetime,
        exclude_id: Optional[int] = None,
    ) -> Optional[Reservation]:
        query = select(Reservation).where(
            Reservation.table_id == table_id,
            Reservation.time == when,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        )
        if exclude_id is not None:
            query = query.where(Reservation.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def _commit_slot(self, table_id: Optional[int], when: datetime) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.warning(f"Slot index rejected write: table #{table_id} @ {when.isoformat()}")
            raise ConflictError(SLOT_TAKEN)

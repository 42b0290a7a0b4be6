"""Reservation store backed by a direct PostgreSQL connection.

Owns the schema, including the two constraints the core relies on as its
authoritative guards: a unique confirmation number and an exclusion
constraint forbidding overlapping stays of the same room.
"""

import asyncio
import threading
from datetime import date
from decimal import Decimal
from typing import Any, Optional

import psycopg2
from psycopg2 import errors as pg_errors
from psycopg2.extras import RealDictCursor
from structlog import get_logger

from hotel_pms.config import settings
from hotel_pms.errors import StorageConflictError, StorageError
from hotel_pms.models import (
    FxRate,
    Guest,
    GuestCreate,
    MonthlyStats,
    Reservation,
    ReservationCreate,
    ReservationFilters,
    Room,
    RoomStatus,
)
from hotel_pms.store.base import ReservationStore

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE EXTENSION IF NOT EXISTS btree_gist;

DO $$ BEGIN
  CREATE TYPE room_status AS ENUM
    ('available', 'occupied', 'out_of_order', 'maintenance', 'dirty', 'clean');
EXCEPTION WHEN duplicate_object THEN NULL; END $$;
DO $$ BEGIN
  CREATE TYPE reservation_status AS ENUM
    ('confirmed', 'checked_in', 'checked_out', 'cancelled', 'no_show');
EXCEPTION WHEN duplicate_object THEN NULL; END $$;
DO $$ BEGIN
  CREATE TYPE booking_channel AS ENUM
    ('direct', 'booking_com', 'expedia', 'airbnb', 'walk_in', 'phone');
EXCEPTION WHEN duplicate_object THEN NULL; END $$;
DO $$ BEGIN
  CREATE TYPE guest_type AS ENUM ('individual', 'group', 'corporate');
EXCEPTION WHEN duplicate_object THEN NULL; END $$;

CREATE TABLE IF NOT EXISTS hotels (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  name TEXT NOT NULL,
  city TEXT,
  brand_color TEXT
);

CREATE TABLE IF NOT EXISTS room_types (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  name TEXT NOT NULL,
  description TEXT,
  base_rate NUMERIC(10, 2) NOT NULL DEFAULT 0,
  max_occupancy INTEGER NOT NULL DEFAULT 2,
  amenities TEXT[] NOT NULL DEFAULT '{}'
);

CREATE TABLE IF NOT EXISTS rooms (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  hotel_id UUID NOT NULL REFERENCES hotels(id),
  room_number TEXT NOT NULL,
  room_type_id UUID REFERENCES room_types(id),
  floor INTEGER,
  status room_status NOT NULL DEFAULT 'available',
  notes TEXT,
  UNIQUE (hotel_id, room_number)
);

CREATE TABLE IF NOT EXISTS guests (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  hotel_id UUID NOT NULL REFERENCES hotels(id),
  first_name TEXT NOT NULL,
  last_name TEXT NOT NULL,
  email TEXT,
  phone TEXT,
  id_number TEXT,
  nationality TEXT,
  date_of_birth DATE,
  address TEXT,
  city TEXT,
  country TEXT,
  guest_type guest_type NOT NULL DEFAULT 'individual',
  vip BOOLEAN NOT NULL DEFAULT FALSE,
  notes TEXT,
  created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
  UNIQUE (id, hotel_id)
);

CREATE TABLE IF NOT EXISTS reservations (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  hotel_id UUID NOT NULL REFERENCES hotels(id),
  guest_id UUID,
  room_id UUID REFERENCES rooms(id),
  room_type_id UUID REFERENCES room_types(id),
  confirmation_number TEXT NOT NULL,
  check_in_date DATE NOT NULL,
  check_out_date DATE NOT NULL,
  adults INTEGER NOT NULL DEFAULT 1 CHECK (adults >= 1),
  children INTEGER NOT NULL DEFAULT 0 CHECK (children >= 0),
  total_amount NUMERIC(10, 2) NOT NULL DEFAULT 0 CHECK (total_amount >= 0),
  paid_amount NUMERIC(10, 2) NOT NULL DEFAULT 0 CHECK (paid_amount >= 0),
  currency TEXT NOT NULL DEFAULT 'EUR',
  status reservation_status NOT NULL DEFAULT 'confirmed',
  channel booking_channel NOT NULL DEFAULT 'direct',
  commission_rate NUMERIC(5, 2) NOT NULL DEFAULT 0,
  special_requests TEXT,
  arrival_time TEXT,
  created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
  CONSTRAINT reservations_confirmation_number_key UNIQUE (confirmation_number),
  CONSTRAINT reservations_dates_check CHECK (check_out_date > check_in_date),
  CONSTRAINT reservations_guest_same_hotel
    FOREIGN KEY (guest_id, hotel_id) REFERENCES guests(id, hotel_id),
  CONSTRAINT reservations_no_room_overlap EXCLUDE USING gist (
    room_id WITH =,
    daterange(check_in_date, check_out_date, '[)') WITH &&
  ) WHERE (room_id IS NOT NULL AND status NOT IN ('cancelled', 'no_show', 'checked_out'))
);

CREATE TABLE IF NOT EXISTS fx_rates (
  rate_date DATE PRIMARY KEY,
  eur_to_usd NUMERIC(12, 6) NOT NULL DEFAULT 1,
  eur_to_try NUMERIC(12, 6) NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS monthly_stats (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  hotel_id UUID NOT NULL REFERENCES hotels(id),
  month_start DATE NOT NULL,
  total_bookings INTEGER NOT NULL DEFAULT 0,
  total_revenue_eur NUMERIC(12, 2) NOT NULL DEFAULT 0,
  adr_eur NUMERIC(10, 2) NOT NULL DEFAULT 0,
  strongest_channel TEXT,
  UNIQUE (hotel_id, month_start)
);
"""

RESERVATION_SELECT = """
SELECT r.*, row_to_json(g.*) AS guest
FROM reservations r
LEFT JOIN guests g ON g.id = r.guest_id
"""

ROOM_SELECT = """
SELECT rm.*, row_to_json(rt.*) AS room_type
FROM rooms rm
LEFT JOIN room_types rt ON rt.id = rm.room_type_id
"""

GUEST_COLUMNS = list(GuestCreate.model_fields)
RESERVATION_COLUMNS = list(ReservationCreate.model_fields)
UPDATABLE_RESERVATION_COLUMNS = frozenset(RESERVATION_COLUMNS) - {"hotel_id", "confirmation_number"}


def _normalize(row: dict[str, Any]) -> dict[str, Any]:
    """Convert NUMERIC columns (Decimal) into floats for the models."""
    return {
        key: float(value) if isinstance(value, Decimal) else value
        for key, value in row.items()
    }


def build_reservation_where(hotel_id: str, filters: Optional[ReservationFilters]) -> tuple[str, list[Any]]:
    """Build the WHERE clause and parameters for a reservation query.

    Args:
        hotel_id: Hotel scope
        filters: Optional filters

    Returns:
        Tuple of (SQL fragment starting with WHERE, parameter list)
    """
    clauses = ["r.hotel_id = %s"]
    params: list[Any] = [hotel_id]
    if filters is not None:
        if filters.room_id:
            clauses.append("r.room_id = %s")
            params.append(filters.room_id)
        if filters.statuses:
            clauses.append("r.status::text = ANY(%s)")
            params.append([s.value for s in filters.statuses])
        if filters.exclude_statuses:
            clauses.append("NOT (r.status::text = ANY(%s))")
            params.append([s.value for s in filters.exclude_statuses])
        if filters.exclude_reservation_id:
            clauses.append("r.id <> %s")
            params.append(filters.exclude_reservation_id)
        if filters.check_in_date:
            clauses.append("r.check_in_date = %s")
            params.append(filters.check_in_date)
        if filters.overlapping:
            clauses.append("r.check_in_date < %s AND r.check_out_date > %s")
            params.extend([filters.overlapping.end, filters.overlapping.start])
    return "WHERE " + " AND ".join(clauses), params


class PostgresReservationStore(ReservationStore):
    """ReservationStore over psycopg2, each operation in its own transaction.

    psycopg2 is blocking, so every operation runs in a worker thread.
    """

    def __init__(self, dsn: Optional[str] = None):
        self.dsn = dsn or settings.database.dsn()
        self._conn = None
        self._lock = threading.Lock()

    def _connection(self):
        if self._conn is None or self._conn.closed:
            logger.info("Connecting to PostgreSQL")
            self._conn = psycopg2.connect(self.dsn, cursor_factory=RealDictCursor)
        return self._conn

    def _execute(self, operation: str, sql: str, params: Optional[list[Any]] = None, fetch: str = "all"):
        """Run one statement in its own transaction.

        Args:
            operation: Operation name for logging
            sql: SQL statement
            params: Statement parameters
            fetch: "all", "one" or "none"

        Returns:
            Normalized rows, a single row (or None), or None

        Raises:
            StorageConflictError: On unique or exclusion constraint violations
            StorageError: On any other database failure
        """
        try:
            with self._lock:
                conn = self._connection()
                with conn:
                    with conn.cursor() as cursor:
                        cursor.execute(sql, params)
                        if fetch == "all":
                            return [_normalize(dict(row)) for row in cursor.fetchall()]
                        if fetch == "one":
                            row = cursor.fetchone()
                            return _normalize(dict(row)) if row else None
                        return None
        except pg_errors.ExclusionViolation as e:
            raise StorageConflictError(str(e), constraint="room_overlap") from e
        except pg_errors.UniqueViolation as e:
            constraint = (
                "confirmation_number"
                if e.diag.constraint_name == "reservations_confirmation_number_key"
                else "unknown"
            )
            raise StorageConflictError(str(e), constraint=constraint) from e
        except psycopg2.Error as e:
            logger.error("Store operation failed", operation=operation, error=str(e))
            raise StorageError(details={"operation": operation}) from e

    async def _run(self, operation: str, sql: str, params: Optional[list[Any]] = None, fetch: str = "all"):
        return await asyncio.to_thread(self._execute, operation, sql, params, fetch)

    async def ensure_schema(self) -> None:
        """Create enums, tables and constraints if missing."""
        await self._run("ensure_schema", SCHEMA_SQL, fetch="none")
        logger.info("Database schema created/verified")

    async def query_reservations(
        self,
        hotel_id: str,
        filters: Optional[ReservationFilters] = None,
    ) -> list[Reservation]:
        where, params = build_reservation_where(hotel_id, filters)
        rows = await self._run(
            "query_reservations",
            f"{RESERVATION_SELECT} {where} ORDER BY r.check_in_date DESC",
            params,
        )
        return [Reservation.model_validate(row) for row in rows]

    async def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        row = await self._run(
            "get_reservation", f"{RESERVATION_SELECT} WHERE r.id = %s", [reservation_id], fetch="one"
        )
        return Reservation.model_validate(row) if row else None

    async def confirmation_number_exists(self, confirmation_number: str) -> bool:
        row = await self._run(
            "confirmation_number_exists",
            "SELECT 1 AS found FROM reservations WHERE confirmation_number = %s",
            [confirmation_number],
            fetch="one",
        )
        return row is not None

    async def insert_guest(self, guest: GuestCreate) -> Guest:
        values = guest.model_dump(mode="json")
        columns = ", ".join(GUEST_COLUMNS)
        placeholders = ", ".join(["%s"] * len(GUEST_COLUMNS))
        row = await self._run(
            "insert_guest",
            f"INSERT INTO guests ({columns}) VALUES ({placeholders}) RETURNING *",
            [values[column] for column in GUEST_COLUMNS],
            fetch="one",
        )
        return Guest.model_validate(row)

    async def delete_guest(self, guest_id: str) -> None:
        await self._run("delete_guest", "DELETE FROM guests WHERE id = %s", [guest_id], fetch="none")

    async def insert_reservation(self, reservation: ReservationCreate) -> Reservation:
        values = reservation.model_dump(mode="json")
        columns = ", ".join(RESERVATION_COLUMNS)
        placeholders = ", ".join(["%s"] * len(RESERVATION_COLUMNS))
        row = await self._run(
            "insert_reservation",
            f"INSERT INTO reservations ({columns}) VALUES ({placeholders}) RETURNING id",
            [values[column] for column in RESERVATION_COLUMNS],
            fetch="one",
        )
        return await self.get_reservation(row["id"])

    async def update_reservation(self, reservation_id: str, changes: dict[str, Any]) -> Reservation:
        unknown = set(changes) - UPDATABLE_RESERVATION_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update reservation columns: {sorted(unknown)}")
        assignments = ", ".join(f"{column} = %s" for column in changes)
        params = [getattr(value, "value", value) for value in changes.values()]
        row = await self._run(
            "update_reservation",
            f"UPDATE reservations SET {assignments} WHERE id = %s RETURNING id",
            params + [reservation_id],
            fetch="one",
        )
        if row is None:
            raise StorageError(
                f"Reservation {reservation_id} was not updated",
                details={"operation": "update_reservation"},
            )
        return await self.get_reservation(reservation_id)

    async def list_rooms(self, hotel_id: str) -> list[Room]:
        rows = await self._run(
            "list_rooms", f"{ROOM_SELECT} WHERE rm.hotel_id = %s ORDER BY rm.room_number", [hotel_id]
        )
        return [Room.model_validate(row) for row in rows]

    async def get_room(self, room_id: str) -> Optional[Room]:
        row = await self._run("get_room", f"{ROOM_SELECT} WHERE rm.id = %s", [room_id], fetch="one")
        return Room.model_validate(row) if row else None

    async def update_room_status(self, room_id: str, status: RoomStatus) -> Room:
        row = await self._run(
            "update_room_status",
            "UPDATE rooms SET status = %s WHERE id = %s RETURNING id",
            [status.value, room_id],
            fetch="one",
        )
        if row is None:
            raise StorageError(
                f"Room {room_id} was not updated",
                details={"operation": "update_room_status"},
            )
        return await self.get_room(room_id)

    async def query_fx_rate(self, rate_date: date) -> Optional[FxRate]:
        row = await self._run(
            "query_fx_rate", "SELECT * FROM fx_rates WHERE rate_date = %s", [rate_date], fetch="one"
        )
        return FxRate.model_validate(row) if row else None

    async def query_monthly_stats(self, hotel_id: str, month_start: date) -> Optional[MonthlyStats]:
        row = await self._run(
            "query_monthly_stats",
            "SELECT * FROM monthly_stats WHERE hotel_id = %s AND month_start = %s",
            [hotel_id, month_start],
            fetch="one",
        )
        return MonthlyStats.model_validate(row) if row else None

    async def list_monthly_stats(self, hotel_id: str) -> list[MonthlyStats]:
        rows = await self._run(
            "list_monthly_stats",
            "SELECT * FROM monthly_stats WHERE hotel_id = %s ORDER BY month_start",
            [hotel_id],
        )
        return [MonthlyStats.model_validate(row) for row in rows]

    async def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
            logger.debug("Closed PostgreSQL connection")

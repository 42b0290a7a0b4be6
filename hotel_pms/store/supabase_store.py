"""Reservation store backed by Supabase's PostgREST API."""

from datetime import date
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError
from structlog import get_logger

from hotel_pms.clients import SupabaseClientError, SupabaseConflictError, SupabaseRestClient
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

RESERVATION_COLUMNS = "*,guest:guests(*)"
ROOM_COLUMNS = "*,room_type:room_types(*)"

# Postgres SQLSTATE codes surfaced by PostgREST on 409 responses
UNIQUE_VIOLATION = "23505"
EXCLUSION_VIOLATION = "23P01"


def _in_list(values: list[Any]) -> str:
    return "(" + ",".join(str(getattr(v, "value", v)) for v in values) + ")"


def build_reservation_filters(hotel_id: str, filters: Optional[ReservationFilters]) -> dict[str, str]:
    """Translate ReservationFilters into PostgREST query parameters.

    Args:
        hotel_id: Hotel scope
        filters: Optional filters

    Returns:
        Dictionary of PostgREST filter parameters
    """
    params = {"hotel_id": f"eq.{hotel_id}"}
    if filters is None:
        return params

    if filters.room_id:
        params["room_id"] = f"eq.{filters.room_id}"
    if filters.statuses:
        params["status"] = f"in.{_in_list(filters.statuses)}"
    elif filters.exclude_statuses:
        params["status"] = f"not.in.{_in_list(filters.exclude_statuses)}"
    if filters.exclude_reservation_id:
        params["id"] = f"neq.{filters.exclude_reservation_id}"
    if filters.check_in_date:
        params["check_in_date"] = f"eq.{filters.check_in_date.isoformat()}"
    elif filters.overlapping:
        params["check_in_date"] = f"lt.{filters.overlapping.end.isoformat()}"
    if filters.overlapping:
        params["check_out_date"] = f"gt.{filters.overlapping.start.isoformat()}"
    return params


def _conflict_from(error: SupabaseConflictError) -> StorageConflictError:
    if error.pg_code == EXCLUSION_VIOLATION:
        constraint = "room_overlap"
    elif error.pg_code == UNIQUE_VIOLATION and "confirmation_number" in str(error):
        constraint = "confirmation_number"
    else:
        constraint = "unknown"
    return StorageConflictError(str(error), constraint=constraint)


def _one(model: type[BaseModel]) -> Callable[[Optional[dict[str, Any]]], Optional[BaseModel]]:
    return lambda row: model.model_validate(row) if row else None


def _many(model: type[BaseModel]) -> Callable[[list[dict[str, Any]]], list[BaseModel]]:
    return lambda rows: [model.model_validate(row) for row in rows]


class SupabaseReservationStore(ReservationStore):
    """ReservationStore talking to the hosted Postgres through PostgREST."""

    def __init__(self, client: Optional[SupabaseRestClient] = None):
        self.client = client or SupabaseRestClient()

    async def _call(self, operation: str, coro, parse: Optional[Callable[[Any], Any]] = None):
        """Await a client call and parse its rows.

        Client errors and rows that fail model validation are both
        raised as storage errors.
        """
        try:
            result = await coro
            return parse(result) if parse else result
        except SupabaseConflictError as e:
            raise _conflict_from(e) from e
        except SupabaseClientError as e:
            logger.error("Store operation failed", operation=operation, error=str(e))
            raise StorageError(details={"operation": operation}) from e
        except ValidationError as e:
            logger.error("Store returned an invalid row", operation=operation, error=str(e))
            raise StorageError(details={"operation": operation}) from e

    async def query_reservations(
        self,
        hotel_id: str,
        filters: Optional[ReservationFilters] = None,
    ) -> list[Reservation]:
        return await self._call(
            "query_reservations",
            self.client.select(
                "reservations",
                filters=build_reservation_filters(hotel_id, filters),
                columns=RESERVATION_COLUMNS,
                order="check_in_date.desc",
            ),
            _many(Reservation),
        )

    async def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return await self._call(
            "get_reservation",
            self.client.select_one(
                "reservations", {"id": f"eq.{reservation_id}"}, columns=RESERVATION_COLUMNS
            ),
            _one(Reservation),
        )

    async def confirmation_number_exists(self, confirmation_number: str) -> bool:
        row = await self._call(
            "confirmation_number_exists",
            self.client.select_one(
                "reservations",
                {"confirmation_number": f"eq.{confirmation_number}"},
                columns="id",
            ),
        )
        return row is not None

    async def insert_guest(self, guest: GuestCreate) -> Guest:
        return await self._call(
            "insert_guest",
            self.client.insert("guests", guest.model_dump(mode="json", exclude_none=True)),
            Guest.model_validate,
        )

    async def delete_guest(self, guest_id: str) -> None:
        await self._call("delete_guest", self.client.delete("guests", {"id": f"eq.{guest_id}"}))

    async def insert_reservation(self, reservation: ReservationCreate) -> Reservation:
        return await self._call(
            "insert_reservation",
            self.client.insert(
                "reservations",
                reservation.model_dump(mode="json", exclude_none=True),
                columns=RESERVATION_COLUMNS,
            ),
            Reservation.model_validate,
        )

    async def update_reservation(self, reservation_id: str, changes: dict[str, Any]) -> Reservation:
        payload = {key: getattr(value, "value", value) for key, value in changes.items()}
        payload = {
            key: value.isoformat() if isinstance(value, date) else value
            for key, value in payload.items()
        }
        rows = await self._call(
            "update_reservation",
            self.client.update(
                "reservations", {"id": f"eq.{reservation_id}"}, payload, columns=RESERVATION_COLUMNS
            ),
            _many(Reservation),
        )
        if not rows:
            raise StorageError(
                f"Reservation {reservation_id} was not updated",
                details={"operation": "update_reservation"},
            )
        return rows[0]

    async def list_rooms(self, hotel_id: str) -> list[Room]:
        return await self._call(
            "list_rooms",
            self.client.select(
                "rooms",
                filters={"hotel_id": f"eq.{hotel_id}"},
                columns=ROOM_COLUMNS,
                order="room_number",
            ),
            _many(Room),
        )

    async def get_room(self, room_id: str) -> Optional[Room]:
        return await self._call(
            "get_room",
            self.client.select_one("rooms", {"id": f"eq.{room_id}"}, columns=ROOM_COLUMNS),
            _one(Room),
        )

    async def update_room_status(self, room_id: str, status: RoomStatus) -> Room:
        rows = await self._call(
            "update_room_status",
            self.client.update(
                "rooms", {"id": f"eq.{room_id}"}, {"status": status.value}, columns=ROOM_COLUMNS
            ),
            _many(Room),
        )
        if not rows:
            raise StorageError(
                f"Room {room_id} was not updated",
                details={"operation": "update_room_status"},
            )
        return rows[0]

    async def query_fx_rate(self, rate_date: date) -> Optional[FxRate]:
        return await self._call(
            "query_fx_rate",
            self.client.select_one("fx_rates", {"rate_date": f"eq.{rate_date.isoformat()}"}),
            _one(FxRate),
        )

    async def query_monthly_stats(self, hotel_id: str, month_start: date) -> Optional[MonthlyStats]:
        return await self._call(
            "query_monthly_stats",
            self.client.select_one(
                "monthly_stats",
                {"hotel_id": f"eq.{hotel_id}", "month_start": f"eq.{month_start.isoformat()}"},
            ),
            _one(MonthlyStats),
        )

    async def list_monthly_stats(self, hotel_id: str) -> list[MonthlyStats]:
        return await self._call(
            "list_monthly_stats",
            self.client.select(
                "monthly_stats",
                filters={"hotel_id": f"eq.{hotel_id}"},
                order="month_start",
            ),
            _many(MonthlyStats),
        )

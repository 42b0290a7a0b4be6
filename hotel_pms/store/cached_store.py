"""Redis read-through cache wrapped around a ReservationStore.

Caching lives here, outside the services, so the core stays stateless
between calls. Only dashboard reads are cached. Filtered reservation
queries (availability checks) and single-row lookups always go to the
wrapped store, and every write invalidates the hotel's cached keys.
"""

import json
from datetime import date
from typing import Any, Awaitable, Callable, Optional

import redis.asyncio as redis
from structlog import get_logger

from hotel_pms.config import settings
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


def create_redis_client() -> redis.Redis:
    """Build an async Redis client from settings."""
    return redis.Redis(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        password=settings.redis.password,
        ssl=settings.redis.ssl,
        decode_responses=True,
        socket_timeout=settings.redis.socket_timeout,
        socket_connect_timeout=settings.redis.socket_connect_timeout,
    )


class CachedReservationStore(ReservationStore):
    """Decorates another store with a Redis cache for dashboard reads.

    Redis failures never fail a request: reads fall through to the wrapped
    store and failed invalidations are logged.
    """

    def __init__(
        self,
        store: ReservationStore,
        redis_client: Optional[redis.Redis] = None,
        ttl: Optional[int] = None,
        key_prefix: Optional[str] = None,
    ):
        self.store = store
        self.redis_client = redis_client or create_redis_client()
        self.ttl = ttl or settings.redis.cache_ttl
        self.key_prefix = key_prefix or settings.redis.key_prefix

    def _key(self, *parts: Any) -> str:
        return ":".join([self.key_prefix, *(str(part) for part in parts)])

    def _hotel_keys(self, hotel_id: str) -> list[str]:
        return [
            self._key("hotel", hotel_id, "rooms"),
            self._key("hotel", hotel_id, "reservations"),
        ]

    async def _get_cached(self, key: str) -> Optional[Any]:
        try:
            raw = await self.redis_client.get(key)
        except Exception as e:
            logger.warning("Redis get operation failed", key=key, error=str(e))
            return None
        return json.loads(raw) if raw else None

    async def _store(self, key: str, payload: Any) -> None:
        try:
            await self.redis_client.setex(key, self.ttl, json.dumps(payload))
        except Exception as e:
            logger.warning("Failed to cache query result", key=key, error=str(e))

    async def _cached(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        dump: Callable[[Any], Any],
        load: Callable[[Any], Any],
    ) -> Any:
        """Get-or-load: return the cached value or load, cache and return it.

        Absent results (None) are not cached, so a row loaded later shows up
        on the next read.
        """
        cached = await self._get_cached(key)
        if cached is not None:
            logger.debug("Cache hit", key=key)
            return load(cached)

        value = await loader()
        if value is not None:
            await self._store(key, dump(value))
        return value

    async def invalidate_hotel(self, hotel_id: str) -> None:
        """Drop the cached room and reservation listings of a hotel."""
        keys = self._hotel_keys(hotel_id)
        try:
            await self.redis_client.delete(*keys)
            logger.debug("Invalidated hotel cache", hotel_id=hotel_id)
        except Exception as e:
            logger.warning("Failed to invalidate hotel cache", hotel_id=hotel_id, error=str(e))

    # Reads

    async def query_reservations(
        self,
        hotel_id: str,
        filters: Optional[ReservationFilters] = None,
    ) -> list[Reservation]:
        if filters is not None and not filters.cache_safe():
            return await self.store.query_reservations(hotel_id, filters)
        return await self._cached(
            self._key("hotel", hotel_id, "reservations"),
            lambda: self.store.query_reservations(hotel_id, filters),
            lambda rows: [row.model_dump(mode="json") for row in rows],
            lambda rows: [Reservation.model_validate(row) for row in rows],
        )

    async def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return await self.store.get_reservation(reservation_id)

    async def confirmation_number_exists(self, confirmation_number: str) -> bool:
        return await self.store.confirmation_number_exists(confirmation_number)

    async def list_rooms(self, hotel_id: str) -> list[Room]:
        return await self._cached(
            self._key("hotel", hotel_id, "rooms"),
            lambda: self.store.list_rooms(hotel_id),
            lambda rows: [row.model_dump(mode="json") for row in rows],
            lambda rows: [Room.model_validate(row) for row in rows],
        )

    async def get_room(self, room_id: str) -> Optional[Room]:
        return await self.store.get_room(room_id)

    async def query_fx_rate(self, rate_date: date) -> Optional[FxRate]:
        return await self._cached(
            self._key("fx", rate_date.isoformat()),
            lambda: self.store.query_fx_rate(rate_date),
            lambda rate: rate.model_dump(mode="json"),
            FxRate.model_validate,
        )

    async def query_monthly_stats(self, hotel_id: str, month_start: date) -> Optional[MonthlyStats]:
        return await self._cached(
            self._key("stats", hotel_id, month_start.isoformat()),
            lambda: self.store.query_monthly_stats(hotel_id, month_start),
            lambda stats: stats.model_dump(mode="json"),
            MonthlyStats.model_validate,
        )

    async def list_monthly_stats(self, hotel_id: str) -> list[MonthlyStats]:
        return await self._cached(
            self._key("stats", hotel_id, "all"),
            lambda: self.store.list_monthly_stats(hotel_id),
            lambda rows: [row.model_dump(mode="json") for row in rows],
            lambda rows: [MonthlyStats.model_validate(row) for row in rows],
        )

    # Writes

    async def insert_guest(self, guest: GuestCreate) -> Guest:
        return await self.store.insert_guest(guest)

    async def delete_guest(self, guest_id: str) -> None:
        await self.store.delete_guest(guest_id)

    async def insert_reservation(self, reservation: ReservationCreate) -> Reservation:
        created = await self.store.insert_reservation(reservation)
        await self.invalidate_hotel(created.hotel_id)
        return created

    async def update_reservation(self, reservation_id: str, changes: dict[str, Any]) -> Reservation:
        updated = await self.store.update_reservation(reservation_id, changes)
        await self.invalidate_hotel(updated.hotel_id)
        return updated

    async def update_room_status(self, room_id: str, status: RoomStatus) -> Room:
        room = await self.store.update_room_status(room_id, status)
        await self.invalidate_hotel(room.hotel_id)
        return room

    async def close(self) -> None:
        try:
            await self.redis_client.close()
            logger.debug("Closed Redis connection")
        except Exception as e:
            logger.warning("Error closing Redis connection", error=str(e))
        await self.store.close()

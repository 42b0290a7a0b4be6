"""Persistence collaborator package."""

from typing import Optional

from hotel_pms.config import Settings, settings
from hotel_pms.store.base import ReservationStore
from hotel_pms.store.cached_store import CachedReservationStore
from hotel_pms.store.postgres_store import PostgresReservationStore
from hotel_pms.store.supabase_store import SupabaseReservationStore


def build_store(config: Optional[Settings] = None) -> ReservationStore:
    """Create the configured store, wrapped in the Redis cache when enabled."""
    config = config or settings
    if config.store_backend == "postgres":
        store: ReservationStore = PostgresReservationStore(config.database.dsn())
    else:
        store = SupabaseReservationStore()
    if config.redis.enabled:
        store = CachedReservationStore(store)
    return store


__all__ = [
    "ReservationStore",
    "CachedReservationStore",
    "PostgresReservationStore",
    "SupabaseReservationStore",
    "build_store",
]

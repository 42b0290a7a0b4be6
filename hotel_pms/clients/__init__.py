"""API clients package."""

from hotel_pms.clients.supabase_client import (
    SupabaseAuthenticationError,
    SupabaseClientError,
    SupabaseConflictError,
    SupabaseRestClient,
    SupabaseServerError,
)

__all__ = [
    "SupabaseRestClient",
    "SupabaseClientError",
    "SupabaseAuthenticationError",
    "SupabaseConflictError",
    "SupabaseServerError",
]

"""Human-readable booking reference generation."""

import secrets
from datetime import date
from typing import Callable, Optional

from structlog import get_logger

from hotel_pms.config import settings
from hotel_pms.errors import ConfirmationCodeExhausted
from hotel_pms.store.base import ReservationStore

logger = get_logger(__name__)

# No 0/O or 1/I/L, so codes can be read out over the phone
CODE_ALPHABET = "23456789ABCDEFGHJKMNPQRSTUVWXYZ"


class ConfirmationCodeGenerator:
    """Generates confirmation numbers like ``RES20240201-7KQ4MX``.

    The existence check is a best-effort optimization. The store's unique
    constraint on confirmation numbers is the authoritative guard, and the
    orchestrator regenerates when an insert trips it.
    """

    def __init__(
        self,
        store: ReservationStore,
        prefix: Optional[str] = None,
        suffix_length: Optional[int] = None,
        max_attempts: Optional[int] = None,
        random_source: Optional[Callable[[int], str]] = None,
    ):
        """Initialize the generator.

        Args:
            store: Reservation store used for the existence check
            prefix: Code prefix (defaults to settings)
            suffix_length: Length of the random suffix (defaults to settings)
            max_attempts: Attempts before giving up (defaults to settings)
            random_source: Callable returning a suffix of the given length
        """
        self.store = store
        self.prefix = prefix or settings.booking.confirmation_prefix
        self.suffix_length = suffix_length or settings.booking.confirmation_suffix_length
        self.max_attempts = max_attempts or settings.booking.confirmation_max_attempts
        self.random_source = random_source or self._random_suffix

    @staticmethod
    def _random_suffix(length: int) -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))

    def candidate(self, issued_on: Optional[date] = None) -> str:
        """Build one candidate code without checking the store."""
        issued_on = issued_on or date.today()
        suffix = self.random_source(self.suffix_length)
        return f"{self.prefix}{issued_on:%Y%m%d}-{suffix}"

    async def generate(self, issued_on: Optional[date] = None) -> str:
        """Generate a confirmation number not yet present in the store.

        Args:
            issued_on: Date embedded in the code (defaults to today)

        Returns:
            Unused confirmation number

        Raises:
            ConfirmationCodeExhausted: If every attempt collided
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.candidate(issued_on)
            if not await self.store.confirmation_number_exists(code):
                return code
            logger.warning(
                "Confirmation number collision, regenerating",
                confirmation_number=code,
                attempt=attempt,
            )

        raise ConfirmationCodeExhausted(details={"attempts": self.max_attempts})

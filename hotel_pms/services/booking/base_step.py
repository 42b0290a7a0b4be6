"""Base class for booking steps."""

from abc import ABC, abstractmethod
from typing import Optional

from structlog import get_logger

from .context import BookingContext

logger = get_logger(__name__)


class BookingStep(ABC):
    """Abstract base class for booking steps.

    Each step should:
    1. Implement execute() and raise a PMSError when it cannot proceed
    2. Read data from context and write its results back to it
    3. Override compensate() when it leaves side effects behind that a
       later failure must undo
    """

    def __init__(self, name: Optional[str] = None):
        """Initialize the booking step.

        Args:
            name: Optional custom name for the step. Defaults to class name.
        """
        self.name = name or self.__class__.__name__
        self.logger = logger.bind(step=self.name)

    @abstractmethod
    async def execute(self, context: BookingContext) -> None:
        """Execute the booking step.

        Args:
            context: Booking context containing shared data

        Raises:
            PMSError: If the step fails
        """

    async def compensate(self, context: BookingContext) -> None:
        """Undo this step's side effects after a later step failed."""
        return None

    async def run(self, context: BookingContext) -> None:
        """Run the step with logging, recording any error on the context.

        Args:
            context: Booking context

        Raises:
            Exception: Whatever execute() raised, after recording it
        """
        self.logger.debug("Step starting", hotel_id=context.hotel_id)

        try:
            await self.execute(context)
        except Exception as e:
            self.logger.info(
                "Step failed",
                hotel_id=context.hotel_id,
                error_type=type(e).__name__,
                error=str(e),
            )
            context.add_error(self.name, str(e))
            raise

        context.completed_steps.append(self.name)
        self.logger.debug("Step completed successfully", hotel_id=context.hotel_id)

    def get_name(self) -> str:
        return self.name

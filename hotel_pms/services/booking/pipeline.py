"""Pipeline executor for booking steps."""

from structlog import get_logger

from .base_step import BookingStep
from .context import BookingContext

logger = get_logger(__name__)


class BookingPipeline:
    """Pipeline for executing the sequence of booking steps.

    The pipeline:
    1. Executes steps in order, passing the context between them
    2. Stops at the first step that fails
    3. Compensates completed steps in reverse order before re-raising
    """

    def __init__(self, name: str, steps: list[BookingStep]):
        """Initialize the pipeline.

        Args:
            name: Pipeline name for logging
            steps: List of booking steps to execute in order
        """
        self.name = name
        self.steps = steps
        self.logger = logger.bind(pipeline=name)

    async def execute(self, context: BookingContext) -> BookingContext:
        """Execute the pipeline.

        Args:
            context: Booking context

        Returns:
            Updated context with results

        Raises:
            Exception: The error of the first failing step
        """
        completed: list[BookingStep] = []

        for step in self.steps:
            try:
                await step.run(context)
            except Exception:
                self.logger.info(
                    "Step failed, stopping pipeline",
                    hotel_id=context.hotel_id,
                    step=step.get_name(),
                )
                await self._compensate(completed, context)
                raise

            completed.append(step)

        context.success = True
        self.logger.info("Pipeline completed", hotel_id=context.hotel_id, results=context.get_results())
        return context

    async def _compensate(self, completed: list[BookingStep], context: BookingContext) -> None:
        """Undo completed steps, newest first.

        A failed compensation is logged and does not hide the original error.
        """
        for step in reversed(completed):
            try:
                await step.compensate(context)
            except Exception as e:
                self.logger.error(
                    "Compensation failed",
                    hotel_id=context.hotel_id,
                    step=step.get_name(),
                    error=str(e),
                    exc_info=True,
                )

    def add_step(self, step: BookingStep) -> "BookingPipeline":
        """Add a step to the pipeline.

        Args:
            step: Booking step to add

        Returns:
            Self for method chaining
        """
        self.steps.append(step)
        return self

    def get_step_names(self) -> list[str]:
        return [step.get_name() for step in self.steps]

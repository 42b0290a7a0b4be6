"""Step to generate the confirmation number."""

from hotel_pms.services.confirmation import ConfirmationCodeGenerator

from ..base_step import BookingStep
from ..context import BookingContext


class GenerateConfirmationStep(BookingStep):
    """Generate a confirmation number not yet used in the store."""

    def __init__(self, code_generator: ConfirmationCodeGenerator):
        super().__init__("GenerateConfirmation")
        self.code_generator = code_generator

    async def execute(self, context: BookingContext) -> None:
        context.confirmation_number = await self.code_generator.generate()

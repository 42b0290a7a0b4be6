"""Tests for reservation creation."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from fakes import HOTEL_ID, seed_reservation
from hotel_pms.errors import (
    ConfirmationCodeExhausted,
    GuestCreationFailed,
    InvalidDateRange,
    ReservationInsertFailed,
    RoomNotFound,
    RoomUnavailable,
    StorageConflictError,
    StorageError,
)
from hotel_pms.models import ReservationStatus, RoomStatus
from hotel_pms.services import AvailabilityChecker, ReservationOrchestrator
from hotel_pms.services.confirmation import ConfirmationCodeGenerator


@pytest.fixture
def orchestrator(store, code_generator):
    return ReservationOrchestrator(store, code_generator=code_generator)


class GatedAvailabilityChecker(AvailabilityChecker):
    """Holds every caller after its check until all callers have checked.

    Reproduces the window where concurrent bookings all pass the advisory
    check before any of them is stored.
    """

    def __init__(self, store, parties: int):
        super().__init__(store)
        self.parties = parties
        self.arrived = 0
        self.all_checked = asyncio.Event()

    async def find_conflicts(self, *args, **kwargs):
        conflicts = await super().find_conflicts(*args, **kwargs)
        self.arrived += 1
        if self.arrived == self.parties:
            self.all_checked.set()
        await self.all_checked.wait()
        return conflicts


class TestCreateReservation:
    """Tests for ReservationOrchestrator.create_reservation."""

    @pytest.mark.asyncio
    async def test_creates_guest_and_confirmed_reservation(
        self, store, orchestrator, guest_input, reservation_input
    ):
        reservation = await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert reservation.status is ReservationStatus.CONFIRMED
        assert reservation.hotel_id == HOTEL_ID
        assert reservation.confirmation_number.startswith("RES")
        assert reservation.guest.full_name == "Ada Lovelace"
        assert store.guests[reservation.guest_id].hotel_id == HOTEL_ID
        assert reservation.room_type_id == "rt-double"
        assert reservation.currency == "EUR"

    @pytest.mark.asyncio
    async def test_prices_stay_from_room_rate(self, orchestrator, guest_input, reservation_input):
        reservation = await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert reservation.total_amount == pytest.approx(4 * 120.0)

    @pytest.mark.asyncio
    async def test_entered_total_wins(self, orchestrator, guest_input, reservation_input):
        reservation = await orchestrator.create_reservation(
            HOTEL_ID, guest_input, reservation_input(total_amount=300.0, currency="USD")
        )

        assert reservation.total_amount == 300.0
        assert reservation.currency == "USD"

    @pytest.mark.asyncio
    async def test_type_only_reservation_skips_room_checks(
        self, store, orchestrator, guest_input, reservation_input
    ):
        reservation = await orchestrator.create_reservation(
            HOTEL_ID, guest_input, reservation_input(room_id=None, room_type_id="rt-suite")
        )

        assert reservation.room_id is None
        assert reservation.total_amount == 0.0
        assert store.calls_to("get_room") == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "check_in, check_out",
        [(date(2024, 2, 5), date(2024, 2, 5)), (date(2024, 2, 5), date(2024, 2, 1))],
    )
    async def test_invalid_range_rejected_without_side_effects(
        self, store, orchestrator, guest_input, reservation_input, check_in, check_out
    ):
        with pytest.raises(InvalidDateRange) as exc_info:
            await orchestrator.create_reservation(
                HOTEL_ID, guest_input, reservation_input(check_in_date=check_in, check_out_date=check_out)
            )

        assert exc_info.value.to_user_message()["field"] == "check_out_date"
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_overlap_rejected_before_guest_is_created(
        self, store, orchestrator, guest_input, reservation_input
    ):
        existing = seed_reservation(store, "room-101", date(2024, 2, 3), date(2024, 2, 7))
        guests_before = dict(store.guests)

        with pytest.raises(RoomUnavailable) as exc_info:
            await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert exc_info.value.conflicts == [existing.confirmation_number]
        assert exc_info.value.field == "room_id"
        assert store.guests == guests_before
        assert store.calls_to("insert_guest") == 0

    @pytest.mark.asyncio
    async def test_back_to_back_booking_allowed(self, store, orchestrator, guest_input, reservation_input):
        seed_reservation(store, "room-101", date(2024, 1, 28), date(2024, 2, 1))

        reservation = await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert reservation.check_in_date == date(2024, 2, 1)

    @pytest.mark.asyncio
    async def test_room_of_other_hotel_rejected(self, store, orchestrator, guest_input, reservation_input):
        with pytest.raises(RoomUnavailable):
            await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input(room_id="room-x"))

        assert store.calls_to("insert_guest") == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [RoomStatus.OUT_OF_ORDER, RoomStatus.MAINTENANCE])
    async def test_out_of_service_room_rejected(
        self, store, orchestrator, guest_input, reservation_input, status
    ):
        store.rooms["room-101"] = store.rooms["room-101"].model_copy(update={"status": status})

        with pytest.raises(RoomUnavailable) as exc_info:
            await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert exc_info.value.details["room_status"] == status.value
        assert store.calls_to("insert_guest") == 0

    @pytest.mark.asyncio
    async def test_dirty_room_can_be_booked(self, orchestrator, guest_input, reservation_input):
        reservation = await orchestrator.create_reservation(
            HOTEL_ID, guest_input, reservation_input(room_id="room-102")
        )

        assert reservation.room_id == "room-102"

    @pytest.mark.asyncio
    async def test_unknown_room_rejected(self, orchestrator, guest_input, reservation_input):
        with pytest.raises(RoomNotFound):
            await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input(room_id="nope"))

    @pytest.mark.asyncio
    async def test_guest_creation_failure(self, store, orchestrator, guest_input, reservation_input):
        store.fail_on["insert_guest"] = StorageError("connection reset")

        with pytest.raises(GuestCreationFailed) as exc_info:
            await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert exc_info.value.to_user_message()["retry"] is True
        assert store.reservations == {}

    @pytest.mark.asyncio
    async def test_insert_failure_rolls_back_guest(self, store, orchestrator, guest_input, reservation_input):
        store.fail_on["insert_reservation"] = StorageError("connection reset")

        with pytest.raises(ReservationInsertFailed) as exc_info:
            await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        error = exc_info.value
        assert error.guest_id is not None
        assert error.guest_rolled_back is True
        assert error.guest_id not in store.guests
        assert store.reservations == {}

    @pytest.mark.asyncio
    async def test_insert_failure_reports_guest_left_behind(
        self, store, orchestrator, guest_input, reservation_input
    ):
        store.fail_on["insert_reservation"] = StorageError("connection reset")
        store.fail_on["delete_guest"] = StorageError("connection reset")

        with pytest.raises(ReservationInsertFailed) as exc_info:
            await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert exc_info.value.guest_rolled_back is False
        assert exc_info.value.guest_id in store.guests

    @pytest.mark.asyncio
    async def test_code_exhaustion_rolls_back_guest(self, store, guest_input, reservation_input):
        generator = ConfirmationCodeGenerator(
            store, prefix="RES", suffix_length=6, max_attempts=2, random_source=lambda n: "TAKEN1"
        )
        seed_reservation(
            store, "room-201", date(2024, 3, 1), date(2024, 3, 2),
            confirmation_number=generator.candidate(),
        )
        orchestrator = ReservationOrchestrator(store, code_generator=generator)

        with pytest.raises(ConfirmationCodeExhausted) as exc_info:
            await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert exc_info.value.details["guest_rolled_back"] is True
        assert len(store.guests) == 1  # only the seeded guest

    @pytest.mark.asyncio
    async def test_duplicate_code_at_insert_is_regenerated(
        self, store, orchestrator, guest_input, reservation_input
    ):
        """The existence check passed but the unique constraint fired at insert."""
        store.fail_on["insert_reservation"] = StorageConflictError(
            "duplicate key", constraint="confirmation_number"
        )

        reservation = await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert reservation.confirmation_number.endswith("AAAAA2")
        assert store.calls_to("insert_reservation") == 2

    @pytest.mark.asyncio
    async def test_no_regeneration_after_last_insert_attempt(
        self, store, orchestrator, guest_input, reservation_input
    ):
        conflict = StorageConflictError("duplicate key", constraint="confirmation_number")

        with patch.object(store, "insert_reservation", new=AsyncMock(side_effect=conflict)) as insert:
            with pytest.raises(ConfirmationCodeExhausted) as exc_info:
                await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert insert.await_count == 3
        # one code for the first insert, one for each retry
        assert store.calls_to("confirmation_number_exists") == 3
        assert exc_info.value.details["attempts"] == 3
        assert exc_info.value.details["guest_rolled_back"] is True

    @pytest.mark.asyncio
    async def test_storage_guard_rejects_concurrent_double_booking(
        self, store, code_generator, guest_input, reservation_input
    ):
        """Both bookings pass the advisory check; the store's overlap guard rejects one."""
        orchestrator = ReservationOrchestrator(
            store,
            availability_checker=GatedAvailabilityChecker(store, parties=2),
            code_generator=code_generator,
        )

        results = await asyncio.gather(
            orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input()),
            orchestrator.create_reservation(
                HOTEL_ID,
                guest_input,
                reservation_input(check_in_date=date(2024, 2, 3), check_out_date=date(2024, 2, 7)),
            ),
            return_exceptions=True,
        )

        created = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, RoomUnavailable)]
        assert len(created) == 1
        assert len(rejected) == 1
        assert rejected[0].details["guard"] == "storage"
        assert rejected[0].details["guest_rolled_back"] is True
        assert len(store.reservations) == 1
        assert len(store.guests) == 1

    @pytest.mark.asyncio
    async def test_booking_leaves_stored_room_status_alone(
        self, store, orchestrator, guest_input, reservation_input
    ):
        await orchestrator.create_reservation(HOTEL_ID, guest_input, reservation_input())

        assert store.calls_to("query_reservations") == 1
        assert store.calls_to("update_room_status") == 0
        assert store.rooms["room-101"].status is RoomStatus.CLEAN

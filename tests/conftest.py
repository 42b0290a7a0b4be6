import itertools
from datetime import date

import pytest

from fakes import HOTEL_ID, OTHER_HOTEL_ID, SUITE, InMemoryReservationStore, make_room
from hotel_pms.models import FxRate, GuestInput, MonthlyStats, ReservationInput, RoomStatus
from hotel_pms.services import ConfirmationCodeGenerator


@pytest.fixture
def store():
    """In-memory store with two floors of rooms and one room of another hotel."""
    store = InMemoryReservationStore()
    store.add_room(make_room("room-101", "101", 1))
    store.add_room(make_room("room-102", "102", 1, status=RoomStatus.DIRTY))
    store.add_room(make_room("room-201", "201", 2, room_type=SUITE))
    store.add_room(make_room("room-x", "101", 1, hotel_id=OTHER_HOTEL_ID))
    return store


@pytest.fixture
def guest_input():
    return GuestInput(first_name="Ada", last_name="Lovelace", email="ada@example.com")


@pytest.fixture
def reservation_input():
    """Factory for booking form input, room 101 from 2024-02-01 to 2024-02-05 by default."""

    def _make(**overrides) -> ReservationInput:
        values = {
            "room_id": "room-101",
            "check_in_date": date(2024, 2, 1),
            "check_out_date": date(2024, 2, 5),
            "adults": 2,
        }
        values.update(overrides)
        return ReservationInput(**values)

    return _make


@pytest.fixture
def sequential_codes():
    """Random source returning AAAAA1, AAAAA2, ... in order."""
    counter = itertools.count(1)
    return lambda length: f"{next(counter):0{length}d}".replace("0", "A")


@pytest.fixture
def code_generator(store, sequential_codes):
    return ConfirmationCodeGenerator(
        store,
        prefix="RES",
        suffix_length=6,
        max_attempts=3,
        random_source=sequential_codes,
    )


@pytest.fixture
def fx_january():
    return FxRate(rate_date=date(2024, 1, 31), eur_to_usd=1.08, eur_to_try=33.0)


@pytest.fixture
def january_stats():
    return MonthlyStats(
        hotel_id=HOTEL_ID,
        month_start=date(2024, 1, 1),
        total_bookings=40,
        total_revenue_eur=12000.0,
        adr_eur=150.0,
        strongest_channel="booking_com",
    )

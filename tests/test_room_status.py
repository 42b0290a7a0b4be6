"""Tests for room display status projection and the room board."""

from datetime import date

import pytest

from fakes import HOTEL_ID, make_room, seed_reservation
from hotel_pms.models import ReservationStatus, RoomStatus
from hotel_pms.services.room_status import RoomStatusProjector


class TestProjectStatus:
    """Tests for RoomStatusProjector.project_status."""

    def test_no_reservations_keeps_stored_status(self):
        for status in RoomStatus:
            room = make_room("room-101", "101", 1, status=status)

            projection = RoomStatusProjector.project_status(room, [], date(2024, 1, 12))

            assert projection.display_status is status
            assert projection.occupying_guest is None

    def test_clean_room_without_reservations_today(self, store):
        room = store.rooms["room-101"]
        seed_reservation(store, "room-101", date(2024, 1, 20), date(2024, 1, 22))

        projection = RoomStatusProjector.project_status(
            room, store.reservations.values(), date(2024, 1, 12)
        )

        assert projection.display_status is RoomStatus.CLEAN

    def test_checked_in_guest_occupies_room(self, store):
        reservation = seed_reservation(
            store, "room-101", date(2024, 1, 10), date(2024, 1, 15), status=ReservationStatus.CHECKED_IN
        )

        projection = RoomStatusProjector.project_status(
            store.rooms["room-101"], [reservation], date(2024, 1, 12)
        )

        assert projection.display_status is RoomStatus.OCCUPIED
        assert projection.occupying_guest == reservation.guest
        assert projection.reservation.id == reservation.id

    @pytest.mark.parametrize("today", [date(2024, 1, 10), date(2024, 1, 14)])
    def test_occupied_on_first_and_last_night(self, store, today):
        reservation = seed_reservation(
            store, "room-101", date(2024, 1, 10), date(2024, 1, 15), status=ReservationStatus.CHECKED_IN
        )

        projection = RoomStatusProjector.project_status(store.rooms["room-101"], [reservation], today)

        assert projection.display_status is RoomStatus.OCCUPIED

    def test_not_occupied_on_departure_day(self, store):
        reservation = seed_reservation(
            store, "room-101", date(2024, 1, 10), date(2024, 1, 15), status=ReservationStatus.CHECKED_IN
        )

        projection = RoomStatusProjector.project_status(
            store.rooms["room-101"], [reservation], date(2024, 1, 15)
        )

        assert projection.display_status is RoomStatus.CLEAN

    def test_arrival_today_shows_available(self, store):
        store.add_room(make_room("room-103", "103", 1, status=RoomStatus.AVAILABLE))
        reservation = seed_reservation(store, "room-103", date(2024, 1, 12), date(2024, 1, 14))

        projection = RoomStatusProjector.project_status(
            store.rooms["room-103"], [reservation], date(2024, 1, 12)
        )

        assert projection.display_status is RoomStatus.AVAILABLE
        assert projection.occupying_guest is None
        assert projection.arriving_guest == reservation.guest

    def test_occupancy_wins_over_arrival(self, store):
        departing = seed_reservation(
            store, "room-101", date(2024, 1, 10), date(2024, 1, 13), status=ReservationStatus.CHECKED_IN
        )
        arriving = seed_reservation(store, "room-101", date(2024, 1, 13), date(2024, 1, 15))

        # Late check-out: the departing guest is still checked in on the arrival day
        departing = departing.model_copy(update={"check_out_date": date(2024, 1, 14)})

        projection = RoomStatusProjector.project_status(
            store.rooms["room-101"], [arriving, departing], date(2024, 1, 13)
        )

        assert projection.display_status is RoomStatus.OCCUPIED
        assert projection.occupying_guest == departing.guest

    def test_other_rooms_are_ignored(self, store):
        reservation = seed_reservation(
            store, "room-102", date(2024, 1, 10), date(2024, 1, 15), status=ReservationStatus.CHECKED_IN
        )

        projection = RoomStatusProjector.project_status(
            store.rooms["room-101"], [reservation], date(2024, 1, 12)
        )

        assert projection.display_status is RoomStatus.CLEAN


class TestRoomBoard:
    """Tests for grouping and loading the room board."""

    def test_group_by_floor_orders_floors_and_rooms(self):
        rooms = [
            make_room("a", "110", 1),
            make_room("b", "102", 1),
            make_room("c", "301", 3),
            make_room("d", "9", 1),
            make_room("e", "lobby", None),
            make_room("f", "201", 2),
        ]
        projector = RoomStatusProjector()

        groups = projector.group_by_floor(projector.project_rooms(rooms, [], date(2024, 1, 1)))

        assert [group.floor for group in groups] == [3, 2, 1, None]
        assert [p.room.room_number for p in groups[2].rooms] == ["9", "102", "110"]

    @pytest.mark.asyncio
    async def test_room_board_loads_hotel_rooms(self, store):
        seed_reservation(
            store, "room-201", date(2024, 1, 10), date(2024, 1, 15), status=ReservationStatus.CHECKED_IN
        )

        groups = await RoomStatusProjector(store).room_board(HOTEL_ID, date(2024, 1, 12))

        assert [group.floor for group in groups] == [2, 1]
        assert groups[0].rooms[0].display_status is RoomStatus.OCCUPIED
        assert [p.display_status for p in groups[1].rooms] == [RoomStatus.CLEAN, RoomStatus.DIRTY]

    @pytest.mark.asyncio
    async def test_projection_never_writes_room_status(self, store):
        seed_reservation(
            store, "room-101", date(2024, 1, 10), date(2024, 1, 15), status=ReservationStatus.CHECKED_IN
        )

        await RoomStatusProjector(store).room_board(HOTEL_ID, date(2024, 1, 12))

        assert store.rooms["room-101"].status is RoomStatus.CLEAN
        assert store.calls_to("update_room_status") == 0

from concurrent.futures import ThreadPoolExecutor

import pytest

from app.core.errors import NotFoundError, ValidationError
from app.services.booking_service import BookingQueryService
from app.services.status_service import BookingStatusService


@pytest.fixture
def statuses(db):
    return BookingStatusService(db)


@pytest.fixture
def bookings(db):
    return BookingQueryService(db)


def test_set_status_writes_exact_value(statuses, bookings, make_booking):
    booking = make_booking(status=None)

    statuses.set_status(booking.booking_id, "In Progress")

    stored = bookings.get_booking(booking.booking_id)
    assert stored.status == "In Progress"
    assert stored.effective_status == "In Progress"


def test_invalid_status_leaves_row_unchanged(statuses, bookings, make_booking):
    booking = make_booking(status="Completed")

    with pytest.raises(ValidationError) as exc:
        statuses.set_status(booking.booking_id, "NotAStatus")

    assert exc.value.message == "Invalid status provided."
    assert bookings.get_booking(booking.booking_id).status == "Completed"


@pytest.mark.parametrize("value", [None, "", "pending", "completed "])
def test_status_values_are_exact_literals(statuses, make_booking, value):
    booking = make_booking()
    with pytest.raises(ValidationError):
        statuses.set_status(booking.booking_id, value)


def test_unknown_booking_is_not_found(statuses):
    with pytest.raises(NotFoundError):
        statuses.set_status(99999, "Completed")


def test_invalid_status_checked_before_existence(statuses):
    # Validation wins even when the booking does not exist
    with pytest.raises(ValidationError):
        statuses.set_status(99999, "Archived")


def test_setting_same_status_twice_succeeds(statuses, bookings, make_booking):
    booking = make_booking()

    statuses.set_status(booking.booking_id, "Completed")
    statuses.set_status(booking.booking_id, "Completed")

    assert bookings.get_booking(booking.booking_id).status == "Completed"


def test_any_transition_is_allowed(statuses, bookings, make_booking):
    booking = make_booking()

    for status in ["Completed", "Pending", "Cancelled", "In Progress", "Pending"]:
        statuses.set_status(booking.booking_id, status)
        assert bookings.get_booking(booking.booking_id).status == status


def test_concurrent_updates_all_succeed(statuses, bookings, make_booking):
    booking = make_booking()
    targets = ["Completed", "Cancelled", "In Progress", "Pending"] * 2

    with ThreadPoolExecutor(max_workers=4) as pool:
        list(pool.map(lambda status: statuses.set_status(booking.booking_id, status), targets))

    # Last write wins; the row holds one of the written values and the pool is still usable
    assert bookings.get_booking(booking.booking_id).status in targets
    assert bookings.dashboard_summary()["totalBookings"] == 1


def test_out_of_range_id_is_not_found(statuses):
    with pytest.raises(NotFoundError):
        statuses.set_status(2**64, "Completed")

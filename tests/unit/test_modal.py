"""
Unit tests for the payment modal state machine.
"""

import pytest

from booking.modal import PaymentModal, success_path
from models.payment import ModalStatus, PollOutcome
from utils.exceptions import BookingStateError


@pytest.fixture
def checking_modal():
    modal = PaymentModal()
    modal.open_checking("cs_123")
    return modal


def test_starts_closed():
    modal = PaymentModal()

    assert not modal.is_open
    assert modal.status is None


def test_open_checking_records_session(checking_modal):
    assert checking_modal.is_open
    assert checking_modal.status == ModalStatus.CHECKING
    assert checking_modal.state.session_id == "cs_123"


def test_cannot_open_twice(checking_modal):
    with pytest.raises(BookingStateError):
        checking_modal.open_checking("cs_456")
    with pytest.raises(BookingStateError):
        checking_modal.open_failed()


def test_paid_then_acknowledge_navigates(checking_modal):
    changed = checking_modal.resolve(
        PollOutcome(status=ModalStatus.PAID, confirmation_number="HTL-0001")
    )

    assert changed
    assert checking_modal.status == ModalStatus.PAID
    assert checking_modal.acknowledge() == "/booking/success?confirmation=HTL-0001"
    assert not checking_modal.is_open


def test_paid_without_confirmation_stays(checking_modal):
    checking_modal.resolve(PollOutcome(status=ModalStatus.PAID))

    assert checking_modal.acknowledge() is None
    assert not checking_modal.is_open


@pytest.mark.parametrize(
    "status", [ModalStatus.FAILED, ModalStatus.CANCELLED, ModalStatus.PENDING]
)
def test_other_outcomes_close_without_navigation(checking_modal, status):
    checking_modal.resolve(
        PollOutcome(status=status, confirmation_number="HTL-0001")
    )

    assert checking_modal.status == status
    # Confirmation numbers only matter for paid bookings
    assert checking_modal.state.confirmation_number is None
    assert checking_modal.acknowledge() is None


def test_dismiss_never_closes_open_modal(checking_modal):
    assert checking_modal.dismiss() is False
    assert checking_modal.is_open

    checking_modal.resolve(PollOutcome(status=ModalStatus.FAILED))

    assert checking_modal.dismiss() is False
    assert checking_modal.is_open


def test_cannot_acknowledge_while_checking(checking_modal):
    with pytest.raises(BookingStateError):
        checking_modal.acknowledge()


def test_cannot_acknowledge_closed_modal():
    with pytest.raises(BookingStateError):
        PaymentModal().acknowledge()


def test_outcome_after_resolution_is_ignored(checking_modal):
    checking_modal.resolve(PollOutcome(status=ModalStatus.CANCELLED))

    changed = checking_modal.resolve(
        PollOutcome(status=ModalStatus.PAID, confirmation_number="HTL-0002")
    )

    assert changed is False
    assert checking_modal.status == ModalStatus.CANCELLED


def test_outcome_for_closed_modal_is_ignored():
    modal = PaymentModal()

    assert modal.resolve(PollOutcome(status=ModalStatus.PAID)) is False
    assert not modal.is_open


def test_open_failed_has_no_session():
    modal = PaymentModal()
    modal.open_failed()

    assert modal.status == ModalStatus.FAILED
    assert modal.state.session_id is None


def test_success_path_escapes_confirmation():
    assert success_path("A B&C") == "/booking/success?confirmation=A+B%26C"

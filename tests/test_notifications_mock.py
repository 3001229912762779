from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from app.core.config import Settings
from app.core.errors import NotificationError
from app.models.db_models import Booking
from app.services.notification_service import NotificationDispatcher, send_email

COMPANY_CONFIG = {
    "company_name": "Teeman Cleaning Services",
    "owner_email": "owner@test.com",
    "notifications": {
        "email_enabled": True,
        "staff_subject": "New booking from {first_name}",
        "staff_template": "<p>{first_name} {last_name}: {message}</p>",
        "customer_subject": "Booking Confirmation - {company_name}",
        "customer_template": "<p>Hello {first_name}, see you on {booking_date}.</p>",
    },
}


def smtp_settings(**overrides):
    values = {"SMTP_USERNAME": "user@test.com", "SMTP_PASSWORD": "pass"}
    values.update(overrides)
    return Settings(**values)


def sample_booking(**overrides):
    fields = {
        "booking_id": 7,
        "first_name": "Jane",
        "last_name": None,
        "email": "client@test.com",
        "phone_number": "555-0100",
        "service_type": "Deep Cleaning",
        "message": "Please ring twice",
        "booking_date": date(2024, 6, 1),
    }
    fields.update(overrides)
    return Booking(**fields)


# Test Email (Mocked SMTP)
@patch("app.services.notification_service.smtplib.SMTP")
def test_send_email_mocked(mock_smtp_cls):
    mock_server = MagicMock()
    mock_smtp_cls.return_value = mock_server

    result = send_email("Test Subject", "<p>Test Body</p>", "client@test.com", smtp_settings(), sender_name="Teeman")

    assert result is True
    mock_smtp_cls.assert_called_once()
    mock_server.starttls.assert_called_once()
    mock_server.login.assert_called_with("user@test.com", "pass")
    mock_server.send_message.assert_called_once()
    mock_server.quit.assert_called_once()

    message = mock_server.send_message.call_args.args[0]
    assert message["To"] == "client@test.com"
    assert message["Subject"] == "Test Subject"
    assert "Teeman" in message["From"]


def test_send_email_without_credentials():
    with patch("app.services.notification_service.smtplib.SMTP") as mock_smtp_cls:
        with pytest.raises(NotificationError):
            send_email("Subject", "Body", "client@test.com", smtp_settings(SMTP_PASSWORD=""))
        mock_smtp_cls.assert_not_called()


def test_send_email_transport_failure():
    with patch("app.services.notification_service.smtplib.SMTP", side_effect=OSError("connection refused")):
        with pytest.raises(NotificationError) as exc:
            send_email("Subject", "Body", "client@test.com", smtp_settings())
    assert "client@test.com" in exc.value.message


def test_dispatch_sends_staff_and_customer_emails():
    dispatcher = NotificationDispatcher(smtp_settings(), COMPANY_CONFIG)

    with patch("app.services.notification_service.send_email") as mock_send:
        dispatcher.dispatch_booking_created(sample_booking())

    assert mock_send.call_count == 2
    staff_call, customer_call = mock_send.call_args_list
    assert staff_call.args[0] == "New booking from Jane"
    assert staff_call.args[2] == "owner@test.com"
    assert customer_call.args[0] == "Booking Confirmation - Teeman Cleaning Services"
    assert customer_call.args[1] == "<p>Hello Jane, see you on 2024-06-01.</p>"
    assert customer_call.args[2] == "client@test.com"


def test_dispatch_escapes_booking_fields():
    dispatcher = NotificationDispatcher(smtp_settings(), COMPANY_CONFIG)
    booking = sample_booking(first_name="<script>alert(1)</script>")

    with patch("app.services.notification_service.send_email") as mock_send:
        dispatcher.dispatch_booking_created(booking)

    staff_body = mock_send.call_args_list[0].args[1]
    assert "<script>" not in staff_body
    assert "&lt;script&gt;" in staff_body


def test_dispatch_staff_falls_back_to_smtp_user():
    config = dict(COMPANY_CONFIG, owner_email="")
    dispatcher = NotificationDispatcher(smtp_settings(), config)

    with patch("app.services.notification_service.send_email") as mock_send:
        dispatcher.dispatch_booking_created(sample_booking())

    assert mock_send.call_args_list[0].args[2] == "user@test.com"


def test_dispatch_failures_are_logged_not_raised():
    dispatcher = NotificationDispatcher(smtp_settings(), COMPANY_CONFIG)

    with patch("app.services.notification_service.send_email", side_effect=NotificationError("boom")) as mock_send:
        dispatcher.dispatch_booking_created(sample_booking())

    # First failure does not stop the second email
    assert mock_send.call_count == 2


def test_dispatch_disabled_in_config():
    config = dict(COMPANY_CONFIG, notifications={"email_enabled": False})
    dispatcher = NotificationDispatcher(smtp_settings(), config)

    with patch("app.services.notification_service.send_email") as mock_send:
        dispatcher.dispatch_booking_created(sample_booking())

    mock_send.assert_not_called()


def test_subject_uses_unescaped_values():
    config = dict(COMPANY_CONFIG, company_name="Smith & Sons")
    dispatcher = NotificationDispatcher(smtp_settings(), config)

    with patch("app.services.notification_service.send_email") as mock_send:
        dispatcher.dispatch_booking_created(sample_booking(first_name="O'Neil"))

    staff_call, customer_call = mock_send.call_args_list
    assert staff_call.args[0] == "New booking from O'Neil"
    assert customer_call.args[0] == "Booking Confirmation - Smith & Sons"
    assert "O&#x27;Neil" in customer_call.args[1]

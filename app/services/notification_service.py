import html
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any, Dict, Optional

from app.core.config import Settings
from app.core.config_loader import get_notification_settings
from app.core.errors import NotificationError
from app.core.logger import logger
from app.models.db_models import Booking

SMTP_TIMEOUT = 10

DEFAULT_STAFF_SUBJECT = "New Booking Received"
DEFAULT_STAFF_TEMPLATE = "New booking: {first_name} {last_name}, {service_type} on {booking_date}"
DEFAULT_CUSTOMER_SUBJECT = "Booking Confirmation - {company_name}"
DEFAULT_CUSTOMER_TEMPLATE = "Hello {first_name}, we have received your booking for {service_type} on {booking_date}."


def send_email(subject: str, html_body: str, to_email: str, settings: Settings, sender_name: Optional[str] = None) -> bool:
    """
    Sends an HTML email over SMTP with STARTTLS.
    Raises NotificationError when SMTP is not configured or the transport fails.
    """
    if not settings.SMTP_USERNAME or not settings.SMTP_PASSWORD:
        raise NotificationError("SMTP credentials missing.")

    try:
        msg = EmailMessage()
        msg["From"] = formataddr((sender_name, settings.SMTP_USERNAME)) if sender_name else settings.SMTP_USERNAME
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(html_body, subtype="html")

        server = smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT, timeout=SMTP_TIMEOUT)
        try:
            server.starttls()
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.send_message(msg)
        finally:
            server.quit()
    except (smtplib.SMTPException, OSError, ValueError) as e:
        raise NotificationError(f"SMTP delivery to {to_email} failed: {e}") from e

    logger.info(f"✅ Email sent to {to_email} with subject: '{subject}'")
    return True


class NotificationDispatcher:
    """
    Sends the booking-created emails (staff alert + customer confirmation).
    Runs after the booking is committed; failures are logged and go no further.
    """

    def __init__(self, settings: Settings, company_config: Dict[str, Any]):
        self.settings = settings
        self.company_config = company_config
        self.notifications = get_notification_settings(company_config)

    @property
    def company_name(self) -> str:
        return self.company_config.get("company_name", "")

    @property
    def staff_email(self) -> str:
        return self.company_config.get("owner_email") or self.settings.SMTP_USERNAME

    def _template_values(self, booking: Booking) -> Dict[str, str]:
        values = {
            "first_name": booking.first_name,
            "last_name": booking.last_name,
            "email": booking.email,
            "phone_number": booking.phone_number,
            "address": booking.address,
            "service_type": booking.service_type,
            "message": booking.message,
            "booking_date": booking.booking_date.isoformat() if booking.booking_date else "",
            "company_name": self.company_name,
        }
        return {key: str(value) if value is not None else "" for key, value in values.items()}

    def dispatch_booking_created(self, booking: Booking) -> None:
        if not self.notifications.get("email_enabled", False):
            logger.info("ℹ️ Email notifications are disabled in config.")
            return

        # Subjects are plain-text headers; bodies are HTML built from raw form input
        subject_context = self._template_values(booking)
        body_context = {key: html.escape(value) for key, value in subject_context.items()}
        outgoing = [
            (
                self.staff_email,
                self.notifications.get("staff_subject", DEFAULT_STAFF_SUBJECT),
                self.notifications.get("staff_template", DEFAULT_STAFF_TEMPLATE),
            ),
            (
                booking.email,
                self.notifications.get("customer_subject", DEFAULT_CUSTOMER_SUBJECT),
                self.notifications.get("customer_template", DEFAULT_CUSTOMER_TEMPLATE),
            ),
        ]

        for recipient, subject_template, body_template in outgoing:
            if not recipient:
                logger.error(f"❌ No recipient for booking {booking.booking_id} notification, skipping.")
                continue
            try:
                subject = subject_template.format(**subject_context)
                body = body_template.format(**body_context)
                send_email(subject, body, recipient, self.settings, sender_name=self.company_name or None)
            except NotificationError as e:
                logger.error(f"❌ Booking {booking.booking_id}: {e.message}")
            except (KeyError, IndexError, ValueError) as e:
                logger.error(f"❌ Booking {booking.booking_id}: bad notification template: {e}")

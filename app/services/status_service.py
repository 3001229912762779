from sqlalchemy import update

from app.core.errors import NotFoundError, ValidationError
from app.core.logger import logger
from app.models.db_models import BOOKING_STATUSES, SQL_INTEGER_MAX, Booking
from app.services.db_service import Database


class BookingStatusService:
    """
    Moves a booking between statuses. Any status may follow any other,
    Completed -> Pending included.
    """

    def __init__(self, db: Database):
        self.db = db

    def set_status(self, booking_id: int, new_status: str) -> None:
        if new_status not in BOOKING_STATUSES:
            raise ValidationError("Invalid status provided.")
        if not 0 < booking_id <= SQL_INTEGER_MAX:
            raise NotFoundError("Booking not found.")

        statement = (
            update(Booking)
            .where(Booking.booking_id == booking_id)
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        with self.db.session() as session:
            result = session.execute(statement)
            session.commit()

        # rowcount counts matched rows, so re-applying the current status still succeeds
        if result.rowcount == 0:
            raise NotFoundError("Booking not found.")

        logger.info(f"🔄 Booking {booking_id} status set to '{new_status}'")

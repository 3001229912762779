from fastapi import Depends, Request

from app.services.booking_service import BookingQueryService
from app.services.db_service import Database
from app.services.notification_service import NotificationDispatcher
from app.services.status_service import BookingStatusService


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_booking_service(db: Database = Depends(get_database)) -> BookingQueryService:
    return BookingQueryService(db)


def get_status_service(db: Database = Depends(get_database)) -> BookingStatusService:
    return BookingStatusService(db)


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.notifications

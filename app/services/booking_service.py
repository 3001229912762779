from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from sqlalchemy import Date, func, or_, select

from app.core.errors import NotFoundError, ValidationError
from app.core.logger import logger
from app.models.db_models import SQL_INTEGER_MAX, STATUS_COMPLETED, STATUS_PENDING, Booking
from app.services.db_service import Database

REQUIRED_FIELDS = ("first_name", "email", "phone_number", "service_type", "booking_date")
OPTIONAL_FIELDS = ("last_name", "address", "message")
SEARCH_FIELDS = ("first_name", "last_name", "email", "phone_number")

# Filterable names -> column expressions. Status and date go through the
# model's effective-value accessors so NULLs are coalesced the same way everywhere.
FILTER_COLUMNS = {
    "first_name": Booking.first_name,
    "last_name": Booking.last_name,
    "email": Booking.email,
    "phone_number": Booking.phone_number,
    "service_type": Booking.service_type,
    "status": Booking.effective_status,
    "date": Booking.effective_date,
}


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


OPERATORS = {
    "eq": lambda column, value: column == value,
    "icontains": lambda column, value: column.ilike(f"%{escape_like(value)}%", escape="\\"),
    "on_day": lambda column, value: func.date(column, type_=Date) == value,
}


@dataclass(frozen=True)
class FilterPredicate:
    """
    One declarative filter: `field` is a filterable name (or a tuple of names,
    ORed together), `operator` a key of OPERATORS, `value` the raw input.
    Values always end up as bound parameters.
    """
    field: Union[str, Tuple[str, ...]]
    operator: str
    value: Any

    @property
    def is_set(self) -> bool:
        return self.value is not None and self.value != ""

    def to_clause(self):
        build = OPERATORS[self.operator]
        fields = self.field if isinstance(self.field, tuple) else (self.field,)
        clauses = [build(FILTER_COLUMNS[name], self.value) for name in fields]
        return clauses[0] if len(clauses) == 1 else or_(*clauses)


def compile_predicates(predicates: Sequence[FilterPredicate]) -> list:
    """Unset predicates are dropped; the rest are ANDed by the caller's where()."""
    return [predicate.to_clause() for predicate in predicates if predicate.is_set]


def parse_booking_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Accepts a date, an ISO date ('2024-06-01') or an ISO datetime
    ('2024-06-01T10:00'); the latter is truncated to its calendar day.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        pass
    try:
        return datetime.fromisoformat(value).date()
    except (TypeError, ValueError):
        raise ValidationError("Invalid booking date.")


def parse_limit(value: Union[int, str, None]) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid limit.")
    if limit < 0 or limit > SQL_INTEGER_MAX:
        raise ValidationError("Invalid limit.")
    return limit


class BookingQueryService:
    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def build_filters(
        search: Optional[str] = None,
        service_type: Optional[str] = None,
        status: Optional[str] = None,
        on_date: Optional[date] = None,
    ) -> List[FilterPredicate]:
        return [
            FilterPredicate(SEARCH_FIELDS, "icontains", search),
            FilterPredicate("service_type", "eq", service_type),
            FilterPredicate("status", "eq", status),
            FilterPredicate("date", "on_day", on_date),
        ]

    def list_bookings(
        self,
        search: Optional[str] = None,
        service_type: Optional[str] = None,
        status: Optional[str] = None,
        on_date: Union[str, date, None] = None,
        limit: Union[int, str, None] = None,
    ) -> List[Booking]:
        """
        Bookings matching every given filter, newest effective date first,
        ties broken by booking_id descending.
        """
        try:
            day = parse_booking_date(on_date)
        except ValidationError:
            raise ValidationError("Invalid date filter.")
        row_limit = parse_limit(limit)

        clauses = compile_predicates(self.build_filters(search, service_type, status, day))
        query = select(Booking)
        if clauses:
            query = query.where(*clauses)
        query = query.order_by(Booking.effective_date.desc(), Booking.booking_id.desc())
        if row_limit is not None:
            query = query.limit(row_limit)

        with self.db.session() as session:
            return list(session.scalars(query).all())

    def get_booking(self, booking_id: int) -> Booking:
        if not 0 < booking_id <= SQL_INTEGER_MAX:
            raise NotFoundError("Booking not found.")
        with self.db.session() as session:
            booking = session.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found.")
        return booking

    def dashboard_summary(self) -> Dict[str, int]:
        # Three independent counts; pending includes rows whose status is still NULL.
        total_query = select(func.count()).select_from(Booking)
        with self.db.session() as session:
            total = session.scalar(total_query)
            pending = session.scalar(total_query.where(Booking.effective_status == STATUS_PENDING))
            completed = session.scalar(total_query.where(Booking.effective_status == STATUS_COMPLETED))

        return {
            "totalBookings": total or 0,
            "pendingBookings": pending or 0,
            "completedBookings": completed or 0,
        }

    def create_booking(self, fields: Dict[str, Any]) -> Booking:
        """
        Persists a new booking with no explicit status (read back as Pending).
        The row is committed before this returns.
        """
        if any(not fields.get(name) for name in REQUIRED_FIELDS):
            raise ValidationError("Missing required booking information.")

        booking = Booking(
            first_name=fields["first_name"],
            email=fields["email"],
            phone_number=fields["phone_number"],
            service_type=fields["service_type"],
            booking_date=parse_booking_date(fields["booking_date"]),
            status=None,
            **{name: fields.get(name) for name in OPTIONAL_FIELDS},
        )

        with self.db.session() as session:
            session.add(booking)
            session.commit()

        logger.info(f"🆕 Booking {booking.booking_id} created: {booking.service_type} on {booking.booking_date}")
        return booking

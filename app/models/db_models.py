from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text, func
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


STATUS_PENDING = "Pending"
STATUS_IN_PROGRESS = "In Progress"
STATUS_COMPLETED = "Completed"
STATUS_CANCELLED = "Cancelled"

BOOKING_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED)

# Largest value a signed 64-bit INTEGER column can hold
SQL_INTEGER_MAX = 2**63 - 1


class Booking(Base):
    __tablename__ = "bookings"

    booking_id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=False)
    address = Column(String(255), nullable=True)
    service_type = Column(String(100), nullable=False, index=True)
    message = Column(Text, nullable=True)
    booking_date = Column(Date, nullable=True)
    # NULL until an admin sets it; read paths coalesce to Pending
    status = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    @hybrid_property
    def effective_status(self):
        return self.status if self.status is not None else STATUS_PENDING

    @effective_status.expression
    def effective_status(cls):
        return func.coalesce(cls.status, STATUS_PENDING)

    @hybrid_property
    def effective_date(self):
        return self.booking_date if self.booking_date is not None else self.created_at

    @effective_date.expression
    def effective_date(cls):
        return func.coalesce(cls.booking_date, cls.created_at)

    def __repr__(self) -> str:
        return f"<Booking(id={self.booking_id}, service={self.service_type}, status={self.effective_status})>"


class Admin(Base):
    __tablename__ = "admins"

    admin_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)


class SessionRecord(Base):
    __tablename__ = "sessions"

    session_id = Column(String(128), primary_key=True)
    is_admin = Column(Boolean, nullable=False, default=False)
    user_id = Column(Integer, nullable=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

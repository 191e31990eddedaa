from sqlalchemy import Column, DateTime, String, Text
from datetime import datetime
import pytz

IST = pytz.timezone('Asia/Kolkata')


def now_ist():
    return datetime.now(IST)


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info."""
    # DateTime(timezone=True) ensures the timezone info is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=now_ist)
    updated_at = Column(DateTime(timezone=True), onupdate=now_ist)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)


class VoidMixin:
    """Mixin for records that are voided instead of deleted.

    Posted financial records are never removed; voiding keeps the row and its
    children for audit and replay.
    """
    voided_at = Column(DateTime(timezone=True), nullable=True)
    voided_by = Column(String, nullable=True)
    void_reason = Column(Text, nullable=True)

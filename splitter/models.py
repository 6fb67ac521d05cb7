"""SQLAlchemy models."""
from sqlalchemy import BigInteger, Column, Integer, String, Text

from splitter.database import Base
from splitter.schemas import DEFAULT_BASE_CURRENCY


class SharedSession(Base):
    """The single "current session" every connected device syncs against."""

    __tablename__ = "shared_sessions"

    id = Column(Integer, primary_key=True, index=True)
    base_currency = Column(String(16), nullable=False, default=DEFAULT_BASE_CURRENCY)
    people_json = Column(Text, nullable=False, default="[]")
    bills_json = Column(Text, nullable=False, default="[]")
    last_updated = Column(BigInteger, nullable=False)

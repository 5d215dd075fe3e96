"""Pact (hosted event) ORM model."""
import uuid
import enum
from sqlalchemy import Column, String, Text, Date, Time, Boolean, Integer, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from planpact.database import Base


class PactStatus(str, enum.Enum):
    active = "active"
    cancelled = "cancelled"


class Pact(Base):
    __tablename__ = "pacts"

    pact_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    host_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(Date, nullable=False, index=True)
    event_time = Column(Time, nullable=True)
    location = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    rsvp_deadline = Column(Date, nullable=True)
    send_reminders = Column(Boolean, nullable=False, default=True)
    allow_plus_ones = Column(Boolean, nullable=False, default=False)
    max_attendees = Column(Integer, nullable=True)
    status = Column(SAEnum(PactStatus), nullable=False, default=PactStatus.active)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    guests = relationship(
        "Guest",
        back_populates="pact",
        cascade="all, delete-orphan",
        order_by="Guest.name",
    )

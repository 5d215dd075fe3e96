"""Guest and RSVP ORM models."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from planpact.database import Base


class RSVPStatus(str, enum.Enum):
    pending = "pending"
    attending = "attending"  # host's own row
    confirmed = "confirmed"
    declined = "declined"


class Guest(Base):
    __tablename__ = "guests"
    __table_args__ = (UniqueConstraint("pact_id", "email", name="uq_guests_pact_email"),)

    guest_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    pact_id = Column(String(36), ForeignKey("pacts.pact_id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=True)
    invited_at = Column(DateTime(timezone=True), server_default=func.now())

    pact = relationship("Pact", back_populates="guests")
    rsvp = relationship("RSVP", back_populates="guest", uselist=False, cascade="all, delete-orphan")


class RSVP(Base):
    __tablename__ = "rsvps"

    rsvp_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    guest_id = Column(
        String(36), ForeignKey("guests.guest_id", ondelete="CASCADE"), nullable=False, unique=True
    )
    pact_id = Column(String(36), ForeignKey("pacts.pact_id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SAEnum(RSVPStatus), nullable=False, default=RSVPStatus.pending)
    plus_ones = Column(Integer, nullable=False, default=0)
    message = Column(Text, nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    guest = relationship("Guest", back_populates="rsvp")

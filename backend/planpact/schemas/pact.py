"""Pydantic schemas for pacts, guests and RSVPs.

Request bodies accept snake_case names and the camelCase names the static
pages send (``date``, ``rsvpDeadline``, ``plusOnes`` ...).
"""
from __future__ import annotations
from datetime import date, datetime, time
from typing import Optional
from pydantic import AliasChoices, BaseModel, Field

from planpact.models.guest import RSVPStatus
from planpact.models.pact import PactStatus


class GuestInvite(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    email: str = Field(..., max_length=255)


class PactFields(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    event_date: Optional[date] = Field(None, validation_alias=AliasChoices("event_date", "date"))
    event_time: Optional[time] = Field(None, validation_alias=AliasChoices("event_time", "time"))
    location: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    rsvp_deadline: Optional[date] = Field(
        None, validation_alias=AliasChoices("rsvp_deadline", "rsvpDeadline")
    )
    max_attendees: Optional[int] = Field(
        None, ge=1, validation_alias=AliasChoices("max_attendees", "maxAttendees")
    )


class PactCreate(PactFields):
    send_reminders: bool = Field(True, validation_alias=AliasChoices("send_reminders", "sendReminders"))
    allow_plus_ones: bool = Field(False, validation_alias=AliasChoices("allow_plus_ones", "allowPlusOnes"))
    guests: list[GuestInvite] = []


class PactUpdate(PactFields):
    send_reminders: Optional[bool] = Field(
        None, validation_alias=AliasChoices("send_reminders", "sendReminders")
    )
    allow_plus_ones: Optional[bool] = Field(
        None, validation_alias=AliasChoices("allow_plus_ones", "allowPlusOnes")
    )
    status: Optional[str] = None


class GuestsAdd(BaseModel):
    guests: list[GuestInvite]


class GuestOut(BaseModel):
    guest_id: str
    name: str
    email: str
    user_id: Optional[str] = None
    invited_at: Optional[datetime] = None
    status: RSVPStatus = RSVPStatus.pending
    plus_ones: int = 0
    message: Optional[str] = None
    responded_at: Optional[datetime] = None


class RSVPStats(BaseModel):
    total_invited: int
    confirmed: int
    declined: int
    pending: int
    total_attendees: int


class PactOut(BaseModel):
    pact_id: str
    host_id: str
    title: str
    description: Optional[str] = None
    event_date: date
    event_time: Optional[time] = None
    location: Optional[str] = None
    address: Optional[str] = None
    rsvp_deadline: Optional[date] = None
    send_reminders: bool
    allow_plus_ones: bool
    max_attendees: Optional[int] = None
    status: PactStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PactDetailOut(PactOut):
    guests: list[GuestOut] = []
    stats: Optional[RSVPStats] = None


class RSVPRequest(BaseModel):
    status: Optional[str] = Field(None, validation_alias=AliasChoices("status", "response"))
    plus_ones: int = Field(0, validation_alias=AliasChoices("plus_ones", "plusOnes"))
    message: Optional[str] = Field(None, max_length=1000)


class RSVPOut(BaseModel):
    rsvp_id: str
    guest_id: str
    pact_id: str
    status: RSVPStatus
    plus_ones: int
    message: Optional[str] = None
    responded_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RSVPListItem(BaseModel):
    rsvp_id: str
    guest_id: str
    guest_name: str
    guest_email: str
    status: RSVPStatus
    plus_ones: int
    message: Optional[str] = None
    responded_at: Optional[datetime] = None


class MessageOut(BaseModel):
    message: str

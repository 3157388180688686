"""Pydantic models for the Venue Booking API."""

import datetime as dt
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, computed_field, field_validator

from venuebook.slots import add_hours_to_label

VenueKind = Literal["pool", "tennis", "pickleball"]
VenueStatus = Literal["Active", "Inactive", "Maintenance"]
BookingStatus = Literal["Confirmed", "Cancelled"]
Role = Literal["admin", "superadmin"]


@dataclass(frozen=True)
class OwnerId:
    """
    Ownership key of a venue.

    Venues reference their owner by email only (there is no foreign key to
    the users table), so the email is normalised once here and compared by
    value everywhere else.
    """

    email: str

    @classmethod
    def of(cls, email: str) -> "OwnerId":
        return cls(email.strip().lower())

    def __str__(self) -> str:
        return self.email


# ── Venues ────────────────────────────────────────────────────────────────


class Owner(BaseModel):
    """Contact details of the admin who owns a venue."""
    name: str = Field(..., min_length=1, description="Owner name")
    email: EmailStr = Field(..., description="Owner email, the ownership key")
    phone: str = Field(..., min_length=1, description="Owner phone")

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, value: str) -> str:
        return OwnerId.of(value).email

    @property
    def owner_id(self) -> OwnerId:
        return OwnerId.of(self.email)


class ShareLink(BaseModel):
    """Browse-and-book link state."""
    token: str | None = None
    expiry: dt.datetime | None = None
    active: bool = False


class BookingLink(ShareLink):
    """Direct booking link state, with an optional override hourly price."""
    price: float | None = None


class VenueBase(BaseModel):
    name: str = Field(..., min_length=1, description="Venue name")
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, description="Hourly price")
    capacity: int = Field(..., ge=1)
    status: VenueStatus = "Active"
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list, description="Paths under the uploads directory")
    attributes: dict[str, str] = Field(
        default_factory=dict,
        description="Kind-specific fields, e.g. surface or size",
    )


class VenueCreate(VenueBase):
    """Body for creating a venue. Admins get their own contact details as owner."""
    owner: Owner | None = None


class VenueUpdate(BaseModel):
    """Partial update. Only editable fields are accepted."""
    name: str | None = Field(None, min_length=1)
    description: str | None = Field(None, min_length=1)
    location: str | None = Field(None, min_length=1)
    price: float | None = Field(None, ge=0)
    capacity: int | None = Field(None, ge=1)
    status: VenueStatus | None = None
    owner: Owner | None = None
    amenities: list[str] | None = None
    images: list[str] | None = None
    attributes: dict[str, str] | None = None


class Venue(VenueBase):
    id: str
    kind: VenueKind
    owner: Owner
    rating: float = Field(0, ge=0, le=5)
    share_link: ShareLink = Field(default_factory=ShareLink)
    booking_link: BookingLink = Field(default_factory=BookingLink)
    created_at: dt.datetime
    updated_at: dt.datetime


class VenueStats(BaseModel):
    """Booking aggregates, computed from bookings at read time."""
    total_bookings: int = 0
    confirmed_bookings: int = 0
    cancelled_bookings: int = 0
    total_revenue: float = 0
    recent_bookings: list["Booking"] = Field(default_factory=list)


class VenueDetail(Venue):
    stats: VenueStats


class VenueView(Venue):
    """
    A venue as returned by the public venue routes.

    Links and booking statistics are only filled in for callers who may
    change the venue; everyone else gets ``null`` for them.
    """
    share_link: ShareLink | None = None
    booking_link: BookingLink | None = None
    stats: VenueStats | None = None


class PublicVenue(BaseModel):
    """Venue fields that link holders are allowed to see."""
    id: str
    kind: VenueKind
    name: str
    description: str
    location: str
    price: float
    capacity: int
    amenities: list[str]
    images: list[str]
    rating: float
    attributes: dict[str, str]
    link_expiry: dt.datetime | None = None


class VenueDeleteResponse(BaseModel):
    message: str
    deleted_bookings: int = 0
    deleted_images: int | None = None


# ── Links ─────────────────────────────────────────────────────────────────


class ShareLinkRequest(BaseModel):
    expiry_days: int | None = Field(None, ge=1, le=365, description="Days until the link expires")


class BookingLinkRequest(BaseModel):
    expiry_hours: int | None = Field(None, ge=1, le=24 * 365, description="Hours until the link expires")
    price: float | None = Field(None, ge=0, description="Override hourly price for link bookings")


class ShareLinkResponse(BaseModel):
    share_url: str
    token: str
    expiry: dt.datetime
    expiry_days: int


class BookingLinkResponse(BaseModel):
    booking_url: str
    token: str
    expiry: dt.datetime
    expiry_hours: int
    price: float | None = None


class LinkValidateRequest(BaseModel):
    venue_id: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)


class LinkValidateResponse(BaseModel):
    success: bool = True
    venue: PublicVenue


# ── Availability ──────────────────────────────────────────────────────────


class Availability(BaseModel):
    venue_id: str
    date: dt.date
    available_slots: list[str]
    booked_slots: list[str]
    all_slots: list[str]


# ── Bookings ──────────────────────────────────────────────────────────────


class BookingCreate(BaseModel):
    """
    Booking submission.

    Required fields are optional here on purpose: the booking writer
    reports every missing one in a single error instead of stopping at
    the first.
    """
    pool_id: str | None = None
    tennis_court_id: str | None = None
    pickleball_court_id: str | None = None
    customer_name: str | None = None
    customer_email: EmailStr | None = None
    customer_phone: str | None = None
    date: dt.date | None = None
    time: str | None = None
    duration: int = Field(1, ge=1, le=8, description="Hours")
    guests: int | None = Field(None, ge=1)
    notes: str | None = None
    share_token: str | None = Field(None, description="Token of a share link the booking came through")
    booking_token: str | None = Field(None, description="Token of a booking link the booking came through")


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class Booking(BaseModel):
    id: str
    venue_kind: VenueKind
    venue_id: str
    venue_name: str | None = None
    customer_name: str
    customer_email: str
    customer_phone: str
    date: dt.date
    time: str
    duration: int
    total_price: float
    guests: int | None = None
    notes: str | None = None
    status: BookingStatus
    created_by: Literal["customer", "admin"] = "customer"
    admin_id: str | None = None
    from_share_link: bool = False
    from_booking_link: bool = False
    created_at: dt.datetime
    updated_at: dt.datetime

    @computed_field
    @property
    def end_time(self) -> str | None:
        return add_hours_to_label(self.time, self.duration)


# ── Users & auth ──────────────────────────────────────────────────────────


class UserInfo(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    phone: str | None = None
    last_login: dt.datetime | None = None
    created_at: dt.datetime


class SessionUser(BaseModel):
    """Request-scoped identity decoded from the session cookie."""
    id: str
    email: str
    role: Role

    @property
    def owner_id(self) -> OwnerId:
        return OwnerId.of(self.email)

    @property
    def is_superadmin(self) -> bool:
        return self.role == "superadmin"


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    phone: str | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class AuthResponse(BaseModel):
    message: str
    user: UserInfo


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=72)
    new_password: str = Field(..., min_length=1, max_length=72)
    confirm_password: str = Field(..., min_length=1, max_length=72)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class PasswordResetTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=72)


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: dt.datetime


# ── Superadmin ────────────────────────────────────────────────────────────


class AdminVenueSummary(BaseModel):
    id: str
    kind: VenueKind
    name: str
    location: str
    status: VenueStatus
    total_bookings: int = 0
    created_at: dt.datetime


class AdminSummary(BaseModel):
    email: str
    name: str
    phone: str
    total_venues: int
    total_bookings: int
    venues: list[AdminVenueSummary]
    created_at: dt.datetime | None = None
    last_active: dt.datetime | None = None


class BookingStats(BaseModel):
    confirmed: int = 0
    cancelled: int = 0


class AdminDetails(AdminSummary):
    booking_stats: BookingStats
    recent_bookings: list[Booking]


class DeletionSummary(BaseModel):
    """Rows removed by a cascade delete, per collection."""
    email: str
    bookings: int
    venues: dict[str, int]
    users: int


VenueStats.model_rebuild()
VenueDetail.model_rebuild()
VenueView.model_rebuild()

"""
Booking writer and booking queries.

Every booking is stored as ``Confirmed``; there is no approval step.
The writer checks that the required fields are present and that the
venue exists.  It does not check that ``time`` is one of the venue's
slot labels, nor that the slot is still free: two submissions for the
same slot can both succeed.
"""

from __future__ import annotations

import logging
from datetime import date

from venuebook import db
from venuebook.dependencies import can_mutate
from venuebook.errors import NotAuthenticated, NotFound, ValidationFailed
from venuebook.models import Booking, BookingCreate, OwnerId, SessionUser, Venue
from venuebook.services.email import send_booking_emails
from venuebook.services.links import booking_link_price, check_link
from venuebook.services.registry import VenueKindSpec, registry
from venuebook.slots import normalise_label

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("customer_name", "customer_email", "customer_phone", "date", "time")


def _venue_refs(payload: BookingCreate) -> list[tuple[VenueKindSpec, str]]:
    """(kind, venue id) for every venue reference set on the payload."""
    refs = []
    for spec in registry.list_kinds():
        value = getattr(payload, spec.booking_ref)
        if value:
            refs.append((spec, value))
    return refs


def _ref_field_names() -> list[str]:
    return [spec.booking_ref for spec in registry.list_kinds()]


def missing_fields(payload: BookingCreate) -> list[str]:
    """Names of the required fields that are absent or blank."""
    missing = []
    if not _venue_refs(payload):
        missing.append(" | ".join(_ref_field_names()))
    for name in _REQUIRED_FIELDS:
        value = getattr(payload, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    return missing


async def create_booking(payload: BookingCreate, *, user: SessionUser | None = None) -> Booking:
    """Validate and persist a booking submission."""
    missing = missing_fields(payload)
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}", fields=missing)

    refs = _venue_refs(payload)
    if len(refs) > 1:
        raise ValidationFailed(
            f"Provide exactly one of {', '.join(_ref_field_names())}",
            fields=[spec.booking_ref for spec, _ in refs],
        )
    spec, venue_id = refs[0]

    venue = await db.get_venue(venue_id, kind=spec.kind)
    if venue is None:
        raise NotFound(spec.not_found_message)

    hourly_rate = venue.price
    from_share_link = from_booking_link = False
    if payload.booking_token:
        check_link(venue.booking_link, payload.booking_token)
        hourly_rate = booking_link_price(venue)
        from_booking_link = True
    elif payload.share_token:
        check_link(venue.share_link, payload.share_token)
        expiry = venue.share_link.expiry
        if expiry is not None and payload.date > expiry.date():
            raise ValidationFailed(
                f"Share link only allows bookings up to {expiry.date().isoformat()}",
                fields=["date"],
            )
        from_share_link = True

    manual = user is not None and can_mutate(user, venue)

    booking = await db.create_booking(
        spec.kind,
        venue.id,
        customer_name=payload.customer_name.strip(),
        customer_email=payload.customer_email,
        customer_phone=payload.customer_phone.strip(),
        on_date=payload.date,
        time=normalise_label(payload.time),
        duration=payload.duration,
        total_price=hourly_rate * payload.duration,
        status="Confirmed",
        guests=payload.guests,
        notes=payload.notes.strip() if payload.notes else None,
        created_by="admin" if manual else "customer",
        admin_id=user.id if manual else None,
        from_share_link=from_share_link,
        from_booking_link=from_booking_link,
    )
    logger.info(
        "Booking %s created for %s %s on %s at %s (%s)",
        booking.id, spec.kind, venue.id, booking.date, booking.time, booking.created_by,
    )

    # The booking is already stored; a mail outage must not turn it into an error
    try:
        await send_booking_emails(venue, booking)
    except Exception:
        logger.exception("Booking %s saved but notification emails failed", booking.id)

    return booking


async def list_bookings(
    user: SessionUser,
    *,
    owner_email: str | None = None,
    venue_refs: dict[str, str] | None = None,
    status: str | None = None,
    customer_email: str | None = None,
    on_date: date | None = None,
) -> list[Booking]:
    """
    Bookings visible to ``user``, filtered.

    Admins only see bookings of venues they own; asking for another
    owner's bookings is refused.  ``venue_refs`` maps booking reference
    fields (``pool_id`` ...) to venue ids.
    """
    owner = OwnerId.of(owner_email) if owner_email else None
    if not user.is_superadmin:
        if owner is not None and owner != user.owner_id:
            raise NotAuthenticated()
        owner = user.owner_id

    venue_ids: list[str] | None = None
    if owner is not None:
        venue_ids = [venue.id for venue in await db.list_venues(owner=owner)]

    venue_kind = None
    for field_name, venue_id in (venue_refs or {}).items():
        spec = registry.by_booking_ref(field_name)
        if spec is None:
            continue
        venue_kind = spec.kind
        venue_ids = [venue_id] if venue_ids is None else [v for v in venue_ids if v == venue_id]

    return await db.list_bookings(
        venue_ids=venue_ids,
        venue_kind=venue_kind,
        status=status,
        customer_email=customer_email,
        on_date=on_date,
    )


async def _booking_for_owner(user: SessionUser, booking_id: str) -> tuple[Booking, Venue | None]:
    booking = await db.get_booking(booking_id)
    if booking is None:
        raise NotFound("Booking not found")

    venue = await db.get_venue(booking.venue_id)
    if user.is_superadmin:
        return booking, venue
    if venue is None or not can_mutate(user, venue):
        raise NotAuthenticated()
    return booking, venue


async def get_booking(user: SessionUser, booking_id: str) -> Booking:
    booking, _ = await _booking_for_owner(user, booking_id)
    return booking


async def update_status(user: SessionUser, booking_id: str, status: str) -> Booking:
    """Confirm or cancel a booking. Cancelling frees its slot."""
    await _booking_for_owner(user, booking_id)
    booking = await db.update_booking_status(booking_id, status)
    logger.info("Booking %s set to %s by %s", booking_id, status, user.email)
    return booking  # type: ignore[return-value]

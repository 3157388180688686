"""
Share and booking links.

Each venue carries two independent links:

* **share link** – lets any holder view the venue and book dates up to
  the link's expiry date;
* **booking link** – lets any holder book directly, optionally at an
  override hourly price.

Issuing a link replaces the previous token.  Expiry is only checked when
a link is validated; nothing flips the stored ``active`` flag when the
expiry passes.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

from venuebook import db
from venuebook.config import BOOKING_LINK_DEFAULT_HOURS, PUBLIC_BASE_URL, SHARE_LINK_DEFAULT_DAYS
from venuebook.errors import LinkExpired, LinkInvalid, NotFound
from venuebook.models import (
    BookingLinkResponse,
    PublicVenue,
    ShareLink,
    ShareLinkResponse,
    Venue,
)
from venuebook.services.registry import VenueKindSpec, registry

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_token() -> str:
    return secrets.token_hex(32)


def share_url(venue: Venue, token: str) -> str:
    spec = registry.get(venue.kind)
    return f"{PUBLIC_BASE_URL}/{spec.public_segment}/{venue.id}/share/{token}"


def booking_url(venue: Venue, token: str) -> str:
    spec = registry.get(venue.kind)
    return f"{PUBLIC_BASE_URL}/{spec.public_segment}/{venue.id}/book?token={token}"


def check_link(link: ShareLink, token: str | None) -> None:
    """
    Raise unless ``token`` opens ``link`` right now.

    A mismatched or inactive link is ``LinkInvalid``; a matching active
    link past its expiry is ``LinkExpired``.
    """
    if not link.active or not link.token or not token:
        raise LinkInvalid()
    if not secrets.compare_digest(link.token, token):
        raise LinkInvalid()
    if link.expiry is not None and _now() > link.expiry:
        raise LinkExpired()


def to_public(venue: Venue, *, price: float | None = None, link_expiry: datetime | None = None) -> PublicVenue:
    return PublicVenue(
        id=venue.id,
        kind=venue.kind,
        name=venue.name,
        description=venue.description,
        location=venue.location,
        price=venue.price if price is None else price,
        capacity=venue.capacity,
        amenities=venue.amenities,
        images=venue.images,
        rating=venue.rating,
        attributes=venue.attributes,
        link_expiry=link_expiry,
    )


# ── Share links ───────────────────────────────────────────────────────────


async def issue_share_link(venue: Venue, expiry_days: int | None = None) -> ShareLinkResponse:
    days = expiry_days or SHARE_LINK_DEFAULT_DAYS
    token = _new_token()
    expiry = _now() + timedelta(days=days)

    await db.set_share_link(venue.id, token=token, expiry=expiry, active=True)
    logger.info("Share link issued for %s %s (expires %s)", venue.kind, venue.id, expiry.isoformat())

    return ShareLinkResponse(
        share_url=share_url(venue, token),
        token=token,
        expiry=expiry,
        expiry_days=days,
    )


async def revoke_share_link(venue: Venue) -> None:
    await db.set_share_link(venue.id, token=None, expiry=None, active=False)
    logger.info("Share link revoked for %s %s", venue.kind, venue.id)


async def validate_share_link(spec: VenueKindSpec, venue_id: str, token: str) -> Venue:
    """Return the venue if ``token`` is its current, unexpired share token."""
    venue = await db.get_venue(venue_id, kind=spec.kind)
    if venue is None:
        raise NotFound(spec.not_found_message)
    try:
        check_link(venue.share_link, token)
    except (LinkInvalid, LinkExpired) as exc:
        logger.warning("Share link rejected for %s %s: %s", spec.kind, venue_id, exc.message)
        raise
    return venue


# ── Booking links ─────────────────────────────────────────────────────────


async def issue_booking_link(
    venue: Venue,
    expiry_hours: int | None = None,
    price: float | None = None,
) -> BookingLinkResponse:
    hours = expiry_hours or BOOKING_LINK_DEFAULT_HOURS
    token = _new_token()
    expiry = _now() + timedelta(hours=hours)

    await db.set_booking_link(venue.id, token=token, expiry=expiry, active=True, price=price)
    logger.info(
        "Booking link issued for %s %s (expires %s, price %s)",
        venue.kind, venue.id, expiry.isoformat(), price,
    )

    return BookingLinkResponse(
        booking_url=booking_url(venue, token),
        token=token,
        expiry=expiry,
        expiry_hours=hours,
        price=price,
    )


async def revoke_booking_link(venue: Venue) -> None:
    await db.set_booking_link(venue.id, token=None, expiry=None, active=False, price=None)
    logger.info("Booking link revoked for %s %s", venue.kind, venue.id)


async def validate_booking_link(spec: VenueKindSpec, venue_id: str, token: str) -> Venue:
    """Return the venue if ``token`` is its current, unexpired booking token."""
    venue = await db.get_venue(venue_id, kind=spec.kind)
    if venue is None:
        raise NotFound(spec.not_found_message)
    try:
        check_link(venue.booking_link, token)
    except (LinkInvalid, LinkExpired) as exc:
        logger.warning("Booking link rejected for %s %s: %s", spec.kind, venue_id, exc.message)
        raise
    return venue


def booking_link_price(venue: Venue) -> float:
    """Hourly rate for bookings made through the venue's booking link."""
    if venue.booking_link.price is not None:
        return venue.booking_link.price
    return venue.price

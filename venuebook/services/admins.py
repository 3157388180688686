"""
Superadmin views over admins, and the cascade delete.

An "admin" is identified by email: the owner email on venues, plus any
admin user row.  Either may exist without the other.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from venuebook import db
from venuebook.errors import NotFound, ValidationFailed
from venuebook.models import (
    AdminDetails,
    AdminSummary,
    AdminVenueSummary,
    Booking,
    BookingStats,
    DeletionSummary,
    OwnerId,
    Venue,
)
from venuebook.services.registry import registry

logger = logging.getLogger(__name__)

_RECENT_BOOKINGS = 10


def _summarise(
    owner: OwnerId,
    venues: list[Venue],
    bookings: list[Booking],
    user_row=None,
) -> AdminSummary:
    per_venue: dict[str, int] = defaultdict(int)
    for booking in bookings:
        per_venue[booking.venue_id] += 1

    first = min(venues, key=lambda v: v.created_at) if venues else None
    created_at = first.created_at if first else None
    last_active = max((v.updated_at for v in venues), default=None)
    if user_row is not None:
        created_at = created_at or user_row["created_at"]
        last_active = last_active or user_row["last_login"]

    name = first.owner.name if first else (user_row["name"] if user_row is not None else "Unknown")
    phone = first.owner.phone if first else None
    if not phone and user_row is not None:
        phone = user_row["phone"]

    return AdminSummary(
        email=owner.email,
        name=name,
        phone=phone or "N/A",
        total_venues=len(venues),
        total_bookings=len(bookings),
        venues=[
            AdminVenueSummary(
                id=v.id,
                kind=v.kind,
                name=v.name,
                location=v.location,
                status=v.status,
                total_bookings=per_venue[v.id],
                created_at=v.created_at,
            )
            for v in venues
        ],
        created_at=created_at,
        last_active=last_active,
    )


async def list_admins() -> list[AdminSummary]:
    """Every venue owner and every admin user, newest first."""
    by_owner: dict[OwnerId, list[Venue]] = defaultdict(list)
    for venue in await db.list_venues():
        by_owner[venue.owner.owner_id].append(venue)

    users = {OwnerId.of(row["email"]): row for row in await db.list_users(role="admin")}

    summaries = []
    for owner in by_owner.keys() | users.keys():
        venues = by_owner.get(owner, [])
        bookings = await db.list_bookings(venue_ids=[v.id for v in venues])
        summaries.append(_summarise(owner, venues, bookings, users.get(owner)))

    summaries.sort(key=lambda s: s.created_at.isoformat() if s.created_at else "", reverse=True)
    return summaries


async def admin_details(email: str) -> AdminDetails:
    owner = OwnerId.of(email)
    venues = await db.list_venues(owner=owner)
    user_row = await db.get_user_by_email(owner.email)
    if not venues and user_row is None:
        raise NotFound("Admin not found")

    bookings = await db.list_bookings(venue_ids=[v.id for v in venues])
    summary = _summarise(owner, venues, bookings, user_row)
    recent = sorted(bookings, key=lambda b: b.created_at, reverse=True)[:_RECENT_BOOKINGS]
    confirmed = sum(1 for b in bookings if b.status == "Confirmed")

    return AdminDetails(
        **summary.model_dump(),
        booking_stats=BookingStats(confirmed=confirmed, cancelled=len(bookings) - confirmed),
        recent_bookings=recent,
    )


async def delete_admin(email: str) -> DeletionSummary:
    """
    Delete an admin's bookings, then venues, then user row.

    Each step commits on its own; if a later step fails the earlier
    deletions stay applied and the error propagates.
    """
    owner = OwnerId.of(email)
    user_row = await db.get_user_by_email(owner.email)
    if user_row is not None and user_row["role"] == "superadmin":
        raise ValidationFailed("Superadmin accounts cannot be deleted")

    venues = await db.list_venues(owner=owner)
    if not venues and user_row is None:
        raise NotFound("Admin not found")

    deleted_bookings = await db.delete_bookings_for_venues([v.id for v in venues])
    deleted_venues = await db.delete_venues_by_owner(owner)
    deleted_users = await db.delete_user_by_email(owner.email)

    logger.info(
        "Admin %s deleted: %d bookings, %s venues, %d users",
        owner.email, deleted_bookings, deleted_venues, deleted_users,
    )
    return DeletionSummary(
        email=owner.email,
        bookings=deleted_bookings,
        venues={spec.kind: deleted_venues.get(spec.kind, 0) for spec in registry.list_kinds()},
        users=deleted_users,
    )

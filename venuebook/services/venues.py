"""
Venue management: create, read with booking stats, update and delete.

Ownership is the owner email stored on the venue.  Admins create venues
for themselves; the superadmin may create and edit venues for anyone.
"""

from __future__ import annotations

import logging

from venuebook import db
from venuebook.dependencies import can_mutate
from venuebook.errors import NotAuthenticated, NotFound, ValidationFailed
from venuebook.models import (
    Owner,
    SessionUser,
    Venue,
    VenueCreate,
    VenueDeleteResponse,
    VenueDetail,
    VenueStats,
    VenueUpdate,
    VenueView,
)
from venuebook.services.images import purge_images
from venuebook.services.registry import VenueKindSpec

logger = logging.getLogger(__name__)

_RECENT_BOOKINGS = 10


def validate_attributes(spec: VenueKindSpec, attributes: dict[str, str]) -> dict[str, str]:
    """Reject unknown, missing or out-of-range kind-specific attributes."""
    unknown = sorted(set(attributes) - set(spec.attributes))
    if unknown:
        raise ValidationFailed(
            f"Unknown {spec.label.lower()} attributes: {', '.join(unknown)}",
            fields=[f"attributes.{key}" for key in unknown],
        )

    missing = [key for key in spec.attributes if not attributes.get(key)]
    if missing:
        raise ValidationFailed(
            f"Missing required fields: {', '.join(f'attributes.{key}' for key in missing)}",
            fields=[f"attributes.{key}" for key in missing],
        )

    for key, value in attributes.items():
        allowed = spec.attributes[key]
        if allowed and value not in allowed:
            raise ValidationFailed(
                f"{key} must be one of: {', '.join(allowed)}",
                fields=[f"attributes.{key}"],
            )
    return attributes


async def _owner_for(user: SessionUser, requested: Owner | None) -> Owner:
    """Owner of a venue created by ``user``."""
    if user.is_superadmin:
        if requested is None:
            raise ValidationFailed("Missing required fields: owner", fields=["owner"])
        return requested

    # Admins always own what they create, whatever the body says
    row = await db.get_user(user.id)
    name = (requested.name if requested else None) or (row["name"] if row else None)
    phone = (requested.phone if requested else None) or (row["phone"] if row else None)
    missing = [f"owner.{key}" for key, value in (("name", name), ("phone", phone)) if not value]
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}", fields=missing)
    return Owner(name=name, email=user.email, phone=phone)


async def get_venue_or_404(spec: VenueKindSpec, venue_id: str) -> Venue:
    venue = await db.get_venue(venue_id, kind=spec.kind)
    if venue is None:
        raise NotFound(spec.not_found_message)
    return venue


async def get_owned_venue(spec: VenueKindSpec, venue_id: str, user: SessionUser) -> Venue:
    """Fetch a venue ``user`` may modify; 404 if missing, 401 if not theirs."""
    venue = await get_venue_or_404(spec, venue_id)
    if not can_mutate(user, venue):
        logger.warning("%s may not modify %s %s", user.email, spec.kind, venue_id)
        raise NotAuthenticated()
    return venue


async def create_venue(spec: VenueKindSpec, body: VenueCreate, user: SessionUser) -> Venue:
    owner = await _owner_for(user, body.owner)
    attributes = validate_attributes(spec, body.attributes)

    venue = await db.create_venue(
        spec.kind,
        name=body.name.strip(),
        description=body.description,
        location=body.location,
        price=body.price,
        capacity=body.capacity,
        owner=owner,
        status=body.status,
        amenities=body.amenities,
        images=body.images,
        attributes=attributes,
    )
    logger.info("%s %s created by %s for %s", spec.label, venue.id, user.email, owner.email)
    return venue


async def venue_stats(venue_id: str) -> VenueStats:
    """Booking aggregates of one venue, computed from its bookings."""
    bookings = await db.list_bookings(venue_ids=[venue_id])
    confirmed = [b for b in bookings if b.status == "Confirmed"]
    recent = sorted(bookings, key=lambda b: b.created_at, reverse=True)[:_RECENT_BOOKINGS]
    return VenueStats(
        total_bookings=len(bookings),
        confirmed_bookings=len(confirmed),
        cancelled_bookings=len(bookings) - len(confirmed),
        total_revenue=sum(b.total_price for b in confirmed),
        recent_bookings=recent,
    )


async def venue_detail(spec: VenueKindSpec, venue_id: str) -> VenueDetail:
    venue = await get_venue_or_404(spec, venue_id)
    stats = await venue_stats(venue.id)
    return VenueDetail(**venue.model_dump(), stats=stats)


async def venue_view(venue: Venue, user: SessionUser | None, with_stats: bool = False) -> VenueView:
    """What ``user`` may see of ``venue``: links and stats only if they can change it."""
    if not can_mutate(user, venue):
        return VenueView(**venue.model_dump(exclude={"share_link", "booking_link"}))
    stats = await venue_stats(venue.id) if with_stats else None
    return VenueView(**venue.model_dump(), stats=stats)


async def update_venue(
    spec: VenueKindSpec,
    venue_id: str,
    changes: VenueCreate | VenueUpdate,
    user: SessionUser,
) -> Venue:
    """
    Apply a full (``VenueCreate``) or partial (``VenueUpdate``) update.

    Admins may not hand a venue over to another owner email.
    """
    venue = await get_owned_venue(spec, venue_id, user)

    partial = isinstance(changes, VenueUpdate)
    if partial:
        fields = changes.model_dump(exclude_unset=True, exclude_none=True)
    else:
        fields = changes.model_dump()

    if "attributes" in fields:
        attributes = fields["attributes"]
        if partial:
            attributes = {**venue.attributes, **attributes}
        fields["attributes"] = validate_attributes(spec, attributes)

    new_owner = getattr(changes, "owner", None)
    if new_owner is not None:
        if not user.is_superadmin and new_owner.owner_id != venue.owner.owner_id:
            raise ValidationFailed("Venues cannot be moved to another owner", fields=["owner.email"])
        fields["owner"] = new_owner
    else:
        fields.pop("owner", None)

    updated = await db.update_venue(venue.id, fields)
    logger.info("%s %s updated by %s (%s)", spec.label, venue.id, user.email, ", ".join(sorted(fields)))
    return updated  # type: ignore[return-value]


async def delete_venue(
    spec: VenueKindSpec,
    venue_id: str,
    user: SessionUser,
    *,
    with_images: bool = False,
) -> VenueDeleteResponse:
    """Delete a venue and its bookings, optionally purging its image files."""
    venue = await get_owned_venue(spec, venue_id, user)

    deleted_images = purge_images(venue.images) if with_images else None
    deleted_bookings = await db.delete_bookings_for_venues([venue.id])
    await db.delete_venue(venue.id)

    logger.info(
        "%s %s deleted by %s (%d bookings, %s images)",
        spec.label, venue.id, user.email, deleted_bookings,
        deleted_images if deleted_images is not None else "no",
    )
    message = f"{spec.label} deleted successfully"
    if with_images:
        message = f"{spec.label} and images deleted successfully"
    return VenueDeleteResponse(
        message=message,
        deleted_bookings=deleted_bookings,
        deleted_images=deleted_images,
    )

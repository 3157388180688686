"""
Venue endpoints, one router per venue kind.

``build_venue_router(spec)`` mounts the same CRUD, link and availability
routes under ``/api/<spec.api_segment>``.
"""

from datetime import date

from fastapi import APIRouter, HTTPException, Query, Request, status

from venuebook import db
from venuebook.dependencies import CurrentUser, OptionalUser
from venuebook.models import (
    Availability,
    BookingLinkRequest,
    BookingLinkResponse,
    LinkValidateRequest,
    LinkValidateResponse,
    MessageResponse,
    OwnerId,
    ShareLinkRequest,
    ShareLinkResponse,
    Venue,
    VenueCreate,
    VenueDeleteResponse,
    VenueStatus,
    VenueUpdate,
    VenueView,
)
from venuebook.rate_limit import PUBLIC, limiter
from venuebook.services import links, venues
from venuebook.services.availability import compute_availability
from venuebook.services.registry import VenueKindSpec


def parse_date_param(value: str | None) -> date:
    """Parse a required ``YYYY-MM-DD`` query parameter or fail with 400."""
    if not value:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date parameter is required",
        )
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format. Use YYYY-MM-DD",
        ) from None


def _scoped_to(spec: VenueKindSpec):
    """Give a route function a per-kind name, so rate limits are counted per kind."""
    def rename(func):
        func.__name__ = f"{func.__name__}_{spec.kind}"
        return func
    return rename


def build_venue_router(spec: VenueKindSpec) -> APIRouter:
    router = APIRouter(prefix=f"/api/{spec.api_segment}", tags=[spec.api_segment])
    op = spec.kind.capitalize()

    # ── Public link validation ────────────────────────────────────────
    # Declared before /{venue_id} routes.

    @router.post(
        "/share/validate",
        response_model=LinkValidateResponse,
        operation_id=f"validate{op}ShareLink",
        summary=f"Validate a {spec.label.lower()} share link",
    )
    @limiter.limit(PUBLIC)
    @_scoped_to(spec)
    async def validate_share_link(request: Request, body: LinkValidateRequest) -> LinkValidateResponse:
        venue = await links.validate_share_link(spec, body.venue_id, body.token)
        return LinkValidateResponse(
            venue=links.to_public(venue, link_expiry=venue.share_link.expiry),
        )

    @router.post(
        "/booking-link/validate",
        response_model=LinkValidateResponse,
        operation_id=f"validate{op}BookingLink",
        summary=f"Validate a {spec.label.lower()} booking link",
    )
    @limiter.limit(PUBLIC)
    @_scoped_to(spec)
    async def validate_booking_link(request: Request, body: LinkValidateRequest) -> LinkValidateResponse:
        venue = await links.validate_booking_link(spec, body.venue_id, body.token)
        return LinkValidateResponse(
            venue=links.to_public(
                venue,
                price=links.booking_link_price(venue),
                link_expiry=venue.booking_link.expiry,
            ),
        )

    # ── CRUD ──────────────────────────────────────────────────────────

    @router.get(
        "",
        response_model=list[VenueView],
        operation_id=f"list{op}",
        summary=f"List {spec.label.lower()}s",
    )
    async def list_venues(
        current_user: OptionalUser,
        owner_email: str | None = Query(None, description="Only venues owned by this email"),
        status_filter: VenueStatus | None = Query(None, alias="status"),
    ) -> list[VenueView]:
        owner = OwnerId.of(owner_email) if owner_email else None
        found = await db.list_venues(spec.kind, owner=owner, status=status_filter)
        return [await venues.venue_view(venue, current_user) for venue in found]

    @router.get(
        "/{venue_id}",
        response_model=VenueView,
        operation_id=f"get{op}",
        summary=f"Get a {spec.label.lower()}, with links and booking statistics for its owner",
    )
    async def get_venue(venue_id: str, current_user: OptionalUser) -> VenueView:
        venue = await venues.get_venue_or_404(spec, venue_id)
        return await venues.venue_view(venue, current_user, with_stats=True)

    @router.post(
        "",
        response_model=Venue,
        status_code=status.HTTP_201_CREATED,
        operation_id=f"create{op}",
        summary=f"Create a {spec.label.lower()}",
    )
    async def create_venue(body: VenueCreate, current_user: CurrentUser) -> Venue:
        return await venues.create_venue(spec, body, current_user)

    @router.put(
        "/{venue_id}",
        response_model=Venue,
        operation_id=f"replace{op}",
        summary=f"Update every field of a {spec.label.lower()}",
    )
    async def replace_venue(venue_id: str, body: VenueCreate, current_user: CurrentUser) -> Venue:
        return await venues.update_venue(spec, venue_id, body, current_user)

    @router.patch(
        "/{venue_id}",
        response_model=Venue,
        operation_id=f"update{op}",
        summary=f"Update some fields of a {spec.label.lower()}",
    )
    async def update_venue(venue_id: str, body: VenueUpdate, current_user: CurrentUser) -> Venue:
        return await venues.update_venue(spec, venue_id, body, current_user)

    @router.delete(
        "/{venue_id}",
        response_model=VenueDeleteResponse,
        operation_id=f"delete{op}",
        summary=f"Delete a {spec.label.lower()} and its bookings",
    )
    async def delete_venue(venue_id: str, current_user: CurrentUser) -> VenueDeleteResponse:
        return await venues.delete_venue(spec, venue_id, current_user)

    @router.delete(
        "/{venue_id}/delete-with-images",
        response_model=VenueDeleteResponse,
        operation_id=f"delete{op}WithImages",
        summary=f"Delete a {spec.label.lower()}, its bookings and its uploaded images",
    )
    async def delete_venue_with_images(venue_id: str, current_user: CurrentUser) -> VenueDeleteResponse:
        return await venues.delete_venue(spec, venue_id, current_user, with_images=True)

    # ── Links ─────────────────────────────────────────────────────────

    @router.post(
        "/{venue_id}/share-link",
        response_model=ShareLinkResponse,
        operation_id=f"issue{op}ShareLink",
        summary="Generate a new share link",
    )
    async def issue_share_link(
        venue_id: str,
        current_user: CurrentUser,
        body: ShareLinkRequest | None = None,
    ) -> ShareLinkResponse:
        venue = await venues.get_owned_venue(spec, venue_id, current_user)
        return await links.issue_share_link(venue, body.expiry_days if body else None)

    @router.delete(
        "/{venue_id}/share-link",
        response_model=MessageResponse,
        operation_id=f"revoke{op}ShareLink",
        summary="Deactivate the share link",
    )
    async def revoke_share_link(venue_id: str, current_user: CurrentUser) -> MessageResponse:
        venue = await venues.get_owned_venue(spec, venue_id, current_user)
        await links.revoke_share_link(venue)
        return MessageResponse(message="Share link deactivated")

    @router.post(
        "/{venue_id}/booking-link",
        response_model=BookingLinkResponse,
        operation_id=f"issue{op}BookingLink",
        summary="Generate a new booking link",
    )
    async def issue_booking_link(
        venue_id: str,
        current_user: CurrentUser,
        body: BookingLinkRequest | None = None,
    ) -> BookingLinkResponse:
        venue = await venues.get_owned_venue(spec, venue_id, current_user)
        return await links.issue_booking_link(
            venue,
            expiry_hours=body.expiry_hours if body else None,
            price=body.price if body else None,
        )

    @router.delete(
        "/{venue_id}/booking-link",
        response_model=MessageResponse,
        operation_id=f"revoke{op}BookingLink",
        summary="Deactivate the booking link",
    )
    async def revoke_booking_link(venue_id: str, current_user: CurrentUser) -> MessageResponse:
        venue = await venues.get_owned_venue(spec, venue_id, current_user)
        await links.revoke_booking_link(venue)
        return MessageResponse(message="Booking link deactivated")

    # ── Availability ──────────────────────────────────────────────────

    @router.get(
        "/{venue_id}/availability",
        response_model=Availability,
        operation_id=f"get{op}Availability",
        summary="Available and booked slots for one day",
    )
    async def get_availability(
        venue_id: str,
        date_param: str | None = Query(None, alias="date", description="YYYY-MM-DD"),
    ) -> Availability:
        return await compute_availability(spec, venue_id, parse_date_param(date_param))

    return router

"""
Superadmin endpoints: admin overview, cascade delete, and a view over
every venue regardless of owner.
"""

from fastapi import APIRouter

from venuebook import db
from venuebook.dependencies import Superadmin
from venuebook.models import (
    AdminDetails,
    AdminSummary,
    DeletionSummary,
    Venue,
    VenueDeleteResponse,
    VenueDetail,
    VenueUpdate,
)
from venuebook.services import admins, venues
from venuebook.services.registry import VenueKindSpec, registry

router = APIRouter(prefix="/api/superadmin", tags=["superadmin"])


@router.get(
    "/admins",
    response_model=list[AdminSummary],
    operation_id="listAdmins",
    summary="Every admin with venue and booking totals",
)
async def list_admins(current_user: Superadmin) -> list[AdminSummary]:
    return await admins.list_admins()


@router.get(
    "/admins/{email}",
    response_model=AdminDetails,
    operation_id="getAdmin",
    summary="One admin's venues, booking stats and recent bookings",
)
async def get_admin(email: str, current_user: Superadmin) -> AdminDetails:
    return await admins.admin_details(email)


@router.delete(
    "/admins/{email}",
    response_model=DeletionSummary,
    operation_id="deleteAdmin",
    summary="Delete an admin with all their venues and bookings",
)
async def delete_admin(email: str, current_user: Superadmin) -> DeletionSummary:
    return await admins.delete_admin(email)


def _add_venue_routes(spec: VenueKindSpec) -> None:
    op = spec.kind.capitalize()
    base = f"/{spec.api_segment}"

    @router.get(
        base,
        response_model=list[VenueDetail],
        operation_id=f"superadminList{op}",
        summary=f"Every {spec.label.lower()} with owner and booking statistics",
    )
    async def list_all(current_user: Superadmin) -> list[VenueDetail]:
        result = []
        for venue in await db.list_venues(spec.kind):
            stats = await venues.venue_stats(venue.id)
            result.append(VenueDetail(**venue.model_dump(), stats=stats))
        return result

    @router.get(
        f"{base}/{{venue_id}}",
        response_model=VenueDetail,
        operation_id=f"superadminGet{op}",
        summary=f"Get any {spec.label.lower()}",
    )
    async def get_one(venue_id: str, current_user: Superadmin) -> VenueDetail:
        return await venues.venue_detail(spec, venue_id)

    @router.patch(
        f"{base}/{{venue_id}}",
        response_model=Venue,
        operation_id=f"superadminUpdate{op}",
        summary=f"Update any {spec.label.lower()}, e.g. its status",
    )
    async def update_one(venue_id: str, body: VenueUpdate, current_user: Superadmin) -> Venue:
        return await venues.update_venue(spec, venue_id, body, current_user)

    @router.delete(
        f"{base}/{{venue_id}}",
        response_model=VenueDeleteResponse,
        operation_id=f"superadminDelete{op}",
        summary=f"Delete any {spec.label.lower()} and its bookings",
    )
    async def delete_one(venue_id: str, current_user: Superadmin) -> VenueDeleteResponse:
        return await venues.delete_venue(spec, venue_id, current_user)


for _spec in registry.list_kinds():
    _add_venue_routes(_spec)

"""
Availability calculator.

A venue's bookable slots for a day are its kind's fixed template minus
the times already held by non-cancelled bookings.  This is a read-time
filter only; the booking writer does not consult it.
"""

from __future__ import annotations

import logging
from datetime import date

from venuebook import db
from venuebook.errors import NotFound
from venuebook.models import Availability
from venuebook.services.registry import VenueKindSpec
from venuebook.slots import normalise_label

logger = logging.getLogger(__name__)


def subtract_booked(all_slots: list[str], booked: list[str]) -> list[str]:
    """Template slots not present in ``booked``, in template order.

    Labels are compared in canonical form, so ``"9:00 AM"`` holds ``"09:00 AM"``.
    """
    taken = {normalise_label(label) for label in booked}
    return [slot for slot in all_slots if normalise_label(slot) not in taken]


async def compute_availability(spec: VenueKindSpec, venue_id: str, on_date: date) -> Availability:
    """Available and booked slots of one venue on one calendar day."""
    venue = await db.get_venue(venue_id, kind=spec.kind)
    if venue is None:
        raise NotFound(spec.not_found_message)

    all_slots = list(spec.slots)
    booked = [normalise_label(label) for label in await db.booked_times(venue_id, on_date)]
    available = subtract_booked(all_slots, booked)

    logger.debug(
        "%s %s on %s: %d/%d slots free",
        spec.kind, venue_id, on_date, len(available), len(all_slots),
    )
    return Availability(
        venue_id=venue_id,
        date=on_date,
        available_slots=available,
        booked_slots=booked,
        all_slots=all_slots,
    )

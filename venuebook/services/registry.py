"""
Venue kind registry – holds the per-kind configuration.

Pools, tennis courts and pickleball courts share one storage table and
one set of routes; what differs between them (URL segments, the booking
reference field, the daily slot template, kind-specific attributes) is
described by a ``VenueKindSpec`` registered here.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from venuebook.slots import hourly_slots


@dataclass(frozen=True)
class VenueKindSpec:
    """Static description of one kind of bookable venue."""

    kind: str              # stored value, e.g. "pool"
    label: str             # human readable, e.g. "Pool"
    api_segment: str       # /api/<api_segment>
    public_segment: str    # public URLs: <base>/<public_segment>/<id>/...
    booking_ref: str       # BookingCreate field that references this kind
    slots: tuple[str, ...]
    # attribute name -> allowed values (empty: free text); all are required
    attributes: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def not_found_message(self) -> str:
        return f"{self.label} not found"


class VenueRegistry:
    """Registry of venue kinds, looked up by kind or booking field."""

    def __init__(self) -> None:
        self._kinds: dict[str, VenueKindSpec] = {}

    def register(self, spec: VenueKindSpec) -> None:
        self._kinds[spec.kind] = spec

    def get(self, kind: str) -> VenueKindSpec | None:
        return self._kinds.get(kind)

    def by_booking_ref(self, field_name: str) -> VenueKindSpec | None:
        for spec in self._kinds.values():
            if spec.booking_ref == field_name:
                return spec
        return None

    def list_kinds(self) -> list[VenueKindSpec]:
        return list(self._kinds.values())


POOL = VenueKindSpec(
    kind="pool",
    label="Pool",
    api_segment="pools",
    public_segment="pool",
    booking_ref="pool_id",
    slots=tuple(hourly_slots(9, 18)),
    attributes={"size": ()},
)

TENNIS = VenueKindSpec(
    kind="tennis",
    label="Tennis court",
    api_segment="tennis",
    public_segment="tennis",
    booking_ref="tennis_court_id",
    slots=tuple(hourly_slots(9, 18)),
    attributes={
        "surface": ("Hard Court", "Clay Court", "Grass Court", "Carpet Court", "Artificial Grass"),
        "court_type": ("Indoor", "Outdoor", "Covered"),
    },
)

PICKLEBALL = VenueKindSpec(
    kind="pickleball",
    label="Pickleball court",
    api_segment="pickleball",
    public_segment="pickleball",
    booking_ref="pickleball_court_id",
    slots=tuple(hourly_slots(9, 20)),
    attributes={
        "surface": ("Indoor", "Outdoor", "Both"),
        "play_type": ("Singles", "Doubles", "Both"),
    },
)


# ── Singleton instance ────────────────────────────────────────────────────
registry = VenueRegistry()
for _spec in (POOL, TENNIS, PICKLEBALL):
    registry.register(_spec)

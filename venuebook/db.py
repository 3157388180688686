"""
SQLite database layer using aiosqlite.

Stores venues (every kind in one table), bookings and users.
Tables are created automatically on first connect.

There are no transactions spanning several calls: every repository
function commits on its own.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from uuid import uuid4

import aiosqlite

from venuebook.config import DB_PATH
from venuebook.models import (
    Booking,
    BookingLink,
    Owner,
    OwnerId,
    ShareLink,
    Venue,
)

logger = logging.getLogger(__name__)

# ── Module-level connection ───────────────────────────────────────────────

_db: aiosqlite.Connection | None = None


async def init_db() -> None:
    """Open the database and create tables if they don't exist."""
    global _db
    db_path = Path(DB_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    _db = await aiosqlite.connect(str(db_path))
    _db.row_factory = aiosqlite.Row  # dict-like rows
    await _db.execute("PRAGMA journal_mode=WAL")

    await _db.executescript(_SCHEMA)
    await _db.commit()
    logger.info("Database initialized at %s", db_path)


async def close_db() -> None:
    """Close the database connection."""
    global _db
    if _db is not None:
        await _db.close()
        _db = None
        logger.info("Database connection closed")


def get_db() -> aiosqlite.Connection:
    """Return the active database connection (must call init_db first)."""
    assert _db is not None, "Database not initialized, call init_db() first"
    return _db


# ── Schema ────────────────────────────────────────────────────────────────

# Bookings reference venues without a FOREIGN KEY: cascades are done by
# the services, in a fixed order, so partial failures stay visible.
_SCHEMA = """
CREATE TABLE IF NOT EXISTS venues (
    id              TEXT PRIMARY KEY,
    kind            TEXT NOT NULL,
    name            TEXT NOT NULL,
    description     TEXT NOT NULL,
    location        TEXT NOT NULL,
    price           REAL NOT NULL,
    capacity        INTEGER NOT NULL,
    status          TEXT NOT NULL DEFAULT 'Active',
    owner_name      TEXT NOT NULL,
    owner_email     TEXT NOT NULL,
    owner_phone     TEXT NOT NULL,
    amenities       TEXT NOT NULL,  -- JSON array
    images          TEXT NOT NULL,  -- JSON array
    attributes      TEXT NOT NULL,  -- JSON object
    rating          REAL NOT NULL DEFAULT 0,
    share_token     TEXT,
    share_expiry    TEXT,
    share_active    INTEGER NOT NULL DEFAULT 0,
    booking_token   TEXT,
    booking_expiry  TEXT,
    booking_active  INTEGER NOT NULL DEFAULT 0,
    booking_price   REAL,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_venues_kind ON venues(kind);
CREATE INDEX IF NOT EXISTS idx_venues_owner ON venues(owner_email);
CREATE INDEX IF NOT EXISTS idx_venues_status ON venues(status);

CREATE TABLE IF NOT EXISTS bookings (
    id              TEXT PRIMARY KEY,
    venue_kind      TEXT NOT NULL,
    venue_id        TEXT NOT NULL,
    customer_name   TEXT NOT NULL,
    customer_email  TEXT NOT NULL,
    customer_phone  TEXT NOT NULL,
    date            TEXT NOT NULL,  -- YYYY-MM-DD
    time            TEXT NOT NULL,
    duration        INTEGER NOT NULL,
    total_price     REAL NOT NULL,
    guests          INTEGER,
    notes           TEXT,
    status          TEXT NOT NULL,
    created_by      TEXT NOT NULL DEFAULT 'customer',
    admin_id        TEXT,
    from_share_link INTEGER NOT NULL DEFAULT 0,
    from_booking_link INTEGER NOT NULL DEFAULT 0,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_bookings_venue ON bookings(venue_id, date);
CREATE INDEX IF NOT EXISTS idx_bookings_status ON bookings(status);
CREATE INDEX IF NOT EXISTS idx_bookings_customer ON bookings(customer_email);

CREATE TABLE IF NOT EXISTS users (
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    email           TEXT NOT NULL UNIQUE,
    password_hash   TEXT,
    role            TEXT NOT NULL DEFAULT 'admin',
    google_id       TEXT,
    phone           TEXT,
    is_active       INTEGER NOT NULL DEFAULT 1,
    last_login      TEXT,
    password_reset_token   TEXT,
    password_reset_expires TEXT,
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_users_role ON users(role);
"""


# ── Helpers ───────────────────────────────────────────────────────────────


def _iso(dt: datetime | date | None) -> str | None:
    if dt is None:
        return None
    return dt.isoformat()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _placeholders(values: list) -> str:
    return ", ".join("?" for _ in values)


def _row_to_venue(row: aiosqlite.Row) -> Venue:
    """Convert a database row to a Venue model."""
    return Venue(
        id=row["id"],
        kind=row["kind"],
        name=row["name"],
        description=row["description"],
        location=row["location"],
        price=row["price"],
        capacity=row["capacity"],
        status=row["status"],
        owner=Owner(
            name=row["owner_name"],
            email=row["owner_email"],
            phone=row["owner_phone"],
        ),
        amenities=json.loads(row["amenities"]),
        images=json.loads(row["images"]),
        attributes=json.loads(row["attributes"]),
        rating=row["rating"],
        share_link=ShareLink(
            token=row["share_token"],
            expiry=row["share_expiry"],
            active=bool(row["share_active"]),
        ),
        booking_link=BookingLink(
            token=row["booking_token"],
            expiry=row["booking_expiry"],
            active=bool(row["booking_active"]),
            price=row["booking_price"],
        ),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_booking(row: aiosqlite.Row) -> Booking:
    """Convert a database row (optionally joined with venue name) to a Booking."""
    keys = row.keys()
    return Booking(
        id=row["id"],
        venue_kind=row["venue_kind"],
        venue_id=row["venue_id"],
        venue_name=row["venue_name"] if "venue_name" in keys else None,
        customer_name=row["customer_name"],
        customer_email=row["customer_email"],
        customer_phone=row["customer_phone"],
        date=row["date"],
        time=row["time"],
        duration=row["duration"],
        total_price=row["total_price"],
        guests=row["guests"],
        notes=row["notes"],
        status=row["status"],
        created_by=row["created_by"],
        admin_id=row["admin_id"],
        from_share_link=bool(row["from_share_link"]),
        from_booking_link=bool(row["from_booking_link"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# ══════════════════════════════════════════════════════════════════════════
#                    VENUE REPOSITORY
# ══════════════════════════════════════════════════════════════════════════

# Columns a venue update may touch, mapped from model field names
_VENUE_JSON_FIELDS = {"amenities", "images", "attributes"}
_VENUE_PLAIN_FIELDS = {"name", "description", "location", "price", "capacity", "status", "rating"}


async def create_venue(
    kind: str,
    *,
    name: str,
    description: str,
    location: str,
    price: float,
    capacity: int,
    owner: Owner,
    status: str = "Active",
    amenities: list[str] | None = None,
    images: list[str] | None = None,
    attributes: dict[str, str] | None = None,
) -> Venue:
    """Insert a new venue and return it."""
    db = get_db()
    venue_id = str(uuid4())
    now = _now_iso()

    await db.execute(
        """
        INSERT INTO venues (
            id, kind, name, description, location, price, capacity, status,
            owner_name, owner_email, owner_phone,
            amenities, images, attributes,
            rating, share_active, booking_active,
            created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 0, 0, 0, ?, ?)
        """,
        (
            venue_id, kind, name, description, location, price, capacity, status,
            owner.name, owner.owner_id.email, owner.phone,
            json.dumps(amenities or []),
            json.dumps(images or []),
            json.dumps(attributes or {}),
            now, now,
        ),
    )
    await db.commit()
    return await get_venue(venue_id)  # type: ignore[return-value]


async def get_venue(venue_id: str, kind: str | None = None) -> Venue | None:
    """Fetch a single venue by ID, optionally constrained to a kind."""
    db = get_db()
    sql = "SELECT * FROM venues WHERE id = ?"
    params: list = [venue_id]
    if kind is not None:
        sql += " AND kind = ?"
        params.append(kind)

    async with db.execute(sql, params) as cur:
        row = await cur.fetchone()
    return _row_to_venue(row) if row else None


async def list_venues(
    kind: str | None = None,
    *,
    owner: OwnerId | None = None,
    status: str | None = None,
) -> list[Venue]:
    """List venues, newest first, with optional filters."""
    db = get_db()
    sql = "SELECT * FROM venues WHERE 1 = 1"
    params: list = []

    if kind is not None:
        sql += " AND kind = ?"
        params.append(kind)
    if owner is not None:
        sql += " AND owner_email = ?"
        params.append(owner.email)
    if status is not None:
        sql += " AND status = ?"
        params.append(status)

    sql += " ORDER BY created_at DESC"

    async with db.execute(sql, params) as cur:
        rows = await cur.fetchall()
    return [_row_to_venue(r) for r in rows]


async def update_venue(venue_id: str, fields: dict) -> Venue | None:
    """
    Update the given venue fields.

    ``fields`` uses model names; ``owner`` may be an Owner or a dict.
    Unknown keys are ignored.
    """
    db = get_db()
    assignments: list[str] = []
    params: list = []

    for key, value in fields.items():
        if key in _VENUE_PLAIN_FIELDS:
            assignments.append(f"{key} = ?")
            params.append(value)
        elif key in _VENUE_JSON_FIELDS:
            assignments.append(f"{key} = ?")
            params.append(json.dumps(value))
        elif key == "owner":
            owner = value if isinstance(value, Owner) else Owner(**value)
            assignments.extend(["owner_name = ?", "owner_email = ?", "owner_phone = ?"])
            params.extend([owner.name, owner.owner_id.email, owner.phone])

    if not assignments:
        return await get_venue(venue_id)

    assignments.append("updated_at = ?")
    params.extend([_now_iso(), venue_id])
    await db.execute(
        f"UPDATE venues SET {', '.join(assignments)} WHERE id = ?",
        params,
    )
    await db.commit()
    return await get_venue(venue_id)


async def set_share_link(
    venue_id: str,
    *,
    token: str | None,
    expiry: datetime | None,
    active: bool,
) -> Venue | None:
    """Overwrite the share link fields of a venue."""
    db = get_db()
    await db.execute(
        """
        UPDATE venues
        SET share_token = ?, share_expiry = ?, share_active = ?, updated_at = ?
        WHERE id = ?
        """,
        (token, _iso(expiry), int(active), _now_iso(), venue_id),
    )
    await db.commit()
    return await get_venue(venue_id)


async def set_booking_link(
    venue_id: str,
    *,
    token: str | None,
    expiry: datetime | None,
    active: bool,
    price: float | None,
) -> Venue | None:
    """Overwrite the booking link fields of a venue."""
    db = get_db()
    await db.execute(
        """
        UPDATE venues
        SET booking_token = ?, booking_expiry = ?, booking_active = ?,
            booking_price = ?, updated_at = ?
        WHERE id = ?
        """,
        (token, _iso(expiry), int(active), price, _now_iso(), venue_id),
    )
    await db.commit()
    return await get_venue(venue_id)


async def delete_venue(venue_id: str) -> bool:
    """Delete a venue. Returns True if a row was actually deleted."""
    db = get_db()
    cur = await db.execute("DELETE FROM venues WHERE id = ?", (venue_id,))
    await db.commit()
    return cur.rowcount > 0


async def delete_venues_by_owner(owner: OwnerId) -> dict[str, int]:
    """Delete every venue owned by ``owner``. Returns deleted counts per kind."""
    db = get_db()
    async with db.execute(
        "SELECT kind, COUNT(*) AS n FROM venues WHERE owner_email = ? GROUP BY kind",
        (owner.email,),
    ) as cur:
        expected = {row["kind"]: row["n"] for row in await cur.fetchall()}

    counts: dict[str, int] = {}
    for kind in expected:
        cur = await db.execute(
            "DELETE FROM venues WHERE owner_email = ? AND kind = ?",
            (owner.email, kind),
        )
        counts[kind] = cur.rowcount
    await db.commit()
    return counts


# ══════════════════════════════════════════════════════════════════════════
#                    BOOKING REPOSITORY
# ══════════════════════════════════════════════════════════════════════════

_BOOKING_SELECT = """
    SELECT b.*, v.name AS venue_name
    FROM bookings b
    LEFT JOIN venues v ON v.id = b.venue_id
"""


async def create_booking(
    venue_kind: str,
    venue_id: str,
    *,
    customer_name: str,
    customer_email: str,
    customer_phone: str,
    on_date: date,
    time: str,
    duration: int,
    total_price: float,
    status: str = "Confirmed",
    guests: int | None = None,
    notes: str | None = None,
    created_by: str = "customer",
    admin_id: str | None = None,
    from_share_link: bool = False,
    from_booking_link: bool = False,
) -> Booking:
    """Insert a new booking and return it."""
    db = get_db()
    booking_id = str(uuid4())
    now = _now_iso()

    await db.execute(
        """
        INSERT INTO bookings (
            id, venue_kind, venue_id,
            customer_name, customer_email, customer_phone,
            date, time, duration, total_price, guests, notes,
            status, created_by, admin_id, from_share_link, from_booking_link,
            created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            booking_id, venue_kind, venue_id,
            customer_name, customer_email.strip().lower(), customer_phone,
            on_date.isoformat(), time, duration, total_price, guests, notes,
            status, created_by, admin_id, int(from_share_link), int(from_booking_link),
            now, now,
        ),
    )
    await db.commit()
    return await get_booking(booking_id)  # type: ignore[return-value]


async def get_booking(booking_id: str) -> Booking | None:
    """Fetch a single booking by ID."""
    db = get_db()
    async with db.execute(_BOOKING_SELECT + " WHERE b.id = ?", (booking_id,)) as cur:
        row = await cur.fetchone()
    return _row_to_booking(row) if row else None


async def list_bookings(
    *,
    venue_ids: list[str] | None = None,
    venue_kind: str | None = None,
    status: str | None = None,
    customer_email: str | None = None,
    on_date: date | None = None,
) -> list[Booking]:
    """
    List bookings, most recent date first, with optional filters.

    ``venue_ids`` restricts to those venues; an empty list matches nothing.
    """
    db = get_db()
    sql = _BOOKING_SELECT + " WHERE 1 = 1"
    params: list = []

    if venue_ids is not None:
        if not venue_ids:
            return []
        sql += f" AND b.venue_id IN ({_placeholders(venue_ids)})"
        params.extend(venue_ids)
    if venue_kind is not None:
        sql += " AND b.venue_kind = ?"
        params.append(venue_kind)
    if status is not None:
        sql += " AND b.status = ?"
        params.append(status)
    if customer_email is not None:
        sql += " AND b.customer_email = ?"
        params.append(customer_email.strip().lower())
    if on_date is not None:
        sql += " AND b.date = ?"
        params.append(on_date.isoformat())

    sql += " ORDER BY b.date DESC, b.created_at DESC"

    async with db.execute(sql, params) as cur:
        rows = await cur.fetchall()
    return [_row_to_booking(r) for r in rows]


async def booked_times(venue_id: str, on_date: date) -> list[str]:
    """Times of the non-cancelled bookings of a venue on a date."""
    db = get_db()
    async with db.execute(
        """
        SELECT time FROM bookings
        WHERE venue_id = ? AND date = ? AND status != 'Cancelled'
        ORDER BY created_at
        """,
        (venue_id, on_date.isoformat()),
    ) as cur:
        rows = await cur.fetchall()
    return [r["time"] for r in rows]


async def update_booking_status(booking_id: str, status: str) -> Booking | None:
    """Set the status of a booking."""
    db = get_db()
    await db.execute(
        "UPDATE bookings SET status = ?, updated_at = ? WHERE id = ?",
        (status, _now_iso(), booking_id),
    )
    await db.commit()
    return await get_booking(booking_id)


async def delete_bookings_for_venues(venue_ids: list[str]) -> int:
    """Delete every booking of the given venues. Returns the number deleted."""
    if not venue_ids:
        return 0
    db = get_db()
    cur = await db.execute(
        f"DELETE FROM bookings WHERE venue_id IN ({_placeholders(venue_ids)})",
        venue_ids,
    )
    await db.commit()
    return cur.rowcount


# ══════════════════════════════════════════════════════════════════════════
#                    USER REPOSITORY
# ══════════════════════════════════════════════════════════════════════════


async def create_user(
    name: str,
    email: str,
    *,
    password_hash: str | None,
    role: str = "admin",
    phone: str | None = None,
    google_id: str | None = None,
) -> aiosqlite.Row:
    """Insert a new user and return its row."""
    db = get_db()
    user_id = str(uuid4())
    now = _now_iso()

    await db.execute(
        """
        INSERT INTO users (
            id, name, email, password_hash, role, google_id, phone,
            is_active, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, 1, ?, ?)
        """,
        (user_id, name, OwnerId.of(email).email, password_hash, role, google_id, phone, now, now),
    )
    await db.commit()
    return await get_user(user_id)  # type: ignore[return-value]


async def get_user(user_id: str) -> aiosqlite.Row | None:
    db = get_db()
    async with db.execute("SELECT * FROM users WHERE id = ?", (user_id,)) as cur:
        return await cur.fetchone()


async def get_user_by_email(email: str) -> aiosqlite.Row | None:
    db = get_db()
    async with db.execute(
        "SELECT * FROM users WHERE email = ?", (OwnerId.of(email).email,)
    ) as cur:
        return await cur.fetchone()


async def list_users(role: str | None = None) -> list[aiosqlite.Row]:
    db = get_db()
    sql = "SELECT * FROM users"
    params: list = []
    if role is not None:
        sql += " WHERE role = ?"
        params.append(role)
    sql += " ORDER BY created_at DESC"
    async with db.execute(sql, params) as cur:
        return list(await cur.fetchall())


async def touch_last_login(user_id: str) -> None:
    db = get_db()
    now = _now_iso()
    await db.execute(
        "UPDATE users SET last_login = ?, updated_at = ? WHERE id = ?",
        (now, now, user_id),
    )
    await db.commit()


async def set_password(user_id: str, password_hash: str) -> None:
    """Replace the password hash and drop any pending reset token."""
    db = get_db()
    await db.execute(
        """
        UPDATE users
        SET password_hash = ?, password_reset_token = NULL,
            password_reset_expires = NULL, updated_at = ?
        WHERE id = ?
        """,
        (password_hash, _now_iso(), user_id),
    )
    await db.commit()


async def set_password_reset(user_id: str, token_hash: str, expires: datetime) -> None:
    db = get_db()
    await db.execute(
        """
        UPDATE users
        SET password_reset_token = ?, password_reset_expires = ?, updated_at = ?
        WHERE id = ?
        """,
        (token_hash, _iso(expires), _now_iso(), user_id),
    )
    await db.commit()


async def get_user_by_reset_token(token_hash: str) -> aiosqlite.Row | None:
    db = get_db()
    async with db.execute(
        "SELECT * FROM users WHERE password_reset_token = ?", (token_hash,)
    ) as cur:
        return await cur.fetchone()


async def delete_user_by_email(email: str) -> int:
    """Delete the user with this email. Returns the number of rows deleted."""
    db = get_db()
    cur = await db.execute(
        "DELETE FROM users WHERE email = ?", (OwnerId.of(email).email,)
    )
    await db.commit()
    return cur.rowcount

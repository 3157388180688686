#!/usr/bin/env python3
"""
Create the superadmin account from SUPERADMIN_EMAIL / SUPERADMIN_PASSWORD.

Does nothing if a superadmin already exists.
"""

import asyncio
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from venuebook import db  # noqa: E402
from venuebook.config import SUPERADMIN_EMAIL, SUPERADMIN_NAME, SUPERADMIN_PASSWORD  # noqa: E402
from venuebook.services.passwords import MIN_PASSWORD_LENGTH, hash_password  # noqa: E402


async def setup_superadmin() -> int:
    if not SUPERADMIN_EMAIL or not SUPERADMIN_PASSWORD:
        print("Error: set SUPERADMIN_EMAIL and SUPERADMIN_PASSWORD (environment or .env)")
        return 1
    if len(SUPERADMIN_PASSWORD) < MIN_PASSWORD_LENGTH:
        print(f"Error: SUPERADMIN_PASSWORD must be at least {MIN_PASSWORD_LENGTH} characters")
        return 1

    await db.init_db()
    try:
        existing = await db.list_users(role="superadmin")
        if existing:
            print(f"✓ Superadmin already exists: {existing[0]['email']}")
            return 0

        if await db.get_user_by_email(SUPERADMIN_EMAIL) is not None:
            print(f"Error: {SUPERADMIN_EMAIL} is already registered as an admin")
            return 1

        row = await db.create_user(
            SUPERADMIN_NAME,
            SUPERADMIN_EMAIL,
            password_hash=hash_password(SUPERADMIN_PASSWORD),
            role="superadmin",
        )
        print("✓ Superadmin created")
        print(f"  Email: {row['email']}")
        print(f"  ID:    {row['id']}")
        return 0
    finally:
        await db.close_db()


if __name__ == "__main__":
    sys.exit(asyncio.run(setup_superadmin()))

#!/usr/bin/env python3
"""
Create the master account that approves admins and manages roles.

Reads MASTER_EMAIL, MASTER_PASSWORD and MASTER_FULL_NAME from the environment
(or .env). Idempotent: an existing account with that email is promoted to
master instead of duplicated.

Usage:
    MASTER_EMAIL=owner@club.com MASTER_PASSWORD=changeme1 python scripts/seed_master_user.py
"""

import asyncio
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from tennis_backend.database.db import AsyncSessionLocal, init_database, close_database
from tennis_backend.services import auth_service, user_service


async def main():
    email = os.getenv("MASTER_EMAIL")
    password = os.getenv("MASTER_PASSWORD")
    full_name = os.getenv("MASTER_FULL_NAME", "Tournament Master")

    if not email or not password:
        print("MASTER_EMAIL and MASTER_PASSWORD must be set")
        sys.exit(1)
    if not auth_service.validate_email(email):
        print(f"Invalid email address: {email}")
        sys.exit(1)
    password_error = auth_service.validate_password(password)
    if password_error:
        print(password_error)
        sys.exit(1)

    await init_database()
    try:
        async with AsyncSessionLocal() as session:
            user, created = await user_service.ensure_master_user(
                session,
                email=auth_service.normalize_email(email),
                password_hash=auth_service.hash_password(password),
                full_name=full_name,
            )
    finally:
        await close_database()

    if created:
        print(f"Created master user #{user['id']} ({user['email']})")
    else:
        print(f"Master user #{user['id']} ({user['email']}) already exists")


if __name__ == "__main__":
    asyncio.run(main())

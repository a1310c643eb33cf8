"""
Seed Admin User

Creates an admin account for the membership system. Run once per admin.

Usage:
    python scripts/seed_admin.py --name "Jane Doe" --email jane@example.org --admin-id ADM001

The password is read from the ADMIN_PASSWORD environment variable, or
prompted for when it is not set.
"""

import argparse
import getpass
import logging
import os
import sys
from pathlib import Path

# Add the repository root to the path
sys.path.insert(0, str(Path(__file__).parent.parent))

from psycopg_pool import ConnectionPool

from src.adapters.notifications import ConsoleEmailSender
from src.adapters.repository.postgres import PostgresAdminRepository, run_migrations
from src.adapters.tokens import JwtTokenIssuer
from src.config.settings import get_settings
from src.domain.admin_auth import AdminAuthService
from src.domain.credentials import SecretHasher
from src.domain.exceptions import MembershipError

logger = logging.getLogger("seed_admin")


def seed_admin(name: str, email: str, admin_id: str, password: str) -> int:
    """Create the admin if it doesn't exist. Returns a process exit code."""
    settings = get_settings()
    pool = ConnectionPool(conninfo=settings.database_url, min_size=1, max_size=1, open=True)
    try:
        run_migrations(pool)
        service = AdminAuthService(
            repository=PostgresAdminRepository(pool),
            email_sender=ConsoleEmailSender(),
            token_issuer=JwtTokenIssuer(settings.jwt_secret, settings.jwt_expires_in_seconds),
            password_hasher=SecretHasher(rounds=settings.admin_bcrypt_cost),
        )
        try:
            admin = service.provision(name, email, admin_id, password)
        except MembershipError as e:
            logger.error("Could not create admin: %s", e)
            return 1
    finally:
        pool.close()

    logger.info("Admin created successfully!")
    logger.info("  Admin ID: %s", admin.admin_id)
    logger.info("  Email: %s", admin.email)
    logger.info("  ID: %s", admin.id)
    return 0


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = argparse.ArgumentParser(description="Create a membership admin account")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--admin-id", required=True, help="Login handle")
    args = parser.parse_args()

    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Admin password: ")
    return seed_admin(args.name, args.email, args.admin_id, password)


if __name__ == "__main__":
    sys.exit(main())

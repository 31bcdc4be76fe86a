#!/usr/bin/env python3
"""Setup script for the tour operator CRM API.

Run after ``pip install -e .`` so the ``tourcrm`` package is importable.
"""

import asyncio
import logging
import os
from datetime import date
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from tourcrm.core.database import async_session_factory, close_db
from tourcrm.core.security import hash_password
from tourcrm.models import ExchangeRate, Tenant, User
from tourcrm.models.enums import Currency, UserRole

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DB_DIR = Path(__file__).parent.parent / "server" / "db"

SAMPLE_TENANT_SLUG = os.getenv("SETUP_TENANT_SLUG", "demo-tours")
SAMPLE_OWNER_EMAIL = os.getenv("SETUP_OWNER_EMAIL", "owner@demo-tours.example")
SAMPLE_OWNER_PASSWORD = os.getenv("SETUP_OWNER_PASSWORD", "change-me-now")
SAMPLE_TRY_PER_EUR = float(os.getenv("SETUP_TRY_PER_EUR", "35.0"))


def setup_database():
    """Bring the schema up to the latest migration."""
    logger.info("Running database migrations...")

    alembic_cfg = Config(str(DB_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(DB_DIR / "alembic"))
    command.upgrade(alembic_cfg, "head")

    logger.info("Database migrations completed")


async def create_sample_data():
    """Create a tenant, its owner and today's TRY/EUR rate."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        try:
            existing = await db.scalar(
                select(func.count()).select_from(Tenant).where(Tenant.slug == SAMPLE_TENANT_SLUG)
            )
            if existing:
                logger.info("Sample tenant already exists, skipping...")
                return

            tenant = Tenant(
                name="Demo Tours",
                slug=SAMPLE_TENANT_SLUG,
                default_currency=Currency.EUR,
            )
            db.add(tenant)
            await db.flush()

            db.add(User(
                tenant_id=tenant.id,
                email=SAMPLE_OWNER_EMAIL,
                name="Demo Owner",
                password_hash=hash_password(SAMPLE_OWNER_PASSWORD),
                role=UserRole.OWNER,
            ))
            db.add(ExchangeRate(
                tenant_id=tenant.id,
                from_currency=Currency.TRY,
                to_currency=Currency.EUR,
                rate=SAMPLE_TRY_PER_EUR,
                rate_date=date.today(),
                source="setup",
            ))

            await db.commit()
            logger.info(f"Sample data created. Log in as {SAMPLE_OWNER_EMAIL}")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise

    await close_db()


def main():
    """Main setup function."""
    logger.info("Starting tour operator CRM setup...")

    # Alembic's env.py drives its own event loop, so migrate before seeding
    setup_database()
    asyncio.run(create_sample_data())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: uvicorn tourcrm.main:app --reload")


if __name__ == "__main__":
    main()

"""Bootstrap a fresh database: tables, the first administrator and a few categories.

Usage: python populate_db.py
Credentials come from ADMIN_EMAIL / ADMIN_PASSWORD (see config.py).
"""
import logging
import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import Database
from models.category import Category
from models.users import User
from utils.hashing import get_password_hash
from utils.logging_setup import configure_logging

logger = logging.getLogger("populate_db")

STARTER_CATEGORIES = ["Food", "Beverages", "Household", "Personal Care", "Vitamins"]


def populate(db: Database, admin_email: str, admin_password: str):
    db.create_all()
    session = db.SessionLocal()
    try:
        email = admin_email.strip().lower()
        admin = session.query(User).filter(User.email == email).first()
        if admin:
            logger.info("Admin %s already exists, skipping", email)
        else:
            session.add(User(
                email=email,
                password_hash=get_password_hash(admin_password),
                name="Administrator",
                role="admin",
            ))
            logger.info("Created admin %s", email)

        existing = {name.lower() for (name,) in session.query(Category.name).all()}
        added = 0
        for name in STARTER_CATEGORIES:
            if name.lower() not in existing:
                session.add(Category(name=name))
                added += 1

        session.commit()
        logger.info("Inserted %d categories", added)
    finally:
        session.close()


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)
    database = Database(settings.DATABASE_URL, timeout=settings.DB_TIMEOUT_SECONDS)
    try:
        populate(database, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    finally:
        database.dispose()

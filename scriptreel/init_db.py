#!/usr/bin/env python3
"""
Database initialization script.
Creates tables if they don't exist and seeds the default settings row.
"""

import sys

from scriptreel.database import Base, engine
from scriptreel.models import AppSettings, Script  # noqa: F401  registers the tables
from scriptreel.storage import SettingsStore


def init_database():
    """Initialize the database by creating all tables."""
    try:
        print("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        SettingsStore().get_settings()
        print("✅ Database tables created successfully!")
    except Exception as e:
        print(f"❌ Error creating database tables: {e}")
        sys.exit(1)


if __name__ == "__main__":
    init_database()

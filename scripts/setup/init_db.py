"""
Initialize database: creates all tables, seeds the admin account and
default kiosk settings. Run once before first launch, or after adding new
models. Needs JWT_SECRET and ADMIN_PASSWORD in the environment or .env.
Usage: python scripts/setup/init_db.py
"""

import sys

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from visitor_register.config import settings
from visitor_register.database import Database
from visitor_register.exceptions import ConfigurationError
from visitor_register.services.settings_service import seed_default_settings
from visitor_register.services.user_service import seed_admin


def main():
    print("🗄️  Visitor Register DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    database = Database(settings.DATABASE_URL)

    # Test connection
    try:
        database.ping()
        print("✅ Database connection OK")
    except SQLAlchemyError as e:
        print(f"❌ Cannot connect to database: {e}")
        sys.exit(1)

    print("\n📋 Creating tables...")
    database.create_tables()

    with database.session() as db:
        try:
            admin = seed_admin(db, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
        except ConfigurationError as e:
            print(f"❌ {e}")
            sys.exit(1)
        seed_default_settings(db)

    if admin:
        print(f"👤 Admin account '{admin.username}' created")
    else:
        print("👤 Admin account already present")

    tables = inspect(database.engine).get_table_names()
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in sorted(tables):
        print(f"   ✓ {t}")

    database.dispose()
    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn visitor_register.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT}")


if __name__ == "__main__":
    main()

import argparse
import getpass
import sys

from sqlalchemy import select
from werkzeug.security import generate_password_hash

from app.core.config import settings
from app.core.config_loader import resolve_path
from app.core.logger import logger, setup_logging
from app.models.db_models import Admin
from app.services.db_service import Database


def create_admin(db: Database, username: str, password: str) -> Admin:
    """
    Inserts an admin row with a salted password hash.
    Raises ValueError if the username is already taken.
    """
    with db.session() as session:
        if session.scalar(select(Admin).where(Admin.username == username)):
            raise ValueError(f"Admin '{username}' already exists")
        admin = Admin(username=username, password_hash=generate_password_hash(password))
        session.add(admin)
        session.commit()
    return admin


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create an admin account for the booking panel.")
    parser.add_argument("username")
    parser.add_argument("--database-url", default=settings.DATABASE_URL)
    args = parser.parse_args(argv)

    password = getpass.getpass("Password: ")
    if not password or password != getpass.getpass("Repeat password: "):
        logger.error("❌ Passwords are empty or do not match.")
        return 1

    db = Database(args.database_url)
    db.create_tables()
    try:
        admin = create_admin(db, args.username, password)
    except ValueError as e:
        logger.error(f"❌ {e}")
        return 1
    finally:
        db.dispose()

    logger.info(f"✅ Admin '{admin.username}' created (id {admin.admin_id})")
    return 0


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL, resolve_path(settings.LOG_DIR))
    sys.exit(main())

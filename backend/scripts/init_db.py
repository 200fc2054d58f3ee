"""Initialize the database - creates all tables, seeds default groups and an optional administrator."""
import argparse
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from forum.config import settings
from forum.database import SessionLocal, engine, Base
import forum.models  # noqa: F401 - registers all models
from forum.models.user import User
from forum.services import group_service
from forum.services.auth_service import hash_password


def init_db(admin_username: str | None = None, admin_email: str | None = None, admin_password: str | None = None):
    print("Creating all database tables...")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = group_service.seed_default_groups(db)
        print(f"Seeded {len(created)} default group(s).")
        if admin_username:
            if db.query(User).filter(User.username == admin_username).first():
                print(f"Admin '{admin_username}' already exists. Skipping.")
            else:
                group = group_service.get_group_by_name(db, settings.ADMIN_GROUP)
                db.add(User(
                    username=admin_username,
                    email=admin_email or f"{admin_username}@example.com",
                    password_hash=hash_password(admin_password),
                    group_id=group.group_id,
                    is_active=True,
                ))
                db.commit()
                print(f"Created administrator '{admin_username}'.")
    finally:
        db.close()
    print("Database initialized successfully.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--admin-username")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args()
    if args.admin_username and not args.admin_password:
        parser.error("--admin-password is required with --admin-username")
    init_db(args.admin_username, args.admin_email, args.admin_password)

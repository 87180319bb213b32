#!/usr/bin/env python3
"""
Create Admin Script

Creates a verified admin account, or promotes an existing account.

USAGE:
    # From the project root with the virtualenv activated
    python scripts/create_admin.py --email admin@example.com --username admin

    # The password is prompted for unless --password is given
    python scripts/create_admin.py --email admin@example.com --username admin \\
        --password 'Sup3r-Secret!'

    # Promote an existing account (username and password are ignored)
    python scripts/create_admin.py --email reader@example.com

This script:
1. Connects to the database using the app settings
2. Promotes the account if the email is already registered
3. Otherwise validates the password and creates a verified admin
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pydantic import ValidationError  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from mybook.database import SessionLocal  # noqa: E402
from mybook.models.user import User  # noqa: E402
from mybook.schemas.user import UserCreate  # noqa: E402
from mybook.services.security import hash_password  # noqa: E402
from mybook.services.users import get_user_by_email  # noqa: E402

logger = logging.getLogger("create_admin")


def promote(db: Session, user: User) -> User:
    """Give an existing account admin rights and mark it verified."""
    user.is_admin = True
    user.is_verified = True
    user.is_active = True
    db.commit()
    logger.info(f"Promoted {user.email} to admin")
    return user


def create(db: Session, email: str, username: str, password: str) -> User:
    """
    Create a new verified admin.

    Raises:
        ValidationError: The email, username or password is rejected
    """
    data = UserCreate(email=email, username=username, password=password)

    user = User(
        email=data.email,
        username=data.username,
        hashed_password=hash_password(data.password),
        is_active=True,
        is_verified=True,
        is_admin=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Created admin {user.email} (id={user.id})")
    return user


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote a MyBook admin")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--username", help="Username for a new account")
    parser.add_argument("--password", help="Password for a new account (prompted if omitted)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")
    args = parse_args(argv)

    db = SessionLocal()
    try:
        existing = get_user_by_email(db, args.email)
        if existing is not None:
            promote(db, existing)
            return 0

        if not args.username:
            logger.error("--username is required to create a new account")
            return 1

        password = args.password or getpass.getpass("Password: ")
        try:
            create(db, args.email, args.username, password)
        except ValidationError as e:
            for error in e.errors():
                logger.error(f"{'.'.join(str(p) for p in error['loc'])}: {error['msg']}")
            return 1
    finally:
        db.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Create an admin or mentor account from the command line.

Usage:
    python -m mentorship_api.cli.create_user [--admin] [--mentor TOPIC ...]
"""

import argparse
import getpass
import sys

from sqlalchemy import select
from sqlalchemy.orm import Session

from mentorship_api.database import SessionLocal, engine, Base
from mentorship_api.models.user import User


def create_user(
    db: Session,
    email: str,
    name: str,
    password: str,
    admin: bool = False,
    mentor_topics: list[str] | None = None,
) -> User:
    """Add a user; mentors are created available with the given topics.

    Raises:
        ValueError: a user with the email already exists.
    """
    existing = db.execute(
        select(User).where(User.email == email)
    ).scalar_one_or_none()
    if existing:
        raise ValueError(f"User with email {email} already exists.")

    user = User(
        email=email,
        name=name,
        role="admin" if admin else "member",
        is_mentee=not admin,
        password_hash="",
    )
    if mentor_topics:
        user.is_mentor = True
        user.available_for_mentoring = True
        user.mentorship_topics = list(mentor_topics)
    user.set_password(password)
    db.add(user)
    db.flush()
    return user


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Create a mentorship platform user.")
    parser.add_argument("--admin", action="store_true", help="grant the admin role")
    parser.add_argument(
        "--mentor", nargs="+", metavar="TOPIC", help="make the user an available mentor"
    )
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine)

    email = input("Email: ").strip()
    name = input("Name: ").strip()
    password = getpass.getpass("Password: ").strip()

    if not all([email, name, password]):
        print("All fields are required.")
        sys.exit(1)

    db = SessionLocal()
    try:
        try:
            create_user(db, email, name, password, args.admin, args.mentor)
        except ValueError as exc:
            print(exc)
            sys.exit(1)
        db.commit()
        kind = "Admin" if args.admin else "User"
        print(f"{kind} '{name}' created successfully.")
    finally:
        db.close()


if __name__ == "__main__":
    main()

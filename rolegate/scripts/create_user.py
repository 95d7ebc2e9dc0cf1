"""
Create a user (e.g. the first SuperAdmin). Run from project root:
  python -m rolegate.scripts.create_user EMAIL PASSWORD FIRST_NAME LAST_NAME
Example:
  python -m rolegate.scripts.create_user admin@example.com 'Secure123' Ada Lovelace
The first user of an empty system always becomes SuperAdmin; later users
created here are Guests, as with public registration.
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from rolegate.core.config import get_settings
from rolegate.core.database import SessionLocal, seed_roles
from rolegate.schemas.user import UserCreate
from rolegate.services.users import create_user

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Rolegate user.")
    parser.add_argument("email", help="Account email")
    parser.add_argument("password", help="8-32 chars, upper, lower and digit")
    parser.add_argument("first_name")
    parser.add_argument("last_name")
    args = parser.parse_args()

    try:
        payload = UserCreate(
            email=args.email,
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
        )
    except ValidationError as e:
        print(e.errors()[0]["msg"], file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        seed_roles(db)
        result = create_user(
            db, payload.model_dump(), requester=None, bcrypt_rounds=get_settings().BCRYPT_ROUNDS
        )
        if not result.success:
            print(result.message, file=sys.stderr)
            return 1
        print(f"Created user '{payload.email}' with role '{result.body['role_name']}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

"""
Create the first admin account, which can then add further admins and doctors.
Run with: python -m scripts.create_admin --email admin@hospital.org --password ...
"""

import argparse
import asyncio
from datetime import date

from app.database import Base, get_db, get_engine
from app.models import activity_log, user  # noqa: F401
from app.models.user import UserRole
from app.schemas.user import AdminCreate
from app.services.user_service import UserService
from app.utils.error_handler import ConflictError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--first-name", default="System")
    parser.add_argument("--last-name", default="Admin")
    parser.add_argument("--phone", default="0000000000")
    parser.add_argument("--gender", default="Other")
    parser.add_argument("--national-id", default="0000000000")
    parser.add_argument("--dob", type=date.fromisoformat, default=date(1970, 1, 1))
    return parser.parse_args(argv)


async def create_admin(args) -> int:
    Base.metadata.create_all(bind=get_engine())
    admin_data = AdminCreate(
        first_name=args.first_name,
        last_name=args.last_name,
        email=args.email,
        phone=args.phone,
        gender=args.gender,
        password=args.password,
        national_id=args.national_id,
        dob=args.dob,
    )

    db_gen = get_db()
    db = next(db_gen)
    try:
        admin = await UserService(db).create_user(admin_data, UserRole.ADMIN)
        print(f"Created admin {admin.email} (id={admin.id})")
    except ConflictError as e:
        print(e.message)
        return 1
    finally:
        db_gen.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(create_admin(parse_args())))

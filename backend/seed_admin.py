"""Create an admin account.

Admins cannot register through the API; seed them with this script.

Usage:
    python -m backend.seed_admin --name "Admin" --email admin@example.com --password secret
"""
import argparse
import sys

from backend.core.errors import ServiceError
from backend.database import SessionLocal, init_db
from backend.models.user import Role
from backend.services.accounts import AccountService


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    return parser.parse_args(argv)


def seed_admin(db, name: str, email: str, password: str):
    return AccountService(db).create_user(name, email, password, role=Role.ADMIN)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    init_db()
    db = SessionLocal()
    try:
        user = seed_admin(db, args.name, args.email, args.password)
    except ServiceError as exc:
        print(f"Could not create admin: {exc.detail}", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created admin {user.email} (id={user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())

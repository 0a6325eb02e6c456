"""
Create a user (e.g. first admin). Run from project root:
  python -m caveworld.scripts.create_user EMAIL USER_NAME PASSWORD [role]
Example:
  python -m caveworld.scripts.create_user admin@caveworld.io admin your-secure-password admin
"""
import argparse
import sys

from caveworld.core.database import SessionLocal
from caveworld.core.errors import AppError, ConflictError
from caveworld.repositories.user_repository import UserRepository
from caveworld.services.auth import USER_EXISTS_MESSAGE, build_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Caveworld user from the shell.")
    parser.add_argument("email", help="Email address")
    parser.add_argument("user_name", help="Username (3-20 chars)")
    parser.add_argument("password", help="Password (at least 8 chars, at most 72 bytes)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        users = UserRepository(db)
        user = build_user(args.email, args.user_name, args.password, role=args.role)
        if users.find_by_email_or_user_name(user.email, user.user_name) is not None:
            raise ConflictError(USER_EXISTS_MESSAGE)
        users.create(user)
        print(f"Created user '{user.user_name}' ({user.email}) with role '{user.role}'.")
        return 0
    except AppError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

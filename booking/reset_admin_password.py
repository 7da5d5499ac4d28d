"""Replace the administrator password without logging in.

Usage:
    python -m booking.reset_admin_password            # prompts twice
    python -m booking.reset_admin_password --password 'new-secret'
"""
import argparse
import getpass
import sys

from booking.core import config
from booking.core.errors import BookingError
from booking.database import Base, engine
from booking.dependencies import get_credential_store
from booking.models import admin_credential  # noqa: F401  registers table


def read_new_password(argv: list[str] | None = None) -> str:
    parser = argparse.ArgumentParser(description="Reset the booking administrator password.")
    parser.add_argument("--password", help="new password; prompted for when omitted")
    args = parser.parse_args(argv)

    if args.password is not None:
        return args.password.strip()

    first = getpass.getpass("New password: ")
    second = getpass.getpass("Repeat new password: ")
    if first != second:
        print("Passwords do not match.", file=sys.stderr)
        sys.exit(1)
    return first.strip()


def main(argv: list[str] | None = None) -> None:
    password = read_new_password(argv)
    if len(password) < config.MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters long.", file=sys.stderr)
        sys.exit(1)

    Base.metadata.create_all(bind=engine, tables=[admin_credential.AdminCredential.__table__])
    try:
        get_credential_store().rotate(password)
    except BookingError as exc:
        print(exc.message, file=sys.stderr)
        sys.exit(1)
    print("Administrator password updated.")


if __name__ == "__main__":
    main()

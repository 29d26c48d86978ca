#!/usr/bin/env python3
"""
Reset a user's password directly in the Lius FinTech data files.

This script DOES NOT read or reveal any existing passwords.  It simply
sets a new password hash (PBKDF2-HMAC-SHA256, format "salthex$hashhex")
for the given username.  Use ``--clear-pin`` to remove the transfer PIN
at the same time.  Stop the server first: the running process does not
share its lock with this script.

Usage:
    python reset_password.py --data-dir ./data --username alice --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import sys

from lius_fintech_api.app.core.db import USERS, init_db
from lius_fintech_api.app.core.errors import StorageError
from lius_fintech_api.app.core.security import hash_password
from lius_fintech_api.app.services.account_service import MIN_PASSWORD_LENGTH, dump_user, find_user


def main() -> None:
    ap = argparse.ArgumentParser(description="Reset a Lius FinTech user's password.")
    ap.add_argument("--data-dir", default=None, help="Directory holding users.json (default: DATA_DIR or ./data)")
    ap.add_argument("--username", required=True, help="User to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    ap.add_argument("--clear-pin", action="store_true", help="Also remove the user's transfer PIN")
    args = ap.parse_args()

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        print(f"[!] Password must be at least {MIN_PASSWORD_LENGTH} characters long.", file=sys.stderr)
        sys.exit(1)

    store = init_db(args.data_dir)
    try:
        with store.transaction() as data:
            users = data[USERS]
            index, user = find_user(users, username=args.username)
            if user is None:
                print(f"[!] No user found with username: {args.username}", file=sys.stderr)
                sys.exit(2)
            user.password = hash_password(new_password)
            if args.clear_pin:
                user.pin = None
            users[index] = dump_user(user)
    except StorageError as exc:
        print(f"[!] {exc.message}", file=sys.stderr)
        sys.exit(3)
    print(f"[+] Password updated for user: {args.username}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Quick script to add a local user to the database.
Run this to create the first admin account.
"""

import getpass
import sys

from training_server import create_app
from training_server.models import ROLES
from training_server.services.user_service import create_local_user


def add_user():
    """Interactive user addition."""
    app = create_app()

    with app.app_context():
        print("\n🔧 Add Local User")
        print("=" * 50)

        username = input("Username: ").strip()
        if not username:
            print("❌ Username is required")
            return 1

        role = input(f"Role ({'/'.join(ROLES)}) [admin]: ").strip() or "admin"
        if role not in ROLES:
            print(f"❌ Role must be one of: {', '.join(ROLES)}")
            return 1

        password = getpass.getpass("Password: ")
        if not password:
            print("❌ Password is required")
            return 1

        if getpass.getpass("Repeat password: ") != password:
            print("❌ Passwords do not match")
            return 1

        user, message = create_local_user(username, password, role=role)
        if not user:
            print(f"❌ {message}")
            return 1

        print(f"\n✅ {message}")
        return 0


if __name__ == '__main__':
    sys.exit(add_user())

#!/usr/bin/env python3
"""
Admin Password Hash Generator
Generates the bcrypt ADMIN_PASSWORD_HASH for the .env file, or checks a password against one.

Usage:
    python generate_password_hash.py            - Generate new hash
    python generate_password_hash.py --check    - Test a password against ADMIN_PASSWORD_HASH
"""
import getpass
import sys

from app.utils.auth import hash_password, verify_admin_password


def generate():
    password = getpass.getpass("Enter admin password: ")
    if not password:
        print("\n❌ Error: Password cannot be empty")
        return 1

    if password != getpass.getpass("Confirm password: "):
        print("\n❌ Error: Passwords do not match")
        return 1

    print("\n⏳ Generating hash (this may take a moment)...")
    print("\n✅ Success! Copy this line to your .env file:\n")
    print(f"ADMIN_PASSWORD_HASH={hash_password(password)}")
    print("\n⚠️  Keep this hash secret and never commit it to version control!")
    return 0


def check():
    password = getpass.getpass("Enter password to test: ")
    try:
        matches = verify_admin_password(password)
    except ValueError as e:
        print(f"\n❌ Error: {e}")
        return 1

    if matches:
        print("\n✅ Password matches ADMIN_PASSWORD_HASH")
        return 0
    print("\n❌ Password does not match. Generate a new hash with: python generate_password_hash.py")
    return 1


def main():
    print("=" * 60)
    print("Dolly Hotel Admin Password Hash Generator")
    print("=" * 60)
    print()

    if len(sys.argv) > 1 and sys.argv[1] == "--check":
        return check()
    return generate()


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Promote an account to administrator.

Administrators cannot be created through the API. Register the account
normally, then run this with a server-side SUPABASE_KEY.

Usage:
    python scripts/promote_admin.py --email owner@example.com
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import from repositories
sys.path.insert(0, str(Path(__file__).parent.parent))

from repositories.client import create_store_client, load_settings
from services.admin_service import ClientNotFoundError, promote_to_admin


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Grant the admin role to a registered account")
    parser.add_argument(
        "--email",
        "-e",
        required=True,
        help="Email of the registered account"
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        client = create_store_client(load_settings())
        profile = promote_to_admin(client, args.email)
    except ClientNotFoundError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        print("  Register the account first, then run this script again.", file=sys.stderr)
        return 1
    except RuntimeError as e:  # missing settings or a store failure
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    print("[SUCCESS] Account is an administrator")
    print(f"  Profile ID: {profile.profile_id}")
    print(f"  Email: {profile.email}")
    print(f"  Status: {profile.status.value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

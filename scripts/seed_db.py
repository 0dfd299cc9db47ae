"""
Seed check for Respond Hub demo staff accounts.

Usage:
  - Built-in demo staff: python scripts/seed_db.py
  - Custom seed file:     python scripts/seed_db.py --seed ./staff_seed.json

Behavior:
  - Loads the staff list (built-in DEMO_STAFF, or a JSON list of
    {id, full_name, email, phone, role, agency} objects).
  - Provisions each entry into a fresh in-memory registry, which applies
    the same validation the running service does.
  - Prints the account ids to use as X-Account-Id headers.
"""

import argparse
import os

from app.core.errors import LifecycleError
from app.services.identity_registry import IdentityRegistry
from app.services.seed_data import DEMO_STAFF, load_seed, seed_demo_accounts


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--seed", default=None, help="Path to a JSON staff seed file")
    args = parser.parse_args()

    seed = DEMO_STAFF
    if args.seed:
        if not os.path.exists(args.seed):
            print(f"Seed file not found: {args.seed}")
            return
        seed = load_seed(args.seed)

    registry = IdentityRegistry()
    try:
        accounts = seed_demo_accounts(registry, seed)
    except LifecycleError as e:
        print(f"Seed rejected: {e}")
        return

    for account in accounts:
        agency = account.agency.value if account.agency else "-"
        print(f"{account.id:<16} {account.role.value:<15} {agency:<5} {account.full_name}")
    print("Seed is valid. Set SEED_DEMO_DATA=true to load the built-in staff on startup.")


if __name__ == "__main__":
    main()

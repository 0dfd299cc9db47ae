"""
Demo staff accounts.

Seeded into a fresh IdentityRegistry before the engine is built, so a
host has a dispatch admin to bootstrap everything else. Ids are fixed
so they can be used directly as X-Account-Id headers.
"""

from typing import Dict, List, Optional
import json
import logging

from app.models.account import Account, AccountCreate, AgencyType, Role
from app.services.identity_registry import IdentityRegistry

logger = logging.getLogger(__name__)


DEMO_STAFF: List[Dict] = [
    {
        "id": "USR-DISPATCH",
        "full_name": "PDRRMO Dispatch Desk",
        "email": "dispatch@respond.ph",
        "phone": "+639170000001",
        "role": "dispatch_admin",
        "agency": None,
    },
    {
        "id": "USR-BFP",
        "full_name": "BFP Station Commander",
        "email": "bfp@respond.ph",
        "phone": "+639170000002",
        "role": "agency_admin",
        "agency": "BFP",
    },
    {
        "id": "USR-PNP",
        "full_name": "PNP Desk Officer",
        "email": "pnp@respond.ph",
        "phone": "+639170000003",
        "role": "agency_admin",
        "agency": "PNP",
    },
    {
        "id": "USR-PCG",
        "full_name": "PCG Station Officer",
        "email": "pcg@respond.ph",
        "phone": "+639170000004",
        "role": "agency_admin",
        "agency": "PCG",
    },
]


def load_seed(path: str) -> List[Dict]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def seed_demo_accounts(registry: IdentityRegistry, seed: Optional[List[Dict]] = None) -> List[Account]:
    """Provision each staff entry. Entries whose id already exists are skipped."""
    created = []
    for entry in seed if seed is not None else DEMO_STAFF:
        if registry.find(entry["id"]) is not None:
            logger.info(f"[SEED] {entry['id']} already present, skipping")
            continue
        account = registry.provision(
            AccountCreate(
                full_name=entry.get("full_name", ""),
                email=entry.get("email", ""),
                phone=entry.get("phone", ""),
            ),
            role=Role(entry["role"]),
            agency=AgencyType(entry["agency"]) if entry.get("agency") else None,
            account_id=entry["id"],
        )
        created.append(account)
    logger.info(f"[SEED] Provisioned {len(created)} demo staff account(s)")
    return created

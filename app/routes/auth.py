"""
Account endpoints - citizen registration and identity document submission.
"""

from fastapi import APIRouter, Depends, status
from app.models.account import Account, AccountCreate, IdentityDocumentSubmission
from app.services.lifecycle_engine import LifecycleEngine
from app.utils.security import get_current_actor, get_engine
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Accounts"])


@router.post("/register", response_model=Account, status_code=status.HTTP_201_CREATED)
async def register(profile: AccountCreate, engine: LifecycleEngine = Depends(get_engine)):
    """
    Self-register a citizen account.

    New accounts start unverified. Reports they file are flagged as
    unverified in the command center until an admin approves their ID.

    Raises:
        422: Email or phone missing
    """
    account = engine.register(profile)
    logger.info(f"📝 POST /auth/register - {account.id}")
    return account


@router.post("/identity-document", response_model=Account)
async def submit_identity_document(
    request: IdentityDocumentSubmission,
    actor=Depends(get_current_actor),
    engine: LifecycleEngine = Depends(get_engine),
):
    """
    Upload an identity document for review (unverified → pending).

    Raises:
        409: Account already verified
        422: Missing image reference
    """
    return engine.submit_identity_document(actor, actor.account_id, request.image_url)


@router.get("/me", response_model=Account)
async def get_me(actor=Depends(get_current_actor), engine: LifecycleEngine = Depends(get_engine)):
    """Current account, including its verification status."""
    return engine.get_account(actor.account_id)

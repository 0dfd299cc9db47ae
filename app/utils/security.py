"""
Actor resolution for HTTP requests.

Credential checks are out of scope: the caller names its account in the
X-Account-Id header and the engine resolves it to an actor variant.
"""

from typing import Optional
import logging

from fastapi import Depends, Header, HTTPException, status

from app.core.errors import NotFoundError
from app.services.lifecycle_engine import LifecycleEngine, get_lifecycle_engine

logger = logging.getLogger(__name__)


def get_engine() -> LifecycleEngine:
    return get_lifecycle_engine()


def get_current_actor(
    x_account_id: Optional[str] = Header(default=None),
    engine: LifecycleEngine = Depends(get_engine),
):
    """Resolve X-Account-Id to an Actor. 401 when missing or unknown."""
    if not x_account_id or not x_account_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="X-Account-Id header required")
    try:
        return engine.actor_for_account(x_account_id.strip())
    except NotFoundError:
        logger.warning(f"Request with unknown account id {x_account_id}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown account")


"""
Identity Registry - known accounts and their verification status.

The registry does not lock. It is owned by the LifecycleEngine, which
calls it only while holding the engine's mutation lock; hosts should go
through the engine rather than calling write methods here directly.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging
import uuid

from app.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.account import (
    Account,
    AccountCreate,
    AccountFilter,
    AccountVerificationStatus,
    AgencyType,
    Role,
    VerificationDecision,
)
from app.models.actor import DispatchAdminActor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountVerificationDecided:
    """Domain event published by every successful decide() call."""
    account_id: str
    new_status: AccountVerificationStatus


DecisionListener = Callable[[AccountVerificationDecided], None]


def new_account_id() -> str:
    return f"USR-{uuid.uuid4().hex[:10].upper()}"


class IdentityRegistry:
    """
    Keyed collection of accounts.

    Listeners registered with subscribe() run synchronously inside decide(),
    before it returns.
    """

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._listeners: List[DecisionListener] = []

    def subscribe(self, listener: DecisionListener) -> None:
        self._listeners.append(listener)

    def register(self, profile: AccountCreate) -> Account:
        """
        Self-register a citizen account.

        Raises:
            ValidationError: If email or phone is blank
        """
        self._require_contact(profile)
        account = Account(
            id=new_account_id(),
            full_name=profile.full_name.strip(),
            email=profile.email.strip(),
            phone=profile.phone.strip(),
            role=Role.CITIZEN,
            agency=None,
            verification_status=AccountVerificationStatus.UNVERIFIED,
        )
        self._accounts[account.id] = account
        logger.info(f"Citizen account registered: {account.id}")
        return account.model_copy(deep=True)

    def provision(self, profile: AccountCreate, role: Role, agency: Optional[AgencyType] = None,
                  account_id: Optional[str] = None) -> Account:
        """
        Create a staff account. Staff accounts are verified from the start.

        account_id pins a well-known id (demo seeding); otherwise one is generated.

        Raises:
            ValidationError: Blank contact fields, citizen role, or an agency
                that does not match the role
        """
        self._require_contact(profile)
        if role == Role.CITIZEN:
            raise ValidationError("Citizen accounts are created through registration")
        if role == Role.AGENCY_ADMIN:
            if agency is None or agency == AgencyType.NONE:
                raise ValidationError("agency_admin accounts require an agency (BFP, PNP or PCG)")
        elif agency is not None:
            raise ValidationError(f"{role.value} accounts cannot carry an agency")
        if account_id is not None and account_id in self._accounts:
            raise ConflictError(f"Account {account_id} already exists")

        account = Account(
            id=account_id or new_account_id(),
            full_name=profile.full_name.strip(),
            email=profile.email.strip(),
            phone=profile.phone.strip(),
            role=role,
            agency=agency,
            verification_status=AccountVerificationStatus.VERIFIED,
        )
        self._accounts[account.id] = account
        logger.info(f"Staff account provisioned: {account.id} ({role.value}, agency={agency.value if agency else '-'})")
        return account.model_copy(deep=True)

    def submit_identity_document(self, account_id: str, image_ref: str) -> Account:
        """
        Owner uploads an ID document: unverified → pending.

        Resubmitting while pending replaces the document and stays pending.

        Raises:
            NotFoundError: Unknown account id
            ValidationError: Blank image reference
            ConflictError: Account is already verified
        """
        account = self._get(account_id)
        if not image_ref or not image_ref.strip():
            raise ValidationError("Identity document image is required")
        if account.verification_status == AccountVerificationStatus.VERIFIED:
            raise ConflictError(f"Account {account_id} is already verified")

        account.verification_status = AccountVerificationStatus.PENDING
        account.id_image_url = image_ref
        logger.info(f"Identity document submitted for {account_id}, status now pending")
        return account.model_copy(deep=True)

    def decide(self, account_id: str, decision: VerificationDecision, actor) -> Account:
        """
        Dispatch admin approves or rejects an account's identity.

        Publishes AccountVerificationDecided to every listener before
        returning. If a listener raises, the previous status is restored
        and republished to the listeners already notified, then the error
        propagates.

        Raises:
            ForbiddenError: Actor is not a dispatch admin
            ValidationError: Decision is not verified/unverified
            NotFoundError: Unknown account id
        """
        if not isinstance(actor, DispatchAdminActor):
            raise ForbiddenError("Only a dispatch admin can decide account verification")
        try:
            decision = VerificationDecision(decision)
        except ValueError:
            raise ValidationError(f"Invalid verification decision: {decision!r}. Allowed: verified, unverified")

        account = self._get(account_id)
        previous_status = account.verification_status
        new_status = AccountVerificationStatus(decision.value)
        account.verification_status = new_status

        event = AccountVerificationDecided(account_id=account_id, new_status=new_status)
        notified: List[DecisionListener] = []
        try:
            for listener in self._listeners:
                notified.append(listener)
                listener(event)
        except Exception:
            logger.error(f"Decision on {account_id} failed in a listener; restoring {previous_status.value}")
            account.verification_status = previous_status
            self._publish_rollback(notified, AccountVerificationDecided(account_id=account_id, new_status=previous_status))
            raise

        logger.info(f"Account {account_id} marked {new_status.value} by {actor.account_id}")
        return account.model_copy(deep=True)

    @staticmethod
    def _publish_rollback(listeners: List[DecisionListener], event: AccountVerificationDecided) -> None:
        """Replay the restored status to listeners that already saw the failed decision."""
        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Listener failed while restoring {event.account_id}: {e}")

    def get(self, account_id: str) -> Account:
        return self._get(account_id).model_copy(deep=True)

    def find(self, account_id: str) -> Optional[Account]:
        account = self._accounts.get(account_id)
        return account.model_copy(deep=True) if account else None

    def list(self, account_filter: Optional[AccountFilter] = None) -> List[Account]:
        account_filter = account_filter or AccountFilter()
        return [
            account.model_copy(deep=True)
            for account in self._accounts.values()
            if account_filter.matches(account)
        ]

    def __len__(self) -> int:
        return len(self._accounts)

    def _get(self, account_id: str) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    @staticmethod
    def _require_contact(profile: AccountCreate) -> None:
        missing = [name for name in ("email", "phone") if not getattr(profile, name, "").strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")



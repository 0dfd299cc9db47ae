"""
Pydantic models for accounts and identity verification.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional
from enum import Enum


class Role(str, Enum):
    """Closed set of account roles. Role never changes after creation."""
    CITIZEN = "citizen"
    DISPATCH_ADMIN = "dispatch_admin"
    AGENCY_ADMIN = "agency_admin"


class AgencyType(str, Enum):
    """Response agencies a report can be assigned to."""
    BFP = "BFP"    # Bureau of Fire Protection
    PNP = "PNP"    # Philippine National Police
    PCG = "PCG"    # Philippine Coast Guard
    NONE = "NONE"


class AccountVerificationStatus(str, Enum):
    """
    Identity review state of an account.

    unverified → pending happens when the owner submits an ID document.
    Only a dispatch admin can move an account to verified (or back).
    """
    UNVERIFIED = "unverified"
    PENDING = "pending"
    VERIFIED = "verified"


class AccountCreate(BaseModel):
    """Registration form fields (citizen self-registration or staff provisioning)."""
    full_name: str = Field("", max_length=200, description="Display name")
    email: str = Field("", max_length=320, description="Contact email")
    phone: str = Field("", max_length=50, description="Contact phone")

    class Config:
        json_schema_extra = {
            "example": {
                "full_name": "Amina Salih",
                "email": "amina@example.ph",
                "phone": "+639171234567",
            }
        }
        extra = "ignore"


class StaffAccountCreate(AccountCreate):
    """Administrator-provisioned staff account."""
    role: Role = Field(..., description="dispatch_admin or agency_admin")
    agency: Optional[AgencyType] = Field(None, description="Required iff role is agency_admin")


class Account(BaseModel):
    """A known account and its current verification status."""
    id: str = Field(..., description="Account token (USR- prefix)")
    full_name: str
    email: str
    phone: str
    role: Role = Role.CITIZEN
    agency: Optional[AgencyType] = None
    verification_status: AccountVerificationStatus = AccountVerificationStatus.UNVERIFIED
    id_image_url: Optional[str] = Field(None, description="Submitted identity document reference")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class IdentityDocumentSubmission(BaseModel):
    """Self-service identity document upload."""
    image_url: str = Field(..., description="Reference to the uploaded ID image")


class VerificationDecision(str, Enum):
    """Decisions a dispatch admin can take on an account."""
    VERIFIED = "verified"
    UNVERIFIED = "unverified"


class AccountFilter(BaseModel):
    """Filters for the account review list."""
    search: Optional[str] = Field(None, description="Case-insensitive match on name or email")
    verification_status: Optional[AccountVerificationStatus] = None
    role: Optional[Role] = None

    def matches(self, account: Account) -> bool:
        if self.verification_status is not None and account.verification_status != self.verification_status:
            return False
        if self.role is not None and account.role != self.role:
            return False
        if self.search:
            term = self.search.lower()
            return term in account.full_name.lower() or term in account.email.lower()
        return True

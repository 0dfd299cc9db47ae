"""
Actor variants - who is issuing a command or query.

Closed union over the three roles. Policy and engine code dispatches on
the concrete class and raises TypeError for anything else, so a new role
has to be handled everywhere before it can be used.
"""

from dataclasses import dataclass
from typing import Union

from app.models.account import Account, AgencyType, Role


@dataclass(frozen=True)
class CitizenActor:
    account_id: str


@dataclass(frozen=True)
class DispatchAdminActor:
    account_id: str


@dataclass(frozen=True)
class AgencyAdminActor:
    account_id: str
    agency: AgencyType


Actor = Union[CitizenActor, DispatchAdminActor, AgencyAdminActor]


def actor_for(account: Account) -> Actor:
    """Build the actor variant matching an account's role."""
    if account.role == Role.CITIZEN:
        return CitizenActor(account_id=account.id)
    if account.role == Role.DISPATCH_ADMIN:
        return DispatchAdminActor(account_id=account.id)
    if account.role == Role.AGENCY_ADMIN:
        return AgencyAdminActor(account_id=account.id, agency=account.agency)
    raise TypeError(f"Unhandled role: {account.role!r}")


def unhandled_actor(actor) -> TypeError:
    return TypeError(f"Unhandled actor variant: {type(actor).__name__}")

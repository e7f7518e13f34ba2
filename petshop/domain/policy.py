"""Role & visibility policy.

Pure decisions about what a role may see and do. Each decision names the
roles it grants explicitly; anything else, including a role the policy does
not recognize, gets the most restrictive answer.
"""

from dataclasses import dataclass
from typing import Optional, Union

from ..models import Role

# Owner id that no stored record can carry
NOBODY = ""


@dataclass(frozen=True)
class AllRecords:
    """Scope covering every appointment"""


@dataclass(frozen=True)
class OwnedBy:
    """Scope covering the appointments booked by one user"""

    user_id: str


Scope = Union[AllRecords, OwnedBy]


@dataclass(frozen=True)
class Principal:
    """The resolved identity behind a request"""

    user_id: str
    role: Optional[Role]


def scope_for(role: Optional[Role], requester_id: str) -> Scope:
    """Map a role and requester to the records they may list or fetch"""
    if role is Role.ADMIN or role is Role.EMPLOYEE:
        return AllRecords()
    if role is Role.CLIENT:
        return OwnedBy(requester_id)
    return OwnedBy(NOBODY)


def includes_owner_profile(role: Optional[Role]) -> bool:
    """Whether appointment responses carry the booking user's profile"""
    return _is_staff(role)


def can_book(role: Optional[Role]) -> bool:
    return role is Role.CLIENT


def can_change_status(role: Optional[Role]) -> bool:
    return _is_staff(role)


def can_delete(role: Optional[Role]) -> bool:
    return role is Role.ADMIN


def _is_staff(role: Optional[Role]) -> bool:
    return role is Role.EMPLOYEE or role is Role.ADMIN

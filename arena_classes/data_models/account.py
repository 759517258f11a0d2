"""Account data models"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import ClassVar, Dict, List, Optional

from .base import BaseModel


@dataclass(frozen=True)
class Account(BaseModel):
    """Library card credentials supplied by the caller.

    `name` is the card number the portal expects in its username field.
    """

    id: str
    name: str
    password: str

    def to_dict(self) -> Dict[str, object]:
        data = super().to_dict()
        data["password"] = "***"
        return data


@dataclass
class LentItem(BaseModel):
    """A loan on the account"""

    # the portal prints two-digit years, some installations four
    DATE_INPUT_FORMATS: ClassVar[Dict[str, List[str]]] = {"deadline": ["%d.%m.%y", "%d.%m.%Y"]}

    id: str
    title: Optional[str] = None
    author: Optional[str] = None
    format: Optional[str] = None
    lending_branch: Optional[str] = None
    deadline: Optional[date] = None
    renewable: bool = False
    prolong_data: Optional[str] = None
    status: Optional[str] = None


@dataclass
class ReservedItem(BaseModel):
    """A reservation on the account"""

    id: str
    title: Optional[str] = None
    author: Optional[str] = None
    format: Optional[str] = None
    cover: Optional[str] = None
    branch: Optional[str] = None
    status: Optional[str] = None
    cancel_data: Optional[str] = None


@dataclass
class AccountData(BaseModel):
    """Snapshot of a logged-in account"""

    account_id: str
    pending_fees: Optional[str] = None
    lent: List[LentItem] = field(default_factory=list)
    reservations: List[ReservedItem] = field(default_factory=list)

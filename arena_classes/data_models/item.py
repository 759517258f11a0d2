"""Data models for a single catalog record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .base import BaseModel


@dataclass(frozen=True)
class Detail(BaseModel):
    """A label/value pair shown on the detail page"""

    desc: str
    content: str


@dataclass
class Copy(BaseModel):
    """One physical copy (holding) of an item"""

    department: Optional[str] = None
    shelfmark: Optional[str] = None
    status: Optional[str] = None


@dataclass
class DetailedItem(BaseModel):
    """Represents the full record of one catalog item"""

    id: str
    title: str = ""
    details: List[Detail] = field(default_factory=list)
    cover: Optional[str] = None
    copies: List[Copy] = field(default_factory=list)
    reservable: bool = False
    reservation_info: Optional[str] = None

"""Outcomes of the multi-step account actions (reserve, renew, cancel).

An action ends in exactly one of four variants. `SelectionNeeded` means the
portal wants one more choice from the user; call the action again with one of
the offered option keys as `selection`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Union

from .base import BaseModel
from .search import DropdownOption


class ActionStatus(str, Enum):
    OK = "ok"
    ERROR = "error"
    SELECTION_NEEDED = "selection_needed"
    UNSUPPORTED = "unsupported"


ACTION_BRANCH = "branch"


@dataclass(frozen=True)
class ActionOk(BaseModel):
    status: ClassVar[ActionStatus] = ActionStatus.OK


@dataclass(frozen=True)
class ActionError(BaseModel):
    message: Optional[str] = None

    status: ClassVar[ActionStatus] = ActionStatus.ERROR


@dataclass(frozen=True)
class SelectionNeeded(BaseModel):
    action: str
    options: List[DropdownOption] = field(default_factory=list)

    status: ClassVar[ActionStatus] = ActionStatus.SELECTION_NEEDED


@dataclass(frozen=True)
class ActionUnsupported(BaseModel):
    status: ClassVar[ActionStatus] = ActionStatus.UNSUPPORTED


MultiStepResult = Union[ActionOk, ActionError, SelectionNeeded, ActionUnsupported]

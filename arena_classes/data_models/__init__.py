from .account import Account, AccountData, LentItem, ReservedItem
from .item import Copy, Detail, DetailedItem
from .results import (
    ACTION_BRANCH,
    ActionError,
    ActionOk,
    ActionStatus,
    ActionUnsupported,
    MultiStepResult,
    SelectionNeeded,
)
from .search import (
    DropdownOption,
    SearchField,
    SearchFieldKind,
    SearchQuery,
    SearchRequestResult,
    SearchResult,
    SearchResultStatus,
    SearchSession,
)

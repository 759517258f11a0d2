"""Client for the Axiell Arena web catalog."""

from .exceptions import (
    ArenaError,
    AuthenticationFailed,
    MalformedMarkup,
    NoActiveSearch,
)

__all__ = [
    "ArenaError",
    "AuthenticationFailed",
    "MalformedMarkup",
    "NoActiveSearch",
]

"""Cross-platform player identity linking backed by a relational store."""

from playerlink.core.errors import (
    InvalidUsernameError,
    MalformedIdentityError,
    PlayerLinkError,
    StorageError,
)
from playerlink.services.link_verification import LinkRequestResult
from playerlink.services.player_link import DatabasePlayerLink, PlayerLinkStore
from playerlink.services.request_janitor import LinkRequestJanitor

__all__ = [
    "DatabasePlayerLink",
    "InvalidUsernameError",
    "LinkRequestJanitor",
    "LinkRequestResult",
    "MalformedIdentityError",
    "PlayerLinkError",
    "PlayerLinkStore",
    "StorageError",
]

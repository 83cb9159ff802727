"""SQLAlchemy ORM models for player linking.

- base.py: Base, IdentityBinary column type
- confirmed_link.py: ConfirmedLink (durable links)
- pending_request.py: PendingLinkRequest (in-flight link requests)
"""

from playerlink.models.base import USERNAME_MAX_LENGTH, Base, IdentityBinary
from playerlink.models.confirmed_link import ConfirmedLink
from playerlink.models.pending_request import LINK_CODE_MAX_LENGTH, PendingLinkRequest

__all__ = [
    "Base",
    "IdentityBinary",
    "USERNAME_MAX_LENGTH",
    "LINK_CODE_MAX_LENGTH",
    "ConfirmedLink",
    "PendingLinkRequest",
]

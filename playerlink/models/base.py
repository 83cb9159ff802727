"""SQLAlchemy base class and shared column types.

Identity columns are BINARY(16) on every dialect. IdentityBinary runs each
bound and loaded value through the identity codec, so model attributes are
always uuid.UUID and the stored bytes are always the canonical form.
"""

import uuid

from sqlalchemy import BINARY
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from playerlink.core.identity import IDENTITY_LENGTH, decode_identity, encode_identity

# Storage width for usernames (VARCHAR(16))
USERNAME_MAX_LENGTH = 16


class IdentityBinary(TypeDecorator[uuid.UUID]):
    """uuid.UUID stored as canonical big-endian BINARY(16)."""

    impl = BINARY(IDENTITY_LENGTH)
    cache_ok = True

    def process_bind_param(
        self, value: uuid.UUID | None, dialect: Dialect
    ) -> bytes | None:
        if value is None:
            return None
        return encode_identity(value)

    def process_result_value(
        self, value: bytes | None, dialect: Dialect
    ) -> uuid.UUID | None:
        if value is None:
            return None
        return decode_identity(value)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        uuid.UUID: IdentityBinary(),
    }

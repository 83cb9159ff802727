"""Identity codec.

Player identities are 128-bit UUIDs stored as 16 raw bytes: the most
significant 64 bits followed by the least significant 64 bits, both
big-endian. The byte form is used as a storage key and for equality,
so it must be bit-exact across processes.
"""

import uuid

from playerlink.core.errors import MalformedIdentityError

IDENTITY_LENGTH = 16

_HALF_MASK = (1 << 64) - 1


def encode_identity(identity: uuid.UUID) -> bytes:
    """Encode an identity to its canonical 16-byte form.

    Args:
        identity: Player identity.

    Returns:
        High 64 bits then low 64 bits, big-endian.

    Raises:
        MalformedIdentityError: If identity is not a UUID.
    """
    if not isinstance(identity, uuid.UUID):
        raise MalformedIdentityError(
            f"Expected a UUID identity, got {type(identity).__name__}"
        )
    value = identity.int
    high = (value >> 64) & _HALF_MASK
    low = value & _HALF_MASK
    return high.to_bytes(8, "big") + low.to_bytes(8, "big")


def decode_identity(data: bytes | bytearray | memoryview) -> uuid.UUID:
    """Decode a canonical 16-byte identity.

    Args:
        data: Raw identity bytes as read from storage.

    Returns:
        The decoded identity.

    Raises:
        MalformedIdentityError: If data is not bytes-like or not 16 bytes long.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise MalformedIdentityError(
            f"Expected identity bytes, got {type(data).__name__}"
        )
    raw = bytes(data)
    if len(raw) != IDENTITY_LENGTH:
        raise MalformedIdentityError(
            f"Identity must be {IDENTITY_LENGTH} bytes, got {len(raw)}"
        )
    high = int.from_bytes(raw[:8], "big")
    low = int.from_bytes(raw[8:], "big")
    return uuid.UUID(int=(high << 64) | low)

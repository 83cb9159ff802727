"""Link code generation.

Codes are decimal digits drawn from the secrets module, so they are
unpredictable and easy to type in game chat.
"""

import secrets

from playerlink.models.pending_request import LINK_CODE_MAX_LENGTH

DEFAULT_LINK_CODE_LENGTH = 6


def generate_link_code(length: int = DEFAULT_LINK_CODE_LENGTH) -> str:
    """Generate a zero-padded numeric link code.

    Args:
        length: Number of digits (1 to 16).

    Returns:
        Code string of exactly ``length`` digits.

    Raises:
        ValueError: If length does not fit the link_code column.
    """
    if not 1 <= length <= LINK_CODE_MAX_LENGTH:
        msg = f"Link code length must be between 1 and {LINK_CODE_MAX_LENGTH}"
        raise ValueError(msg)
    return f"{secrets.randbelow(10**length):0{length}d}"

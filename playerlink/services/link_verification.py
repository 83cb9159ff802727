"""Link request protocol.

Turns an unauthenticated claim ("I am primary user X, link me to this
secondary identity") into a confirmed link once the player proves control
of X by submitting the code delivered to X.

verify_link_request() state machine, all in the caller's transaction:
1. No pending request for the primary username → NO_LINK_REQUESTED
2. Request was made for a different secondary username → consume it,
   NO_LINK_REQUESTED (a code for player A cannot be redeemed by player B)
3. Wrong code → INVALID_CODE, request kept so the player can retry
4. Consume the request as read; if it was already consumed or replaced since
   the read → NO_LINK_REQUESTED
5. Request older than the timeout → REQUEST_EXPIRED
6. Upsert the confirmed link → LINK_COMPLETED
"""

import hmac
import uuid
from enum import Enum

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from playerlink.repositories.confirmed_link_repository import ConfirmedLinkRepository
from playerlink.repositories.link_request_repository import LinkRequestRepository
from playerlink.services.link_code import DEFAULT_LINK_CODE_LENGTH, generate_link_code

logger = structlog.get_logger()


class LinkRequestResult(str, Enum):
    """Outcome of a verification attempt. Every value is terminal."""

    NO_LINK_REQUESTED = "no_link_requested"
    INVALID_CODE = "invalid_code"
    REQUEST_EXPIRED = "request_expired"
    LINK_COMPLETED = "link_completed"


async def create_link_request(
    db: AsyncSession,
    *,
    primary_id: uuid.UUID,
    primary_username: str,
    secondary_username: str,
    now: int,
    code_length: int = DEFAULT_LINK_CODE_LENGTH,
) -> str:
    """Start a link request and return its code.

    Any earlier request for the same primary username is replaced.

    Args:
        db: Async database session.
        primary_id: Primary identity starting the link.
        primary_username: Primary username (request key).
        secondary_username: Secondary username the link is meant for.
        now: Current time in seconds since the epoch.
        code_length: Number of digits in the generated code.

    Returns:
        The link code, to be delivered to the player out of band.
    """
    link_code = generate_link_code(code_length)
    await LinkRequestRepository.upsert(
        db,
        primary_username=primary_username,
        primary_id=primary_id,
        link_code=link_code,
        secondary_username=secondary_username,
        requested_at=now,
    )
    logger.info(
        "link_request_created",
        primary_username=primary_username,
        secondary_username=secondary_username,
    )
    return link_code


async def verify_link_request(
    db: AsyncSession,
    *,
    secondary_id: uuid.UUID,
    primary_username: str,
    secondary_username: str,
    code: str,
    now: int,
    timeout: int,
) -> LinkRequestResult:
    """Adjudicate a submitted link code.

    Args:
        db: Async database session.
        secondary_id: Identity of the secondary player submitting the code.
        primary_username: Primary username the request was made under.
        secondary_username: Username of the secondary player submitting the code.
        code: Submitted link code.
        now: Current time in seconds since the epoch.
        timeout: Request lifetime in seconds.

    Returns:
        The LinkRequestResult for this attempt.
    """
    request = await LinkRequestRepository.get(db, primary_username)
    if request is None:
        logger.info("link_request_missing", primary_username=primary_username)
        return LinkRequestResult.NO_LINK_REQUESTED

    # Read everything needed before the row is deleted.
    requested_for = request.secondary_username
    primary_id = request.primary_id
    stored_code = request.link_code
    requested_at = request.requested_at
    expired = request.is_expired(timeout, now)

    if requested_for != secondary_username:
        await LinkRequestRepository.consume(
            db, primary_username, link_code=stored_code, requested_at=requested_at
        )
        logger.warning(
            "link_request_wrong_player",
            primary_username=primary_username,
            requested_for=requested_for,
            submitted_by=secondary_username,
        )
        return LinkRequestResult.NO_LINK_REQUESTED

    if not hmac.compare_digest(stored_code.encode(), code.encode()):
        logger.info("link_request_invalid_code", primary_username=primary_username)
        return LinkRequestResult.INVALID_CODE

    # The request is adjudicated now, expired or not. Only the row that was
    # read is deleted; a request replaced since then is left alone.
    removed = await LinkRequestRepository.consume(
        db, primary_username, link_code=stored_code, requested_at=requested_at
    )
    if removed == 0:
        logger.info(
            "link_request_consumed_or_replaced", primary_username=primary_username
        )
        return LinkRequestResult.NO_LINK_REQUESTED

    if expired:
        logger.info(
            "link_request_expired",
            primary_username=primary_username,
            age_seconds=now - requested_at,
        )
        return LinkRequestResult.REQUEST_EXPIRED

    await ConfirmedLinkRepository.upsert(
        db,
        secondary_id=secondary_id,
        primary_id=primary_id,
        primary_username=primary_username,
    )
    logger.info(
        "link_completed",
        primary_username=primary_username,
        primary_id=str(primary_id),
        secondary_id=str(secondary_id),
    )
    return LinkRequestResult.LINK_COMPLETED

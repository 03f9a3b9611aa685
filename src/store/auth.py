# seller login against the identity service, gated by the sellers table
from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

import httpx
from supabase import AuthError, AuthRetryableError

from store import gateway, models
from store.client import connect
from store.errors import NetworkError, StoreNotConfiguredError
from utils.logger import get_logger

if TYPE_CHECKING:
    from utils.session import SessionStore, Tokens

_logger = get_logger(__name__)

# the identity service could not be reached, as opposed to saying no
UNREACHABLE = (AuthRetryableError, httpx.HTTPError, StoreNotConfiguredError)


async def _sign_in(
    email: str, password: str
) -> Optional[Tuple[str, Optional["Tokens"]]]:
    """Return (subject id, session tokens), None for rejected credentials.

    Raises NetworkError when the identity service cannot be reached.
    """
    try:
        async with connect() as client:
            res = await client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
    except UNREACHABLE as e:
        raise NetworkError(f"network error: {e}") from e
    except AuthError as e:
        _logger.info(f"Sign-in rejected for {email}: {e}")
        return None
    if res.user is None:
        return None
    tokens = None
    if res.session is not None:
        tokens = (res.session.access_token, res.session.refresh_token)
    return str(res.user.id), tokens


async def _sign_out() -> None:
    try:
        async with connect() as client:
            await client.auth.sign_out()
    except (AuthError, httpx.HTTPError, StoreNotConfiguredError) as e:
        _logger.error(f"Error signing out of identity service: {e}")


async def login(
    email: str, password: str, sessions: "SessionStore"
) -> Optional[models.Seller]:
    """
    Return the active Seller for these credentials, or None.

    An identity without an active seller row is signed out again and any
    local session is cleared, so a deactivated seller keeps no access.
    """
    signed_in = await _sign_in(email.strip(), password)
    if signed_in is None:
        return None
    uid, tokens = signed_in

    seller = await gateway.get_active_seller(uid)
    if seller is None:
        _logger.warning(f"Identity {uid} has no active seller record, signing out.")
        await _sign_out()
        await sessions.clear()
        return None

    if tokens is None:
        # never keep another identity's tokens next to this seller
        await sessions.clear()
    await sessions.save(seller, tokens=tokens)
    _logger.info(f"Seller {seller.email} logged in.")
    return seller


async def resume(sessions: "SessionStore") -> Optional[models.Seller]:
    """
    Pick up a saved, unexpired session and hand its tokens back to the
    identity service so table calls run as the seller again.

    Tokens the service rejects end the session. An unreachable service
    keeps it; table calls then run with the anon key until the next login.
    """
    seller = await sessions.load()
    if seller is None:
        return None
    tokens = await sessions.load_tokens()
    if tokens is None:
        _logger.warning(f"Session for {seller.email} has no identity tokens.")
        return seller

    try:
        async with connect() as client:
            await client.auth.set_session(*tokens)
    except UNREACHABLE as e:
        _logger.warning(f"Could not restore identity session: {e}")
    except AuthError as e:
        _logger.info(f"Saved identity session for {seller.email} rejected: {e}")
        await sessions.clear()
        return None
    return seller


async def logout(sessions: "SessionStore") -> None:
    """Drop the local session and the identity session behind it."""
    await sessions.clear()
    await _sign_out()

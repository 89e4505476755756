"""Request identity: an identified user id and/or a guest storage namespace.

Authentication happens upstream; this layer only reads the resulting ids.
Each browser sends its own guest id, so there is no shared fallback
namespace: guest progress is never read or written without one.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header

from learnpath.exceptions import AuthenticationRequiredError
from learnpath.storage.factory import validate_guest_id


@dataclass(frozen=True)
class Identity:
    """Who a request acts for."""

    user_id: str | None
    guest_id: str | None

    @property
    def is_guest(self) -> bool:
        """True when no identified user is available."""
        return self.user_id is None


async def get_identity(
    x_user_id: Annotated[str | None, Header()] = None,
    x_guest_id: Annotated[str | None, Header()] = None,
) -> Identity:
    """Build the identity from request headers.

    Raises
    ------
        AuthenticationRequiredError: If the request carries neither id.
    """
    user_id = x_user_id.strip() if x_user_id else None
    guest_id = validate_guest_id(x_guest_id) if x_guest_id else None
    if not user_id and guest_id is None:
        msg = "Send X-User-Id when signed in or X-Guest-Id as a guest"
        raise AuthenticationRequiredError(msg)
    return Identity(user_id=user_id or None, guest_id=guest_id)


async def get_required_user_id(identity: Annotated[Identity, Depends(get_identity)]) -> str:
    """Get the identified user id, failing for guests."""
    if identity.user_id is None:
        raise AuthenticationRequiredError()
    return identity.user_id


async def get_required_guest_id(identity: Annotated[Identity, Depends(get_identity)]) -> str:
    """Get the guest namespace id, failing when the client sent none."""
    if identity.guest_id is None:
        msg = "X-Guest-Id is required to access guest progress"
        raise AuthenticationRequiredError(msg)
    return identity.guest_id


CurrentIdentity = Annotated[Identity, Depends(get_identity)]
RequiredUserId = Annotated[str, Depends(get_required_user_id)]
RequiredGuestId = Annotated[str, Depends(get_required_guest_id)]

"""Identity providers."""
from typing import Optional

from ..models import AuthenticatedUser


class StaticIdentity:
    """
    Identity provider for a fixed, pre-authenticated user.

    Implements IIdentityProvider. An empty uid means nobody is signed in.
    """

    def __init__(self, uid: Optional[str], display_name: Optional[str] = None):
        self._user = AuthenticatedUser(uid, display_name) if uid else None

    def current_user(self) -> Optional[AuthenticatedUser]:
        return self._user

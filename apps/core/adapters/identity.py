# apps/core/adapters/identity.py
from typing import Optional

from apps.core.ports.identity import IIdentityProvider, UserRef


class RequestIdentityProvider(IIdentityProvider):
    """Użytkownik z sesji Django (request.user)."""

    def __init__(self, request):
        self.request = request

    def get_current_user(self) -> Optional[UserRef]:
        user = getattr(self.request, 'user', None)
        if user is None or not user.is_authenticated:
            return None
        return UserRef(id=user.id)


class StaticIdentityProvider(IIdentityProvider):
    def __init__(self, user_id: Optional[int] = None):
        self.user_id = user_id

    def get_current_user(self) -> Optional[UserRef]:
        if self.user_id is None:
            return None
        return UserRef(id=self.user_id)

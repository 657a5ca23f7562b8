# apps/core/ports/identity.py
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UserRef:
    id: int


class IIdentityProvider(ABC):
    @abstractmethod
    def get_current_user(self) -> Optional[UserRef]:
        """Zwraca zalogowanego użytkownika albo None."""
        pass

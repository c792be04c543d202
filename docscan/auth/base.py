from abc import ABC, abstractmethod

from docscan.auth.models import Actor


class BaseAuthorizationService(ABC):
    """Contract for the external authorization collaborator."""

    @abstractmethod
    def is_authorized(self, actor: Actor, capability: str) -> bool:
        """Return whether *actor* may perform *capability*."""

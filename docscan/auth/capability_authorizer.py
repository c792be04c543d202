from docscan.auth.base import BaseAuthorizationService
from docscan.auth.models import Actor


class CapabilitySetAuthorizer(BaseAuthorizationService):
    """Grants a capability when the actor carries it (or the ``*`` wildcard)."""

    WILDCARD = "*"

    def is_authorized(self, actor: Actor, capability: str) -> bool:
        return capability in actor.capabilities or self.WILDCARD in actor.capabilities

class UnauthorizedError(Exception):
    """Raised when an actor lacks the capability an operation requires."""

    def __init__(self, actor_id: str, capability: str) -> None:
        self.actor_id = actor_id
        self.capability = capability
        super().__init__(f"Actor '{actor_id}' is not authorized for '{capability}'")

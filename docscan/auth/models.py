from dataclasses import dataclass, field


@dataclass(frozen=True)
class Actor:
    """The user on whose behalf a pipeline operation runs."""

    id: str
    department: str | None = None
    capabilities: frozenset[str] = field(default_factory=frozenset)

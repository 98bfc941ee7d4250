"""Exception types shared across the case-analysis core."""


class JustinianusError(Exception):
    """Base exception for case-analysis errors."""

    pass


class NotFoundError(JustinianusError, KeyError):
    """Raised when a node, edge, deadline or case id is unknown to a store."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id

    def __str__(self) -> str:
        return f"{self.kind} not found: {self.item_id}"


class GraphIntegrityError(JustinianusError):
    """Raised when an edge would dangle or point a node at itself."""

    pass

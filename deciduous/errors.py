"""Exception types raised while compiling and rendering threat trees."""

from typing import Optional


class DeciduousError(Exception):
    """Base class for all errors raised by this package."""
    pass


class DecodeError(DeciduousError):
    """Raised when the document text is not well-formed YAML."""
    pass


class ValidationError(DeciduousError):
    """Raised when a decoded document breaks a structural rule.

    The whole document is rejected; no partial graph is ever produced.
    """

    def __init__(self, reason: str, node_id: Optional[str] = None):
        self.reason = reason
        self.node_id = node_id
        if node_id is None:
            message = reason
        else:
            message = f"Node '{node_id}': {reason}"
        super().__init__(message)


class FilterError(ValidationError):
    """Raised when a filter entry does not name a declared node."""
    pass


class EmissionDefect(DeciduousError):
    """A style table has no entry for a produced combination.

    This is a programming defect, not a user error; hosts should not catch it.
    """
    pass


class RenderError(DeciduousError):
    """Raised when the Graphviz layout engine fails or is not installed."""
    pass

"""
Exception hierarchy for the restructuring engine.

Both pipelines fail fast on the first detected invariant violation; a
partially restructured tree is never returned.
"""
from typing import Optional


class SpanweaveError(Exception):
    """Base class for all restructuring errors."""


class InvalidTree(SpanweaveError):
    """Malformed input handed to the flattener or document adapter."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{message} (at {path})"
        super().__init__(message)


class OverlapResolutionFailure(SpanweaveError):
    """The nester reached a label configuration it cannot resolve."""


class NestingDepthExceeded(OverlapResolutionFailure):
    """Recursive re-nesting went deeper than the configured bound."""

    def __init__(self, depth: int, max_depth: int):
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"Re-nesting depth {depth} exceeds the configured maximum of {max_depth}"
        )


class ContentMismatch(SpanweaveError):
    """Content changed across a transform. Diagnostic use only."""

    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        super().__init__(message)

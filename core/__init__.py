"""Core package - Domain models, constants and errors."""

from .models import (
    Label,
    Text,
    Element,
    Run,
    Container,
    Block,
    iter_leaves,
    to_outline,
)
from .constants import (
    MARKER_SEPARATOR,
    MARKER_PATTERN,
    DEFAULT_MAX_NESTING_DEPTH,
    MAX_NESTING_DEPTH_LIMIT,
    NAMESPACE_ATTRIBUTE_PREFIXES,
)
from .errors import (
    SpanweaveError,
    InvalidTree,
    OverlapResolutionFailure,
    NestingDepthExceeded,
    ContentMismatch,
)

__all__ = [
    'Label',
    'Text',
    'Element',
    'Run',
    'Container',
    'Block',
    'iter_leaves',
    'to_outline',
    'MARKER_SEPARATOR',
    'MARKER_PATTERN',
    'DEFAULT_MAX_NESTING_DEPTH',
    'MAX_NESTING_DEPTH_LIMIT',
    'NAMESPACE_ATTRIBUTE_PREFIXES',
    'SpanweaveError',
    'InvalidTree',
    'OverlapResolutionFailure',
    'NestingDepthExceeded',
    'ContentMismatch',
]

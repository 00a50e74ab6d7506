"""Utilities package - Helper functions for content checks and logging."""

from .text_utils import (
    leaf_runs,
    content_text,
    element_payloads,
    first_difference,
    assert_content_preserved,
)

from .logging_utils import (
    configure_logging,
    get_logger,
)

__all__ = [
    # Text utils
    'leaf_runs',
    'content_text',
    'element_payloads',
    'first_difference',
    'assert_content_preserved',

    # Logging utils
    'configure_logging',
    'get_logger',
]

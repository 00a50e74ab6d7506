"""Nesting package - Flatten and nest overlapping label annotations."""

from .markers import (
    MarkerSource,
    default_markers,
)

from .flattener import (
    flatten,
)

from .grouping import (
    LabelGroup,
    label_order,
    bridgeable_runs,
    find_candidate_groups,
    claim_groups,
    group_runs,
)

from .nester import (
    nest,
    check_no_redundant_wrapping,
)

from .cleanup import (
    strip_markers,
    strip_run_markers,
    strip_marker_text,
    clean_attributes,
)

from .pipeline import (
    nest_clean,
    normalize,
)

__all__ = [
    # Instance markers
    'MarkerSource',
    'default_markers',

    # Flattening
    'flatten',

    # Grouping
    'LabelGroup',
    'label_order',
    'bridgeable_runs',
    'find_candidate_groups',
    'claim_groups',
    'group_runs',

    # Nesting
    'nest',
    'check_no_redundant_wrapping',

    # Cleanup
    'strip_markers',
    'strip_run_markers',
    'strip_marker_text',
    'clean_attributes',

    # Pipelines
    'nest_clean',
    'normalize',
]

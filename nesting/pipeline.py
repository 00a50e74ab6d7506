"""
Composed transforms used by document adapters.

- ``nest_clean``: nest a flat sequence and strip instance markers
- ``normalize``: flatten, nest and clean a tree, keeping the block's own
  tag and attributes
"""
from typing import List, Optional, Sequence

from core.models import Block, Run
from nesting.cleanup import clean_attributes, strip_markers
from nesting.flattener import flatten
from nesting.markers import MarkerSource
from nesting.nester import nest
from utils.text_utils import assert_content_preserved


def nest_clean(
    runs: Sequence[Run],
    *,
    max_depth: Optional[int] = None,
    bridge_whitespace: Optional[bool] = None,
    verify: bool = False,
) -> Block:
    """
    Nest ``runs`` and strip instance markers from the result.

    Raises:
        ContentMismatch: if ``verify`` is set and content changed
    """
    block = strip_markers(nest(runs, max_depth=max_depth, bridge_whitespace=bridge_whitespace))
    if verify:
        assert_content_preserved(runs, block)
    return block


def normalize(
    tree: Block,
    *,
    markers: Optional[MarkerSource] = None,
    max_depth: Optional[int] = None,
    bridge_whitespace: Optional[bool] = None,
    verify: bool = False,
) -> Block:
    """
    Re-derive the canonical nesting of ``tree``.

    Overlapping or redundantly nested containers are resolved the same way
    edited flat runs would be.
    """
    runs: List[Run] = flatten(tree, markers)
    block = nest_clean(runs, max_depth=max_depth, bridge_whitespace=bridge_whitespace)
    block = Block(children=block.children, attributes=clean_attributes(tree.attributes), tag=tree.tag)
    if verify:
        assert_content_preserved(tree, block)
    return block

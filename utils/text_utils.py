"""
Text utilities for restructuring checks.

Handles content extraction and the content-preservation check used by
tests and the CLI's ``--verify`` flag.
"""
from typing import Iterable, List, Tuple, Union

from core.errors import ContentMismatch
from core.models import Block, Container, Element, Run, iter_leaves

ContentSource = Union[Block, Container, Run, Iterable[Union[Container, Run]]]


def leaf_runs(source: ContentSource) -> List[Run]:
    """
    Leaf runs of a tree, a node or a flat sequence, in document order.

    Args:
        source: Block, Container, Run or iterable of nodes

    Returns:
        List of leaf runs
    """
    if isinstance(source, Block):
        return list(source.leaves())
    if isinstance(source, (Container, Run)):
        return list(iter_leaves([source]))
    return list(iter_leaves(source))


def content_text(source: ContentSource) -> str:
    """Concatenated text content."""
    return ''.join(run.text for run in leaf_runs(source))


def element_payloads(source: ContentSource) -> List[Tuple[int, object]]:
    """Opaque element payloads with their leaf position."""
    return [
        (i, run.content.payload)
        for i, run in enumerate(leaf_runs(source))
        if isinstance(run.content, Element)
    ]


def first_difference(before: str, after: str) -> int:
    """Offset of the first differing character, or -1 if equal."""
    if before == after:
        return -1
    for i, (a, b) in enumerate(zip(before, after)):
        if a != b:
            return i
    return min(len(before), len(after))


def assert_content_preserved(before: ContentSource, after: ContentSource) -> None:
    """
    Check that text and opaque elements survived a transform unchanged.

    Raises:
        ContentMismatch: on the first detected difference
    """
    text_before = content_text(before)
    text_after = content_text(after)
    offset = first_difference(text_before, text_after)
    if offset >= 0:
        raise ContentMismatch(
            f"Content differs at offset {offset}: "
            f"{text_before[offset:offset + 20]!r} != {text_after[offset:offset + 20]!r}",
            offset=offset,
        )

    payloads_before = [payload for _, payload in element_payloads(before)]
    payloads_after = [payload for _, payload in element_payloads(after)]
    if len(payloads_before) != len(payloads_after) or any(
        a is not b for a, b in zip(payloads_before, payloads_after)
    ):
        raise ContentMismatch(
            f"Opaque elements changed: {len(payloads_before)} before, {len(payloads_after)} after"
        )

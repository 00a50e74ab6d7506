"""
Flattener

Turns a nested label tree into a flat sequence of minimal runs:
- Every leaf becomes one Run
- A Run carries the ordered labels of all its ancestor containers, each
  tagged with a marker unique to that container instance
- Attributes are inherited from the nearest container defining them; the
  leaf's own attributes win

Traversal uses an explicit stack, so input depth is not limited by the
interpreter's recursion limit.
"""
from typing import Any, Dict, List, Optional, Set, Tuple

from core.errors import InvalidTree
from core.models import Block, Container, Element, Label, Run, Text
from nesting.markers import MarkerSource, default_markers
from utils.logging_utils import get_logger

logger = get_logger(__name__)


def _describe_path(labels: Tuple[Label, ...], index: int) -> str:
    """Readable location of a node for error messages."""
    trail = '/'.join(label.name for label in labels)
    return f"{trail or '<block>'}[{index}]"


def _check_node(node: Any, labels: Tuple[Label, ...], index: int, seen: Set[int]) -> None:
    """
    Validate one node before it is visited.

    Raises:
        InvalidTree: for null or foreign children, empty label names,
            bad leaf content and containers reachable more than once
    """
    path = _describe_path(labels, index)

    if node is None:
        raise InvalidTree("Null child in tree", path)

    if isinstance(node, Container):
        if not isinstance(node.label, Label) or not node.label.name:
            raise InvalidTree("Container without a label name", path)
        if id(node) in seen:
            raise InvalidTree("Container reachable more than once (cycle or shared subtree)", path)
        seen.add(id(node))
        return

    if isinstance(node, Run):
        if not isinstance(node.content, (Text, Element)):
            raise InvalidTree(f"Leaf content of type {type(node.content).__name__} is not Text or Element", path)
        return

    raise InvalidTree(f"Unexpected node type {type(node).__name__}", path)


def _leaf_run(leaf: Run, labels: Tuple[Label, ...], attributes: Dict[str, Any]) -> Run:
    """
    Build the emitted Run for a leaf.

    A leaf that still carries labels of its own (a label-bearing leaf that
    was never wrapped in a container) keeps them, unmarked, after the
    inherited ones. Names already inherited are not repeated.
    """
    inherited_names = {label.name for label in labels}
    own = tuple(label.without_marker() for label in leaf.labels if label.name not in inherited_names)

    return Run(
        content=leaf.content,
        labels=labels + own,
        attributes={**attributes, **leaf.attributes},
    )


def flatten(tree: Block, markers: Optional[MarkerSource] = None) -> List[Run]:
    """
    Flatten a nested tree into an ordered run sequence.

    Args:
        tree: Block whose children are Containers and leaf Runs
        markers: Marker source, defaults to the process-wide one

    Returns:
        Runs in document order; concatenated content equals the tree's

    Raises:
        InvalidTree: if the tree is malformed
    """
    if not isinstance(tree, Block):
        raise InvalidTree(f"Expected a Block, got {type(tree).__name__}")

    source = markers if markers is not None else default_markers
    runs: List[Run] = []
    seen: Set[int] = set()
    dropped = 0

    # (node, index among siblings, inherited labels, inherited attributes)
    stack = [(child, i, (), {}) for i, child in reversed(list(enumerate(tree.children)))]

    while stack:
        node, index, labels, attributes = stack.pop()
        _check_node(node, labels, index, seen)

        if isinstance(node, Run):
            runs.append(_leaf_run(node, labels, attributes))
            continue

        if not node.children:
            dropped += 1
            logger.debug("empty_container_dropped", label=str(node.label), path=_describe_path(labels, index))
            continue

        marked = labels + (source.mark(node.label),)
        merged = {**attributes, **node.attributes}
        stack.extend(
            (child, i, marked, merged)
            for i, child in reversed(list(enumerate(node.children)))
        )

    logger.debug("flattened", runs=len(runs), empty_containers=dropped)
    return runs

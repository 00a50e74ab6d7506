"""
Nester

Rebuilds a nested label tree from a flat run sequence:
1. Group runs by shared label and claim the canonical groups for this
   level (see ``nesting.grouping``)
2. Materialize every claimed group as a Container: strip its label from
   the member runs, then re-nest those runs one level down
3. Reassemble the level in original order: unlabeled runs become leaves,
   each claimed group is emitted once at its first position

Overlapping labels that cannot share a container are split: the part of a
label's stretch that falls inside a larger group is wrapped inside it, the
rest gets a container of its own.

Attributes shared by every run of a group are hoisted onto its container;
leaves keep only what differs from their ancestors, so the effective
attributes of every run are unchanged.
"""
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from config.settings import get_settings
from core.constants import MAX_NESTING_DEPTH_LIMIT
from core.errors import NestingDepthExceeded, OverlapResolutionFailure
from core.models import Block, Container, Node, Run
from nesting.grouping import LabelGroup, bridgeable_runs, group_runs
from utils.logging_utils import get_logger

logger = get_logger(__name__)

_MISSING = object()


def _shared_attributes(runs: Sequence[Run], inherited: Dict[str, Any]) -> Dict[str, Any]:
    """Attributes every run agrees on, minus those already inherited."""
    if not runs:
        return {}

    shared = dict(runs[0].attributes)
    for run in runs[1:]:
        shared = {
            key: value for key, value in shared.items()
            if run.attributes.get(key, _MISSING) == value
        }
    return {
        key: value for key, value in shared.items()
        if inherited.get(key, _MISSING) != value
    }


def _leaf(run: Run, inherited: Dict[str, Any]) -> Run:
    """Fresh unlabeled leaf holding only attributes not already inherited."""
    return Run(
        content=run.content,
        labels=(),
        attributes={
            key: value for key, value in run.attributes.items()
            if inherited.get(key, _MISSING) != value
        },
    )


class _Nester:
    """One nesting pass over a single block."""

    def __init__(self, max_depth: int, bridge_whitespace: bool):
        self.max_depth = max_depth
        self.bridge_whitespace = bridge_whitespace
        self.containers = 0

    def nest_level(
        self,
        runs: Sequence[Run],
        bridgeable: Sequence[bool],
        depth: int,
        inherited: Dict[str, Any],
        path: FrozenSet[str],
    ) -> List[Node]:
        if depth > self.max_depth:
            raise NestingDepthExceeded(depth, self.max_depth)

        groups = []
        if any(run.labels for run in runs):
            groups = group_runs(runs, self.bridge_whitespace, bridgeable)
        by_start = {group.start: group for group in groups}

        nodes: List[Node] = []
        i = 0
        while i < len(runs):
            group = by_start.get(i)
            if group is None:
                run = runs[i]
                if run.labels:
                    raise OverlapResolutionFailure(
                        f"Run {i} ({run.text!r}) carries labels "
                        f"{[str(label) for label in run.labels]} but no group claimed it"
                    )
                nodes.append(_leaf(run, inherited))
                i += 1
            else:
                nodes.append(self.materialize(group, runs, bridgeable, depth, inherited, path))
                i = group.end
        return nodes

    def materialize(
        self,
        group: LabelGroup,
        runs: Sequence[Run],
        bridgeable: Sequence[bool],
        depth: int,
        inherited: Dict[str, Any],
        path: FrozenSet[str],
    ) -> Container:
        members = runs[group.start:group.end]
        member_bridgeable = bridgeable[group.start:group.end]

        for offset, run in enumerate(members):
            if not run.has_label(group.label) and not (self.bridge_whitespace and member_bridgeable[offset]):
                raise OverlapResolutionFailure(
                    f"Run {group.start + offset} ({run.text!r}) in group "
                    f"'{group.label}' does not carry the group's label"
                )

        # Names on the wrapping path are consumed here; an inner instance
        # of the same name collapses into this container.
        inner_path = path | {group.label.name}
        stripped = [run.without_names(inner_path) for run in members]

        attributes = _shared_attributes(members, inherited)
        scope = {**inherited, **attributes}

        self.containers += 1
        children = self.nest_level(stripped, member_bridgeable, depth + 1, scope, inner_path)
        return Container(label=group.label, children=children, attributes=attributes)


def check_no_redundant_wrapping(block: Block) -> None:
    """
    Verify that no container repeats a label name found on its ancestors.

    Raises:
        OverlapResolutionFailure: on the first violation
    """
    stack = [(child, ()) for child in reversed(block.children)]
    while stack:
        node, names = stack.pop()
        if not isinstance(node, Container):
            continue
        if node.label.name in names:
            raise OverlapResolutionFailure(
                f"Container '{node.label}' is nested inside another '{node.label.name}' "
                f"(path: {'/'.join(names)})"
            )
        inner = names + (node.label.name,)
        stack.extend((child, inner) for child in reversed(node.children))


def nest(
    runs: Sequence[Run],
    *,
    max_depth: Optional[int] = None,
    bridge_whitespace: Optional[bool] = None,
) -> Block:
    """
    Build a nested tree from a flat run sequence.

    Args:
        runs: Flat run sequence (typically the output of ``flatten``)
        max_depth: Bound for recursive re-nesting, defaults to
            ``settings.max_nesting_depth`` and never exceeds
            ``MAX_NESTING_DEPTH_LIMIT``
        bridge_whitespace: Group labeled runs across whitespace-only text,
            defaults to ``settings.bridge_whitespace``

    Returns:
        Fresh Block whose leaves carry no labels; instance markers are
        kept (see ``nesting.cleanup.strip_markers``)

    Raises:
        OverlapResolutionFailure: if a group cannot be resolved
        NestingDepthExceeded: if re-nesting goes deeper than ``max_depth``
    """
    current = get_settings()
    if max_depth is None:
        max_depth = current.max_nesting_depth
    if bridge_whitespace is None:
        bridge_whitespace = current.bridge_whitespace

    max_depth = min(max_depth, MAX_NESTING_DEPTH_LIMIT)
    runs = list(runs)
    bridgeable = bridgeable_runs(runs) if bridge_whitespace else [False] * len(runs)

    nester = _Nester(max_depth=max_depth, bridge_whitespace=bridge_whitespace)
    children = nester.nest_level(runs, bridgeable, 0, {}, frozenset())
    block = Block(children=children)

    check_no_redundant_wrapping(block)
    logger.debug("nested", runs=len(runs), containers=nester.containers, top_level=len(children))
    return block

"""
Label Grouping Module

Finds and ranks the label groups the nester wraps into containers:
- Candidate groups: maximal contiguous stretches of runs sharing a label
- Ranking: largest group first, then earliest start, then outermost label
- Claiming: ranked candidates take their positions greedily; a candidate
  overlapping claimed positions is subsumed (fully covered) or clipped to
  its unclaimed stretches and re-ranked (partial overlap)

Runs inside a claimed group keep their other labels; those are resolved by
re-nesting the group's runs one level down.
"""
import heapq
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from core.models import Label, Run
from utils.logging_utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LabelGroup:
    """Contiguous stretch of runs ``[start, end)`` sharing ``label``."""
    label: Label
    start: int
    end: int
    rank: int = 0  # position of label in the first run's ordered label set

    @property
    def size(self) -> int:
        return self.end - self.start

    def sort_key(self) -> Tuple[int, int, int]:
        """Canonical order: larger first, then earlier, then outer label."""
        return (-self.size, self.start, self.rank)

    def positions(self) -> range:
        return range(self.start, self.end)


def label_order(runs: Sequence[Run]) -> List[Label]:
    """Distinct labels in order of first appearance."""
    seen: Dict[Label, None] = {}
    for run in runs:
        for label in run.labels:
            seen.setdefault(label, None)
    return list(seen)


def _rank_in(run: Run, label: Label) -> int:
    return run.labels.index(label)


def _can_bridge(bridgeable: Sequence[bool], start: int, end: int) -> bool:
    """True if every run in ``[start, end)`` may be bridged."""
    return all(bridgeable[i] for i in range(start, end))


def bridgeable_runs(runs: Sequence[Run]) -> List[bool]:
    """Flags for runs that are unlabeled whitespace-only text."""
    return [run.is_whitespace for run in runs]


def find_candidate_groups(
    runs: Sequence[Run],
    bridge_whitespace: bool = False,
    bridgeable: Optional[Sequence[bool]] = None,
) -> List[LabelGroup]:
    """
    Collect every maximal contiguous group for every label.

    Args:
        runs: Flat run sequence
        bridge_whitespace: Let a group continue across unlabeled
            whitespace-only text sitting between two runs with the label
        bridgeable: Per-run flags for the runs a group may continue across,
            defaults to ``bridgeable_runs(runs)``. Nested levels pass the
            flags computed on the original input, so whitespace that only
            lost an enclosing label is never bridged.

    Returns:
        Candidate groups, per label in order of first appearance
    """
    candidates: List[LabelGroup] = []
    if bridge_whitespace and bridgeable is None:
        bridgeable = bridgeable_runs(runs)

    for label in label_order(runs):
        positions = [i for i, run in enumerate(runs) if run.has_label(label)]

        start = prev = positions[0]
        for pos in positions[1:]:
            adjacent = pos == prev + 1
            if not adjacent and bridge_whitespace and _can_bridge(bridgeable, prev + 1, pos):
                adjacent = True
            if not adjacent:
                candidates.append(LabelGroup(label, start, prev + 1, _rank_in(runs[start], label)))
                start = pos
            prev = pos

        candidates.append(LabelGroup(label, start, prev + 1, _rank_in(runs[start], label)))

    return candidates


def _free_stretches(group: LabelGroup, claimed: List[bool]) -> List[Tuple[int, int]]:
    """Maximal sub-ranges of ``group`` whose positions are not yet claimed."""
    stretches = []
    start: Optional[int] = None

    for i in group.positions():
        if claimed[i]:
            if start is not None:
                stretches.append((start, i))
                start = None
        elif start is None:
            start = i

    if start is not None:
        stretches.append((start, group.end))
    return stretches


def _clip(group: LabelGroup, start: int, end: int, runs: Sequence[Run]) -> Optional[LabelGroup]:
    """
    Shrink a free stretch to the runs that actually carry the label.

    Bridged whitespace may sit at the edges of a clipped stretch and must
    not open or close a group on its own.
    """
    while start < end and not runs[start].has_label(group.label):
        start += 1
    while end > start and not runs[end - 1].has_label(group.label):
        end -= 1
    if start >= end:
        return None
    return LabelGroup(group.label, start, end, _rank_in(runs[start], group.label))


def claim_groups(candidates: Sequence[LabelGroup], runs: Sequence[Run]) -> List[LabelGroup]:
    """
    Select the groups wrapped at this nesting level.

    Candidates are taken largest first (ties: earliest start, then the
    label that comes first in the run's ordered label set). A candidate
    whose positions are all claimed is dropped; it is re-discovered when
    the claiming group's runs are re-nested. A partially claimed candidate
    is split into its free stretches, which compete again.

    Returns:
        Claimed groups, disjoint and sorted by start position
    """
    claimed = [False] * len(runs)
    result: List[LabelGroup] = []

    heap = []
    for seq, group in enumerate(candidates):
        heapq.heappush(heap, (group.sort_key(), seq, group))
    seq = len(candidates)

    while heap:
        _, _, group = heapq.heappop(heap)
        stretches = _free_stretches(group, claimed)

        if stretches == [(group.start, group.end)]:
            for i in group.positions():
                claimed[i] = True
            result.append(group)
            continue

        if not stretches:
            logger.debug("group_subsumed", label=str(group.label), start=group.start, end=group.end)
            continue

        logger.debug(
            "group_split",
            label=str(group.label),
            start=group.start,
            end=group.end,
            pieces=len(stretches),
        )
        for start, end in stretches:
            piece = _clip(group, start, end, runs)
            if piece is not None:
                heapq.heappush(heap, (piece.sort_key(), seq, piece))
                seq += 1

    result.sort(key=lambda group: group.start)
    return result


def group_runs(
    runs: Sequence[Run],
    bridge_whitespace: bool = False,
    bridgeable: Optional[Sequence[bool]] = None,
) -> List[LabelGroup]:
    """Candidate discovery followed by claiming, for one nesting level."""
    return claim_groups(find_candidate_groups(runs, bridge_whitespace, bridgeable), runs)

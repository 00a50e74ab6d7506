"""
Core domain models for annotated text restructuring.

These are pure data structures without business logic. Both the nested
form (a ``Block`` of ``Container`` nodes) and the flat form (a list of
``Run`` objects) are built from them.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from core.constants import DEFAULT_BLOCK_TAG, MARKER_PATTERN, MARKER_SEPARATOR


@dataclass(frozen=True)
class Label:
    """An annotation name, optionally tagged with an instance marker."""
    name: str
    marker: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> 'Label':
        """
        Parse a rendered label such as ``"logic"`` or ``"logic__12"``.

        Only a separator followed by ASCII digits is read as a marker;
        anything else stays part of the name.
        """
        match = MARKER_PATTERN.search(text)
        if match and match.start() > 0:
            return cls(text[:match.start()], int(match.group(1)))
        return cls(text)

    @property
    def is_marked(self) -> bool:
        return self.marker is not None

    def with_marker(self, marker: int) -> 'Label':
        return Label(self.name, marker)

    def without_marker(self) -> 'Label':
        if self.marker is None:
            return self
        return Label(self.name)

    def __str__(self) -> str:
        if self.marker is None:
            return self.name
        return f"{self.name}{MARKER_SEPARATOR}{self.marker}"


@dataclass(frozen=True)
class Text:
    """Plain text content."""
    value: str

    @property
    def text(self) -> str:
        return self.value


@dataclass(frozen=True)
class Element:
    """
    Opaque inline content the engine must not inspect.

    ``payload`` is passed through by reference; ``text`` is only used for
    content checks and ``tag`` only by document adapters.
    """
    payload: Any
    tag: str = ''
    text: str = ''


Content = Union[Text, Element]


def ordered_labels(labels: Iterable[Label]) -> Tuple[Label, ...]:
    """Drop repeated labels while keeping first-seen order."""
    return tuple(dict.fromkeys(labels))


@dataclass
class Run:
    """Atomic content unit with its ordered label set and attributes."""
    content: Content
    labels: Tuple[Label, ...] = ()
    attributes: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.labels = ordered_labels(self.labels)

    @property
    def text(self) -> str:
        return self.content.text

    @property
    def is_whitespace(self) -> bool:
        """True for unlabeled text that holds nothing but whitespace."""
        return (
            isinstance(self.content, Text)
            and not self.labels
            and not self.content.value.strip()
        )

    def has_label(self, label: Label) -> bool:
        return label in self.labels

    def label_names(self) -> List[str]:
        return [label.name for label in self.labels]

    def without_names(self, names: Iterable[str]) -> 'Run':
        """Copy of this run without any label whose name is in ``names``."""
        dropped = set(names)
        return Run(
            content=self.content,
            labels=tuple(label for label in self.labels if label.name not in dropped),
            attributes=dict(self.attributes),
        )

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        result = {
            'text': self.text,
            'labels': [str(label) for label in self.labels],
            'attributes': dict(self.attributes),
        }
        if isinstance(self.content, Element):
            result['element'] = self.content.tag
        return result


@dataclass
class Container:
    """A single label's scope over an ordered sequence of child nodes."""
    label: Label
    children: List['Node'] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return ''.join(run.text for run in iter_leaves(self.children))

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'label': str(self.label),
            'attributes': dict(self.attributes),
            'children': [child.to_dict() for child in self.children],
        }


Node = Union[Container, Run]


@dataclass
class Block:
    """
    Root of a nested tree: one paragraph-equivalent content block.

    The block itself carries no label; its ``tag`` and ``attributes``
    belong to the surrounding markup and are never inherited by runs.
    """
    children: List[Node] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)
    tag: str = DEFAULT_BLOCK_TAG

    @property
    def text(self) -> str:
        return ''.join(run.text for run in self.leaves())

    def leaves(self) -> Iterator[Run]:
        return iter_leaves(self.children)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'tag': self.tag,
            'attributes': dict(self.attributes),
            'children': [child.to_dict() for child in self.children],
        }


def iter_leaves(nodes: Iterable[Node]) -> Iterator[Run]:
    """Yield the leaf runs below ``nodes`` in document order."""
    stack = list(reversed(list(nodes)))
    while stack:
        node = stack.pop()
        if isinstance(node, Container):
            stack.extend(reversed(node.children))
        else:
            yield node


def to_outline(nodes: Union[Block, Iterable[Node]]) -> List:
    """
    Compact structural view used in tests and debug logs.

    Containers become ``(label, [children])`` tuples, unlabeled leaves
    become their text and labeled leaves become ``(text, [labels])``.
    Attributes are left out.
    """
    if isinstance(nodes, Block):
        nodes = nodes.children

    outline = []
    for node in nodes:
        if isinstance(node, Container):
            outline.append((str(node.label), to_outline(node.children)))
        elif node.labels:
            outline.append((node.text, [str(label) for label in node.labels]))
        else:
            outline.append(node.text)
    return outline

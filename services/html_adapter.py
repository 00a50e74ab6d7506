"""
HTML Adapter - Maps annotated HTML blocks to engine trees and back.

Annotations are ``<span class="...">`` elements inside block elements
(``<p>`` by default). Each class is one label:

- Nested form: spans may contain spans; a span with several classes is read
  as one container per class, outermost first
- Flat form: spans hold only text (or a single opaque element); each span
  is one run and its classes are read verbatim, instance markers included

Any other inline element is handed to the engine as opaque content and
copied back unchanged.
"""
import copy
from typing import Any, Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment, PreformattedString

from config.settings import Settings, get_settings
from core.constants import (
    COMMENT_TAG,
    LABEL_ATTRIBUTE,
    LABEL_TAG,
    TRANSFORM_MODES,
)
from core.errors import InvalidTree
from core.models import Block, Container, Element, Label, Node, Run, Text, ordered_labels
from nesting.cleanup import clean_attributes
from nesting.flattener import flatten
from nesting.markers import MarkerSource, default_markers
from nesting.pipeline import nest_clean, normalize
from utils.logging_utils import get_logger

logger = get_logger(__name__)


def _class_list(tag: Tag) -> List[str]:
    classes = tag.get(LABEL_ATTRIBUTE) or []
    if isinstance(classes, str):
        classes = classes.split()
    return list(classes)


def _attributes(tag: Tag) -> Dict[str, Any]:
    """Tag attributes other than the label-carrying one."""
    return {key: value for key, value in tag.attrs.items() if key != LABEL_ATTRIBUTE}


def _is_text(node) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def _opaque(node) -> Element:
    if isinstance(node, Comment):
        return Element(payload=node, tag=COMMENT_TAG, text='')
    if isinstance(node, Tag):
        return Element(payload=node, tag=node.name, text=node.get_text())
    return Element(payload=node, tag=type(node).__name__.lower(), text='')


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _read_nodes(nodes, passed: Dict[str, Any]) -> List[Node]:
    result: List[Node] = []

    for node in nodes:
        if _is_text(node):
            result.append(Run(Text(str(node)), attributes=dict(passed)))
            continue

        if not (isinstance(node, Tag) and node.name == LABEL_TAG):
            result.append(Run(_opaque(node), attributes=dict(passed)))
            continue

        attributes = {**passed, **_attributes(node)}
        labels = ordered_labels(Label.parse(cls).without_marker() for cls in _class_list(node))

        # A class-less span only carries attributes down to its content
        if not labels:
            result.extend(_read_nodes(node.children, attributes))
            continue

        children = _read_nodes(node.children, {})
        for label in reversed(labels[1:]):
            children = [Container(label=label, children=children)]
        result.append(Container(label=labels[0], children=children, attributes=attributes))

    return result


def read_tree(block_tag: Tag) -> Block:
    """
    Read a block element holding nested spans as a nested tree.

    Args:
        block_tag: Block element (e.g. ``<p>``)

    Returns:
        Block mirroring the span structure
    """
    return Block(
        children=_read_nodes(block_tag.children, {}),
        attributes=dict(block_tag.attrs),
        tag=block_tag.name,
    )


def read_runs(block_tag: Tag) -> List[Run]:
    """
    Read a block element holding flat spans as a run sequence.

    Raises:
        InvalidTree: if a span contains nested markup
    """
    runs: List[Run] = []

    for index, node in enumerate(block_tag.children):
        if _is_text(node):
            runs.append(Run(Text(str(node))))
            continue
        if not (isinstance(node, Tag) and node.name == LABEL_TAG):
            runs.append(Run(_opaque(node)))
            continue

        labels = tuple(Label.parse(cls) for cls in _class_list(node))
        attributes = _attributes(node)
        inner = list(node.children)

        if all(_is_text(child) for child in inner):
            runs.append(Run(Text(node.get_text()), labels, attributes))
        elif len(inner) == 1 and not (isinstance(inner[0], Tag) and inner[0].name == LABEL_TAG):
            runs.append(Run(_opaque(inner[0]), labels, attributes))
        else:
            raise InvalidTree(
                f"Span with classes {_class_list(node)} is not flat",
                f"{block_tag.name}[{index}]",
            )

    return runs


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def _render_content(run: Run, soup: BeautifulSoup):
    if isinstance(run.content, Text):
        return soup.new_string(run.content.value)
    payload = run.content.payload
    if isinstance(payload, (Tag, NavigableString)):
        return copy.copy(payload)
    return soup.new_string(run.content.text)


def _span(soup: BeautifulSoup, labels: Sequence[Label], attributes: Dict[str, Any]) -> Tag:
    attrs = dict(attributes)
    if labels:
        attrs[LABEL_ATTRIBUTE] = ' '.join(str(label) for label in labels)
    return soup.new_tag(LABEL_TAG, attrs=attrs)


def _render_run(run: Run, soup: BeautifulSoup):
    content = _render_content(run, soup)
    if not run.labels and not run.attributes:
        return content
    span = _span(soup, run.labels, run.attributes)
    span.append(content)
    return span


def _render_node(node: Node, soup: BeautifulSoup):
    if isinstance(node, Run):
        return _render_run(node, soup)
    span = _span(soup, [node.label], node.attributes)
    for child in node.children:
        span.append(_render_node(child, soup))
    return span


def write_tree(block: Block, soup: BeautifulSoup) -> Tag:
    """Render a nested tree as a block element of ``soup``."""
    tag = soup.new_tag(block.tag, attrs=dict(block.attributes))
    for child in block.children:
        tag.append(_render_node(child, soup))
    return tag


def write_runs(
    runs: Sequence[Run],
    soup: BeautifulSoup,
    tag_name: str = 'p',
    attributes: Optional[Dict[str, Any]] = None,
) -> Tag:
    """Render a flat run sequence as a block element of ``soup``."""
    tag = soup.new_tag(tag_name, attrs=dict(attributes or {}))
    for run in runs:
        tag.append(_render_run(run, soup))
    return tag


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

class HtmlDocumentService:
    """Applies a transform mode to every content block of an HTML document."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        verify: bool = False,
        markers: Optional[MarkerSource] = None,
    ):
        """
        Initialize HTML document service.

        Args:
            settings: Settings to use (default: process-wide settings)
            verify: Check content preservation for every block
            markers: Marker source for flattening (default: process-wide source)
        """
        self.settings = settings or get_settings()
        self.verify = verify
        self.markers = markers or default_markers

    def transform_block(self, block_tag: Tag, mode: str, soup: BeautifulSoup) -> Tag:
        """Transform one block element and return its replacement."""
        options = self.settings.get_nesting_config()

        if mode == 'flatten':
            runs = flatten(read_tree(block_tag), self.markers)
            return write_runs(runs, soup, block_tag.name, dict(block_tag.attrs))

        if mode == 'nest':
            block = nest_clean(read_runs(block_tag), verify=self.verify, **options)
            block = Block(
                children=block.children,
                attributes=clean_attributes(dict(block_tag.attrs), self.settings.namespace_attribute_prefixes),
                tag=block_tag.name,
            )
            return write_tree(block, soup)

        if mode == 'roundtrip':
            block = normalize(read_tree(block_tag), markers=self.markers, verify=self.verify, **options)
            return write_tree(block, soup)

        raise ValueError(f"Unknown transform mode {mode!r}, expected one of {TRANSFORM_MODES}")

    def transform(self, html: str, mode: str, selector: Optional[str] = None) -> str:
        """
        Transform every block matched by ``selector``.

        Args:
            html: Document source
            mode: One of ``flatten``, ``nest``, ``roundtrip``
            selector: CSS selector for blocks (default: settings.block_selector)

        Returns:
            Transformed document source
        """
        if mode not in TRANSFORM_MODES:
            raise ValueError(f"Unknown transform mode {mode!r}, expected one of {TRANSFORM_MODES}")

        soup = BeautifulSoup(html, 'html.parser')
        blocks = soup.select(selector or self.settings.block_selector)

        for block_tag in blocks:
            replacement = self.transform_block(block_tag, mode, soup)
            block_tag.replace_with(replacement)

        logger.info("document_transformed", mode=mode, blocks=len(blocks))
        return str(soup)


def transform_document(
    html: str,
    mode: str,
    settings: Optional[Settings] = None,
    selector: Optional[str] = None,
    verify: bool = False,
) -> str:
    """Transform an HTML document with a one-off HtmlDocumentService."""
    return HtmlDocumentService(settings=settings, verify=verify).transform(html, mode, selector)

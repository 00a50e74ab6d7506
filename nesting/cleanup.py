"""
Instance-marker cleanup.

Finishing pass after nesting: strips instance markers from labels and drops
namespace declarations that markup serializers leave on attributes. Every
function here returns fresh values and is idempotent.
"""
from typing import Any, Dict, Iterable, List, Optional, Sequence, TypeVar, Union

from config.settings import get_settings
from core.constants import MARKER_PATTERN
from core.models import Block, Container, Label, Run

T = TypeVar('T', Block, Container, Run)


def strip_marker_text(text: str) -> str:
    """
    Remove instance markers from a rendered label or class string.

    Example:
        >>> strip_marker_text('logic--a__12 citation--b__13')
        'logic--a citation--b'
    """
    return ' '.join(str(Label.parse(token).without_marker()) for token in text.split())


def is_namespace_attribute(key: str, prefixes: Optional[Iterable[str]] = None) -> bool:
    """True for ``xmlns`` and ``xmlns:*`` style keys."""
    if prefixes is None:
        prefixes = get_settings().namespace_attribute_prefixes
    return any(key == prefix or key.startswith(prefix + ':') for prefix in prefixes)


def clean_attributes(attributes: Dict[str, Any], prefixes: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    if prefixes is None:
        prefixes = get_settings().namespace_attribute_prefixes
    prefixes = tuple(prefixes)
    return {
        key: value for key, value in attributes.items()
        if not is_namespace_attribute(key, prefixes)
    }


def _strip_node(node: Union[Container, Run], prefixes: Sequence[str]) -> Union[Container, Run]:
    if isinstance(node, Run):
        return Run(
            content=node.content,
            labels=tuple(label.without_marker() for label in node.labels),
            attributes=clean_attributes(node.attributes, prefixes),
        )
    return Container(
        label=node.label.without_marker(),
        children=[_strip_node(child, prefixes) for child in node.children],
        attributes=clean_attributes(node.attributes, prefixes),
    )


def strip_markers(node: T, prefixes: Optional[Iterable[str]] = None) -> T:
    """
    Return a copy of ``node`` without instance markers or namespace attributes.

    Args:
        node: Block, Container or Run
        prefixes: Namespace attribute prefixes, defaults to
            ``settings.namespace_attribute_prefixes``
    """
    if prefixes is None:
        prefixes = get_settings().namespace_attribute_prefixes
    prefixes = tuple(prefixes)

    if isinstance(node, Block):
        return Block(
            children=[_strip_node(child, prefixes) for child in node.children],
            attributes=clean_attributes(node.attributes, prefixes),
            tag=node.tag,
        )
    return _strip_node(node, prefixes)


def strip_run_markers(runs: Sequence[Run], prefixes: Optional[Iterable[str]] = None) -> List[Run]:
    """``strip_markers`` applied to every run of a flat sequence."""
    return [strip_markers(run, prefixes) for run in runs]

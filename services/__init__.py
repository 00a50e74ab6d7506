"""Services package - Document adapters around the restructuring engine."""

from .html_adapter import (
    HtmlDocumentService,
    transform_document,
    read_tree,
    read_runs,
    write_tree,
    write_runs,
)

__all__ = [
    'HtmlDocumentService',
    'transform_document',
    'read_tree',
    'read_runs',
    'write_tree',
    'write_runs',
]

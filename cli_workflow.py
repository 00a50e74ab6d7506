#!/usr/bin/env python3
"""
CLI workflow runner for span annotation restructuring.

Applies flatten, nest or roundtrip to every content block of an HTML file.
"""
import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from pydantic import ValidationError

from config.settings import Settings, get_settings
from core.errors import SpanweaveError
from services.html_adapter import HtmlDocumentService
from utils.logging_utils import configure_logging, get_logger

logger = get_logger(__name__)


def transform_file_cli(
    mode: str,
    file_path: str,
    output_path: Optional[str] = None,
    selector: Optional[str] = None,
    bridge_whitespace: bool = False,
    max_depth: Optional[int] = None,
    verify: bool = False,
) -> int:
    """Transform one HTML file and print or write the result."""
    if not os.path.exists(file_path):
        print(f"❌ Error: File not found: {file_path}", file=sys.stderr)
        return 1

    overrides = {}
    if bridge_whitespace:
        overrides['bridge_whitespace'] = True
    if max_depth is not None:
        overrides['max_nesting_depth'] = max_depth
    if selector:
        overrides['block_selector'] = selector
    try:
        settings = Settings.model_validate({**get_settings().model_dump(), **overrides})
    except ValidationError as e:
        print(f"❌ Error: Invalid option: {e.errors()[0]['msg']}", file=sys.stderr)
        return 1

    html = Path(file_path).read_text(encoding='utf-8')
    service = HtmlDocumentService(settings=settings, verify=verify)

    try:
        result = service.transform(html, mode)
    except SpanweaveError as e:
        logger.error("transform_failed", mode=mode, file=file_path, error=str(e))
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    if output_path:
        Path(output_path).write_text(result, encoding='utf-8')
        print(f"✓ {mode}: {file_path} -> {output_path}", file=sys.stderr)
    else:
        sys.stdout.write(result)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Flatten or nest overlapping span annotations in HTML documents'
    )
    parser.add_argument('--log-level', type=str, default=None, help='Logging level (default: from settings)')
    parser.add_argument('--log-json', action='store_true', help='Emit JSON log lines')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    commands = {
        'flatten': 'Split nested spans into flat runs with instance markers',
        'nest': 'Rebuild nested spans from flat runs',
        'roundtrip': 'Flatten then nest, resolving overlaps in nested markup',
    }
    for name, help_text in commands.items():
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument('file', type=str, help='HTML file to transform')
        command_parser.add_argument('-o', '--output', type=str, help='Output file path (default: stdout)')
        command_parser.add_argument('--selector', type=str, help='CSS selector for content blocks')
        command_parser.add_argument('--bridge-whitespace', action='store_true', help='Group spans across whitespace-only text')
        command_parser.add_argument('--max-depth', type=int, help='Maximum re-nesting depth')
        command_parser.add_argument('--verify', action='store_true', help='Fail if content changes')

    args = parser.parse_args(argv)

    if args.command not in commands:
        parser.print_help()
        return 1

    configure_logging(level=args.log_level, json_output=args.log_json or None)

    return transform_file_cli(
        mode=args.command,
        file_path=args.file,
        output_path=args.output,
        selector=args.selector,
        bridge_whitespace=args.bridge_whitespace,
        max_depth=args.max_depth,
        verify=args.verify,
    )


if __name__ == '__main__':
    sys.exit(main())

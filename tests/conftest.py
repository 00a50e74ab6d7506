"""
Pytest configuration and global fixtures.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.models import Block, Container, Label, Run, Text
from nesting.markers import MarkerSource


@pytest.fixture
def markers():
    """Fresh marker source so markers are predictable within a test."""
    return MarkerSource()


@pytest.fixture
def make_runs():
    """
    Build a flat run sequence from ``(text, "label label")`` pairs.

    Labels are parsed with ``Label.parse``, so ``"a__3"`` yields a marked label.
    """
    def _make(*items):
        runs = []
        for text, labels in items:
            runs.append(Run(Text(text), tuple(Label.parse(name) for name in labels.split())))
        return runs
    return _make


@pytest.fixture
def sample_tree():
    """Properly nested paragraph: Intro a[A b[AB] A2] mid c[C] end."""
    return Block(children=[
        Run(Text('Intro ')),
        Container(Label('a'), children=[
            Run(Text('A ')),
            Container(Label('b'), children=[Run(Text('AB'))], attributes={'data-id': '7'}),
            Run(Text(' A2')),
        ]),
        Run(Text(' mid ')),
        Container(Label('c'), children=[Run(Text('C'))]),
        Run(Text(' end')),
    ])


@pytest.fixture
def temp_dir(tmp_path):
    """Provide temporary directory for test files."""
    return tmp_path

"""
Unit tests for core.constants module.
"""
import pytest
from core.constants import (
    DEFAULT_MAX_NESTING_DEPTH,
    MARKER_PATTERN,
    MARKER_SEPARATOR,
    MAX_NESTING_DEPTH_LIMIT,
    NAMESPACE_ATTRIBUTE_PREFIXES,
    TRANSFORM_MODES,
)


class TestMarkerPattern:
    """Tests for MARKER_PATTERN constant."""

    def test_matches_trailing_marker(self):
        """Test pattern finds a marker at the end of a label."""
        match = MARKER_PATTERN.search(f"logic{MARKER_SEPARATOR}17")

        assert match is not None
        assert match.group(1) == '17'

    def test_ignores_inner_separator(self):
        """Test separator in the middle of a name is not a marker."""
        assert MARKER_PATTERN.search(f"a{MARKER_SEPARATOR}1b") is None

    def test_requires_digits(self):
        """Test non-numeric suffix is not a marker."""
        assert MARKER_PATTERN.search(f"a{MARKER_SEPARATOR}x") is None


class TestDefaults:
    """Tests for default values."""

    def test_depth_bound_below_recursion_limit(self):
        """Test default depth leaves room in the interpreter stack."""
        import sys

        assert 0 < DEFAULT_MAX_NESTING_DEPTH * 2 < sys.getrecursionlimit()

    def test_depth_ceiling_below_recursion_limit(self):
        """Test the hard ceiling keeps two frames per level under the limit."""
        import sys

        assert DEFAULT_MAX_NESTING_DEPTH <= MAX_NESTING_DEPTH_LIMIT
        assert MAX_NESTING_DEPTH_LIMIT * 2 < sys.getrecursionlimit()

    def test_namespace_prefixes(self):
        """Test xmlns declarations are treated as artifacts."""
        assert 'xmlns' in NAMESPACE_ATTRIBUTE_PREFIXES

    def test_transform_modes(self):
        """Test all adapter modes are known."""
        assert set(TRANSFORM_MODES) == {'flatten', 'nest', 'roundtrip'}

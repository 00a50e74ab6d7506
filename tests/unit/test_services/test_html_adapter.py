"""
Unit tests for services.html_adapter module.
"""
import pytest
from bs4 import BeautifulSoup

from config.settings import Settings
from core.errors import InvalidTree
from core.models import Element, Label, Run, Text, to_outline
from nesting.markers import MarkerSource
from services.html_adapter import (
    HtmlDocumentService,
    transform_document,
    read_runs,
    read_tree,
    write_runs,
    write_tree,
)


def _block(html):
    soup = BeautifulSoup(html, 'html.parser')
    return soup, soup.find(['p', 'li', 'div'])


@pytest.fixture
def service():
    """Service with its own marker source and default settings."""
    return HtmlDocumentService(settings=Settings(), markers=MarkerSource())


class TestReadTree:
    """Tests for read_tree function."""

    def test_nested_spans(self, sample_tree):
        """Test nested spans map onto containers."""
        _, tag = _block(
            '<p id="p1">Intro <span class="a">A <span class="b" data-id="7">AB</span> A2</span>'
            ' mid <span class="c">C</span> end</p>'
        )

        block = read_tree(tag)

        assert to_outline(block) == to_outline(sample_tree)
        assert block.tag == 'p'
        assert block.attributes == {'id': 'p1'}
        assert block.children[1].children[1].attributes == {'data-id': '7'}

    def test_multi_class_span(self):
        """Test several classes become a container chain, outermost first."""
        _, tag = _block('<p><span class="c d e" title="t">CDE</span></p>')

        block = read_tree(tag)
        (outer,) = block.children

        assert to_outline(block) == [('c', [('d', [('e', ['CDE'])])])]
        assert outer.attributes == {'title': 't'}

    def test_classless_span_passes_attributes(self):
        """Test a span without classes only contributes attributes."""
        _, tag = _block('<p><span lang="en">x<span class="a">y</span></span></p>')

        block = read_tree(tag)

        assert to_outline(block) == ['x', ('a', ['y'])]
        assert block.children[0].attributes == {'lang': 'en'}
        assert block.children[1].attributes == {'lang': 'en'}

    def test_markers_in_classes_ignored(self):
        """Test leftover markers do not distinguish nested containers."""
        _, tag = _block('<p><span class="a__4">x</span></p>')

        assert read_tree(tag).children[0].label == Label('a')

    def test_digit_suffix_read_as_marker(self):
        """Test a class ending in a separator and digits loses that suffix."""
        _, tag = _block('<p><span class="foo__3 foo__bar">x</span></p>')

        block = read_tree(tag)

        assert to_outline(block) == [('foo', [('foo__bar', ['x'])])]
        assert block.children[0].label == Label('foo')

    def test_opaque_elements(self):
        """Test other inline markup is opaque content."""
        _, tag = _block('<p><span class="cite">see <sup>1</sup></span><!-- note --></p>')

        block = read_tree(tag)
        sup = block.children[0].children[1].content
        comment = block.children[1].content

        assert isinstance(sup, Element)
        assert sup.tag == 'sup'
        assert sup.text == '1'
        assert comment.tag == '#comment'
        assert comment.text == ''


class TestReadRuns:
    """Tests for read_runs function."""

    def test_flat_spans(self):
        """Test each span is one run with verbatim labels."""
        _, tag = _block('<p>x <span class="a__1">y</span><span class="a__1 b__2" title="t">z</span></p>')

        runs = read_runs(tag)

        assert [run.text for run in runs] == ['x ', 'y', 'z']
        assert runs[0].labels == ()
        assert runs[2].labels == (Label('a', 1), Label('b', 2))
        assert runs[2].attributes == {'title': 't'}

    def test_span_around_element(self):
        """Test a span holding a single element yields an element run."""
        _, tag = _block('<p><span class="a"><b>bold</b></span><img src="i.png"/></p>')

        first, second = read_runs(tag)

        assert first.content.tag == 'b'
        assert first.labels == (Label('a'),)
        assert second.content.tag == 'img'
        assert second.labels == ()

    def test_nested_span_rejected(self):
        """Test nested markup is not accepted as flat input."""
        _, tag = _block('<p><span class="a">x<span class="b">y</span></span></p>')

        with pytest.raises(InvalidTree) as exc_info:
            read_runs(tag)

        assert exc_info.value.path == 'p[0]'


class TestWrite:
    """Tests for write_tree and write_runs functions."""

    def test_write_runs(self):
        """Test runs render as one span each, bare text when unlabeled."""
        soup = BeautifulSoup('', 'html.parser')
        runs = [Run(Text('x ')), Run(Text('y'), (Label('a', 1), Label('b', 2)))]

        tag = write_runs(runs, soup)

        assert str(tag) == '<p>x <span class="a__1 b__2">y</span></p>'

    def test_write_tree(self, sample_tree):
        """Test containers render as nested spans."""
        soup = BeautifulSoup('', 'html.parser')

        tag = write_tree(sample_tree, soup)
        rendered = BeautifulSoup(str(tag), 'html.parser')
        inner = rendered.find('span', attrs={'data-id': '7'})

        assert rendered.get_text() == 'Intro A AB A2 mid C end'
        assert inner['class'] == ['b']
        assert inner.parent['class'] == ['a']

    def test_unlabeled_attributes_kept(self):
        """Test a leaf with attributes but no labels gets a class-less span."""
        soup = BeautifulSoup('', 'html.parser')

        tag = write_runs([Run(Text('x'), attributes={'lang': 'en'})], soup)

        assert str(tag) == '<p><span lang="en">x</span></p>'


class TestHtmlDocumentService:
    """Tests for HtmlDocumentService class."""

    NESTED = '<p>Intro <span class="a">A <span class="b">AB</span></span> end</p>'
    FLAT = '<p>Intro <span class="a__1">A </span><span class="a__1 b__2">AB</span> end</p>'

    def test_flatten(self, service):
        """Test nested spans are split into marked flat spans."""
        assert service.transform(self.NESTED, 'flatten') == self.FLAT

    def test_nest(self, service):
        """Test flat spans are rebuilt and markers removed."""
        assert service.transform(self.FLAT, 'nest') == self.NESTED

    def test_nest_overlapping(self, service):
        """Test overlapping flat spans are split at the boundary."""
        html = '<p><span class="a">x</span><span class="a b">y</span><span class="b">z</span></p>'

        result = service.transform(html, 'nest')

        assert result == (
            '<p><span class="a">x<span class="b">y</span></span>'
            '<span class="b">z</span></p>'
        )

    def test_roundtrip_well_nested_unchanged(self, service):
        """Test properly nested markup is reproduced."""
        assert service.transform(self.NESTED, 'roundtrip') == self.NESTED

    def test_roundtrip_collapses_redundant_span(self, service):
        """Test a span nested in a same-class span is absorbed."""
        html = '<p><span class="a">x<span class="a">y</span></span></p>'

        assert service.transform(html, 'roundtrip') == '<p><span class="a">xy</span></p>'

    def test_roundtrip_drops_digit_class_suffix(self, service):
        """Test a digit suffix on an author class does not survive a roundtrip."""
        html = '<p><span class="foo__3 foo__bar">x</span></p>'

        result = service.transform(html, 'roundtrip')

        assert result == '<p><span class="foo"><span class="foo__bar">x</span></span></p>'

    def test_elements_and_comments_survive(self, service):
        """Test opaque markup round-trips through flat form."""
        html = '<p><span class="cite">see <sup>1</sup></span><!-- note --></p>'

        flat = service.transform(html, 'flatten')

        assert flat == (
            '<p><span class="cite__1">see </span>'
            '<span class="cite__1"><sup>1</sup></span><!-- note --></p>'
        )
        assert service.transform(flat, 'nest') == html

    def test_selector(self, service):
        """Test only matching blocks are transformed."""
        html = '<div><p><span class="a">x</span></p><ul><li><span class="b">y</span></li></ul></div>'

        result = service.transform(html, 'flatten', selector='li')

        assert '<p><span class="a">x</span></p>' in result
        assert '<li><span class="b__1">y</span></li>' in result

    def test_block_attributes_kept(self, service):
        """Test block attributes survive nesting."""
        result = service.transform('<p id="p1"><span class="a__1">x</span></p>', 'nest')

        assert result == '<p id="p1"><span class="a">x</span></p>'

    def test_whitespace_bridging_setting(self):
        """Test bridging follows the service settings."""
        html = '<p><span class="a">x</span> <span class="a">y</span></p>'

        plain = HtmlDocumentService(settings=Settings(bridge_whitespace=False))
        bridged = HtmlDocumentService(settings=Settings(bridge_whitespace=True))

        assert plain.transform(html, 'nest') == html
        assert bridged.transform(html, 'nest') == '<p><span class="a">x y</span></p>'

    def test_verify(self, service):
        """Test verification passes for content-preserving transforms."""
        verifying = HtmlDocumentService(settings=Settings(), verify=True, markers=MarkerSource())

        assert verifying.transform(self.NESTED, 'roundtrip') == self.NESTED

    def test_unknown_mode(self, service):
        """Test an unknown mode is rejected."""
        with pytest.raises(ValueError):
            service.transform(self.NESTED, 'shuffle')

    def test_invalid_flat_input(self, service):
        """Test nesting already nested markup fails."""
        with pytest.raises(InvalidTree):
            service.transform(self.NESTED, 'nest')


def test_transform_document():
    """Test the one-call form uses the given settings."""
    html = '<div><span class="a">x</span></div>'

    result = transform_document(html, 'roundtrip', settings=Settings(block_selector='div'), verify=True)

    assert result == html

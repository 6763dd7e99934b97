"""Tests for header/footer rendering."""

import logging
from io import BytesIO

import pytest
from pypdf import PdfReader
from reportlab.pdfbase import pdfmetrics

from docgen.config import GeneratorOptions
from docgen.exceptions import UnsupportedRenderType
from docgen.models.template import (
    Alignment,
    FooterTemplate,
    HeaderFooterConfig,
    HeaderTemplate,
    RenderType,
)
from docgen.renderers.header_footer import (
    SIDE_MARGIN,
    HeaderFooterProcessor,
    TemplateHeaderFooterRenderer,
    aligned_x,
)
from docgen.renderers.templated_view import render_text_pages


@pytest.fixture
def three_pages():
    pdf_bytes, _ = render_text_pages("Body one\n\fBody two\n\fBody three\n", GeneratorOptions())
    return pdf_bytes


def _page_texts(pdf_bytes):
    return [page.extract_text() for page in PdfReader(BytesIO(pdf_bytes)).pages]


class TestHeaderFooterProcessor:
    """Test suite for HeaderFooterProcessor."""

    def test_template_header_and_footer(self, three_pages):
        """Test Jinja2 content with page variables is drawn on every page."""
        config = HeaderFooterConfig(
            headers=(HeaderTemplate(content="{{ company }} Enrollment"),),
            footers=(FooterTemplate(content="Page {{ pageNumber }} of {{ totalPages }}"),),
        )

        result = HeaderFooterProcessor().apply(three_pages, config, {"company": "Acme"})
        texts = _page_texts(result)

        assert len(texts) == 3
        for number, text in enumerate(texts, start=1):
            assert "Acme Enrollment" in text
            assert f"Page {number} of 3" in text
        assert "Body two" in texts[1]

    def test_excluded_pages(self, three_pages):
        """Test excluded page indexes get no decoration."""
        config = HeaderFooterConfig(
            footers=(FooterTemplate(content="Page {{ pageNumber }} of {{ totalPages }}"),),
            exclude_pages=frozenset({0}),
        )

        texts = _page_texts(HeaderFooterProcessor().apply(three_pages, config))

        assert "Page 1 of 3" not in texts[0]
        assert "Page 2 of 3" in texts[1]
        assert "Page 3 of 3" in texts[2]

    def test_first_page_only(self, three_pages):
        """Test apply_to_all_pages=False decorates only the first page."""
        config = HeaderFooterConfig(headers=(HeaderTemplate(content="Cover only"),), apply_to_all_pages=False)

        texts = _page_texts(HeaderFooterProcessor().apply(three_pages, config))

        assert "Cover only" in texts[0]
        assert "Cover only" not in texts[1]

    def test_item_data(self, three_pages):
        """Test per-item data is available to the content template."""
        config = HeaderFooterConfig(headers=(HeaderTemplate(content="{{ label }}", data={"label": "Confidential"}),))

        texts = _page_texts(HeaderFooterProcessor().apply(three_pages, config, {"label": "ignored"}))

        assert "Confidential" in texts[2]

    def test_canvas_footer_page_numbers(self, three_pages):
        """Test canvas footers add the formatted page number label."""
        config = HeaderFooterConfig(
            headers=(HeaderTemplate(content="Plain header", render_type=RenderType.CANVAS),),
            footers=(FooterTemplate(content="Footer text", render_type=RenderType.CANVAS,
                                    page_number_format="{page}/{total}"),),
        )

        texts = _page_texts(HeaderFooterProcessor().apply(three_pages, config))

        assert "Plain header" in texts[0]
        assert "Footer text" in texts[1]
        assert "2/3" in texts[1]

    def test_no_config_returns_input(self, three_pages):
        """Test documents without headers or footers are returned unchanged."""
        processor = HeaderFooterProcessor()

        assert processor.apply(three_pages, None) is three_pages
        assert processor.apply(three_pages, HeaderFooterConfig()) is three_pages

    def test_unsupported_render_type(self, three_pages):
        """Test a render type without renderer raises UnsupportedRenderType."""
        processor = HeaderFooterProcessor([TemplateHeaderFooterRenderer()])
        config = HeaderFooterConfig(headers=(HeaderTemplate(content="x", render_type=RenderType.CANVAS),))

        with pytest.raises(UnsupportedRenderType):
            processor.apply(three_pages, config)
        with pytest.raises(UnsupportedRenderType):
            processor.renderer_for(RenderType.CANVAS)

    def test_failing_item_is_skipped(self, three_pages, caplog):
        """Test one broken item is logged while the others are still drawn."""
        config = HeaderFooterConfig(
            headers=(HeaderTemplate(content="{% if %}"),),
            footers=(FooterTemplate(content="Still here"),),
        )

        with caplog.at_level(logging.ERROR):
            result = HeaderFooterProcessor().apply(three_pages, config)

        assert "Still here" in _page_texts(result)[0]
        assert "Failed to render header" in caplog.text


class TestAlignment:
    """Test suite for aligned_x."""

    def test_positions(self):
        """Test left, center and right placement."""
        width = pdfmetrics.stringWidth("Title", "Helvetica", 10)

        assert aligned_x("Title", "Helvetica", 10, Alignment.LEFT, 612) == SIDE_MARGIN
        assert aligned_x("Title", "Helvetica", 10, Alignment.CENTER, 612) == pytest.approx((612 - width) / 2)
        assert aligned_x("Title", "Helvetica", 10, Alignment.RIGHT, 612) == pytest.approx(612 - width - SIDE_MARGIN)

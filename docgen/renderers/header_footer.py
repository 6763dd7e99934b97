"""Rendering utilities for headers and footers.

Each non-excluded page receives an overlay drawn with reportlab at the page's
media box size, merged onto the page with pypdf.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from jinja2 import ChainableUndefined, Environment
from pypdf import PdfReader, PdfWriter
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen.canvas import Canvas

from ..engine.context import PageContext
from ..exceptions import UnsupportedRenderType
from ..models.template import (
    Alignment,
    FooterTemplate,
    HeaderFooterConfig,
    HeaderTemplate,
    RenderType,
)

logger = logging.getLogger(__name__)

PageDecoration = Union[HeaderTemplate, FooterTemplate]

SIDE_MARGIN = 50.0
_BOLD_VARIANTS = {"Helvetica": "Helvetica-Bold", "Times-Roman": "Times-Bold", "Courier": "Courier-Bold"}


def aligned_x(text: str, font_name: str, font_size: float, alignment: Alignment, page_width: float) -> float:
    """Left edge for ``text`` so that it sits at ``alignment`` on the page."""
    text_width = pdfmetrics.stringWidth(text, font_name, font_size)
    if alignment is Alignment.CENTER:
        return (page_width - text_width) / 2.0
    if alignment is Alignment.RIGHT:
        return page_width - text_width - SIDE_MARGIN
    return SIDE_MARGIN


class HeaderFooterRenderer(ABC):
    """Draws one header or footer item onto a page overlay."""

    render_type: RenderType

    def supports(self, render_type: RenderType) -> bool:
        return render_type is self.render_type

    @abstractmethod
    def content_lines(self, item: PageDecoration, page: PageContext) -> List[str]:
        """Text lines to draw for ``item`` on ``page``."""

    def font_for(self, item: PageDecoration) -> str:
        return item.font_name

    def draw(self, canvas: Canvas, item: PageDecoration, page: PageContext,
             page_size: Tuple[float, float]) -> None:
        width, height = page_size
        lines = self.content_lines(item, page)
        font_name = self.font_for(item)
        font_size = item.font_size
        line_height = font_size * 1.2
        alignment = Alignment.parse(item.alignment)

        if isinstance(item, HeaderTemplate):
            y = height - item.margin_top
        else:
            # footer lines stack upwards so the last one sits on the bottom margin
            y = item.margin_bottom + line_height * (len(lines) - 1)

        canvas.setFont(font_name, font_size)
        for line in lines:
            if line:
                canvas.drawString(aligned_x(line, font_name, font_size, alignment, width), y, line)
            y -= line_height


class TemplateHeaderFooterRenderer(HeaderFooterRenderer):
    """Substitutes data, ``pageNumber`` and ``totalPages`` into Jinja2 content."""

    render_type = RenderType.TEMPLATE

    def __init__(self, environment: Optional[Environment] = None) -> None:
        self.environment = environment or Environment(undefined=ChainableUndefined, autoescape=False)

    def content_lines(self, item: PageDecoration, page: PageContext) -> List[str]:
        text = self.environment.from_string(item.content or "").render(page.template_model(item.data))
        return text.splitlines()


class CanvasHeaderFooterRenderer(HeaderFooterRenderer):
    """Draws the content verbatim; headers are bold, footers may carry page numbers."""

    render_type = RenderType.CANVAS

    def font_for(self, item: PageDecoration) -> str:
        if isinstance(item, HeaderTemplate):
            return _BOLD_VARIANTS.get(item.font_name, item.font_name)
        return item.font_name

    def content_lines(self, item: PageDecoration, page: PageContext) -> List[str]:
        return (item.content or "").splitlines()

    def draw(self, canvas: Canvas, item: PageDecoration, page: PageContext,
             page_size: Tuple[float, float]) -> None:
        super().draw(canvas, item, page, page_size)
        if isinstance(item, FooterTemplate) and item.include_page_numbers:
            label = item.page_number_format.replace("{page}", str(page.page_number))
            label = label.replace("{total}", str(page.total_pages))
            x = aligned_x(label, item.font_name, item.font_size, Alignment.RIGHT, page_size[0])
            canvas.setFont(item.font_name, item.font_size)
            canvas.drawString(x, item.margin_bottom, label)


class HeaderFooterProcessor:
    """Applies a :class:`HeaderFooterConfig` to every page of a PDF."""

    def __init__(self, renderers: Optional[Iterable[HeaderFooterRenderer]] = None) -> None:
        self._renderers: Dict[RenderType, HeaderFooterRenderer] = {}
        if renderers is None:
            renderers = (TemplateHeaderFooterRenderer(), CanvasHeaderFooterRenderer())
        for renderer in renderers:
            self.register(renderer)

    def register(self, renderer: HeaderFooterRenderer) -> None:
        for render_type in RenderType:
            if renderer.supports(render_type):
                self._renderers[render_type] = renderer

    def renderer_for(self, render_type: RenderType) -> HeaderFooterRenderer:
        renderer = self._renderers.get(render_type)
        if renderer is None:
            raise UnsupportedRenderType(f"No header/footer renderer registered for render type: {render_type}")
        return renderer

    def apply(self, pdf_bytes: bytes, config: Optional[HeaderFooterConfig],
              data: Optional[Mapping[str, Any]] = None) -> bytes:
        """
        Draw headers and footers on every page not excluded by ``config``.

        Args:
            pdf_bytes: Merged document
            config: Header/footer configuration, may be ``None``
            data: Data tree available to the content templates

        Returns:
            The decorated document

        Raises:
            UnsupportedRenderType: if an item's render type has no renderer
        """
        if config is None or not (config.headers or config.footers):
            return pdf_bytes

        writer = PdfWriter(clone_from=PdfReader(BytesIO(pdf_bytes)))
        total_pages = len(writer.pages)
        items: List[PageDecoration] = list(config.headers) + list(config.footers)

        for index, page in enumerate(writer.pages):
            if not config.applies_to(index):
                logger.debug("Skipping headers/footers on page %d", index + 1)
                continue

            page_context = PageContext(page_number=index + 1, total_pages=total_pages, data=data or {})
            page_size = (float(page.mediabox.width), float(page.mediabox.height))
            buffer = BytesIO()
            canvas = Canvas(buffer, pagesize=page_size)
            drawn = 0
            for item in items:
                renderer = self.renderer_for(item.render_type)
                try:
                    renderer.draw(canvas, item, page_context, page_size)
                    drawn += 1
                except Exception as exc:
                    logger.error("Failed to render %s on page %d: %s", item.kind, index + 1, exc)

            if drawn:
                canvas.save()
                page.merge_page(PdfReader(BytesIO(buffer.getvalue())).pages[0])

        output = BytesIO()
        writer.write(output)
        return output.getvalue()

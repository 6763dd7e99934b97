"""Section renderers and the header/footer compositor."""

from .acroform import FormFillRenderer
from .base import RenderedSection, SectionRenderer, SectionRendererRegistry
from .component import ComponentRegistry, ComponentSectionRenderer, PdfComponent, SimpleTextComponent
from .header_footer import (
    CanvasHeaderFooterRenderer,
    HeaderFooterProcessor,
    HeaderFooterRenderer,
    TemplateHeaderFooterRenderer,
)
from .templated_view import TemplatedViewRenderer

__all__ = [
    "CanvasHeaderFooterRenderer",
    "ComponentRegistry",
    "ComponentSectionRenderer",
    "FormFillRenderer",
    "HeaderFooterProcessor",
    "HeaderFooterRenderer",
    "PdfComponent",
    "RenderedSection",
    "SectionRenderer",
    "SectionRendererRegistry",
    "SimpleTextComponent",
    "TemplateHeaderFooterRenderer",
    "TemplatedViewRenderer",
]

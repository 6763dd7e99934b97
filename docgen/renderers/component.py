"""Component sections: Python classes drawing directly on a reportlab canvas."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Any, Dict, Mapping, Optional, Tuple

from reportlab.pdfgen.canvas import Canvas

from ..config import GeneratorOptions
from ..engine.viewmodels import InvoiceViewModel, ViewModelFactory
from ..exceptions import SectionRenderFailure
from ..models.template import PageSection, SectionType
from .base import RenderedSection, SectionRenderer, count_pages

logger = logging.getLogger(__name__)


class PdfComponent(ABC):
    """Draws a section. May call ``canvas.showPage()`` to add pages."""

    @abstractmethod
    def render(self, canvas: Canvas, page_size: Tuple[float, float], context, data: Any) -> None:
        pass


class SimpleTextComponent(PdfComponent):
    """Title plus one line per top-level scalar value."""

    def render(self, canvas: Canvas, page_size: Tuple[float, float], context, data: Any) -> None:
        width, height = page_size
        title = "Component Rendering"
        if isinstance(data, Mapping):
            title = str(data.get("title", title))

        y = height - 92
        canvas.setFont("Helvetica-Bold", 12)
        canvas.drawString(100, y, title)

        canvas.setFont("Helvetica", 10)
        if not isinstance(data, Mapping):
            return
        for key, value in data.items():
            if key == "title" or isinstance(value, (Mapping, list, tuple)):
                continue
            y -= 16
            if y < 50:
                break
            canvas.drawString(100, y, f"{key}: {value}")


class InvoiceSummaryComponent(PdfComponent):
    def render(self, canvas: Canvas, page_size: Tuple[float, float], context, data: Any) -> None:
        if not isinstance(data, InvoiceViewModel):
            raise TypeError("invoiceSummary requires viewModelType InvoiceViewModel")

        y = page_size[1] - 92
        canvas.setFont("Helvetica-Bold", 16)
        canvas.drawString(50, y, "INVOICE SUMMARY")

        canvas.setFont("Helvetica", 12)
        for line in (
            f"Invoice Number: {data.invoice_number}",
            f"Customer: {data.customer_name}",
            f"Total Amount: ${data.total_amount:,.2f}",
        ):
            y -= 20
            canvas.drawString(50, y, line)

        if data.show_discount_message:
            y -= 20
            canvas.setFont("Helvetica-Oblique", 10)
            canvas.drawString(50, y, "Special discount applied to this invoice!")


class ComponentRegistry:
    def __init__(self, components: Optional[Mapping[str, PdfComponent]] = None) -> None:
        if components is None:
            components = {
                "simpleText": SimpleTextComponent(),
                "invoiceSummary": InvoiceSummaryComponent(),
            }
        self._components: Dict[str, PdfComponent] = dict(components)

    def register(self, name: str, component: PdfComponent) -> None:
        self._components[name] = component

    def get(self, name: str) -> Optional[PdfComponent]:
        return self._components.get(name)


class ComponentSectionRenderer(SectionRenderer):
    """Looks up the component named by ``templatePath`` and lets it draw."""

    section_type = SectionType.COMPONENT

    def __init__(self, components: ComponentRegistry, view_models: ViewModelFactory,
                 options: Optional[GeneratorOptions] = None) -> None:
        self.components = components
        self.view_models = view_models
        self.options = options or GeneratorOptions()

    def render(self, section: PageSection, context, data: Optional[Mapping[str, Any]] = None) -> RenderedSection:
        data = context.data if data is None else data
        logger.info("Rendering component section: %s", section.section_id)

        component = self.components.get(section.template_path or "")
        if component is None:
            raise SectionRenderFailure(
                section.section_id, f"No component registered with id: {section.template_path}"
            )

        model = self.view_models.create(section.view_model_type, data)
        buffer = BytesIO()
        canvas = Canvas(buffer, pagesize=self.options.page_size)
        canvas.setFont(self.options.font_name, self.options.font_size)
        try:
            component.render(canvas, self.options.page_size, context, model)
            canvas.save()
        except Exception as exc:
            raise SectionRenderFailure(
                section.section_id, f"Failed to render component: {section.template_path}", str(exc)
            ) from exc

        pdf_bytes = buffer.getvalue()
        return RenderedSection(section.section_id, pdf_bytes, count_pages(pdf_bytes))

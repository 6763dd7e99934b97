"""Form-fill sections: AcroForm PDFs filled with mapped field values."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any, Dict, Mapping, Optional

from pypdf import PdfReader, PdfWriter

from ..exceptions import SectionRenderFailure, TemplateNotFound
from ..mapping.registry import MappingStrategyRegistry
from ..models.template import PageSection, SectionType
from .base import INDICATOR_VALUE, RenderedSection, SectionRenderer

logger = logging.getLogger(__name__)

_CHECKED_WORDS = {"true", "yes", "on", "1", "x", "checked"}


def checkbox_value(form_field: Mapping[str, Any], value: str) -> str:
    """Translate a mapped value into an appearance state name for a button field."""
    states = [str(state) for state in form_field.get("/_States_", [])]
    on_states = [state for state in states if state != "/Off"]
    wanted = "/" + value.lstrip("/")
    if wanted in on_states:
        return wanted
    if value.strip().lower() in _CHECKED_WORDS:
        return on_states[0] if on_states else "/Yes"
    return "/Off"


class FormFillRenderer(SectionRenderer):
    """Fills the AcroForm named by ``templatePath`` using the section mappings."""

    section_type = SectionType.FORM_FILL

    def __init__(self, loader, mappings: MappingStrategyRegistry) -> None:
        self.loader = loader
        self.mappings = mappings

    def render(self, section: PageSection, context, data: Optional[Mapping[str, Any]] = None) -> RenderedSection:
        data = context.data if data is None else data
        logger.info("Rendering form section: %s", section.section_id)

        if not section.template_path:
            raise SectionRenderFailure(section.section_id, "Form section has no templatePath")
        try:
            form_bytes = self.loader.get_resource_bytes(section.template_path)
        except TemplateNotFound as exc:
            raise SectionRenderFailure(
                section.section_id, f"Form template not found: {section.template_path}", str(exc)
            ) from exc

        values = self.mappings.resolve_fields(section, data)
        for indicator in context.overflow_indicators(section.section_id):
            values[indicator] = INDICATOR_VALUE

        try:
            pdf_bytes, page_count = self._fill(form_bytes, values, section.template_path)
        except Exception as exc:
            raise SectionRenderFailure(
                section.section_id, f"Failed to fill form {section.template_path}", str(exc)
            ) from exc

        logger.info("Filled %d fields in section %s", len(values), section.section_id)
        return RenderedSection(section.section_id, pdf_bytes, page_count, values)

    def _fill(self, form_bytes: bytes, values: Dict[str, str], template_path: str):
        reader = PdfReader(BytesIO(form_bytes))
        writer = PdfWriter(clone_from=reader)
        form_fields = reader.get_fields() or {}

        fill: Dict[str, str] = {}
        for name, value in values.items():
            form_field = form_fields.get(name)
            if form_field is None:
                logger.warning("Field not found in form %s: %s", template_path, name)
                continue
            if form_field.get("/FT") == "/Btn":
                fill[name] = checkbox_value(form_field, value)
            else:
                fill[name] = value

        if fill:
            for page in writer.pages:
                if "/Annots" in page:
                    writer.update_page_form_field_values(page, fill, auto_regenerate=False)
            writer.set_need_appearances_writer(True)

        buffer = BytesIO()
        writer.write(buffer)
        return buffer.getvalue(), len(writer.pages)

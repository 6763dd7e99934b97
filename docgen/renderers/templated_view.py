"""Templated-view sections: Jinja2 text laid out onto reportlab pages."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any, Callable, Mapping, Optional, Tuple

import jinja2
from jinja2 import BaseLoader, ChainableUndefined, Environment
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen.canvas import Canvas

from ..config import GeneratorOptions
from ..engine.viewmodels import ViewModelFactory
from ..exceptions import SectionRenderFailure, TemplateNotFound
from ..models.template import PageSection, SectionType
from .base import INDICATOR_VALUE, RenderedSection, SectionRenderer

logger = logging.getLogger(__name__)

PAGE_BREAK = "\f"
HEADING_PREFIX = "# "


class ResourceTemplateLoader(BaseLoader):
    """Jinja2 loader reading template sources through the template loader."""

    def __init__(self, read_resource: Callable[[str], bytes]) -> None:
        self.read_resource = read_resource

    def get_source(self, environment: Environment, template: str) -> Tuple[str, Optional[str], Callable[[], bool]]:
        try:
            source = self.read_resource(template).decode("utf-8")
        except TemplateNotFound as exc:
            raise jinja2.TemplateNotFound(template) from exc
        return source, template, lambda: True


def create_environment(read_resource: Callable[[str], bytes]) -> Environment:
    return Environment(
        loader=ResourceTemplateLoader(read_resource),
        undefined=ChainableUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class TextPageWriter:
    """Writes lines top to bottom, starting new pages as needed."""

    def __init__(self, options: GeneratorOptions) -> None:
        self.options = options
        self.buffer = BytesIO()
        self.canvas = Canvas(self.buffer, pagesize=options.page_size)
        self.width, self.height = options.page_size
        self.page_count = 1
        self._start_page()

    def _start_page(self) -> None:
        self.y = self.height - self.options.margin
        # font state marks the page as non-empty so blank pages are kept
        self.canvas.setFont(self.options.font_name, self.options.font_size)

    def new_page(self) -> None:
        self.canvas.showPage()
        self.page_count += 1
        self._start_page()

    def write_line(self, line: str) -> None:
        font_name = self.options.font_name
        font_size = self.options.font_size
        if line.startswith(HEADING_PREFIX):
            line = line[len(HEADING_PREFIX):]
            font_name = f"{font_name}-Bold" if font_name in ("Helvetica", "Times", "Courier") else font_name
            font_size += 4

        usable = self.width - 2 * self.options.margin
        for wrapped in simpleSplit(line, font_name, font_size, usable) or [""]:
            if self.y < self.options.margin:
                self.new_page()
            self.canvas.setFont(font_name, font_size)
            self.canvas.drawString(self.options.margin, self.y, wrapped)
            self.y -= max(self.options.line_height, font_size * 1.2)

    def write_text(self, text: str) -> None:
        for index, chunk in enumerate(text.split(PAGE_BREAK)):
            if index:
                self.new_page()
            for line in chunk.splitlines():
                self.write_line(line)

    def finish(self) -> bytes:
        self.canvas.save()
        return self.buffer.getvalue()


def render_text_pages(text: str, options: GeneratorOptions) -> Tuple[bytes, int]:
    writer = TextPageWriter(options)
    writer.write_text(text)
    return writer.finish(), writer.page_count


class TemplatedViewRenderer(SectionRenderer):
    """Renders ``templatePath`` with Jinja2 and draws the resulting text."""

    section_type = SectionType.TEMPLATED_VIEW

    def __init__(self, loader, view_models: ViewModelFactory, options: Optional[GeneratorOptions] = None) -> None:
        self.loader = loader
        self.view_models = view_models
        self.options = options or GeneratorOptions()
        self.environment = create_environment(loader.get_resource_bytes)

    def build_model(self, section: PageSection, context, data: Mapping[str, Any]) -> dict:
        view_model = self.view_models.create(section.view_model_type, data)
        model = dict(view_model) if isinstance(view_model, Mapping) else {"model": view_model}
        for indicator in context.overflow_indicators(section.section_id):
            model[indicator] = INDICATOR_VALUE
        return model

    def render(self, section: PageSection, context, data: Optional[Mapping[str, Any]] = None) -> RenderedSection:
        data = context.data if data is None else data
        logger.info("Rendering templated section: %s", section.section_id)

        if not section.template_path:
            raise SectionRenderFailure(section.section_id, "Templated section has no templatePath")
        try:
            template = self.environment.get_template(section.template_path)
            text = template.render(self.build_model(section, context, data))
        except jinja2.TemplateNotFound as exc:
            raise SectionRenderFailure(
                section.section_id, f"Template not found: {section.template_path}"
            ) from exc
        except jinja2.TemplateError as exc:
            raise SectionRenderFailure(
                section.section_id, f"Template rendering failed for {section.template_path}", str(exc)
            ) from exc

        try:
            pdf_bytes, page_count = render_text_pages(text, self.options)
        except Exception as exc:
            raise SectionRenderFailure(section.section_id, "Failed to draw templated section", str(exc)) from exc
        return RenderedSection(section.section_id, pdf_bytes, page_count)

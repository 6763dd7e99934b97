"""Section renderer interface and registry."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Dict, Iterable, Mapping, Optional

from pypdf import PdfReader

from ..exceptions import SectionRenderFailure
from ..models.template import PageSection, SectionType

# Value written into a form field that flags "continued on addendum".
INDICATOR_VALUE = "Yes"


@dataclass
class RenderedSection:
    section_id: str
    pdf_bytes: bytes
    page_count: int
    field_values: Dict[str, str] = field(default_factory=dict)


def count_pages(pdf_bytes: bytes) -> int:
    return len(PdfReader(BytesIO(pdf_bytes)).pages)


class SectionRenderer(ABC):
    """Turns one section plus data into PDF pages."""

    section_type: SectionType

    def supports(self, section_type: Optional[SectionType]) -> bool:
        return section_type is self.section_type

    @abstractmethod
    def render(self, section: PageSection, context, data: Optional[Mapping[str, Any]] = None) -> RenderedSection:
        """
        Render ``section``.

        Args:
            section: Section to render
            context: RenderContext of the current request
            data: Data tree to render with; defaults to ``context.data``

        Raises:
            SectionRenderFailure: if the section cannot be produced
        """


class SectionRendererRegistry:
    def __init__(self, renderers: Iterable[SectionRenderer] = ()) -> None:
        self._renderers: Dict[SectionType, SectionRenderer] = {}
        for renderer in renderers:
            self.register(renderer)

    def register(self, renderer: SectionRenderer) -> None:
        for section_type in SectionType:
            if renderer.supports(section_type):
                self._renderers[section_type] = renderer

    def get(self, section: PageSection) -> SectionRenderer:
        renderer = self._renderers.get(section.section_type) if section.section_type else None
        if renderer is None:
            raise SectionRenderFailure(
                section.section_id,
                f"No renderer found for section type: {section.section_type}",
            )
        return renderer

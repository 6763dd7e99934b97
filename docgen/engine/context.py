"""Per-request rendering state."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Callable, Dict, List, Mapping, Optional

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..models.template import DocumentTemplate

logger = logging.getLogger(__name__)

ResourceReader = Callable[[str], bytes]


class RenderContext:
    """
    State for one document generation request.

    Holds the resolved template (shared, read-only), the input data, a page
    counter, a metadata map used by sections to signal each other, and font
    and image handles loaded on first use. A context is never shared between
    requests.
    """

    def __init__(
        self,
        template: DocumentTemplate,
        data: Mapping[str, Any],
        resource_reader: Optional[ResourceReader] = None,
    ) -> None:
        self.template = template
        self.data = data
        self.resource_reader = resource_reader
        self.current_page = 0
        self.current_section_id: Optional[str] = None
        self.metadata: Dict[str, Any] = {}
        self._fonts: Dict[str, str] = {}
        self._images: Dict[str, ImageReader] = {}

    def advance_pages(self, count: int) -> int:
        """Move the page counter forward by ``count`` pages and return it."""
        if count < 0:
            raise ValueError("Page count cannot be negative")
        self.current_page += count
        return self.current_page

    # Overflow signaling ------------------------------------------------
    @staticmethod
    def overflow_key(section_id: str, indicator_field: str) -> str:
        return f"overflow.{section_id}.{indicator_field}"

    def mark_overflow(self, section_id: str, indicator_field: str) -> None:
        self.metadata[self.overflow_key(section_id, indicator_field)] = True

    def overflow_indicators(self, section_id: str) -> List[str]:
        """Indicator fields flagged for ``section_id``."""
        prefix = f"overflow.{section_id}."
        return [key[len(prefix):] for key, flagged in self.metadata.items() if key.startswith(prefix) and flagged]

    # Resources ---------------------------------------------------------
    def _read(self, path: str) -> bytes:
        if self.resource_reader is not None:
            return self.resource_reader(path)
        with open(path, "rb") as handle:
            return handle.read()

    def get_font(self, path: str) -> str:
        """Register the TrueType font at ``path`` and return its font name."""
        font_name = self._fonts.get(path)
        if font_name is None:
            digest = hashlib.sha1(path.encode("utf-8")).hexdigest()[:8]
            font_name = f"docgen-{digest}"
            if font_name not in pdfmetrics.getRegisteredFontNames():
                pdfmetrics.registerFont(TTFont(font_name, BytesIO(self._read(path))))
            self._fonts[path] = font_name
            logger.debug("Loaded font %s as %s", path, font_name)
        return font_name

    def get_image(self, path: str) -> ImageReader:
        """Load the image at ``path`` once per request."""
        image = self._images.get(path)
        if image is None:
            pil_image = Image.open(BytesIO(self._read(path)))
            pil_image.load()
            image = ImageReader(pil_image)
            self._images[path] = image
            logger.debug("Loaded image %s (%dx%d)", path, *pil_image.size)
        return image


@dataclass
class PageContext:
    """Page position handed to header/footer renderers (1-based page number)."""

    page_number: int
    total_pages: int
    data: Mapping[str, Any] = field(default_factory=dict)

    def template_model(self, extra: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        model: Dict[str, Any] = dict(self.data or {})
        if extra:
            model.update(extra)
        model["pageNumber"] = self.page_number
        model["totalPages"] = self.total_pages
        return model

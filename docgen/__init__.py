"""
docgen - template-driven PDF document composition.

Builds PDF documents from declarative YAML/JSON templates and runtime data:

- Template inheritance, fragments and caching (``TemplateLoader``)
- Field mapping with Direct, JSONPath, JSONata and Custom strategies
- Overflow planning of repeating data into addendum pages
- Form-fill, templated-view and component section renderers
- Headers and footers with page numbering

Typical use::

    from docgen import DocumentComposer, GeneratorOptions

    composer = DocumentComposer.create_default(GeneratorOptions(template_roots=["templates"]))
    pdf_bytes = composer.generate("enrollment", {"applicant": {...}})
"""

from .config import GeneratorOptions
from .engine.composer import DocumentComposer
from .exceptions import (
    CyclicInheritanceError,
    DocGenError,
    DocumentGenerationError,
    FieldMappingFailure,
    InvalidOverflowConfig,
    SectionRenderFailure,
    TemplateNotFound,
    TemplateParseError,
    UnsupportedRenderType,
)
from .loader.template_loader import TemplateLoader
from .mapping.registry import MappingStrategyRegistry
from .models.template import DocumentGenerationRequest, DocumentTemplate, MappingType
from .version import __version__

__all__ = [
    "CyclicInheritanceError",
    "DocGenError",
    "DocumentComposer",
    "DocumentGenerationError",
    "DocumentGenerationRequest",
    "DocumentTemplate",
    "FieldMappingFailure",
    "GeneratorOptions",
    "InvalidOverflowConfig",
    "MappingStrategyRegistry",
    "MappingType",
    "SectionRenderFailure",
    "TemplateLoader",
    "TemplateNotFound",
    "TemplateParseError",
    "UnsupportedRenderType",
    "__version__",
]

"""Template parsing, inheritance merge and loading."""

from .merge import include_fragment, merge_sections, merge_templates
from .parser import parse_template
from .template_loader import TemplateLoader, interpolate_template_fields, resolve_placeholders

__all__ = [
    "TemplateLoader",
    "include_fragment",
    "interpolate_template_fields",
    "merge_sections",
    "merge_templates",
    "parse_template",
    "resolve_placeholders",
]

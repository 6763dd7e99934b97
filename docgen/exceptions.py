"""Custom exceptions for docgen."""

from typing import Optional


class DocGenError(Exception):
    """Base exception for docgen errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class TemplateNotFound(DocGenError):
    """Raised when a template or resource artifact cannot be located or read."""

    pass


class TemplateParseError(DocGenError):
    """Raised when a template artifact is structurally invalid."""

    pass


class CyclicInheritanceError(DocGenError):
    """Raised when template inheritance loops back on itself or nests too deep."""

    def __init__(self, chain, details: Optional[str] = None):
        self.chain = tuple(chain)
        super().__init__(
            "Cyclic template inheritance: " + " -> ".join(self.chain),
            details,
        )


class InvalidOverflowConfig(DocGenError):
    """Raised when an overflow configuration cannot be applied."""

    pass


class UnsupportedRenderType(DocGenError):
    """Raised when no header/footer renderer is registered for a render type."""

    pass


class FieldMappingFailure(DocGenError):
    """Raised for a single field that could not be mapped.

    Never escapes the mapping layer; strategies catch it and substitute an
    empty value.
    """

    def __init__(self, field_name: str, expression: str, details: Optional[str] = None):
        self.field_name = field_name
        self.expression = expression
        super().__init__(f"Failed to map field '{field_name}' from '{expression}'", details)


class SectionRenderFailure(DocGenError):
    """Raised when a section renderer cannot produce its pages."""

    def __init__(self, section_id: Optional[str], message: str, details: Optional[str] = None):
        self.section_id = section_id
        super().__init__(message, details)


class DocumentGenerationError(DocGenError):
    """Single failure surfaced by the composer for a request."""

    def __init__(
        self,
        message: str,
        template_id: Optional[str] = None,
        section_id: Optional[str] = None,
        details: Optional[str] = None,
    ):
        self.template_id = template_id
        self.section_id = section_id
        super().__init__(message, details)

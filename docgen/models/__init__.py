"""Template value objects."""

from .template import (
    DEFAULT_MAPPING_TYPE,
    Alignment,
    DocumentGenerationRequest,
    DocumentTemplate,
    FieldMappingGroup,
    FooterTemplate,
    HeaderFooterConfig,
    HeaderTemplate,
    IndexPosition,
    MappingType,
    OverflowConfig,
    PageSection,
    RenderType,
    RepeatingGroupConfig,
    SectionType,
    freeze_mapping,
)

__all__ = [
    "DEFAULT_MAPPING_TYPE",
    "Alignment",
    "DocumentGenerationRequest",
    "DocumentTemplate",
    "FieldMappingGroup",
    "FooterTemplate",
    "HeaderFooterConfig",
    "HeaderTemplate",
    "IndexPosition",
    "MappingType",
    "OverflowConfig",
    "PageSection",
    "RenderType",
    "RepeatingGroupConfig",
    "SectionType",
    "freeze_mapping",
]

"""Immutable value objects describing a document template.

Templates are parsed once, merged with their parents and then shared by every
generation request, so nothing in here is ever mutated after construction.
Sequences are tuples and mappings are wrapped in ``MappingProxyType``;
:func:`dataclasses.replace` is used whenever a modified copy is needed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple


def freeze_mapping(values: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Return a read-only copy of ``values``."""
    if isinstance(values, MappingProxyType):
        return values
    return MappingProxyType(dict(values or {}))


def _empty_mapping() -> Mapping[str, Any]:
    return MappingProxyType({})


# Names used by older template artifacts, keyed by enum class name.
_TAG_ALIASES: Dict[str, Dict[str, str]] = {
    "SectionType": {
        "ACROFORM": "FORM_FILL",
        "FORM": "FORM_FILL",
        "FREEMARKER": "TEMPLATED_VIEW",
        "PDFBOX_COMPONENT": "COMPONENT",
    },
    "RenderType": {
        "PDFBOX": "CANVAS",
        "FREEMARKER": "TEMPLATE",
    },
}


class _TagEnum(Enum):
    """Enum accepting case-insensitive names and legacy aliases."""

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        key = value.strip().upper().replace("-", "_")
        key = _TAG_ALIASES.get(cls.__name__, {}).get(key, key)
        for member in cls:
            if member.value == key:
                return member
        return None


class MappingType(_TagEnum):
    DIRECT = "DIRECT"
    JSONPATH = "JSONPATH"
    JSONATA = "JSONATA"
    CUSTOM = "CUSTOM"


DEFAULT_MAPPING_TYPE = MappingType.JSONPATH


class SectionType(_TagEnum):
    FORM_FILL = "FORM_FILL"
    TEMPLATED_VIEW = "TEMPLATED_VIEW"
    COMPONENT = "COMPONENT"


class RenderType(_TagEnum):
    CANVAS = "CANVAS"
    TEMPLATE = "TEMPLATE"


class Alignment(_TagEnum):
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"

    @classmethod
    def parse(cls, value: Any) -> "Alignment":
        """Parse an alignment, falling back to LEFT for unknown values."""
        if isinstance(value, Alignment):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.LEFT


class IndexPosition(_TagEnum):
    BEFORE_FIELD = "BEFORE_FIELD"
    AFTER_FIELD = "AFTER_FIELD"


@dataclass(frozen=True)
class RepeatingGroupConfig:
    """Expands a list into numbered form fields such as ``child_name_1``."""

    fields: Mapping[str, str] = field(default_factory=_empty_mapping)
    prefix: str = ""
    suffix: str = ""
    start_index: int = 1
    index_separator: str = "_"
    index_position: IndexPosition = IndexPosition.AFTER_FIELD
    max_items: Optional[int] = None

    def field_name(self, key: str, index: int) -> str:
        if self.index_position is IndexPosition.BEFORE_FIELD:
            return f"{self.prefix}{index}{self.index_separator}{key}{self.suffix}"
        return f"{self.prefix}{key}{self.index_separator}{index}{self.suffix}"


@dataclass(frozen=True)
class FieldMappingGroup:
    mapping_type: MappingType
    field_mappings: Mapping[str, str] = field(default_factory=_empty_mapping)
    base_path: Optional[str] = None
    repeating_group: Optional[RepeatingGroupConfig] = None


@dataclass(frozen=True)
class OverflowConfig:
    array_path: str
    mapping_type: MappingType = DEFAULT_MAPPING_TYPE
    max_items_in_main: int = 0
    items_per_overflow_page: int = 0
    addendum_template_path: Optional[str] = None
    overflow_indicator_field: Optional[str] = None


@dataclass(frozen=True)
class PageSection:
    """One page-producing unit of a template.

    ``section_type`` and ``mapping_type`` are ``None`` when the artifact did
    not set them, so a child section can tell "unset" apart from "set to the
    default" while merging.
    """

    section_id: str
    section_type: Optional[SectionType] = None
    template_path: Optional[str] = None
    mapping_type: Optional[MappingType] = None
    field_mappings: Mapping[str, str] = field(default_factory=_empty_mapping)
    field_mapping_groups: Tuple[FieldMappingGroup, ...] = ()
    view_model_type: Optional[str] = None
    condition: Optional[str] = None
    overflow_configs: Tuple[OverflowConfig, ...] = ()
    order: int = 0

    @property
    def effective_mapping_type(self) -> MappingType:
        return self.mapping_type or DEFAULT_MAPPING_TYPE

    @property
    def has_mapping_groups(self) -> bool:
        return bool(self.field_mapping_groups)


@dataclass(frozen=True)
class HeaderTemplate:
    content: str = ""
    render_type: RenderType = RenderType.TEMPLATE
    alignment: Alignment = Alignment.CENTER
    font_name: str = "Helvetica"
    font_size: float = 10.0
    data: Mapping[str, Any] = field(default_factory=_empty_mapping)
    margin_top: float = 50.0

    kind = "header"


@dataclass(frozen=True)
class FooterTemplate:
    content: str = ""
    render_type: RenderType = RenderType.TEMPLATE
    alignment: Alignment = Alignment.CENTER
    font_name: str = "Helvetica"
    font_size: float = 10.0
    data: Mapping[str, Any] = field(default_factory=_empty_mapping)
    margin_bottom: float = 50.0
    include_page_numbers: bool = True
    page_number_format: str = "Page {page} of {total}"

    kind = "footer"


@dataclass(frozen=True)
class HeaderFooterConfig:
    headers: Tuple[HeaderTemplate, ...] = ()
    footers: Tuple[FooterTemplate, ...] = ()
    apply_to_all_pages: bool = True
    exclude_pages: FrozenSet[int] = frozenset()

    def applies_to(self, page_index: int) -> bool:
        """Whether the 0-based ``page_index`` receives headers and footers."""
        if page_index in self.exclude_pages:
            return False
        return self.apply_to_all_pages or page_index == 0


@dataclass(frozen=True)
class DocumentTemplate:
    template_id: str
    sections: Tuple[PageSection, ...] = ()
    description: Optional[str] = None
    base_template_id: Optional[str] = None
    excluded_sections: Tuple[str, ...] = ()
    section_overrides: Mapping[str, str] = field(default_factory=_empty_mapping)
    included_fragments: Tuple[str, ...] = ()
    header_footer_config: Optional[HeaderFooterConfig] = None
    metadata: Mapping[str, Any] = field(default_factory=_empty_mapping)

    @property
    def section_ids(self) -> Tuple[str, ...]:
        return tuple(section.section_id for section in self.sections)

    def get_section(self, section_id: str) -> Optional[PageSection]:
        for section in self.sections:
            if section.section_id == section_id:
                return section
        return None


@dataclass(frozen=True)
class DocumentGenerationRequest:
    template_id: str
    data: Mapping[str, Any] = field(default_factory=dict)
    variables: Mapping[str, Any] = field(default_factory=dict)

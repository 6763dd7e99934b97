"""Conversion of raw template documents (parsed YAML/JSON) into value objects."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from ..exceptions import TemplateParseError
from ..models.template import (
    Alignment,
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
    DEFAULT_MAPPING_TYPE,
)

E = TypeVar("E")


def _snake(name: str) -> str:
    return "".join("_" + c.lower() if c.isupper() else c for c in name)


def _get(raw: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Read ``key`` given in camelCase, also accepting its snake_case form."""
    if key in raw:
        return raw[key]
    return raw.get(_snake(key), default)


def _require_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TemplateParseError(f"Expected a mapping for {where}", f"got {type(value).__name__}")
    return value


def _require_list(value: Any, where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TemplateParseError(f"Expected a list for {where}", f"got {type(value).__name__}")
    return value


def _enum(enum_cls: Type[E], value: Any, where: str) -> Optional[E]:
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise TemplateParseError(f"Invalid {enum_cls.__name__} for {where}", repr(value)) from None


def _int(value: Any, where: str, default: int = 0) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise TemplateParseError(f"Expected an integer for {where}", repr(value))
    try:
        return int(value)
    except (TypeError, ValueError):
        raise TemplateParseError(f"Expected an integer for {where}", repr(value)) from None


def _str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _string_map(value: Any, where: str) -> Mapping[str, str]:
    raw = _require_mapping(value, where)
    return freeze_mapping({str(k): "" if v is None else str(v) for k, v in raw.items()})


def parse_repeating_group(raw: Mapping[str, Any], where: str) -> RepeatingGroupConfig:
    raw = _require_mapping(raw, where)
    max_items = _get(raw, "maxItems")
    position = _enum(IndexPosition, _get(raw, "indexPosition"), where)
    return RepeatingGroupConfig(
        fields=_string_map(_get(raw, "fields"), f"{where}.fields"),
        prefix=str(_get(raw, "prefix") or ""),
        suffix=str(_get(raw, "suffix") or ""),
        start_index=_int(_get(raw, "startIndex"), f"{where}.startIndex", 1),
        index_separator=str(_get(raw, "indexSeparator", "_") or ""),
        index_position=position or IndexPosition.AFTER_FIELD,
        max_items=None if max_items is None else _int(max_items, f"{where}.maxItems"),
    )


def parse_mapping_group(raw: Mapping[str, Any], where: str) -> FieldMappingGroup:
    raw = _require_mapping(raw, where)
    fields = _get(raw, "fields")
    if fields is None:
        fields = _get(raw, "fieldMappings")
    repeating = _get(raw, "repeatingGroup")
    return FieldMappingGroup(
        mapping_type=_enum(MappingType, _get(raw, "mappingType"), where) or DEFAULT_MAPPING_TYPE,
        field_mappings=_string_map(fields, f"{where}.fields"),
        base_path=_str(_get(raw, "basePath")),
        repeating_group=None if repeating is None else parse_repeating_group(repeating, f"{where}.repeatingGroup"),
    )


def parse_overflow_config(raw: Mapping[str, Any], where: str) -> OverflowConfig:
    raw = _require_mapping(raw, where)
    array_path = _get(raw, "arrayPath")
    if not array_path:
        raise TemplateParseError(f"Missing arrayPath in {where}")
    return OverflowConfig(
        array_path=str(array_path),
        mapping_type=_enum(MappingType, _get(raw, "mappingType"), where) or DEFAULT_MAPPING_TYPE,
        max_items_in_main=_int(_get(raw, "maxItemsInMain"), f"{where}.maxItemsInMain"),
        items_per_overflow_page=_int(_get(raw, "itemsPerOverflowPage"), f"{where}.itemsPerOverflowPage"),
        addendum_template_path=_str(_get(raw, "addendumTemplatePath")),
        overflow_indicator_field=_str(_get(raw, "overflowIndicatorField")),
    )


def parse_section(raw: Mapping[str, Any], where: str) -> PageSection:
    raw = _require_mapping(raw, where)
    section_id = _get(raw, "sectionId")
    if not section_id:
        raise TemplateParseError(f"Missing sectionId in {where}")
    where = f"section '{section_id}'"

    groups = _require_list(_get(raw, "fieldMappingGroups"), f"{where}.fieldMappingGroups")
    overflows = _require_list(_get(raw, "overflowConfigs"), f"{where}.overflowConfigs")
    return PageSection(
        section_id=str(section_id),
        section_type=_enum(SectionType, _get(raw, "type"), where),
        template_path=_str(_get(raw, "templatePath")),
        mapping_type=_enum(MappingType, _get(raw, "mappingType"), where),
        field_mappings=_string_map(_get(raw, "fieldMappings"), f"{where}.fieldMappings"),
        field_mapping_groups=tuple(
            parse_mapping_group(group, f"{where}.fieldMappingGroups[{i}]") for i, group in enumerate(groups)
        ),
        view_model_type=_str(_get(raw, "viewModelType")),
        condition=_str(_get(raw, "condition")),
        overflow_configs=tuple(
            parse_overflow_config(config, f"{where}.overflowConfigs[{i}]") for i, config in enumerate(overflows)
        ),
        order=_int(_get(raw, "order"), f"{where}.order"),
    )


def _decoration_kwargs(raw: Mapping[str, Any], where: str) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"content": str(_get(raw, "content") or "")}
    render_type = _enum(RenderType, _get(raw, "renderType"), where)
    if render_type is not None:
        kwargs["render_type"] = render_type
    if _get(raw, "alignment") is not None:
        kwargs["alignment"] = Alignment.parse(_get(raw, "alignment"))
    if _get(raw, "fontName"):
        kwargs["font_name"] = str(_get(raw, "fontName"))
    if _get(raw, "fontSize") is not None:
        kwargs["font_size"] = float(_get(raw, "fontSize"))
    kwargs["data"] = freeze_mapping(_require_mapping(_get(raw, "data"), f"{where}.data"))
    return kwargs


def parse_header(raw: Mapping[str, Any], where: str) -> HeaderTemplate:
    raw = _require_mapping(raw, where)
    kwargs = _decoration_kwargs(raw, where)
    if _get(raw, "marginTop") is not None:
        kwargs["margin_top"] = float(_get(raw, "marginTop"))
    return HeaderTemplate(**kwargs)


def parse_footer(raw: Mapping[str, Any], where: str) -> FooterTemplate:
    raw = _require_mapping(raw, where)
    kwargs = _decoration_kwargs(raw, where)
    if _get(raw, "marginBottom") is not None:
        kwargs["margin_bottom"] = float(_get(raw, "marginBottom"))
    if _get(raw, "includePageNumbers") is not None:
        kwargs["include_page_numbers"] = bool(_get(raw, "includePageNumbers"))
    if _get(raw, "pageNumberFormat"):
        kwargs["page_number_format"] = str(_get(raw, "pageNumberFormat"))
    return FooterTemplate(**kwargs)


def parse_header_footer_config(raw: Any) -> Optional[HeaderFooterConfig]:
    if raw is None:
        return None
    raw = _require_mapping(raw, "headerFooterConfig")
    headers = _require_list(_get(raw, "headers"), "headerFooterConfig.headers")
    footers = _require_list(_get(raw, "footers"), "headerFooterConfig.footers")
    excluded = _require_list(_get(raw, "excludePages"), "headerFooterConfig.excludePages")
    apply_all = _get(raw, "applyToAllPages")
    return HeaderFooterConfig(
        headers=tuple(parse_header(h, f"headers[{i}]") for i, h in enumerate(headers)),
        footers=tuple(parse_footer(f, f"footers[{i}]") for i, f in enumerate(footers)),
        apply_to_all_pages=True if apply_all is None else bool(apply_all),
        exclude_pages=frozenset(_int(p, "excludePages") for p in excluded),
    )


def parse_template(raw: Any, default_id: str) -> DocumentTemplate:
    """Build an unmerged :class:`DocumentTemplate` from a parsed document.

    Args:
        raw: Result of ``yaml.safe_load`` / ``json.load``
        default_id: Identifier used when the document has no ``templateId``

    Raises:
        TemplateParseError: if the structure is invalid
    """
    if not isinstance(raw, Mapping):
        raise TemplateParseError(
            f"Template '{default_id}' must be a mapping at the top level",
            f"got {type(raw).__name__}",
        )

    sections = tuple(
        parse_section(section, f"sections[{i}]")
        for i, section in enumerate(_require_list(_get(raw, "sections"), "sections"))
    )
    seen = set()
    for section in sections:
        if section.section_id in seen:
            raise TemplateParseError(f"Duplicate sectionId '{section.section_id}' in template '{default_id}'")
        seen.add(section.section_id)

    return DocumentTemplate(
        template_id=str(_get(raw, "templateId") or default_id),
        sections=sections,
        description=_str(_get(raw, "description")),
        base_template_id=_str(_get(raw, "baseTemplateId")),
        excluded_sections=tuple(str(s) for s in _require_list(_get(raw, "excludedSections"), "excludedSections")),
        section_overrides=_string_map(_get(raw, "sectionOverrides"), "sectionOverrides"),
        included_fragments=tuple(str(s) for s in _require_list(_get(raw, "includedFragments"), "includedFragments")),
        header_footer_config=parse_header_footer_config(_get(raw, "headerFooterConfig")),
        metadata=freeze_mapping(_require_mapping(_get(raw, "metadata"), "metadata")),
    )

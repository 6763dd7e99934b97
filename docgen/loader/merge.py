"""Pure functions combining templates: inheritance merge and fragment inclusion.

None of these functions modify their inputs. Cached parent templates are
shared by every child that extends them.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Mapping, Optional, TypeVar

from ..models.template import DocumentTemplate, PageSection, freeze_mapping

T = TypeVar("T")


def _pick(child: Optional[T], parent: Optional[T]) -> Optional[T]:
    return parent if child is None else child


def merge_sections(parent: PageSection, child: PageSection) -> PageSection:
    """Overlay ``child`` onto ``parent`` for a section id present in both.

    Scalars set on the child win. Field mappings merge key by key. Mapping
    groups and overflow configs are replaced when the child declares any.
    """
    return replace(
        parent,
        section_type=_pick(child.section_type, parent.section_type),
        template_path=_pick(child.template_path, parent.template_path),
        mapping_type=_pick(child.mapping_type, parent.mapping_type),
        field_mappings=freeze_mapping({**parent.field_mappings, **child.field_mappings}),
        field_mapping_groups=child.field_mapping_groups or parent.field_mapping_groups,
        view_model_type=_pick(child.view_model_type, parent.view_model_type),
        condition=_pick(child.condition, parent.condition),
        overflow_configs=child.overflow_configs or parent.overflow_configs,
        order=child.order if child.order != 0 else parent.order,
    )


def apply_section_override(section: PageSection, overrides: Mapping[str, str]) -> PageSection:
    """Replace the template path of an inherited section from ``section_id -> path``."""
    if section.section_id not in overrides:
        return section
    return replace(section, template_path=overrides[section.section_id])


def sort_sections(sections: Iterable[PageSection]) -> tuple:
    # sorted() is stable, so equal orders keep their insertion order
    return tuple(sorted(sections, key=lambda section: section.order))


def merge_templates(parent: DocumentTemplate, child: DocumentTemplate) -> DocumentTemplate:
    """Resolve ``child`` against its already-resolved ``parent``."""
    excluded = set(child.excluded_sections)
    child_sections = {section.section_id: section for section in child.sections}

    merged: List[PageSection] = []
    for section in parent.sections:
        if section.section_id in excluded:
            continue
        override = child_sections.get(section.section_id)
        if override is not None:
            merged.append(merge_sections(section, override))
        else:
            # only sections the child does not redeclare take legacy path overrides
            merged.append(apply_section_override(section, child.section_overrides))

    inherited = {section.section_id for section in merged}
    merged.extend(section for section in child.sections if section.section_id not in inherited)

    return replace(
        child,
        sections=sort_sections(merged),
        description=_pick(child.description, parent.description),
        header_footer_config=_pick(child.header_footer_config, parent.header_footer_config),
        metadata=freeze_mapping({**parent.metadata, **child.metadata}),
    )


def include_fragment(template: DocumentTemplate, fragment: DocumentTemplate) -> DocumentTemplate:
    """Append the fragment's sections whose ids the template does not have yet."""
    existing = set(template.section_ids)
    added = [section for section in fragment.sections if section.section_id not in existing]
    if not added:
        return template
    return replace(template, sections=sort_sections(list(template.sections) + added))

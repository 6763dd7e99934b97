"""
Template loading with inheritance resolution and caching.

Templates are YAML or JSON documents found under the configured template
roots. A template may extend another one through ``baseTemplateId`` and may
pull in the sections of ``includedFragments``. The fully merged result is
cached per requested identifier and placeholder variables until
:meth:`TemplateLoader.clear_cache`.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import replace
from pathlib import Path, PurePosixPath
from typing import Any, Hashable, Iterable, Iterator, Mapping, Optional, Tuple

import yaml

from ..config import GeneratorOptions
from ..exceptions import (
    CyclicInheritanceError,
    DocGenError,
    TemplateNotFound,
    TemplateParseError,
)
from ..mapping.direct import get_nested_value
from ..models.template import DocumentTemplate, SectionType
from ..utils.cache import Cache
from .merge import include_fragment, merge_templates, sort_sections
from .parser import parse_template

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".yaml", ".yml", ".json")
PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")


def resolve_placeholders(text: str, variables: Optional[Mapping[str, Any]], strict: bool = True) -> str:
    """
    Substitute ``${name}`` placeholders from ``variables``.

    Args:
        text: Text containing placeholders
        variables: Values by placeholder name; dotted names walk nested mappings
        strict: Raise on unknown placeholders instead of leaving them as-is

    Returns:
        Text with placeholders replaced

    Raises:
        TemplateParseError: if ``strict`` and a placeholder has no value
    """
    if not text or "${" not in text:
        return text
    variables = variables or {}

    def substitute(match: "re.Match[str]") -> str:
        name = match.group(1).strip()
        value = variables[name] if name in variables else get_nested_value(variables, name)
        if value is not None:
            return str(value)
        if strict:
            raise TemplateParseError(f"Unresolved placeholder '${{{name}}}'", f"in '{text}'")
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(substitute, text)


def template_cache_key(template_id: str, variables: Optional[Mapping[str, Any]]) -> Hashable:
    """Cache key for a resolved template; the variables shape the merged result."""
    if not variables:
        return template_id
    return template_id, json.dumps(dict(variables), sort_keys=True, default=str)


def interpolate_template_fields(template: DocumentTemplate, variables: Optional[Mapping[str, Any]]) -> DocumentTemplate:
    """Resolve placeholders in paths, conditions and header/footer text.

    Unknown placeholders are left untouched here; only template ids must
    resolve completely.
    """
    if not variables:
        return template

    def sub(value: Optional[str]) -> Optional[str]:
        return None if value is None else resolve_placeholders(value, variables, strict=False)

    sections = tuple(
        replace(
            section,
            template_path=sub(section.template_path),
            condition=sub(section.condition),
            overflow_configs=tuple(
                replace(config, addendum_template_path=sub(config.addendum_template_path))
                for config in section.overflow_configs
            ),
        )
        for section in template.sections
    )

    config = template.header_footer_config
    if config is not None:
        config = replace(
            config,
            headers=tuple(replace(h, content=sub(h.content)) for h in config.headers),
            footers=tuple(replace(f, content=sub(f.content)) for f in config.footers),
        )
    return replace(template, sections=sections, header_footer_config=config)


class TemplateLoader:
    """Resolves template identifiers to merged, immutable templates."""

    def __init__(self, options: Optional[GeneratorOptions] = None) -> None:
        self.options = options or GeneratorOptions()
        self._templates = Cache(max_size=None, name="template cache")
        self._resources = Cache(self.options.cache_max_size, self.options.cache_ttl, name="resource cache")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def load(self, template_id: str, variables: Optional[Mapping[str, Any]] = None) -> DocumentTemplate:
        """Load and fully resolve ``template_id``.

        Raises:
            TemplateNotFound: no artifact exists for the identifier
            TemplateParseError: the artifact or a placeholder is invalid
            CyclicInheritanceError: inheritance loops or nests too deeply
        """
        return self._load(template_id, variables or {}, ())

    def get_resource_bytes(self, path: str) -> bytes:
        """Return the raw bytes of a section resource such as a PDF form."""
        if not path:
            raise TemplateNotFound("Empty resource path")
        if not self.options.cache_enabled:
            return self._read_resource(path)
        return self._resources.get_or_compute(path, lambda: self._read_resource(path))

    def clear_cache(self) -> None:
        self._templates.clear()
        self._resources.clear()
        logger.info("Template and resource caches cleared")

    def is_cached(self, template_id: str, variables: Optional[Mapping[str, Any]] = None) -> bool:
        return self._templates.has(template_cache_key(template_id, variables))

    def warm_cache(self, template_ids: Optional[Iterable[str]] = None) -> int:
        """Preload templates and their section resources.

        Failures are logged and skipped. Returns the number of templates loaded.
        """
        ids = list(template_ids if template_ids is not None else self.options.preload_template_ids)
        if not ids:
            logger.info("Template cache warming skipped (no template ids configured)")
            return 0

        start = time.perf_counter()
        warmed = 0
        for template_id in ids:
            try:
                template = self.load(template_id)
            except DocGenError as exc:
                logger.error("Failed to warm template %s: %s", template_id, exc)
                continue
            warmed += 1
            for section in template.sections:
                if not section.template_path or section.section_type is None:
                    continue
                if section.section_type is SectionType.COMPONENT:
                    continue
                try:
                    self.get_resource_bytes(section.template_path)
                except TemplateNotFound as exc:
                    logger.warning("Failed to warm resource %s: %s", section.template_path, exc)
        logger.info("Template cache warming completed in %.1fms", (time.perf_counter() - start) * 1000)
        return warmed

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def _load(self, template_id: str, variables: Mapping[str, Any], chain: Tuple[str, ...]) -> DocumentTemplate:
        resolved_id = resolve_placeholders(template_id, variables)
        if resolved_id in chain:
            raise CyclicInheritanceError(chain + (resolved_id,))
        if len(chain) >= self.options.max_inheritance_depth:
            raise CyclicInheritanceError(
                chain + (resolved_id,),
                f"inheritance depth exceeds {self.options.max_inheritance_depth}",
            )

        if not self.options.cache_enabled:
            return self._resolve(resolved_id, variables, chain)
        return self._templates.get_or_compute(
            template_cache_key(resolved_id, variables), lambda: self._resolve(resolved_id, variables, chain)
        )

    def _resolve(self, template_id: str, variables: Mapping[str, Any], chain: Tuple[str, ...]) -> DocumentTemplate:
        chain = chain + (template_id,)
        template = self._parse(template_id)

        if template.base_template_id:
            logger.debug("Template %s extends %s", template_id, template.base_template_id)
            parent = self._load(template.base_template_id, variables, chain)
            template = merge_templates(parent, template)
        else:
            template = replace(template, sections=sort_sections(template.sections))

        for fragment_id in template.included_fragments:
            fragment = self._load(fragment_id, variables, chain)
            template = include_fragment(template, fragment)

        template = interpolate_template_fields(template, variables)
        logger.info("Resolved template %s with %d sections", template_id, len(template.sections))
        return template

    def _parse(self, template_id: str) -> DocumentTemplate:
        path = self._find_template_file(template_id)
        if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            raise TemplateParseError(f"Unsupported template format for '{template_id}'", str(path))

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateNotFound(f"Template '{template_id}' could not be read", str(exc)) from exc

        try:
            raw = json.loads(text) if path.suffix.lower() == ".json" else yaml.safe_load(text)
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise TemplateParseError(f"Malformed template '{template_id}'", str(exc)) from exc

        logger.debug("Parsed template %s from %s", template_id, path)
        try:
            return parse_template(raw, template_id)
        except (TypeError, ValueError) as exc:
            raise TemplateParseError(f"Malformed template '{template_id}'", str(exc)) from exc

    # ------------------------------------------------------------------
    # File lookup
    # ------------------------------------------------------------------
    def _candidate_paths(self, template_id: str) -> Iterator[Path]:
        has_extension = PurePosixPath(template_id).suffix != ""
        for root in self.options.template_roots:
            for name in (template_id, f"templates/{template_id}"):
                base = root / name
                if not has_extension or base.suffix.lower() not in SUPPORTED_EXTENSIONS:
                    for extension in SUPPORTED_EXTENSIONS:
                        yield base.with_name(base.name + extension)
                yield base

    def _find_template_file(self, template_id: str) -> Path:
        for candidate in self._candidate_paths(template_id):
            if candidate.is_file():
                return candidate
        roots = ", ".join(str(root) for root in self.options.template_roots)
        raise TemplateNotFound(f"Template not found: {template_id}", f"searched {roots}")

    def _read_resource(self, path: str) -> bytes:
        candidates = [Path(path)] if Path(path).is_absolute() else [
            root / prefix / path for root in self.options.template_roots for prefix in ("", "templates")
        ]
        for candidate in candidates:
            if candidate.is_file():
                try:
                    return candidate.read_bytes()
                except OSError as exc:
                    raise TemplateNotFound(f"Resource '{path}' could not be read", str(exc)) from exc
        raise TemplateNotFound(f"Resource not found: {path}")

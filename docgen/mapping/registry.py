"""Lookup of mapping strategies by tag, plus section-level field resolution."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from ..exceptions import DocGenError
from ..models.template import FieldMappingGroup, MappingType, PageSection
from .base import FieldMappingStrategy
from .custom import CustomMappingStrategy
from .direct import DirectMappingStrategy
from .jsonata import JsonataMappingStrategy
from .jsonpath import JsonPathMappingStrategy

logger = logging.getLogger(__name__)


class MappingStrategyRegistry:
    """Maps each :class:`MappingType` to the strategy that evaluates it."""

    def __init__(self, strategies: Optional[Iterable[FieldMappingStrategy]] = None) -> None:
        self._strategies: Dict[MappingType, FieldMappingStrategy] = {}
        for strategy in strategies or ():
            self.register(strategy)

    @classmethod
    def create_default(cls) -> "MappingStrategyRegistry":
        direct = DirectMappingStrategy()
        jsonpath = JsonPathMappingStrategy()
        jsonata = JsonataMappingStrategy()
        custom = CustomMappingStrategy(direct=direct, jsonpath=jsonpath, jsonata=jsonata)
        return cls([direct, jsonpath, jsonata, custom])

    def register(self, strategy: FieldMappingStrategy) -> None:
        for mapping_type in MappingType:
            if strategy.supports(mapping_type):
                self._strategies[mapping_type] = strategy

    def get(self, mapping_type: MappingType) -> FieldMappingStrategy:
        try:
            return self._strategies[mapping_type]
        except KeyError:
            raise DocGenError(f"No mapping strategy registered for type: {mapping_type}") from None

    def resolve_fields(self, section: PageSection, data: Any) -> Dict[str, str]:
        """Resolve every form field of ``section`` against ``data``.

        Mapping groups are applied in declaration order; later groups
        overwrite earlier values for the same field.
        """
        if not section.has_mapping_groups:
            return self.get(section.effective_mapping_type).map(data, section.field_mappings)

        values: Dict[str, str] = {}
        for group in section.field_mapping_groups:
            group_values = self.map_group(data, group)
            logger.debug("Mapped %d fields using %s strategy", len(group_values), group.mapping_type.value)
            values.update(group_values)
        return values

    def map_group(self, data: Any, group: FieldMappingGroup) -> Dict[str, str]:
        strategy = self.get(group.mapping_type)
        if group.repeating_group is not None:
            return self._map_repeating_group(strategy, data, group)
        return strategy.map_with_base_path(data, group.base_path, group.field_mappings)

    def _map_repeating_group(self, strategy: FieldMappingStrategy, data: Any, group: FieldMappingGroup) -> Dict[str, str]:
        config = group.repeating_group
        if not group.base_path:
            logger.warning("Repeating group declared without a base path")
            return {}

        try:
            items = strategy.evaluate_path(data, group.base_path)
        except Exception as exc:
            logger.warning("Failed to evaluate repeating group base path '%s': %s", group.base_path, exc)
            return {}
        if not isinstance(items, list):
            logger.warning(
                "Repeating group base path '%s' did not evaluate to a list. Got: %s",
                group.base_path, type(items).__name__,
            )
            return {}

        if config.max_items is not None:
            items = items[: max(0, config.max_items)]

        values: Dict[str, str] = {}
        for offset, item in enumerate(items):
            index = config.start_index + offset
            for key, expression in config.fields.items():
                field_name = config.field_name(key, index)
                values[field_name] = strategy.map_field(item, field_name, expression)
        return values

"""Field mapping strategy interface and shared value conversion."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from ..exceptions import FieldMappingFailure, InvalidOverflowConfig
from ..models.template import MappingType

logger = logging.getLogger(__name__)

DATE_FORMAT = "%m/%d/%Y"


def convert_to_string(value: Any) -> str:
    """Convert a resolved value to the text written into a document field."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, (list, tuple)):
        return ", ".join(convert_to_string(item) for item in value)
    return str(value)


def unwrap_single(value: Any) -> Any:
    """Return the only element of a one-element list, otherwise ``value``."""
    if isinstance(value, list) and len(value) == 1:
        return value[0]
    return value


def is_truthy(value: Any) -> bool:
    """Truthiness used for section conditions.

    ``True`` passes, ``False``/``None`` do not; anything else passes when its
    text form is non-empty and not ``"false"``.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = convert_to_string(value)
    return bool(text) and text.lower() != "false"


class FieldMappingStrategy(ABC):
    """Resolves expressions in one mapping language against a data tree."""

    mapping_type: MappingType

    def supports(self, mapping_type: MappingType) -> bool:
        return mapping_type is self.mapping_type

    @abstractmethod
    def evaluate_path(self, data: Any, expression: str) -> Any:
        """Evaluate ``expression`` against ``data`` and return the raw value."""

    def assign_path(self, data: Any, expression: str, value: Any) -> Any:
        """Return a copy of ``data`` with ``value`` placed at ``expression``.

        The input tree is left untouched.
        """
        raise InvalidOverflowConfig(
            f"{self.mapping_type.value} expressions cannot be used as an assignment target",
            expression,
        )

    def map_field(self, data: Any, field_name: str, expression: str) -> str:
        """Map a single field, degrading to an empty string on failure."""
        try:
            return convert_to_string(self.evaluate_path(data, expression))
        except Exception as exc:
            failure = exc if isinstance(exc, FieldMappingFailure) else FieldMappingFailure(
                field_name, expression, str(exc)
            )
            logger.warning("%s", failure)
            return ""

    def map(self, data: Any, field_map: Mapping[str, str]) -> Dict[str, str]:
        """Map every entry of ``field_map`` (field name -> expression)."""
        return {
            field_name: self.map_field(data, field_name, expression)
            for field_name, expression in field_map.items()
        }

    def map_with_base_path(self, data: Any, base_path: Optional[str], field_map: Mapping[str, str]) -> Dict[str, str]:
        """Evaluate ``base_path`` once and map ``field_map`` relative to its result."""
        if not base_path:
            return self.map(data, field_map)
        try:
            context = unwrap_single(self.evaluate_path(data, base_path))
        except Exception as exc:
            logger.warning("Failed to evaluate base path '%s': %s", base_path, exc)
            context = None
        if context is None:
            logger.debug("Base path '%s' resolved to nothing", base_path)
            return {field_name: "" for field_name in field_map}
        return self.map(context, field_map)

"""Dot-path field mapping (``customer.address.city``, ``items.0.price``)."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from ..exceptions import InvalidOverflowConfig
from ..models.template import MappingType
from .base import FieldMappingStrategy

logger = logging.getLogger(__name__)


def _is_index(segment: str) -> bool:
    return segment.isascii() and segment.isdigit()


def split_path(path: str) -> List[str]:
    return [segment for segment in path.strip().split(".") if segment]


def get_nested_value(data: Any, path: Optional[str]) -> Any:
    """Walk ``path`` through nested mappings and sequences.

    Returns ``None`` for a missing key, an out-of-range index or an attempt to
    step into a scalar.
    """
    if data is None or not path:
        return None

    current = data
    for segment in split_path(path):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(segment)
        elif isinstance(current, (list, tuple)):
            if not _is_index(segment):
                logger.debug("Segment '%s' of '%s' is not a list index", segment, path)
                return None
            index = int(segment)
            if index >= len(current):
                return None
            current = current[index]
        else:
            logger.warning(
                "Cannot navigate into %s at segment '%s' of path '%s'",
                type(current).__name__, segment, path,
            )
            return None
    return current


def assign_nested_value(data: Any, segments: List[str], value: Any) -> Any:
    """Copy-on-write assignment along ``segments``; only touched nodes are copied."""
    if not segments:
        return value

    head, rest = segments[0], segments[1:]
    if data is None:
        return {head: assign_nested_value(None, rest, value)}
    if isinstance(data, Mapping):
        updated = dict(data)
        updated[head] = assign_nested_value(data.get(head), rest, value)
        return updated
    if isinstance(data, (list, tuple)) and _is_index(head) and int(head) < len(data):
        updated_list = list(data)
        updated_list[int(head)] = assign_nested_value(data[int(head)], rest, value)
        return updated_list
    raise InvalidOverflowConfig(
        "Cannot assign into path",
        f"segment '{head}' is not addressable in {type(data).__name__}",
    )


class DirectMappingStrategy(FieldMappingStrategy):
    mapping_type = MappingType.DIRECT

    def evaluate_path(self, data: Any, expression: str) -> Any:
        return get_nested_value(data, expression)

    def assign_path(self, data: Any, expression: str, value: Any) -> Any:
        segments = split_path(expression)
        if not segments:
            raise InvalidOverflowConfig("Cannot assign to an empty path")
        return assign_nested_value(data, segments, value)

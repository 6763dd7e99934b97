"""JSONata field mapping backed by ``jsonata-python``."""

from __future__ import annotations

import re
from typing import Any

import jsonata

from ..exceptions import InvalidOverflowConfig
from ..models.template import MappingType
from .base import FieldMappingStrategy
from .direct import assign_nested_value, split_path

_SIMPLE_PATH = re.compile(r"^[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")


class JsonataMappingStrategy(FieldMappingStrategy):
    """Evaluates JSONata expressions such as ``firstName & ' ' & lastName``."""

    mapping_type = MappingType.JSONATA

    def evaluate_path(self, data: Any, expression: str) -> Any:
        if data is None:
            return None
        return jsonata.Jsonata(expression).evaluate(data)

    def assign_path(self, data: Any, expression: str, value: Any) -> Any:
        # only plain navigation paths have a well-defined write location
        if not _SIMPLE_PATH.match(expression.strip()):
            raise InvalidOverflowConfig(
                "JSONata array paths must be simple field paths to be replaced",
                expression,
            )
        return assign_nested_value(data, split_path(expression), value)

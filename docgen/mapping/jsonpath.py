"""JSONPath field mapping backed by ``jsonpath-ng``."""

from __future__ import annotations

import copy
import logging
import re
from functools import lru_cache
from typing import Any

from jsonpath_ng.ext import parse as parse_jsonpath

from ..exceptions import InvalidOverflowConfig
from ..models.template import MappingType
from .base import FieldMappingStrategy, convert_to_string, unwrap_single

logger = logging.getLogger(__name__)

# applicants[type='PRIMARY'] -> applicants[?(@.type=='PRIMARY')]
_SHORTHAND_FILTER = re.compile(r"\[\s*([A-Za-z_][\w]*)\s*=\s*'([^']*)'\s*\]")
# <path> == 'literal', used by section conditions
_EQUALITY = re.compile(r"^(?P<path>.+?)\s*==\s*'(?P<value>[^']*)'\s*$")


def normalize_jsonpath(expression: str) -> str:
    """Turn the relaxed path syntax used in templates into JSONPath."""
    expression = expression.strip()
    expression = _SHORTHAND_FILTER.sub(r"[?(@.\1=='\2')]", expression)
    if expression.startswith("$.") or expression.startswith("$[") or expression == "$":
        return expression
    if expression.startswith("["):
        return "$" + expression
    return "$." + expression


@lru_cache(maxsize=1024)
def compile_jsonpath(expression: str):
    return parse_jsonpath(normalize_jsonpath(expression))


class JsonPathMappingStrategy(FieldMappingStrategy):
    """Evaluates JSONPath expressions.

    No match yields ``None``, a single match yields its value and several
    matches yield the list of values.
    """

    mapping_type = MappingType.JSONPATH

    def evaluate_path(self, data: Any, expression: str) -> Any:
        match = _EQUALITY.match(expression.strip())
        if match:
            actual = unwrap_single(self._find(data, match.group("path")))
            return convert_to_string(actual) == match.group("value")
        return self._find(data, expression)

    def _find(self, data: Any, expression: str) -> Any:
        if data is None:
            return None
        matches = [found.value for found in compile_jsonpath(expression).find(data)]
        if not matches:
            return None
        if len(matches) == 1:
            return matches[0]
        return matches

    def assign_path(self, data: Any, expression: str, value: Any) -> Any:
        target = expression.strip()
        # items[*] addresses the elements; the list itself is replaced
        if target.endswith("[*]"):
            target = target[:-3]
        compiled = compile_jsonpath(target)
        updated = copy.deepcopy(data)
        if not compiled.find(updated):
            raise InvalidOverflowConfig("Array path does not exist in data", expression)
        return compiled.update(updated, value)

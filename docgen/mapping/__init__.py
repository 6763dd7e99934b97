"""Field mapping strategies: Direct, JSONPath, JSONata and Custom."""

from .base import FieldMappingStrategy, convert_to_string, is_truthy, unwrap_single
from .custom import CustomMappingStrategy
from .direct import DirectMappingStrategy, get_nested_value
from .jsonata import JsonataMappingStrategy
from .jsonpath import JsonPathMappingStrategy, normalize_jsonpath
from .registry import MappingStrategyRegistry

__all__ = [
    "CustomMappingStrategy",
    "DirectMappingStrategy",
    "FieldMappingStrategy",
    "JsonPathMappingStrategy",
    "JsonataMappingStrategy",
    "MappingStrategyRegistry",
    "convert_to_string",
    "get_nested_value",
    "is_truthy",
    "normalize_jsonpath",
    "unwrap_single",
]

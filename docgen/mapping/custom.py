"""Transforming field mapping: ``functionName:arg1,arg2``.

Arguments are resolved before the function runs:

* ``'literal'`` or ``"literal"``: quotes are stripped
* ``10``: bare integers are literals
* ``MM/dd/yyyy``: date patterns (no dots or brackets) are literals
* ``direct:a.b``, ``jsonpath:a[type='X'].b``, ``jsonata:a & b``: explicit strategy
* anything else: JSONPath when it contains ``[``, otherwise a direct path

An expression without a function name (``jsonpath:$.a`` or ``a.b``) is a
plain extraction.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import random
import re
import string
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models.template import MappingType
from .base import FieldMappingStrategy, unwrap_single
from .direct import DirectMappingStrategy
from .jsonata import JsonataMappingStrategy
from .jsonpath import JsonPathMappingStrategy

logger = logging.getLogger(__name__)

STRATEGY_PREFIXES = ("direct:", "jsonpath:", "jsonata:")

_INTEGER = re.compile(r"^\d+$")
# repeated upper-case pattern letters such as MM or YYYY
_DATE_PATTERN_LETTERS = re.compile(r"([MDYHmsEaZ])\1")
_DATE_TOKENS = re.compile(r"y+|M+|d+|E+")


def format_date_pattern(value: date, pattern: str) -> str:
    """Format ``value`` with a ``MM/dd/yyyy`` style pattern."""

    def token(match: "re.Match[str]") -> str:
        text = match.group(0)
        letter, width = text[0], len(text)
        if letter == "y":
            return f"{value.year % 100:02d}" if width == 2 else f"{value.year:04d}"
        if letter == "M":
            if width >= 4:
                return value.strftime("%B")
            if width == 3:
                return value.strftime("%b")
            return f"{value.month:02d}" if width == 2 else str(value.month)
        if letter == "d":
            return f"{value.day:02d}" if width >= 2 else str(value.day)
        return value.strftime("%A" if width >= 4 else "%a")

    return _DATE_TOKENS.sub(token, pattern)


def _arg(args: List[str], index: int, default: str = "") -> str:
    if len(args) <= index or args[index] is None:
        return default
    return args[index]


def _int_arg(args: List[str], index: int, default: int) -> int:
    try:
        return int(_arg(args, index, str(default)))
    except ValueError:
        return default


def identity(args: List[str]) -> str:
    return _arg(args, 0)


def format_phone_us(args: List[str]) -> str:
    phone = _arg(args, 0)
    digits = re.sub(r"\D", "", phone)
    if len(digits) != 10:
        return phone
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"


def calculate_age(args: List[str]) -> str:
    dob = _arg(args, 0)
    if not dob:
        return "0"
    try:
        born = date.fromisoformat(dob)
    except ValueError:
        logger.warning("Failed to calculate age from: %s", dob)
        return "0"
    today = date.today()
    years = today.year - born.year - ((today.month, today.day) < (born.month, born.day))
    return str(years)


def format_currency(args: List[str]) -> str:
    amount = _arg(args, 0)
    if not amount:
        return "$0.00"
    try:
        return f"${float(amount):,.2f}"
    except ValueError:
        return amount


def encode_ssn(args: List[str]) -> str:
    ssn = _arg(args, 0)
    if not ssn:
        return ""
    return base64.b64encode(ssn.encode("utf-8")).decode("ascii")


def generate_random(args: List[str]) -> str:
    length = _int_arg(args, 0, 6)
    alphabet = string.ascii_uppercase + string.digits
    return "".join(random.choice(alphabet) for _ in range(length))


def format_date(args: List[str]) -> str:
    value = _arg(args, 0)
    pattern = _arg(args, 1, "MM/dd/yyyy")
    if not value:
        return ""
    try:
        return format_date_pattern(date.fromisoformat(value), pattern)
    except ValueError:
        logger.warning("Failed to format date: %s with format: %s", value, pattern)
        return value


def calculate_days_between(args: List[str]) -> str:
    try:
        first = date.fromisoformat(_arg(args, 0))
        second = date.fromisoformat(_arg(args, 1))
    except ValueError:
        return "0"
    return str(abs((second - first).days))


def remove_spaces(args: List[str]) -> str:
    return re.sub(r"\s+", "", _arg(args, 0))


def capitalize_words(args: List[str]) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in _arg(args, 0).lower().split())


def truncate(args: List[str]) -> str:
    value = _arg(args, 0)
    limit = _int_arg(args, 1, 50)
    if len(value) <= limit:
        return value
    return value[:limit] + "..."


def hash_value(args: List[str]) -> str:
    return hashlib.sha256(_arg(args, 0).encode("utf-8")).hexdigest()[:16]


TRANSFORMATIONS: Dict[str, Callable[[List[str]], str]] = {
    "identity": identity,
    "passthrough": identity,
    "formatphoneus": format_phone_us,
    "calculateage": calculate_age,
    "formatcurrency": format_currency,
    "encryptssn": encode_ssn,
    "generaterandom": generate_random,
    "formatdate": format_date,
    "calculatedays": calculate_days_between,
    "calculatedaysbetween": calculate_days_between,
    "removespaces": remove_spaces,
    "capitalize": capitalize_words,
    "truncate": truncate,
    "hash": hash_value,
}


class CustomMappingStrategy(FieldMappingStrategy):
    """Extracts with one of the other strategies, then applies a transformation."""

    mapping_type = MappingType.CUSTOM

    def __init__(
        self,
        direct: Optional[DirectMappingStrategy] = None,
        jsonpath: Optional[JsonPathMappingStrategy] = None,
        jsonata: Optional[JsonataMappingStrategy] = None,
    ) -> None:
        self.direct = direct or DirectMappingStrategy()
        self.jsonpath = jsonpath or JsonPathMappingStrategy()
        self.jsonata = jsonata or JsonataMappingStrategy()
        self.transformations: Dict[str, Callable[[List[str]], str]] = dict(TRANSFORMATIONS)

    def register_transformation(self, name: str, func: Callable[[List[str]], str]) -> None:
        self.transformations[name.lower()] = func

    def evaluate_path(self, data: Any, expression: str) -> Any:
        expression = expression.strip()
        if ":" not in expression or expression.startswith(STRATEGY_PREFIXES):
            strategy, path = self._select(expression)
            return unwrap_single(strategy.evaluate_path(data, path))

        name, _, raw_args = expression.partition(":")
        func = self.transformations.get(name.strip().lower())
        if func is None:
            raise ValueError(f"Unknown custom transformation: {name.strip()}")
        args = [self._resolve_argument(data, arg.strip()) for arg in raw_args.split(",")] if raw_args else []
        return func(args)

    def _select(self, expression: str) -> Tuple[FieldMappingStrategy, str]:
        if expression.startswith("direct:"):
            return self.direct, expression[len("direct:"):]
        if expression.startswith("jsonpath:"):
            return self.jsonpath, expression[len("jsonpath:"):]
        if expression.startswith("jsonata:"):
            return self.jsonata, expression[len("jsonata:"):]
        if "[" in expression:
            return self.jsonpath, expression
        return self.direct, expression

    def _resolve_argument(self, data: Any, arg: str) -> str:
        if arg[:1] in ("'", '"'):
            return arg.strip("'\"")
        if _INTEGER.match(arg):
            return arg
        if "." not in arg and "[" not in arg and not arg.startswith(STRATEGY_PREFIXES):
            if "/" in arg or "-" in arg or _DATE_PATTERN_LETTERS.search(arg):
                return arg

        strategy, path = self._select(arg)
        return strategy.map_field(data, arg, path)

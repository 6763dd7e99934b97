"""Runtime options for the document generator."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from reportlab.lib.pagesizes import A4, letter


PAGE_SIZES: Dict[str, Tuple[float, float]] = {
    "letter": letter,
    "a4": A4,
}


@dataclass
class GeneratorOptions:
    """Options shared by the loader, renderers and composer."""

    template_roots: List[Path] = field(default_factory=lambda: [Path(".")])
    cache_enabled: bool = True
    cache_max_size: int = 256
    cache_ttl: int = 0
    max_inheritance_depth: int = 32
    page_size: Tuple[float, float] = letter
    margin: float = 50.0
    font_name: str = "Helvetica"
    font_size: float = 11.0
    line_height: float = 14.0
    preload_template_ids: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.template_roots = [Path(root) for root in self.template_roots]
        if isinstance(self.page_size, str):
            key = self.page_size.lower()
            if key not in PAGE_SIZES:
                raise ValueError(f"Unknown page size: {self.page_size}")
            self.page_size = PAGE_SIZES[key]
        if self.max_inheritance_depth < 1:
            raise ValueError("max_inheritance_depth must be at least 1")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "GeneratorOptions":
        """Build options from a plain mapping, ignoring unknown keys.

        Keys may be snake_case or camelCase.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in (values or {}).items():
            name = _snake_case(str(key))
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)


def _snake_case(name: str) -> str:
    out = []
    for char in name:
        if char.isupper():
            out.append("_")
            out.append(char.lower())
        else:
            out.append(char)
    return "".join(out).lstrip("_")

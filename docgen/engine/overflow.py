"""Partitioning of repeating data into a main page and addendum pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..exceptions import InvalidOverflowConfig
from ..models.template import OverflowConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverflowPlan:
    """Result of :meth:`OverflowPlanner.plan`.

    Concatenating ``main_page_items`` and every batch in order gives back the
    planned sequence.
    """

    main_page_items: tuple
    addendum_batches: tuple = ()

    @property
    def has_overflow(self) -> bool:
        return bool(self.addendum_batches)

    @property
    def total_addendum_pages(self) -> int:
        return len(self.addendum_batches)

    @property
    def overflow_items(self) -> List[Any]:
        return [item for batch in self.addendum_batches for item in batch]

    def addendum_page_data(self, base_data: Mapping[str, Any], index: int) -> Dict[str, Any]:
        """Data tree for the addendum page at 0-based ``index``."""
        data = dict(base_data)
        data.update(
            overflowItems=list(self.addendum_batches[index]),
            isAddendum=True,
            addendumPageNumber=index + 1,
            totalAddendumPages=self.total_addendum_pages,
        )
        return data


class OverflowPlanner:
    """Decides how many items stay on the main page and batches the rest."""

    def plan(self, items: Sequence[Any], config: OverflowConfig, context=None,
             section_id: Optional[str] = None) -> OverflowPlan:
        """
        Split ``items`` according to ``config``.

        Args:
            items: Full item sequence resolved from the array path
            config: Overflow configuration of the section
            context: Optional RenderContext; receives the overflow indicator
            section_id: Section owning the configuration, defaults to the
                context's current section

        Returns:
            The overflow plan

        Raises:
            InvalidOverflowConfig: for a negative main capacity, or a
                non-positive page size when items overflow
        """
        max_main = config.max_items_in_main
        if max_main < 0:
            raise InvalidOverflowConfig("maxItemsInMain must not be negative", str(max_main))

        items = list(items)
        main_items = tuple(items[:max_main])
        remaining = items[max_main:]
        if not remaining:
            logger.debug("No overflow: %d items, max in main %d", len(items), max_main)
            return OverflowPlan(main_page_items=main_items)

        per_page = config.items_per_overflow_page
        if per_page <= 0:
            raise InvalidOverflowConfig(
                "itemsPerOverflowPage must be positive when items overflow",
                f"got {per_page} for array path '{config.array_path}'",
            )

        batches = tuple(tuple(remaining[start:start + per_page]) for start in range(0, len(remaining), per_page))
        logger.info(
            "Overflow detected for %s: %d items, %d on main page, %d addendum page(s)",
            section_id or config.array_path, len(items), len(main_items), len(batches),
        )

        if config.overflow_indicator_field and context is not None:
            owner = section_id or context.current_section_id
            if owner is not None:
                context.mark_overflow(owner, config.overflow_indicator_field)

        return OverflowPlan(main_page_items=main_items, addendum_batches=batches)

"""View models: reshaping raw request data before a section is rendered."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)


class ViewModelBuilder(ABC):
    """Builds a view model from the raw data tree.

    Builders are registered under their class name with any ``Builder``
    suffix removed, so ``InvoiceViewModelBuilder`` answers to
    ``viewModelType: InvoiceViewModel``.
    """

    @property
    def name(self) -> str:
        name = type(self).__name__
        return name[: -len("Builder")] if name.endswith("Builder") else name

    @abstractmethod
    def build(self, data: Mapping[str, Any]) -> Any:
        pass


@dataclass
class InvoiceItem:
    description: str
    quantity: int
    unit_price: float

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@dataclass
class InvoiceViewModel:
    invoice_number: str
    date: str
    customer_name: str = ""
    customer_address: str = ""
    items: List[InvoiceItem] = field(default_factory=list)

    @property
    def total_amount(self) -> float:
        return sum(item.line_total for item in self.items)

    @property
    def show_discount_message(self) -> bool:
        return self.total_amount > 1000


class InvoiceViewModelBuilder(ViewModelBuilder):
    def build(self, data: Mapping[str, Any]) -> InvoiceViewModel:
        customer = data.get("customer") or {}
        address = customer.get("address") or {}
        customer_address = ""
        if address:
            customer_address = "{}, {}, {} {}".format(
                address.get("street", ""), address.get("city", ""),
                address.get("state", ""), address.get("zipCode", ""),
            )

        items = [
            InvoiceItem(
                description=str(item.get("description") or ""),
                quantity=int(item.get("quantity") or 0),
                unit_price=float(item.get("unitPrice") or 0.0),
            )
            for item in data.get("items") or []
        ]
        return InvoiceViewModel(
            invoice_number=str(data.get("invoiceNumber", "N/A")),
            date=str(data.get("date", "")),
            customer_name=str(customer.get("companyName", "")),
            customer_address=customer_address,
            items=items,
        )


class ViewModelFactory:
    """Registry of view model builders."""

    def __init__(self, builders: Optional[Iterable[ViewModelBuilder]] = None) -> None:
        self._builders: Dict[str, ViewModelBuilder] = {}
        for builder in builders if builders is not None else (InvoiceViewModelBuilder(),):
            self.register(builder)

    def register(self, builder: ViewModelBuilder, name: Optional[str] = None) -> None:
        key = name or builder.name
        self._builders[key] = builder
        logger.debug("Registered view model builder %s as %s", type(builder).__name__, key)

    def create(self, view_model_type: Optional[str], data: Mapping[str, Any]) -> Any:
        """Build the view model, or return ``data`` when no type is requested or known."""
        if not view_model_type:
            return data
        builder = self._builders.get(view_model_type)
        if builder is None:
            logger.warning("No view model builder found for type: %s. Using raw data.", view_model_type)
            return data
        return builder.build(data)

"""
Data models for the price grid engine.

Uses dataclasses for structured, type-safe data representation. The working
grid is a plain dict keyed by CellKey so each pass can be tested on its own.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import NamedTuple, Optional

from ..exceptions import GridRequestError


@dataclass(frozen=True)
class Item:
    """An active catalogue item as supplied by the Item Catalog."""
    item_id: int
    item_code: str
    description: str = ""
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    type_id: Optional[int] = None
    type_name: Optional[str] = None
    case_size: Optional[float] = None  # "caisse"
    format: Optional[str] = None
    volume: Optional[str] = None
    active: bool = True

    def to_dict(self) -> dict:
        """Display fields in wire format."""
        return {
            "itemId": self.item_id,
            "itemCode": self.item_code,
            "description": self.description,
            "caisse": self.case_size,
            "format": self.format,
            "volume": self.volume,
            "categoryName": self.category_name,
            "className": self.type_name,
        }


@dataclass(frozen=True)
class PriceList:
    """A price list from the Price List Directory."""
    price_id: int
    code: str
    description: str = ""
    scope_id: Optional[int] = None
    currency: str = "CAD"
    active: bool = True

    def to_dict(self) -> dict:
        return {
            "priceId": self.price_id,
            "code": self.code,
            "name": self.description,
            "description": self.description,
            "currency": self.currency,
            "isActive": self.active,
        }


@dataclass(frozen=True)
class PriceObservation:
    """One dated price at a quantity break for an item on a price list."""
    observation_id: int
    item_id: int
    price_id: int
    quantity_tier: int
    price: float
    discount_amount: float = 0.0
    effective_date: Optional[date] = None


class CellKey(NamedTuple):
    """Composite key of a grid cell."""
    item_id: int
    quantity_tier: int
    price_code: str


@dataclass(frozen=True)
class PriceCell:
    """Resolved price and discount at one (item, tier, price list)."""
    price: float
    discount_amount: float = 0.0


PriceGrid = dict[CellKey, PriceCell]


@dataclass
class ItemFilter:
    """
    Selects the items a grid covers.

    Either an explicit list of item ids, or a category with an optional type.
    Item ids take precedence when both are supplied.
    """
    item_ids: Optional[tuple[int, ...]] = None
    category_id: Optional[int] = None
    type_id: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return not self.item_ids and self.category_id is None


@dataclass
class GridRequest:
    """A price grid request: the selected price list and an item filter."""
    price_list_id: Optional[int]
    item_filter: ItemFilter = field(default_factory=ItemFilter)

    def validate(self):
        """Raise GridRequestError when the price list or the item filter is missing."""
        if self.price_list_id is None:
            raise GridRequestError("A price list id is required")
        if self.item_filter.is_empty:
            raise GridRequestError("Either item ids or a category id is required")


@dataclass
class PriceGridRow:
    """One output row: an item at one quantity tier."""
    row_id: str
    quantity_tier: int
    unit_price: Optional[float]
    weight_price: Optional[float]
    export_base_price: Optional[float]
    costing_discount_amt: float
    columns: dict[str, Optional[float]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.row_id,
            "qtyMin": self.quantity_tier,
            "unitPrice": self.unit_price,
            "pdsPrice": self.weight_price,
            "coutExp": self.export_base_price,
            "costingDiscountAmt": self.costing_discount_amt,
            "columns": dict(self.columns),
        }


@dataclass
class ItemPriceGrid:
    """Complete grid for one item under the selected price list."""
    item: Item
    price_code: str
    ranges: list[PriceGridRow] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to the JSON shape returned by the prices endpoint."""
        data = self.item.to_dict()
        data["priceListName"] = self.price_code
        data["priceCode"] = self.price_code
        data["ranges"] = [row.to_dict() for row in self.ranges]
        return data

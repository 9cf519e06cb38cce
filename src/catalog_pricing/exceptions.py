"""
Exceptions raised by the catalog pricing engine and its data sources.
"""
from typing import Optional


class CatalogPricingError(Exception):
    """Base class for all catalog pricing errors."""
    code: str = "CATALOG_PRICING_ERROR"


class GridRequestError(CatalogPricingError):
    """A price grid request is missing its price list or item filter."""
    code = "INVALID_GRID_REQUEST"


class PriceListNotFoundError(CatalogPricingError):
    """The selected price list id does not exist."""
    code = "PRICE_LIST_NOT_FOUND"

    def __init__(self, price_id: int):
        self.price_id = price_id
        super().__init__(f"Price list {price_id} not found")


class SourceDataError(CatalogPricingError):
    """A source table is missing or lacks required columns."""
    code = "SOURCE_DATA_ERROR"

    def __init__(self, table: str, message: str, path: Optional[str] = None):
        self.table = table
        self.path = path
        super().__init__(f"{table}: {message}")

"""
Catalogue Service - browsing lookups that feed the price grid selectors.

Price lists, categories, item types and item search, all read from the
same sources as the engine.
"""
from typing import Optional

from ..config.settings import Settings
from ..data.catalog import ItemCatalog, PriceListDirectory
from ..exceptions import GridRequestError

SEARCH_LIMIT = 50


class CatalogueService:
    """Service for browsing the catalogue hierarchy and price lists."""

    def __init__(self, settings: Settings, catalog: Optional[ItemCatalog] = None,
                 directory: Optional[PriceListDirectory] = None):
        self.settings = settings
        self.catalog = catalog or ItemCatalog(settings)
        self.directory = directory or PriceListDirectory(settings)

    def list_price_lists(self) -> list[dict]:
        """Active price lists of the default company, ordered by description."""
        return [pl.to_dict() for pl in self.directory.list_active(self.settings.default_scope_id)]

    def list_categories(self) -> list[dict]:
        return self.catalog.list_categories()

    def list_item_types(self, category_id: int) -> list[dict]:
        return self.catalog.list_item_types(category_id)

    def find_items(self, item_type_id: Optional[int] = None, search: Optional[str] = None) -> list[dict]:
        """
        Items of a type, or items matching a search term.

        Search wins when both are given and is capped at SEARCH_LIMIT results.
        """
        if search:
            items = self.catalog.search_items(search, limit=SEARCH_LIMIT)
        elif item_type_id is not None:
            items = self.catalog.items_by_type(item_type_id)
        else:
            raise GridRequestError("Either an item type or a search term is required")

        return [
            {
                "itemId": item.item_id,
                "itemCode": item.item_code,
                "description": item.description,
                "prodId": item.category_id,
                "itemTypeId": item.type_id,
                "className": item.type_name,
                "categoryName": item.category_name,
            }
            for item in items
        ]

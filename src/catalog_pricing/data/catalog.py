"""
Item Catalog and Price List Directory backed by the replicated CSV tables.
"""
import logging
from typing import Iterable, Optional

import pandas as pd

from ..config.settings import Settings
from ..engine.models import Item, ItemFilter, PriceList
from .tables import read_table, to_number, to_bool, optional_int, optional_float, optional_str

logger = logging.getLogger(__name__)

ITEM_COLUMNS = ('item_id', 'item_code', 'description', 'category_id', 'type_id',
                'case_size', 'format', 'volume', 'is_active')
PRICE_LIST_COLUMNS = ('price_id', 'code', 'description', 'scope_id', 'currency_id', 'is_active')

CURRENCIES = {1: 'CAD', 2: 'USD', 3: 'EUR'}


def load_eligible_items(settings: Settings) -> pd.DataFrame:
    """
    Load active items that carry no exclusion flag, with category and type names.

    Numeric columns are coerced; a case size that is missing, unparseable or
    not positive becomes NaN.
    """
    items = read_table(settings.items, 'items', ITEM_COLUMNS)
    items['item_id'] = to_number(items['item_id'])
    items = items.dropna(subset=['item_id']).copy()
    items['item_id'] = items['item_id'].astype(int)
    items['category_id'] = to_number(items['category_id'])
    items['type_id'] = to_number(items['type_id'])
    items['case_size'] = to_number(items['case_size'])
    items.loc[items['case_size'] <= 0, 'case_size'] = float('nan')
    items = items[to_bool(items['is_active'])]

    flags = read_table(settings.item_flags, 'item_flags', ('item_id', 'flag'), required=False)
    wanted = {f.upper() for f in settings.exclusion_flags}
    flagged = to_number(flags.loc[flags['flag'].str.upper().isin(wanted), 'item_id']).dropna()
    excluded = set(flagged.astype(int))
    if excluded:
        items = items[~items['item_id'].isin(excluded)]

    categories = read_table(settings.categories, 'categories', ('category_id', 'name'), required=False)
    categories = categories.assign(category_id=to_number(categories['category_id']))
    types = read_table(settings.item_types, 'item_types', ('type_id', 'description'), required=False)
    types = types.assign(type_id=to_number(types['type_id']))

    items = items.merge(
        categories.rename(columns={'name': 'category_name'})[['category_id', 'category_name']]
        .drop_duplicates('category_id'),
        on='category_id', how='left',
    )
    items = items.merge(
        types.rename(columns={'description': 'type_name'})[['type_id', 'type_name']]
        .drop_duplicates('type_id'),
        on='type_id', how='left',
    )
    return items


def apply_item_filter(items: pd.DataFrame, item_filter: ItemFilter) -> pd.DataFrame:
    """Restrict items to explicit ids, or to a category and optional type."""
    if item_filter.item_ids:
        return items[items['item_id'].isin([int(i) for i in item_filter.item_ids])]

    mask = items['category_id'] == item_filter.category_id
    if item_filter.type_id is not None:
        mask &= items['type_id'] == item_filter.type_id
    return items[mask]


def _row_to_item(row) -> Item:
    return Item(
        item_id=int(row['item_id']),
        item_code=row['item_code'],
        description=row['description'],
        category_id=optional_int(row['category_id']),
        category_name=optional_str(row.get('category_name')),
        type_id=optional_int(row['type_id']),
        type_name=optional_str(row.get('type_name')),
        case_size=optional_float(row['case_size']),
        format=optional_str(row['format']),
        volume=optional_str(row['volume']),
        active=True,
    )


class ItemCatalog:
    """
    Supplies filtered catalogue items.

    Items are ordered by category, then type, then item code.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def find_items(self, item_filter: ItemFilter) -> list[Item]:
        items = apply_item_filter(load_eligible_items(self.settings), item_filter)
        items = items.sort_values(
            ['category_name', 'type_name', 'item_code'], na_position='last', kind='stable'
        )
        return [_row_to_item(row) for _, row in items.iterrows()]

    def list_categories(self) -> list[dict]:
        """Categories with at least one eligible item, by name."""
        items = load_eligible_items(self.settings).dropna(subset=['category_id'])
        counts = (
            items.groupby(['category_id', 'category_name'], dropna=False)
            .size().reset_index(name='item_count')
        )
        counts = counts.sort_values('category_name', na_position='last', kind='stable')
        return [
            {
                "prodId": int(row['category_id']),
                "name": optional_str(row['category_name']),
                "itemCount": int(row['item_count']),
            }
            for _, row in counts.iterrows()
        ]

    def list_item_types(self, category_id: int) -> list[dict]:
        """Item types used in a category, with their item counts."""
        items = load_eligible_items(self.settings)
        items = items[(items['category_id'] == category_id) & items['type_id'].notna()]
        counts = (
            items.groupby(['type_id', 'type_name'], dropna=False)
            .size().reset_index(name='item_count')
        )
        counts = counts[counts['item_count'] > 0]
        counts = counts.sort_values('type_name', na_position='last', kind='stable')
        return [
            {
                "itemTypeId": int(row['type_id']),
                "description": optional_str(row['type_name']),
                "itemCount": int(row['item_count']),
            }
            for _, row in counts.iterrows()
        ]

    def items_by_type(self, type_id: int) -> list[Item]:
        items = load_eligible_items(self.settings)
        items = items[items['type_id'] == type_id].sort_values('item_code', kind='stable')
        return [_row_to_item(row) for _, row in items.iterrows()]

    def search_items(self, term: str, limit: int = 50) -> list[Item]:
        """
        Case-insensitive substring search on item code and description.

        Results are ranked: exact code, code prefix, description prefix,
        then any other match; item code breaks ties.
        """
        items = load_eligible_items(self.settings)
        codes = items['item_code'].str.lower()
        descriptions = items['description'].str.lower()
        needle = term.strip().lower()

        mask = (
            codes.str.contains(needle, regex=False, na=False) |
            descriptions.str.contains(needle, regex=False, na=False)
        )
        rank = pd.Series(4, index=items.index)
        rank[descriptions.str.startswith(needle, na=False)] = 3
        rank[codes.str.startswith(needle, na=False)] = 2
        rank[codes == needle] = 1

        items = items[mask].assign(search_rank=rank[mask])
        items = items.sort_values(['search_rank', 'item_code'], kind='stable').head(limit)
        return [_row_to_item(row) for _, row in items.iterrows()]


class PriceListDirectory:
    """Resolves price list ids and codes within a company scope."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _load(self) -> pd.DataFrame:
        lists = read_table(self.settings.price_lists, 'price_lists', PRICE_LIST_COLUMNS)
        lists['price_id'] = to_number(lists['price_id'])
        lists = lists.dropna(subset=['price_id']).copy()
        lists['price_id'] = lists['price_id'].astype(int)
        lists['scope_id'] = to_number(lists['scope_id'])
        lists['currency_id'] = to_number(lists['currency_id'])
        lists['is_active'] = to_bool(lists['is_active'])
        return lists.sort_values('price_id', kind='stable')

    @staticmethod
    def _to_price_list(row) -> PriceList:
        currency_id = optional_int(row['currency_id'])
        return PriceList(
            price_id=int(row['price_id']),
            code=row['code'],
            description=row['description'],
            scope_id=optional_int(row['scope_id']),
            currency=CURRENCIES.get(currency_id, 'CAD'),
            active=bool(row['is_active']),
        )

    def get_list(self, price_id: int) -> Optional[PriceList]:
        lists = self._load()
        match = lists[lists['price_id'] == int(price_id)]
        if match.empty:
            return None
        return self._to_price_list(match.iloc[0])

    def get_lists_by_scope(self, scope_id: Optional[int], codes: Iterable[str]) -> list[PriceList]:
        """
        Active lists in the scope whose code is one of codes.

        When a code appears more than once in the scope, the lowest id wins.
        """
        codes = list(codes)
        lists = self._load()
        lists = lists[lists['is_active'] & lists['code'].isin(codes)]
        if scope_id is not None:
            lists = lists[lists['scope_id'] == scope_id]
        lists = lists.drop_duplicates('code', keep='first')

        unresolved = sorted(set(codes) - set(lists['code']))
        if unresolved:
            logger.debug("No active price list for codes %s in scope %s", unresolved, scope_id)

        return [self._to_price_list(row) for _, row in lists.iterrows()]

    def resolve_list_id(self, code: str, scope_id: Optional[int] = None) -> Optional[int]:
        found = self.get_lists_by_scope(scope_id, [code])
        return found[0].price_id if found else None

    def list_active(self, scope_id: Optional[int] = None) -> list[PriceList]:
        """Active price lists ordered by description, optionally for one company."""
        lists = self._load()
        lists = lists[lists['is_active']]
        if scope_id is not None:
            lists = lists[lists['scope_id'] == scope_id]
        lists = lists.sort_values('description', kind='stable')
        return [self._to_price_list(row) for _, row in lists.iterrows()]

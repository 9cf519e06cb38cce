"""
Price Observation Store and Cost Differential Index.

The store reduces the dated price ranges to the latest observation for each
(item, price list, quantity tier). The index follows an item's
DiscountMaintenance link to the step cost used by the override pass.
"""
import logging
from typing import Iterable

import pandas as pd

from ..config.settings import Settings
from ..engine.models import ItemFilter, PriceObservation
from .catalog import load_eligible_items, apply_item_filter
from .tables import read_table, to_number

logger = logging.getLogger(__name__)

PRICE_RANGE_COLUMNS = ('observation_id', 'item_id', 'price_id', 'from_qty', 'price',
                       'discount_amt', 'effective_date')
LINK_COLUMNS = ('table_name', 'table_id', 'field_name', 'field_value')
DISCOUNT_COLUMNS = ('header_id', 'costing_discount_amt')

TRIPLE = ['item_id', 'price_id', 'from_qty']


def parse_price_ranges(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Coerce the raw price range table.

    Rows whose item, list, tier or price cannot be parsed, or whose tier is
    fractional, are dropped;
    an unparseable discount becomes 0 and an unparseable date NaT.
    """
    df = raw.copy()
    for col in ('observation_id', 'item_id', 'price_id', 'from_qty', 'price', 'discount_amt'):
        df[col] = to_number(df[col])
    df['effective_date'] = pd.to_datetime(df['effective_date'], errors='coerce')
    df['discount_amt'] = df['discount_amt'].fillna(0.0)
    df['observation_id'] = df['observation_id'].fillna(-1)

    df = df.dropna(subset=['item_id', 'price_id', 'from_qty', 'price'])
    # Quantity tiers are whole units
    df = df[df['from_qty'] == df['from_qty'].round()].copy()
    for col in ('observation_id', 'item_id', 'price_id', 'from_qty'):
        df[col] = df[col].astype(int)
    return df


def latest_per_triple(df: pd.DataFrame) -> pd.DataFrame:
    """
    Keep the observation with the latest effective date per (item, list, tier).

    Ties on date go to the highest observation id; undated rows lose to dated ones.
    """
    ordered = df.sort_values(
        TRIPLE + ['effective_date', 'observation_id'], na_position='first', kind='stable'
    )
    return ordered.drop_duplicates(subset=TRIPLE, keep='last').sort_values(TRIPLE, kind='stable')


class PriceObservationStore:
    """Reads authoritative price observations for a set of price lists."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def load_observations(self, price_ids: Iterable[int], item_filter: ItemFilter) -> list[PriceObservation]:
        price_ids = {int(p) for p in price_ids}
        if not price_ids:
            return []

        raw = read_table(self.settings.price_ranges, 'price_ranges', PRICE_RANGE_COLUMNS)
        df = parse_price_ranges(raw)
        df = df[df['price_id'].isin(price_ids)]

        # Same item scope as the catalog: active, not excluded, matching the filter
        eligible = apply_item_filter(load_eligible_items(self.settings), item_filter)
        df = df[df['item_id'].isin(set(eligible['item_id']))]

        latest = latest_per_triple(df)
        logger.debug(
            "Loaded %d observations (%d after latest-date reduction) for lists %s",
            len(df), len(latest), sorted(price_ids),
        )

        return [
            PriceObservation(
                observation_id=int(row['observation_id']),
                item_id=int(row['item_id']),
                price_id=int(row['price_id']),
                quantity_tier=int(row['from_qty']),
                price=float(row['price']),
                discount_amount=float(row['discount_amt']),
                effective_date=None if pd.isna(row['effective_date']) else row['effective_date'].date(),
            )
            for _, row in latest.iterrows()
        ]


class CostDifferentialIndex:
    """Resolves per-item step costs through the DiscountMaintenance link."""

    LINK_FIELD = 'DiscountMaintenance'
    LINK_TABLE = 'items'

    def __init__(self, settings: Settings):
        self.settings = settings

    def get_differentials(self, item_ids: Iterable[int]) -> dict[int, float]:
        item_ids = {int(i) for i in item_ids}
        if not item_ids:
            return {}

        links = read_table(self.settings.discount_links, 'discount_links', LINK_COLUMNS, required=False)
        links = links[
            (links['field_name'] == self.LINK_FIELD) &
            (links['table_name'].str.lower() == self.LINK_TABLE) &
            links['field_value'].str.fullmatch(r'[0-9]+')
        ].copy()
        links['table_id'] = to_number(links['table_id'])
        links = links[links['table_id'].isin(item_ids)].copy()
        links['header_id'] = links['field_value'].astype(int)

        headers = read_table(
            self.settings.discount_maintenance, 'discount_maintenance', DISCOUNT_COLUMNS, required=False
        )
        headers = headers.assign(
            header_id=to_number(headers['header_id']),
            amount=to_number(headers['costing_discount_amt']),
        ).dropna(subset=['header_id', 'amount']).copy()
        headers['header_id'] = headers['header_id'].astype(int)
        headers = headers.drop_duplicates('header_id', keep='first')

        merged = links.merge(headers[['header_id', 'amount']], on='header_id', how='inner')
        merged = merged.drop_duplicates('table_id', keep='first')

        return {int(row['table_id']): float(row['amount']) for _, row in merged.iterrows()}

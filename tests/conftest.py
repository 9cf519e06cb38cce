import os
import sys

import pandas as pd
import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from catalog_pricing.config.settings import Settings


PRICE_LISTS = [
    # price_id, code, description, scope_id, currency_id, is_active
    (3, '01-EXP', 'EXPERT', 1, 1, 'true'),
    (4, '02-DET', 'DETAILLANT', 1, 1, 'true'),
    (5, '03-IND', 'INDUSTRIEL', 1, 2, 'true'),
    (6, '04-GROS EXP', 'EXPERT GROSSISTE', 1, 1, 'true'),
    (7, '05-GROS', 'GROSSISTE', 1, 3, 'true'),
    (17, '08-PDS', 'PDS', 1, 9, 'true'),
    (30, '01-EXP', 'EXPERT (AUTRE COMPAGNIE)', 2, 1, 'true'),
    (40, '02-DET', 'DETAILLANT INACTIF', 1, 1, 'false'),
]

ITEMS = [
    # item_id, item_code, description, category_id, type_id, case_size, format, volume, is_active
    (1, 'A-OVERRIDE', 'Override item', 10, 100, '10', 'Caisse', '1L', 'true'),
    (2, 'B-GAPFILL', 'Gap-fill item', 10, 100, '', 'Caisse', '1L', 'true'),
    (3, 'C-DEDUP', 'Dedup item', 10, 100, 'n/a', 'Caisse', '1L', 'true'),
    (4, 'D-EXCLUDED', 'Excluded item', 10, 100, '6', 'Caisse', '1L', 'true'),
    (5, 'E-EMPTY', 'Item without prices', 10, 100, '-3', 'Caisse', '1L', 'true'),
    (6, 'F-INACTIVE', 'Inactive item', 10, 100, '6', 'Caisse', '1L', 'false'),
    (7, 'G-OTHER-CAT', 'Other category item', 20, 200, '6', 'Caisse', '1L', 'true'),
    (8, 'AA-GREASE', 'Grease item', 10, 101, '6', 'Seau', '16kg', 'true'),
]

PRICE_RANGES = [
    # observation_id, item_id, price_id, from_qty, price, discount_amt, effective_date
    # Item 1: case size 10, step 2.50 on 01-EXP
    (1, 1, 3, 10, '100.00', '0', '2025-01-01'),
    (2, 1, 3, 20, '99.00', '0.40', '2025-01-01'),
    (3, 1, 4, 30, '120.00', '0', '2025-01-01'),
    # Item 2: 02-DET carries the curve, 05-GROS and 01-EXP only a base price
    (10, 2, 4, 1, '10.00', '0', '2025-01-01'),
    (11, 2, 4, 5, '8.00', '0', '2025-01-01'),
    (12, 2, 7, 1, '20.00', '0', '2025-01-01'),
    (13, 2, 3, 1, '12.00', '0.30', '2025-01-01'),
    (14, 2, 5, 1, '11.00', '0.75', '2025-01-01'),
    # Item 3: dated duplicates
    (20, 3, 3, 1, '5.00', '0', '2024-01-01'),
    (21, 3, 3, 1, '6.00', '0', '2025-01-01'),
    (40, 3, 4, 1, '7.00', '0', '2025-06-01'),
    (41, 3, 4, 1, '7.50', '0', '2025-06-01'),
    (42, 3, 4, 2, 'oops', '0', '2025-06-01'),
    (43, 3, 17, 1, '3.10', 'bad', 'not-a-date'),
    # Excluded, inactive and other-company rows
    (50, 4, 3, 1, '9.99', '0', '2025-01-01'),
    (51, 6, 3, 1, '9.99', '0', '2025-01-01'),
    (52, 1, 30, 1, '55.00', '0', '2025-01-01'),
    (53, 7, 3, 1, '4.00', '0', '2025-01-01'),
]

ITEM_FLAGS = [(4, 'EXCLUDE_PRICE_LIST'), (8, 'SOMETHING_ELSE')]

DISCOUNT_LINKS = [
    ('items', 1, 'DiscountMaintenance', '900'),
    ('items', 2, 'DiscountMaintenance', 'abc'),
    ('Items', 3, 'OtherField', '901'),
]

DISCOUNT_MAINTENANCE = [(900, '2.50'), (901, '1.00')]


def write_table(path, columns, rows):
    pd.DataFrame(rows, columns=columns).to_csv(path, index=False)


def write_sources(data_dir, price_lists=PRICE_LISTS, items=ITEMS, price_ranges=PRICE_RANGES,
                  item_flags=ITEM_FLAGS, discount_links=DISCOUNT_LINKS,
                  discount_maintenance=DISCOUNT_MAINTENANCE):
    """Write a complete set of source tables into data_dir."""
    write_table(data_dir / 'price_lists.csv',
                ['price_id', 'code', 'description', 'scope_id', 'currency_id', 'is_active'],
                price_lists)
    write_table(data_dir / 'categories.csv', ['category_id', 'name'],
                [(10, 'Lubrifiants'), (20, 'Nettoyants')])
    write_table(data_dir / 'item_types.csv', ['type_id', 'description'],
                [(100, 'Huiles'), (101, 'Graisses'), (200, 'Degraissants')])
    write_table(data_dir / 'items.csv',
                ['item_id', 'item_code', 'description', 'category_id', 'type_id',
                 'case_size', 'format', 'volume', 'is_active'],
                items)
    write_table(data_dir / 'item_flags.csv', ['item_id', 'flag'], item_flags)
    write_table(data_dir / 'price_ranges.csv',
                ['observation_id', 'item_id', 'price_id', 'from_qty', 'price',
                 'discount_amt', 'effective_date'],
                price_ranges)
    write_table(data_dir / 'discount_links.csv',
                ['table_name', 'table_id', 'field_name', 'field_value'], discount_links)
    write_table(data_dir / 'discount_maintenance.csv',
                ['header_id', 'costing_discount_amt'], discount_maintenance)
    return data_dir


@pytest.fixture
def data_dir(tmp_path):
    return write_sources(tmp_path)


@pytest.fixture
def settings(data_dir):
    return Settings.load(data_dir=data_dir, project_root=data_dir)

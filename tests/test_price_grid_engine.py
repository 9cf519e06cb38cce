"""
End-to-end tests for the price grid engine over CSV fixtures.
"""
import json

import pytest

from catalog_pricing.engine import PriceGridEngine, GridRequest, ItemFilter
from catalog_pricing.engine.price_grid_engine import reference_order
from catalog_pricing.engine.models import PriceList
from catalog_pricing.exceptions import GridRequestError, PriceListNotFoundError

from conftest import write_sources


@pytest.fixture
def engine(settings):
    return PriceGridEngine(settings)


def expert_grid(engine, **filter_kwargs):
    request = GridRequest(price_list_id=3, item_filter=ItemFilter(**filter_kwargs))
    return {g.item.item_id: g for g in engine.build_grid(request)}


def rows_by_tier(item_grid):
    return {row.quantity_tier: row for row in item_grid.ranges}


def test_override_cascade_on_export_baseline(engine):
    rows = rows_by_tier(expert_grid(engine, item_ids=(1,))[1])

    assert sorted(rows) == [10, 20, 30]
    assert rows[10].unit_price == 100.00
    assert rows[20].unit_price == 97.50
    assert rows[30].unit_price == 95.00
    assert rows[30].columns["02-DET"] == 120.00
    # Existing discount on the overridden cell is preserved
    assert rows[20].costing_discount_amt == 0.40
    assert rows[30].costing_discount_amt == 0.0


def test_other_company_prices_are_ignored(engine):
    rows = rows_by_tier(expert_grid(engine, item_ids=(1,))[1])
    assert 1 not in rows


def test_gap_fill_from_reference_list(engine):
    rows = rows_by_tier(expert_grid(engine, item_ids=(2,))[2])

    assert sorted(rows) == [1, 5]
    tier5 = rows[5].columns
    assert tier5["02-DET"] == 8.00
    assert tier5["05-GROS"] == 16.00
    assert tier5["01-EXP"] == 9.60
    assert tier5["03-IND"] == 8.80
    assert tier5["08-PDS"] is None
    assert rows[5].unit_price == 9.60


def test_discount_comes_only_from_selected_list(engine):
    rows = rows_by_tier(expert_grid(engine, item_ids=(2,))[2])

    # 03-IND carries 0.75 at tier 1; only the 01-EXP discount is surfaced
    assert rows[1].costing_discount_amt == 0.30
    assert rows[5].costing_discount_amt == 0.0


def test_dedup_and_weight_column(engine):
    [row] = expert_grid(engine, item_ids=(3,))[3].ranges

    assert row.row_id == "3-1"
    assert row.unit_price == 6.00
    assert row.columns["02-DET"] == 7.50
    assert row.weight_price == 3.10
    assert row.export_base_price == 6.00


def test_category_filter_keeps_catalog_order_and_empty_items(engine):
    request = GridRequest(price_list_id=3, item_filter=ItemFilter(category_id=10))
    result = engine.build_grid(request)

    assert [g.item.item_id for g in result] == [8, 1, 2, 3, 5]
    empty = {g.item.item_id: g.ranges for g in result}
    assert empty[5] == []
    assert empty[8] == []


def test_excluded_item_never_appears(engine):
    for kwargs in ({"item_ids": (4,)}, {"category_id": 10}, {"category_id": 10, "type_id": 100}):
        assert 4 not in expert_grid(engine, **kwargs)


def test_ranges_strictly_increasing(engine):
    request = GridRequest(price_list_id=3, item_filter=ItemFilter(category_id=10))
    for item_grid in engine.build_grid(request):
        tiers = [row.quantity_tier for row in item_grid.ranges]
        assert tiers == sorted(set(tiers))


def test_output_is_idempotent(engine):
    request = GridRequest(price_list_id=3, item_filter=ItemFilter(category_id=10))

    first = json.dumps(engine.build_grid_dicts(request))
    second = json.dumps(engine.build_grid_dicts(request))

    assert first == second


def test_industrial_selection_has_no_weight_column(engine):
    request = GridRequest(price_list_id=5, item_filter=ItemFilter(item_ids=(2,)))
    [item_grid] = engine.build_grid(request)

    rows = rows_by_tier(item_grid)
    assert set(rows[1].columns) == {"03-IND", "01-EXP"}
    assert rows[1].unit_price == 11.00
    assert rows[1].costing_discount_amt == 0.75
    assert rows[1].weight_price is None


def test_no_observations_returns_empty_ranges(tmp_path):
    write_sources(tmp_path, price_ranges=[])
    from catalog_pricing.config.settings import Settings
    engine = PriceGridEngine(Settings.load(data_dir=tmp_path, project_root=tmp_path))

    result = engine.build_grid(GridRequest(price_list_id=3, item_filter=ItemFilter(category_id=10)))

    assert len(result) == 5
    assert all(g.ranges == [] for g in result)


def test_no_items_returns_empty_grid(engine):
    assert engine.build_grid(GridRequest(price_list_id=3, item_filter=ItemFilter(category_id=999))) == []


# ---------------------------------------------------------------------------
# Request validation and failures
# ---------------------------------------------------------------------------
class ExplodingSource:
    def __getattr__(self, name):
        raise AssertionError(f"source should not be called: {name}")


def test_missing_filter_is_rejected_before_any_read(settings):
    engine = PriceGridEngine(
        settings,
        catalog=ExplodingSource(),
        directory=ExplodingSource(),
        observations=ExplodingSource(),
        differentials=ExplodingSource(),
    )

    with pytest.raises(GridRequestError):
        engine.build_grid(GridRequest(price_list_id=3))
    with pytest.raises(GridRequestError):
        engine.build_grid(GridRequest(price_list_id=None, item_filter=ItemFilter(item_ids=(1,))))


def test_unknown_selected_list(engine):
    with pytest.raises(PriceListNotFoundError):
        engine.build_grid(GridRequest(price_list_id=999, item_filter=ItemFilter(item_ids=(1,))))


class FailingStore:
    def load_observations(self, price_ids, item_filter):
        raise RuntimeError("price ranges unavailable")


def test_source_failure_aborts_the_grid(settings):
    engine = PriceGridEngine(settings, observations=FailingStore())

    with pytest.raises(RuntimeError, match="price ranges unavailable"):
        engine.build_grid(GridRequest(price_list_id=3, item_filter=ItemFilter(item_ids=(1,))))


def test_reference_order_is_by_price_list_id():
    lists = [PriceList(price_id=17, code="08-PDS"), PriceList(price_id=4, code="02-DET")]

    assert reference_order(("08-PDS", "ZZ", "02-DET", "AA"), lists) == ["02-DET", "08-PDS", "AA", "ZZ"]


def test_infinite_and_fractional_source_values_do_not_reach_the_grid(tmp_path):
    from catalog_pricing.config.settings import Settings
    from conftest import PRICE_RANGES

    write_sources(tmp_path, price_ranges=PRICE_RANGES + [
        (60, 1, 3, 10, "inf", "0", "2026-01-01"),
        (61, 3, 3, 2, "5.00", "0", "2025-01-01"),
        (62, 3, 3, "2.9", "1.00", "0", "2026-01-01"),
    ])
    engine = PriceGridEngine(Settings.load(data_dir=tmp_path, project_root=tmp_path))

    result = {g.item.item_id: g for g in engine.build_grid(
        GridRequest(price_list_id=3, item_filter=ItemFilter(item_ids=(1, 3))))}

    assert rows_by_tier(result[1])[20].unit_price == 97.50
    assert [(r.quantity_tier, r.unit_price) for r in result[3].ranges] == [(1, 6.00), (2, 5.00)]

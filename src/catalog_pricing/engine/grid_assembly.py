"""
Grid assembly - projects the resolved cells into per-item output rows.
"""
from typing import Optional, Sequence

from ..config.column_matrix import ColumnMatrix
from .models import Item, ItemPriceGrid, PriceCell, PriceGrid, PriceGridRow
from .passes import group_by_item, item_tiers


def _price(cells: dict[tuple[int, str], PriceCell], tier: int, code: Optional[str]) -> Optional[float]:
    cell = cells.get((tier, code)) if code else None
    return cell.price if cell else None


def build_rows(
    item_id: int,
    cells: dict[tuple[int, str], PriceCell],
    codes: Sequence[str],
    selected_code: str,
    matrix: ColumnMatrix,
) -> list[PriceGridRow]:
    """Build one row per quantity tier of an item, ascending."""
    # Export baseline falls back to wholesale-export when it is not a column
    export_code = (
        matrix.export_base_code if matrix.export_base_code in codes
        else matrix.wholesale_export_code
    )

    rows = []
    for tier in item_tiers(cells):
        selected = cells.get((tier, selected_code))
        rows.append(PriceGridRow(
            row_id=f"{item_id}-{tier}",
            quantity_tier=tier,
            unit_price=selected.price if selected else None,
            weight_price=_price(cells, tier, matrix.weight_code),
            export_base_price=_price(cells, tier, export_code),
            costing_discount_amt=selected.discount_amount if selected else 0.0,
            columns={code: _price(cells, tier, code) for code in codes},
        ))
    return rows


def assemble_grid(
    items: Sequence[Item],
    grid: PriceGrid,
    codes: Sequence[str],
    selected_code: str,
    matrix: ColumnMatrix,
) -> list[ItemPriceGrid]:
    """
    Build the output for every catalog item, in catalog order.

    Items without any cell still appear, with an empty ``ranges`` list.
    """
    by_item = group_by_item(grid)
    return [
        ItemPriceGrid(
            item=item,
            price_code=selected_code,
            ranges=build_rows(item.item_id, by_item.get(item.item_id, {}), codes, selected_code, matrix),
        )
        for item in items
    ]

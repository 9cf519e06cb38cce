"""
Grid passes - cost override and ratio gap-fill.

Both passes take a PriceGrid and return a new one; the input is never mutated.
The override pass must run before gap-fill so that ratios are computed from
the overridden export-baseline prices.
"""
import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping, Optional, Sequence

from .models import CellKey, PriceCell, PriceGrid

logger = logging.getLogger(__name__)

BASE_TIER = 1

_CENT = Decimal('0.01')


def round_price(value: float) -> float:
    """Round a price to cents, half away from zero."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def group_by_item(grid: PriceGrid) -> dict[int, dict[tuple[int, str], PriceCell]]:
    """Index grid cells as item_id → (tier, code) → cell."""
    by_item: dict[int, dict[tuple[int, str], PriceCell]] = defaultdict(dict)
    for key, cell in grid.items():
        by_item[key.item_id][(key.quantity_tier, key.price_code)] = cell
    return by_item


def item_tiers(cells: Iterable[tuple[int, str]]) -> list[int]:
    """Sorted distinct quantity tiers of one item's cells."""
    return sorted({tier for tier, _ in cells})


def apply_cost_override(
    grid: PriceGrid,
    export_code: str,
    case_sizes: Mapping[int, Optional[float]],
    differentials: Mapping[int, float],
) -> PriceGrid:
    """
    Step export-baseline prices down above the case size.

    For an item with a positive cost differential and an export-baseline
    price at the tier equal to its case size, the n-th tier above the case
    size gets ``base - n * differential``. Only the export_code column is
    read or written.
    """
    result = dict(grid)
    overridden = 0

    for item_id, cells in group_by_item(grid).items():
        differential = differentials.get(item_id)
        case_size = case_sizes.get(item_id)
        if not differential or differential <= 0 or not case_size or case_size <= 0:
            continue

        base_cell = next(
            (cell for (tier, code), cell in cells.items()
             if code == export_code and tier == case_size),
            None,
        )
        if base_cell is None:
            continue

        upper_tiers = [tier for tier in item_tiers(cells) if tier > case_size]
        for step, tier in enumerate(upper_tiers, start=1):
            key = CellKey(item_id, tier, export_code)
            existing = grid.get(key)
            result[key] = PriceCell(
                price=round_price(base_cell.price - step * differential),
                discount_amount=existing.discount_amount if existing else 0.0,
            )
            overridden += 1

    logger.debug("Cost override wrote %d export-baseline cells", overridden)
    return result


def fill_gaps(grid: PriceGrid, reference_order: Sequence[str] = ()) -> PriceGrid:
    """
    Synthesize missing tier prices from another list's discount ratio.

    For each tier above the base tier, the first code in reference_order
    with a positive base price and a price at that tier supplies
    ``ratio = price_at_tier / base_price``. Every code that has a base price
    but no price at that tier then gets ``round(base * ratio, 2)``.
    Codes missing from reference_order are tried last, alphabetically.
    Existing cells are never overwritten.
    """
    result = dict(grid)
    filled = 0

    for item_id, cells in group_by_item(grid).items():
        base_prices = {
            code: cell.price for (tier, code), cell in cells.items() if tier == BASE_TIER
        }
        if not base_prices:
            continue

        candidates = [code for code in reference_order if code in base_prices]
        candidates += sorted(code for code in base_prices if code not in candidates)

        for tier in item_tiers(cells):
            if tier == BASE_TIER:
                continue

            ratio = None
            for code in candidates:
                base = base_prices[code]
                at_tier = cells.get((tier, code))
                if at_tier is None or base is None or base <= 0:
                    continue
                ratio = at_tier.price / base
                break

            if ratio is None:
                continue

            for code, base in base_prices.items():
                key = CellKey(item_id, tier, code)
                if key in result:
                    continue
                result[key] = PriceCell(price=round_price(base * ratio), discount_amount=0.0)
                filled += 1

    logger.debug("Gap-fill synthesized %d cells", filled)
    return result

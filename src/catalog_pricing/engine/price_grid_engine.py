"""
Price Grid Engine - builds the multi-column price grid for a selected list.

Resolution order:
1. Resolve the selected price list and expand it through the column matrix
2. Resolve the matrix codes to price lists in the selected list's company
3. Load items and latest price observations concurrently
4. Load cost differentials for the loaded items
5. Cost override on the export-baseline column
6. Ratio gap-fill across the loaded columns
7. Assemble one row per item and quantity tier
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from ..config.settings import get_settings, Settings
from ..exceptions import PriceListNotFoundError
from .models import CellKey, GridRequest, ItemPriceGrid, PriceCell, PriceGrid, PriceList, PriceObservation
from .passes import apply_cost_override, fill_gaps
from .grid_assembly import assemble_grid

logger = logging.getLogger(__name__)


def build_cells(observations: list[PriceObservation], code_by_id: dict[int, str]) -> PriceGrid:
    """Key authoritative observations by (item, tier, price code)."""
    grid: PriceGrid = {}
    for obs in observations:
        code = code_by_id.get(obs.price_id)
        if code is None:
            continue
        grid[CellKey(obs.item_id, obs.quantity_tier, code)] = PriceCell(
            price=obs.price, discount_amount=obs.discount_amount
        )
    return grid


def reference_order(codes: tuple[str, ...], lists: list[PriceList]) -> list[str]:
    """Gap-fill reference codes: ascending price list id, unresolved codes last."""
    ids = {pl.code: pl.price_id for pl in lists}
    resolved = sorted((c for c in codes if c in ids), key=lambda c: ids[c])
    return resolved + sorted(c for c in codes if c not in ids)


class PriceGridEngine:
    """
    Core engine that turns sparse tiered price observations into a full grid.

    Collaborators are injected so the engine can run over any source; by
    default they read the CSV tables configured in Settings.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        catalog=None,
        directory=None,
        observations=None,
        differentials=None,
    ):
        self.settings = settings or get_settings()
        self.matrix = self.settings.column_matrix

        # Deferred: the data package imports engine.models
        from ..data.catalog import ItemCatalog, PriceListDirectory
        from ..data.observations import PriceObservationStore, CostDifferentialIndex

        self.catalog = catalog or ItemCatalog(self.settings)
        self.directory = directory or PriceListDirectory(self.settings)
        self.observations = observations or PriceObservationStore(self.settings)
        self.differentials = differentials or CostDifferentialIndex(self.settings)

    def build_grid(self, request: GridRequest) -> list[ItemPriceGrid]:
        """
        Build the price grid for a request.

        Raises GridRequestError for a missing price list or item filter and
        PriceListNotFoundError for an unknown selected list. Any source
        failure propagates; no partial grid is returned.
        """
        request.validate()

        selected = self.directory.get_list(request.price_list_id)
        if selected is None:
            raise PriceListNotFoundError(request.price_list_id)

        codes = self.matrix.resolve(selected.code)
        lists = self.directory.get_lists_by_scope(selected.scope_id, codes)
        code_by_id = {pl.price_id: pl.code for pl in lists}

        logger.info(
            "Building grid for %s (id %s) with columns %s",
            selected.code, selected.price_id, ", ".join(codes),
        )

        with ThreadPoolExecutor(max_workers=2) as pool:
            items_future = pool.submit(self.catalog.find_items, request.item_filter)
            obs_future = pool.submit(
                self.observations.load_observations, list(code_by_id), request.item_filter
            )
            items = items_future.result()
            observations = obs_future.result()

        item_ids = [item.item_id for item in items]
        differentials = {}
        if self.matrix.export_base_code in code_by_id.values():
            differentials = self.differentials.get_differentials(item_ids)

        known = set(item_ids)
        grid = build_cells([o for o in observations if o.item_id in known], code_by_id)

        grid = apply_cost_override(
            grid,
            self.matrix.export_base_code,
            {item.item_id: item.case_size for item in items},
            differentials,
        )
        grid = fill_gaps(grid, reference_order(codes, lists))

        result = assemble_grid(items, grid, codes, selected.code, self.matrix)
        logger.info(
            "Grid for %s: %d items, %d rows",
            selected.code, len(result), sum(len(g.ranges) for g in result),
        )
        return result

    def build_grid_dicts(self, request: GridRequest) -> list[dict]:
        """Build the grid and convert it to the JSON shape."""
        return [item_grid.to_dict() for item_grid in self.build_grid(request)]

"""Engine subpackage - core price grid logic and resolution."""
from .price_grid_engine import PriceGridEngine
from .models import GridRequest, ItemFilter, ItemPriceGrid, PriceGridRow

__all__ = ['PriceGridEngine', 'GridRequest', 'ItemFilter', 'ItemPriceGrid', 'PriceGridRow']

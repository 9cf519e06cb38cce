"""
Shared engine and service instances for the API routers.

Routers receive them through FastAPI dependencies so tests can override them.
"""
from typing import Optional

from ..config.settings import get_settings
from ..engine import PriceGridEngine
from ..services.catalogue_service import CatalogueService

_engine: Optional[PriceGridEngine] = None
_catalogue: Optional[CatalogueService] = None


def get_engine() -> PriceGridEngine:
    global _engine
    if _engine is None:
        _engine = PriceGridEngine(get_settings())
    return _engine


def get_catalogue_service() -> CatalogueService:
    global _catalogue
    if _catalogue is None:
        _catalogue = CatalogueService(get_settings())
    return _catalogue

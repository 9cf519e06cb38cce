"""
Catalogue API - FastAPI router for the price grid and catalogue lookups.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from ..engine import PriceGridEngine, GridRequest, ItemFilter
from ..exceptions import GridRequestError, PriceListNotFoundError
from ..services.catalogue_service import CatalogueService
from .state import get_engine, get_catalogue_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalogue", tags=["catalogue"])


class GridQuery(BaseModel):
    """Request body for a price grid over a long item selection."""
    model_config = ConfigDict(populate_by_name=True)

    price_id: Optional[int] = Field(None, alias="priceId")
    prod_id: Optional[int] = Field(None, alias="prodId")
    type_id: Optional[int] = Field(None, alias="typeId")
    item_ids: list[int] = Field(default_factory=list, alias="itemIds")


def _grid_response(engine: PriceGridEngine, request: GridRequest) -> list[dict]:
    try:
        return engine.build_grid_dicts(request)
    except GridRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PriceListNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception("Price grid failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/prices")
def get_prices(
    price_id: Optional[int] = Query(None, alias="priceId"),
    prod_id: Optional[int] = Query(None, alias="prodId"),
    type_id: Optional[int] = Query(None, alias="typeId"),
    item_id: Optional[list[int]] = Query(None, alias="itemId"),
    engine: PriceGridEngine = Depends(get_engine),
):
    """Price grid for the selected price list and its sibling columns."""
    request = GridRequest(
        price_list_id=price_id,
        item_filter=ItemFilter(
            item_ids=tuple(item_id) if item_id else None,
            category_id=prod_id,
            type_id=type_id,
        ),
    )
    return _grid_response(engine, request)


@router.post("/prices")
def post_prices(query: GridQuery, engine: PriceGridEngine = Depends(get_engine)):
    request = GridRequest(
        price_list_id=query.price_id,
        item_filter=ItemFilter(
            item_ids=tuple(query.item_ids) or None,
            category_id=query.prod_id,
            type_id=query.type_id,
        ),
    )
    return _grid_response(engine, request)


@router.get("/pricelists")
def list_price_lists(service: CatalogueService = Depends(get_catalogue_service)):
    """Active price lists ordered by description."""
    try:
        return service.list_price_lists()
    except Exception as e:
        logger.exception("Price list lookup failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/products")
def list_categories(service: CatalogueService = Depends(get_catalogue_service)):
    """Product categories with their item counts."""
    try:
        return service.list_categories()
    except Exception as e:
        logger.exception("Category lookup failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/itemtypes")
def list_item_types(
    prod_id: Optional[int] = Query(None, alias="prodId"),
    service: CatalogueService = Depends(get_catalogue_service),
):
    """Item types within a product category."""
    if prod_id is None:
        raise HTTPException(status_code=400, detail="prodId is required")
    try:
        return service.list_item_types(prod_id)
    except Exception as e:
        logger.exception("Item type lookup failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/items")
def find_items(
    item_type_id: Optional[int] = Query(None, alias="itemTypeId"),
    search: Optional[str] = None,
    service: CatalogueService = Depends(get_catalogue_service),
):
    """Items of a type, or items matching a search on code or description."""
    try:
        return service.find_items(item_type_id=item_type_id, search=search)
    except GridRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Item lookup failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_pricing import __version__
from catalog_pricing.config.settings import get_settings
from catalog_pricing.api.catalogue_api import router as catalogue_router

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Catalog Pricing API",
    description="Catalogue price grids with cost override and ratio gap-fill",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalogue_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Catalog Pricing API Active"}


@app.get("/system/status")
async def get_status():
    current = get_settings()
    tables = {
        name: getattr(current, name).exists()
        for name in ('price_lists', 'categories', 'item_types', 'items', 'item_flags',
                     'price_ranges', 'discount_links', 'discount_maintenance')
    }
    return {
        "engine_active": True,
        "data_dir": str(current.data_dir),
        "default_scope_id": current.default_scope_id,
        "exclusion_flags": list(current.exclusion_flags),
        "tables": tables,
        "source_report": current.source_report.stat().st_mtime if current.source_report.exists() else None,
    }

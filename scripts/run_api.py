#!/usr/bin/env python
"""
Serve the catalogue price grid API with uvicorn.

Usage:
    python scripts/run_api.py [--host 0.0.0.0] [--port 8000] [--no-reload]
"""
import argparse
import os
import sys
from pathlib import Path

import uvicorn

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))


def main():
    parser = argparse.ArgumentParser(description="Run the Catalog Pricing API")
    parser.add_argument('--host', default=os.getenv('CATALOG_PRICING_HOST', '0.0.0.0'))
    parser.add_argument('--port', type=int, default=int(os.getenv('CATALOG_PRICING_PORT', '8000')))
    parser.add_argument('--no-reload', action='store_true', help="Disable auto-reload on source changes")
    args = parser.parse_args()

    print(f"Serving price grids on http://{args.host}:{args.port}")
    uvicorn.run(
        "catalog_pricing.api.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        reload_dirs=[str(PROJECT_ROOT / 'src')],
        app_dir=str(PROJECT_ROOT / 'src'),
    )


if __name__ == "__main__":
    main()

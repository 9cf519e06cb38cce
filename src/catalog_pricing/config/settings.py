"""
Centralized settings and path configuration for the catalog pricing service.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .column_matrix import ColumnMatrix

load_dotenv()

DEFAULT_EXCLUSION_FLAGS = ('EXCLUDE_PRICE_LIST', 'EXCLUDE_CATALOGUE')


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists() or (parent / 'sample_data').is_dir():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _parse_flags(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_EXCLUSION_FLAGS
    return tuple(flag.strip().upper() for flag in raw.split(',') if flag.strip())


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Source tables
    price_lists: Path
    categories: Path
    item_types: Path
    items: Path
    item_flags: Path
    price_ranges: Path
    discount_links: Path
    discount_maintenance: Path

    # Output files
    source_report: Path

    # Company used by the browsing lookups
    default_scope_id: int = 1

    # Administrative markers that remove an item from every price grid
    exclusion_flags: tuple = DEFAULT_EXCLUSION_FLAGS

    column_matrix: ColumnMatrix = field(default_factory=ColumnMatrix)

    log_level: str = "INFO"

    @classmethod
    def load(cls, data_dir: Optional[Path] = None, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment and the data directory layout."""
        root = project_root or get_project_root()

        env_dir = os.getenv('CATALOG_PRICING_DATA_DIR')
        if data_dir is None:
            data_dir = Path(env_dir) if env_dir else root / 'sample_data'
        data_dir = Path(data_dir)

        # Optional matrix override shipped alongside the data
        matrix_path = data_dir / 'column_matrix.json'
        matrix = ColumnMatrix.from_json(matrix_path) if matrix_path.exists() else ColumnMatrix()

        return cls(
            project_root=root,
            data_dir=data_dir,
            price_lists=data_dir / 'price_lists.csv',
            categories=data_dir / 'categories.csv',
            item_types=data_dir / 'item_types.csv',
            items=data_dir / 'items.csv',
            item_flags=data_dir / 'item_flags.csv',
            price_ranges=data_dir / 'price_ranges.csv',
            discount_links=data_dir / 'discount_links.csv',
            discount_maintenance=data_dir / 'discount_maintenance.csv',
            source_report=data_dir / 'outputs' / 'source_report.json',
            default_scope_id=int(os.getenv('CATALOG_PRICING_SCOPE_ID', '1')),
            exclusion_flags=_parse_flags(os.getenv('CATALOG_PRICING_EXCLUSION_FLAGS')),
            column_matrix=matrix,
            log_level=os.getenv('LOG_LEVEL', 'INFO'),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings

"""
CSV table helpers shared by the data sources.

Every table is read as strings and coerced column by column, so malformed
numbers end up as NaN/None instead of raising.
"""
import hashlib
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from ..exceptions import SourceDataError


def read_table(path: Path, name: str, columns: Sequence[str], required: bool = True) -> pd.DataFrame:
    """
    Read a source table, stripping headers and values.

    Optional tables that do not exist come back empty with the expected
    columns; required ones raise SourceDataError.
    """
    if not path.exists():
        if required:
            raise SourceDataError(name, "table not found", str(path))
        return pd.DataFrame({col: pd.Series(dtype=str) for col in columns})

    df = pd.read_csv(path, dtype=str, keep_default_na=False).fillna('')
    df.columns = [c.strip() for c in df.columns]

    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SourceDataError(name, f"missing columns {', '.join(missing)}", str(path))

    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def to_number(series: pd.Series) -> pd.Series:
    """Coerce to float; anything unparseable or infinite becomes NaN."""
    numbers = pd.to_numeric(series, errors='coerce').astype(float)
    return numbers.replace([float('inf'), float('-inf')], float('nan'))


def to_bool(series: pd.Series) -> pd.Series:
    """Parse booleans the way the CSV exports write them."""
    return series.astype(str).str.lower().isin(('true', '1', 'yes', 'on', 't'))


def optional_int(value) -> Optional[int]:
    if value is None or pd.isna(value):
        return None
    return int(value)


def optional_float(value) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def optional_str(value) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    value = str(value).strip()
    return value or None


def get_file_hash(path: Path) -> str:
    """Get a short SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]

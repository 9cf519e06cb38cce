"""
Source Report - checks the replicated catalogue tables before serving grids.

Produces a JSON report with:
- File hashes for every source table
- Row counts
- Observations superseded by a later effective date
- Rows dropped for unparseable tier or price
- Observations pointing at unknown price lists
- Excluded item count
"""
import json
from datetime import datetime
from typing import Optional

from ..config.settings import get_settings, Settings
from ..exceptions import SourceDataError
from .catalog import PRICE_LIST_COLUMNS, ITEM_COLUMNS, load_eligible_items
from .observations import PRICE_RANGE_COLUMNS, parse_price_ranges, latest_per_triple
from .tables import read_table, get_file_hash, to_number, to_bool

TABLES = ('price_lists', 'categories', 'item_types', 'items', 'item_flags',
          'price_ranges', 'discount_links', 'discount_maintenance')
REQUIRED_TABLES = ('price_lists', 'items', 'price_ranges')


def build_source_report(settings: Optional[Settings] = None, verbose: bool = True) -> dict:
    """
    Inspect the source tables and write the report.

    Args:
        settings: Optional settings override
        verbose: Print progress messages

    Returns:
        Report dictionary
    """
    settings = settings or get_settings()

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "input_files": {},
        "metrics": {},
        "warnings": [],
        "errors": []
    }

    for name in TABLES:
        path = getattr(settings, name)
        if path.exists():
            report["input_files"][name] = {"path": str(path), "hash": get_file_hash(path)}
        elif name in REQUIRED_TABLES:
            report["errors"].append(f"CRITICAL ERROR: {path} not found.")
        else:
            report["warnings"].append(f"WARNING: optional table {name} not found")

    if report["errors"]:
        report["status"] = "failed"
        if verbose:
            for msg in report["errors"]:
                print(msg)
        _write_report(settings, report, verbose)
        return report

    try:
        lists = read_table(settings.price_lists, 'price_lists', PRICE_LIST_COLUMNS)
        items = read_table(settings.items, 'items', ITEM_COLUMNS)
        raw = read_table(settings.price_ranges, 'price_ranges', PRICE_RANGE_COLUMNS)

        ranges = parse_price_ranges(raw)
        latest = latest_per_triple(ranges)
        known_lists = set(to_number(lists['price_id']).dropna().astype(int))
        active_items = int(to_bool(items['is_active']).sum())
        eligible = load_eligible_items(settings)

        report["metrics"] = {
            "price_list_count": len(lists),
            "item_count": len(items),
            "active_item_count": active_items,
            "excluded_item_count": active_items - len(eligible),
            "observation_count": len(raw),
            "unparseable_observations": len(raw) - len(ranges),
            "superseded_observations": len(ranges) - len(latest),
            "unknown_price_list_observations": int((~latest['price_id'].isin(known_lists)).sum()),
        }
    except SourceDataError as e:
        msg = f"ERROR: {e}"
        report["errors"].append(msg)
        report["status"] = "failed"
        if verbose:
            print(msg)
        _write_report(settings, report, verbose)
        return report

    metrics = report["metrics"]
    if metrics["unparseable_observations"]:
        report["warnings"].append(
            f"{metrics['unparseable_observations']} price ranges have an unparseable tier or price"
        )
    if metrics["unknown_price_list_observations"]:
        report["warnings"].append(
            f"{metrics['unknown_price_list_observations']} price ranges reference unknown price lists"
        )

    report["status"] = "success"
    if verbose:
        print(f"Checked {metrics['observation_count']} price ranges "
              f"({metrics['superseded_observations']} superseded by later dates)")

    _write_report(settings, report, verbose)
    return report


def _write_report(settings: Settings, report: dict, verbose: bool):
    report_path = settings.source_report
    report_path.parent.mkdir(parents=True, exist_ok=True)
    with open(report_path, 'w') as f:
        json.dump(report, f, indent=2)

    if verbose:
        print(f"Source report saved to: {report_path}")


if __name__ == "__main__":
    build_source_report()

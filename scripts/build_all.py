#!/usr/bin/env python
"""
Build pipeline - checks the source tables and runs the test suite.

Usage:
    python scripts/build_all.py
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from catalog_pricing.data.source_report import build_source_report


def main():
    print("=" * 60)
    print("CATALOG PRICING BUILD PIPELINE")
    print("=" * 60)
    print()

    print("[1/2] Checking source tables...")
    report = build_source_report(verbose=True)

    if report["status"] != "success":
        print("\n❌ SOURCE CHECK FAILED")
        for error in report["errors"]:
            print(f"  {error}")
        sys.exit(1)

    print()
    print("[2/2] Running tests...")

    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    metrics = report['metrics']
    print()
    print("=" * 60)
    print("✅ BUILD COMPLETE")
    print("=" * 60)
    print()
    print("Summary:")
    print(f"  Price lists: {metrics['price_list_count']}")
    print(f"  Items: {metrics['item_count']} ({metrics['excluded_item_count']} excluded)")
    print(f"  Price ranges: {metrics['observation_count']}")
    print(f"  Superseded by later dates: {metrics['superseded_observations']}")
    for warning in report['warnings']:
        print(f"  {warning}")


if __name__ == "__main__":
    main()

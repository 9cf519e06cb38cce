"""
Tests for the source table report.
"""
import json

from catalog_pricing.data.source_report import build_source_report

from conftest import PRICE_RANGES, write_sources


def test_report_metrics(settings):
    report = build_source_report(settings, verbose=False)

    assert report["status"] == "success"
    metrics = report["metrics"]
    assert metrics["price_list_count"] == 8
    assert metrics["item_count"] == 8
    assert metrics["active_item_count"] == 7
    assert metrics["excluded_item_count"] == 1
    assert metrics["observation_count"] == len(PRICE_RANGES)
    assert metrics["unparseable_observations"] == 1
    assert metrics["superseded_observations"] == 2
    assert metrics["unknown_price_list_observations"] == 0
    assert len(report["input_files"]["items"]["hash"]) == 12


def test_report_is_written_to_disk(settings):
    build_source_report(settings, verbose=False)

    with open(settings.source_report) as f:
        saved = json.load(f)
    assert saved["status"] == "success"


def test_unknown_price_lists_are_warned(tmp_path):
    from catalog_pricing.config.settings import Settings

    write_sources(tmp_path, price_ranges=PRICE_RANGES + [(99, 1, 777, 1, '1.00', '0', '2025-01-01')])
    report = build_source_report(Settings.load(data_dir=tmp_path, project_root=tmp_path), verbose=False)

    assert report["metrics"]["unknown_price_list_observations"] == 1
    assert any("unknown price lists" in w for w in report["warnings"])


def test_missing_required_table_fails(settings):
    settings.items.unlink()

    report = build_source_report(settings, verbose=False)

    assert report["status"] == "failed"
    assert any("items.csv" in e for e in report["errors"])


def test_missing_optional_table_warns(settings):
    settings.discount_links.unlink()

    report = build_source_report(settings, verbose=False)

    assert report["status"] == "success"
    assert any("discount_links" in w for w in report["warnings"])

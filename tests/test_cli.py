from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from islanders.cli import cli
from islanders.core.catalog_loader import load_catalog

CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "catalog.yaml"


def test_cli_search_filters_and_sorts():
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["search", "--catalog", str(CATALOG_PATH), "--domain", "Real Estate", "--sort-by", "price_asc"],
    )
    assert result.exit_code == 0

    lines = [line for line in result.output.splitlines() if line.startswith("re_")]
    assert [line.split()[0] for line in lines] == ["re_1", "re_2", "re_0"]


def test_cli_search_amenities_are_repeatable():
    runner = CliRunner()
    result = runner.invoke(
        cli,
        ["search", "--catalog", str(CATALOG_PATH), "--amenity", "pool", "--amenity", "spa"],
    )
    assert result.exit_code == 0
    assert "hotel_0" in result.output
    assert "re_0" not in result.output


def test_cli_search_no_results():
    runner = CliRunner()
    result = runner.invoke(cli, ["search", "--catalog", str(CATALOG_PATH), "-q", "submarine"])
    assert result.exit_code == 0
    assert "No matching items." in result.output


def test_cli_search_rejects_unknown_sort():
    runner = CliRunner()
    result = runner.invoke(cli, ["search", "--sort-by", "random"])
    assert result.exit_code != 0


def test_cli_catalog_export_writes_yaml(tmp_path):
    target = tmp_path / "demo.yaml"

    runner = CliRunner()
    result = runner.invoke(cli, ["catalog", "export", str(target), "--per-domain", "3"])
    assert result.exit_code == 0
    assert "Wrote 15 items" in result.output

    items = load_catalog(target)
    assert len(items) == 15


def test_cli_tick_with_memory_backend_warns():
    runner = CliRunner()
    result = runner.invoke(cli, ["tick"])
    assert result.exit_code == 0
    assert "storage_backend is not 'database'" in result.output
    assert "scanned=0 advanced=0 notified=0 failed=0" in result.output


def test_cli_help_shows_usage():
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Usage" in result.output

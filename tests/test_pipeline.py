"""
End-to-end batch run against temporary CSVs and the shipped data/ snapshot.
"""

import logging
from pathlib import Path

import pytest

from bed_report import store
from bed_report.config import ReportPaths
from bed_report.pipeline import build_database, run_report
from bed_report.queries import REPORTS
from bed_report.reshape import HOSPITAL_LABELS

from conftest import bed_fact_frame, business_frame

SHIPPED_DATA = Path(__file__).resolve().parents[1] / "data"


@pytest.fixture()
def paths(tmp_path, write_sources):
    return ReportPaths(
        db_path=tmp_path / "beds.db",
        data_dir=write_sources(),
        output_dir=tmp_path / "reports",
    )


class TestRunReport:
    def test_writes_every_figure(self, paths):
        results = run_report(paths)

        assert list(results) == [q.name for q in REPORTS]
        html = sorted(p.name for p in paths.output_dir.glob("*.html"))
        assert len(html) == 8, f"Expected 8 charts, got {html}"

    def test_store_persists_five_tables(self, paths):
        run_report(paths, write_charts=False)

        with store.open_store(paths.db_path) as con:
            counts = store.row_counts(con)
        assert set(counts) == set(store.TABLE_DDL)
        assert counts["combined_table"] == 2

    def test_duplicate_keys_do_not_stop_run(self, tmp_path, write_sources):
        data_dir = write_sources(
            bed_facts=bed_fact_frame([("ORG1", 4, 10, 8, 6), ("ORG1", 4, 10, 8, 6), ("ORG1", 15, 5, 4, 3)])
        )
        paths = ReportPaths(tmp_path / "beds.db", data_dir, tmp_path / "reports")

        results = run_report(paths, write_charts=False)

        census = results["top_icu_sicu_census"]
        assert census.loc[census["bed_type"] == "ICU", "bed_count"].tolist() == [16]

    def test_org_in_two_clusters_warns(self, tmp_path, write_sources, caplog):
        data_dir = write_sources(
            businesses=business_frame(
                [("ORG1", "Test Hospital", 15, 12, 9, 1), ("ORG1", "Test Hospital", 15, 12, 9, 2)]
            )
        )
        paths = ReportPaths(tmp_path / "beds.db", data_dir, tmp_path / "reports")

        with caplog.at_level(logging.WARNING):
            results = run_report(paths, write_charts=False)

        assert "combined_table" in caplog.text
        assert "totals may be inflated" in caplog.text
        census = results["top_icu_sicu_census"]
        assert census.loc[census["bed_type"] == "ICU", "bed_count"].tolist() == [16], "Run continues on doubled rows"

    def test_rerun_is_stale_without_source_check(self, paths, write_sources):
        run_report(paths, write_charts=False)
        write_sources(bed_facts=bed_fact_frame([("ORG1", 4, 1, 1, 1), ("ORG1", 15, 1, 1, 1)]), data_dir=paths.data_dir)

        stale = run_report(paths, write_charts=False)["top_icu_sicu_census"]
        fresh = run_report(paths, check_sources=True, write_charts=False)["top_icu_sicu_census"]

        assert stale["bed_count"].tolist() == [8, 4]
        assert fresh["bed_count"].tolist() == [1, 1]

    def test_missing_source_is_fatal(self, paths):
        (paths.data_dir / "business.csv").unlink()
        with pytest.raises(FileNotFoundError):
            run_report(paths)


class TestShippedData:
    def test_snapshot_reports(self, tmp_path):
        paths = ReportPaths(tmp_path / "beds.db", SHIPPED_DATA, tmp_path / "reports")

        status = build_database(paths)
        results = run_report(paths, write_charts=False)

        assert status == "built"
        for name, long in results.items():
            assert long["hospital_name"].nunique() <= 10, name

        both = set(results["both_icu_sicu_census"]["hospital_name"])
        assert "Valley Childrens Hospital" not in both, "ICU-only hospital must be excluded"
        assert "Vanderbilt University<br>Medical Center" in both
        assert not set(HOSPITAL_LABELS) & both, "Long names must be wrapped"

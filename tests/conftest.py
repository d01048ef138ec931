"""
Shared fixtures: an in-memory store and small synthetic source tables.

The default frames are the single-hospital scenario used throughout the
report tests: one hospital with one ICU and one SICU fact row.
"""

import pandas as pd
import pytest

from bed_report import store
from bed_report.loader import SOURCE_COLUMNS, SOURCE_FILES


# ---------------------------------------------------------------------------
# Frame builders
# ---------------------------------------------------------------------------
def bed_type_frame(rows=None) -> pd.DataFrame:
    rows = rows if rows is not None else [(4, "ICU", "ICU"), (15, "SICU", "SICU")]
    return pd.DataFrame(rows, columns=SOURCE_COLUMNS["bed_type_table"])


def bed_fact_frame(rows=None) -> pd.DataFrame:
    rows = rows if rows is not None else [("ORG1", 4, 10, 8, 6), ("ORG1", 15, 5, 4, 3)]
    return pd.DataFrame(rows, columns=SOURCE_COLUMNS["bed_fact_table"])


def business_frame(rows=None) -> pd.DataFrame:
    rows = rows if rows is not None else [("ORG1", "Test Hospital", 15, 12, 9, 1)]
    return pd.DataFrame(rows, columns=SOURCE_COLUMNS["business_table"])


def load_frames(con, bed_types=None, bed_facts=None, businesses=None) -> None:
    """Load the three source tables, defaulting to the single-hospital scenario."""
    store.load(con, "bed_type_table", bed_types if bed_types is not None else bed_type_frame())
    store.load(con, "bed_fact_table", bed_facts if bed_facts is not None else bed_fact_frame())
    store.load(con, "business_table", businesses if businesses is not None else business_frame())


def hospital_rows(specs):
    """
    specs: iterable of (org_id, name, icu_census, sicu_census); a None count
    means no fact row of that type. License and staffed mirror census.
    """
    facts, businesses = [], []
    for org, name, icu, sicu in specs:
        if icu is not None:
            facts.append((org, 4, icu, icu, icu))
        if sicu is not None:
            facts.append((org, 15, sicu, sicu, sicu))
        businesses.append((org, name, 0, 0, 0, 1))
    return bed_fact_frame(facts), business_frame(businesses)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def con():
    """Fresh in-memory store, closed after the test."""
    with store.open_store(":memory:") as connection:
        yield connection


@pytest.fixture()
def loaded_con(con):
    """Store holding the single-hospital scenario (combined table not built)."""
    load_frames(con)
    return con


@pytest.fixture()
def write_sources(tmp_path):
    """Factory writing the three source CSVs into a data directory."""

    def _write(bed_types=None, bed_facts=None, businesses=None, data_dir=None):
        data_dir = data_dir or (tmp_path / "data")
        data_dir.mkdir(parents=True, exist_ok=True)
        frames = {
            "bed_type_table": bed_types if bed_types is not None else bed_type_frame(),
            "bed_fact_table": bed_facts if bed_facts is not None else bed_fact_frame(),
            "business_table": businesses if businesses is not None else business_frame(),
        }
        for name, df in frames.items():
            df.to_csv(data_dir / SOURCE_FILES[name], index=False)
        return data_dir

    return _write

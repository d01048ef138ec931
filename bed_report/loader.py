# loader.py
# Read the three source CSVs and persist them into the store, overwriting prior rows.

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import pandas as pd

from . import store

logger = logging.getLogger(__name__)

SOURCE_FILES = {
    "bed_type_table": "bed_type.csv",
    "bed_fact_table": "bed_fact.csv",
    "business_table": "business.csv",
}

SOURCE_COLUMNS = {
    "bed_type_table": ["bed_id", "bed_code", "bed_desc"],
    "bed_fact_table": ["ims_org_id", "bed_id", "license_beds", "census_beds", "staffed_beds"],
    "business_table": [
        "ims_org_id",
        "business_name",
        "ttl_license_beds",
        "ttl_census_beds",
        "ttl_staffed_beds",
        "bed_cluster_id",
    ],
}

TEXT_COLUMNS = {"ims_org_id", "bed_code", "bed_desc", "business_name"}


class SourceShapeError(ValueError):
    """A source file's header does not match its declared column set."""


def read_source(path: Path, columns: list[str]) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Source CSV not found: {path}")

    df = pd.read_csv(path, dtype={c: str for c in TEXT_COLUMNS})

    missing = set(columns) - set(df.columns)
    extra = set(df.columns) - set(columns)
    if missing or extra:
        raise SourceShapeError(
            f"{path.name}: missing columns {sorted(missing)}, unexpected columns {sorted(extra)}. "
            f"Required: {columns}"
        )

    df = df[columns].copy()
    counts = [c for c in columns if c not in TEXT_COLUMNS]
    for c in counts:
        df[c] = pd.to_numeric(df[c], errors="raise").astype("int64")

    # ids and bed counts are all non-negative
    negative = df.loc[(df[counts] < 0).any(axis=1)]
    if not negative.empty:
        raise SourceShapeError(
            f"{path.name}: negative values in {len(negative)} row(s). Example:\n{negative.head()}"
        )
    return df


def load_sources(con: sqlite3.Connection, data_dir: Path) -> dict[str, pd.DataFrame]:
    """Read every source and replace the matching table's contents with it."""
    frames = {}
    for name, filename in SOURCE_FILES.items():
        df = read_source(Path(data_dir) / filename, SOURCE_COLUMNS[name])
        store.ensure_table(con, name)
        store.load(con, name, df, overwrite=True)
        frames[name] = df
    logger.info(
        "Loaded sources: %s",
        ", ".join(f"{n}={len(f)}" for n, f in frames.items()),
    )
    return frames

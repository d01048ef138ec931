# store.py
# SQLite store: table definitions, create-if-missing, and full-overwrite loads.

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import pandas as pd

logger = logging.getLogger(__name__)

# ---------- DDL ----------
# bed_fact_table and business_table keys are logical only; duplicates must
# load so integrity.check_unique can report them.
TABLE_DDL = {
    "bed_type_table": """
        CREATE TABLE bed_type_table (
            bed_id INTEGER PRIMARY KEY,
            bed_code TEXT,
            bed_desc TEXT
        )
    """,
    "bed_fact_table": """
        CREATE TABLE bed_fact_table (
            ims_org_id TEXT NOT NULL,
            bed_id INTEGER NOT NULL,
            license_beds INTEGER,
            census_beds INTEGER,
            staffed_beds INTEGER
        )
    """,
    "business_table": """
        CREATE TABLE business_table (
            ims_org_id TEXT NOT NULL,
            business_name TEXT,
            ttl_license_beds INTEGER,
            ttl_census_beds INTEGER,
            ttl_staffed_beds INTEGER,
            bed_cluster_id INTEGER NOT NULL
        )
    """,
    "combined_table": """
        CREATE TABLE combined_table (
            ims_org_id TEXT NOT NULL,
            bed_id INTEGER NOT NULL,
            business_name TEXT,
            ttl_license_beds INTEGER,
            ttl_census_beds INTEGER,
            ttl_staffed_beds INTEGER,
            bed_cluster_id INTEGER,
            bed_code TEXT,
            bed_desc TEXT,
            bed_category TEXT NOT NULL CHECK (bed_category IN ('ICU', 'SICU', 'Other')),
            license_beds INTEGER,
            census_beds INTEGER,
            staffed_beds INTEGER
        )
    """,
    "source_fingerprint_table": """
        CREATE TABLE source_fingerprint_table (
            fingerprint TEXT NOT NULL,
            built_at TEXT DEFAULT (datetime('now'))
        )
    """,
}


def validate_table_name(name: str) -> None:
    if name not in TABLE_DDL:
        raise ValueError(f"Unknown table {name!r}. Known: {sorted(TABLE_DDL)}")


# ---------- Connection ----------
@contextmanager
def open_store(db_path) -> Iterator[sqlite3.Connection]:
    """Open the store for one run; always commits and closes on exit."""
    target = db_path.as_posix() if isinstance(db_path, Path) else str(db_path)
    con = sqlite3.connect(target)
    logger.debug("Opened store %s", target)
    try:
        yield con
    finally:
        con.commit()
        con.close()


# ---------- Tables ----------
def table_exists(con: sqlite3.Connection, name: str) -> bool:
    row = con.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
    ).fetchone()
    return row is not None


def ensure_table(con: sqlite3.Connection, name: str, ddl: Optional[str] = None) -> bool:
    """
    Create `name` if and only if no table of that name exists.

    Existence is a name lookup; an existing table is reused as-is even if its
    columns differ from `ddl`. Returns True when the table was created.
    """
    if table_exists(con, name):
        return False
    if ddl is None:
        validate_table_name(name)
        ddl = TABLE_DDL[name]
    con.execute(ddl)
    con.commit()
    logger.info("Created table %s", name)
    return True


def drop_table(con: sqlite3.Connection, name: str) -> None:
    validate_table_name(name)
    con.execute(f"DROP TABLE IF EXISTS {name}")
    con.commit()


def load(con: sqlite3.Connection, name: str, frame: pd.DataFrame, overwrite: bool = True) -> int:
    """Write every row of `frame` into `name`, replacing prior rows when `overwrite`."""
    validate_table_name(name)
    ensure_table(con, name)
    if overwrite:
        con.execute(f"DELETE FROM {name}")
    frame.to_sql(name, con, if_exists="append", index=False)
    con.commit()
    logger.info("Loaded %d rows into %s", len(frame), name)
    return len(frame)


def read_table(con: sqlite3.Connection, name: str) -> pd.DataFrame:
    validate_table_name(name)
    return pd.read_sql(f"SELECT * FROM {name} ORDER BY rowid", con)


def row_counts(con: sqlite3.Connection) -> dict:
    counts = {}
    for name in TABLE_DDL:
        if not table_exists(con, name):
            continue
        counts[name] = int(pd.read_sql(f"SELECT COUNT(*) AS n FROM {name}", con)["n"][0])
    return counts

# combiner.py
# Materialize combined_table: business x bed facts x bed types, one row per joined fact.

from __future__ import annotations

import hashlib
import logging
import sqlite3

import pandas as pd

from . import store
from .config import ICU_BED_ID, SICU_BED_ID

logger = logging.getLogger(__name__)

SOURCE_TABLES = ("bed_type_table", "bed_fact_table", "business_table")

COMBINED_COLUMNS = [
    "ims_org_id",
    "bed_id",
    "business_name",
    "ttl_license_beds",
    "ttl_census_beds",
    "ttl_staffed_beds",
    "bed_cluster_id",
    "bed_code",
    "bed_desc",
    "bed_category",
    "license_beds",
    "census_beds",
    "staffed_beds",
]

# Inner joins: facts without a business or bed type row are dropped.
# bed_category is resolved here once; reports never look at bed_id or bed_desc.
COMBINE_SQL = f"""
INSERT INTO combined_table ({", ".join(COMBINED_COLUMNS)})
SELECT
    b.ims_org_id,
    f.bed_id,
    b.business_name,
    b.ttl_license_beds,
    b.ttl_census_beds,
    b.ttl_staffed_beds,
    b.bed_cluster_id,
    t.bed_code,
    t.bed_desc,
    CASE
        WHEN f.bed_id = :icu THEN 'ICU'
        WHEN f.bed_id = :sicu THEN 'SICU'
        ELSE 'Other'
    END,
    f.license_beds,
    f.census_beds,
    f.staffed_beds
FROM business_table AS b
JOIN bed_fact_table AS f ON f.ims_org_id = b.ims_org_id
JOIN bed_type_table AS t ON t.bed_id = f.bed_id
ORDER BY f.rowid, b.rowid
"""


def source_fingerprint(con: sqlite3.Connection) -> str:
    """md5 over the current contents of the three source tables."""
    digest = hashlib.md5()
    for name in SOURCE_TABLES:
        digest.update(name.encode("utf-8"))
        if not store.table_exists(con, name):
            continue
        df = store.read_table(con, name)
        digest.update(pd.util.hash_pandas_object(df, index=False).values.tobytes())
    return digest.hexdigest()


def _recorded_fingerprint(con: sqlite3.Connection):
    if not store.table_exists(con, "source_fingerprint_table"):
        return None
    row = con.execute(
        "SELECT fingerprint FROM source_fingerprint_table ORDER BY rowid DESC LIMIT 1"
    ).fetchone()
    return row[0] if row else None


def _materialize(con: sqlite3.Connection) -> int:
    store.ensure_table(con, "combined_table")
    cur = con.execute(COMBINE_SQL, {"icu": ICU_BED_ID, "sicu": SICU_BED_ID})
    n = cur.rowcount

    store.ensure_table(con, "source_fingerprint_table")
    con.execute("DELETE FROM source_fingerprint_table")
    con.execute(
        "INSERT INTO source_fingerprint_table (fingerprint) VALUES (?)",
        (source_fingerprint(con),),
    )
    con.commit()
    logger.info("Built combined_table with %d rows", n)
    return n


def build_combined(con: sqlite3.Connection, *, check_sources: bool = False) -> str:
    """
    Build combined_table once.

    If the table already exists it is reused without looking at the source
    tables, so reloaded sources do not reach the reports until the table is
    dropped. With `check_sources=True` the stored source fingerprint is
    compared first and the table is rebuilt when the sources changed.

    Returns "built", "reused" or "rebuilt".
    """
    if not store.table_exists(con, "combined_table"):
        _materialize(con)
        return "built"

    if not check_sources:
        logger.info("combined_table exists; reusing it without checking sources")
        return "reused"

    if _recorded_fingerprint(con) == source_fingerprint(con):
        logger.info("combined_table is current")
        return "reused"

    logger.warning("Source tables changed since combined_table was built; rebuilding")
    store.drop_table(con, "combined_table")
    _materialize(con)
    return "rebuilt"

# pipeline.py
# One sequential batch run: load -> combine -> validate -> query -> reshape -> render.

from __future__ import annotations

import logging
import sys
from typing import Optional

import pandas as pd

from . import combiner, integrity, loader, queries, render, reshape
from .config import LOG_LEVEL, ReportPaths
from .store import open_store

logger = logging.getLogger(__name__)


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure basic logging to stdout."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_database(paths: Optional[ReportPaths] = None, *, check_sources: bool = True) -> str:
    """Load the CSVs and materialize combined_table. Returns the combiner status."""
    paths = paths or ReportPaths.default()
    with open_store(paths.db_path) as con:
        loader.load_sources(con, paths.data_dir)
        return combiner.build_combined(con, check_sources=check_sources)


def run_report(
    paths: Optional[ReportPaths] = None,
    *,
    check_sources: bool = False,
    write_charts: bool = True,
) -> dict[str, pd.DataFrame]:
    """
    Run every report and return the long-form tables by report name.

    Integrity findings are logged and do not stop the run. Any structural
    failure (missing file, bad header, SQL error) propagates.
    """
    paths = paths or ReportPaths.default()
    results = {}
    with open_store(paths.db_path) as con:
        loader.load_sources(con, paths.data_dir)
        status = combiner.build_combined(con, check_sources=check_sources)
        logger.info("combined_table: %s", status)

        checks = integrity.check_source_keys(con)
        checks.append(integrity.check_combined_key(con))
        if any(not c.is_unique for c in checks):
            logger.warning("Continuing with duplicate keys; totals may be inflated")
        integrity.check_bed_keying(con)

        for query in queries.REPORTS:
            wide = queries.run_query(con, query)
            long = reshape.reshape_report(query, wide)
            results[query.name] = long
            if write_charts:
                fig = render.bar_chart(query, long)
                render.write_figure(fig, paths.output_dir, f"figure_{query.figure}_{query.name}")
    return results

# make_report.py
# Batch run of the ICU/SICU bed reports. Charts land in reports/ as HTML.

from bed_report.config import ReportPaths
from bed_report.pipeline import run_report, setup_logging


def main():
    setup_logging()
    paths = ReportPaths.default()
    results = run_report(paths)
    for name, long in results.items():
        print(f"\n== {name} ({long['hospital_name'].nunique()} hospitals)")
        print(long.to_string(index=False))
    print(f"\nCharts written to {paths.output_dir}")


if __name__ == "__main__":
    main()

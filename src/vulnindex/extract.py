"""Download and load source tables.

Indicator tables and boundary files are published as plain files (CSV,
parquet, GeoJSON); these helpers fetch them into data/raw and read them back
keyed by unit id.
"""
import argparse
from pathlib import Path

import pandas as pd
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import DATA_DIR
from .tables import UNIT_ID


def ensure_dirs():
    (DATA_DIR / "raw").mkdir(parents=True, exist_ok=True)


def requests_session_with_retries(retries=5, backoff_factor=0.5, status_forcelist=(429, 500, 502, 503, 504)):
    session = requests.Session()
    retry = Retry(
        total=retries,
        read=retries,
        connect=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=["GET"]
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def download_file(url: str, dest: Path, session=None):
    """Fetch url into dest, retrying transient server errors."""
    session = session or requests_session_with_retries()
    resp = session.get(url, timeout=60)
    resp.raise_for_status()
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(resp.content)
    print("Saved", dest)
    return dest


def load_indicator_table(path, unit_id=UNIT_ID) -> pd.DataFrame:
    """Read a CSV or parquet indicator table, keeping unit ids as strings."""
    path = Path(path)
    if path.suffix == ".parquet":
        df = pd.read_parquet(path)
        if unit_id in df.columns:
            df[unit_id] = df[unit_id].astype(str)
    else:
        df = pd.read_csv(path, dtype={unit_id: str})
    if unit_id not in df.columns:
        raise KeyError(f"'{unit_id}' not in {path} (columns: {df.columns.tolist()})")
    return df


def main():
    parser = argparse.ArgumentParser(description="Download indicator and boundary files")
    parser.add_argument("--indicators-url", help="URL of the indicator CSV/parquet")
    parser.add_argument("--boundaries-url", help="URL of the unit boundary GeoJSON")
    parser.add_argument("--output", default=str(DATA_DIR / "raw"), help="raw data dir")
    args = parser.parse_args()
    ensure_dirs()
    out = Path(args.output)
    session = requests_session_with_retries()
    if args.indicators_url:
        suffix = ".parquet" if args.indicators_url.endswith(".parquet") else ".csv"
        download_file(args.indicators_url, out / f"indicators{suffix}", session)
    if args.boundaries_url:
        download_file(args.boundaries_url, out / "boundaries.geojson", session)


if __name__ == "__main__":
    main()

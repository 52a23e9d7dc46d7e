"""Turn a raw indicator file into the unit-keyed table the pipeline expects.

Rows with missing indicator values are reported and dropped; they are never
filled in.
"""
import argparse
from pathlib import Path

import pandas as pd

from .config import DATA_DIR
from .tables import UNIT_ID


def normalize_indicator_table(df: pd.DataFrame, id_column=UNIT_ID, columns=None) -> pd.DataFrame:
    """Rename the id column, keep `columns` (default: all) and coerce them to numbers."""
    if id_column not in df.columns:
        raise KeyError(f"id column '{id_column}' not found (columns: {df.columns.tolist()})")
    df = df.rename(columns={id_column: UNIT_ID})
    if columns is None:
        columns = [c for c in df.columns if c != UNIT_ID]
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"indicator columns not found: {missing}")
    out = df[[UNIT_ID] + list(columns)].copy()
    out[UNIT_ID] = out[UNIT_ID].astype(str).str.strip()
    for c in columns:
        out[c] = pd.to_numeric(out[c], errors="coerce")
    return out


def drop_incomplete_rows(df: pd.DataFrame) -> pd.DataFrame:
    incomplete = df.isna().any(axis=1)
    if incomplete.any():
        print(f"Dropping {int(incomplete.sum())} units with missing values:",
              df.loc[incomplete, UNIT_ID].tolist()[:20])
    return df.loc[~incomplete].reset_index(drop=True)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--input", default=str(DATA_DIR / "raw" / "indicators.csv"), help="raw indicator CSV")
    parser.add_argument("--output", default=str(DATA_DIR / "processed" / "indicators.parquet"))
    parser.add_argument("--id-column", default=UNIT_ID, help="name of the unit identifier in the raw file")
    parser.add_argument("--columns", nargs="*", help="indicator columns to keep (default: all)")
    args = parser.parse_args()
    df = pd.read_csv(args.input, dtype={args.id_column: str})
    df = drop_incomplete_rows(normalize_indicator_table(df, args.id_column, args.columns))
    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(out, index=False)
    print(f"Processed {len(df)} units to", out)


if __name__ == "__main__":
    main()

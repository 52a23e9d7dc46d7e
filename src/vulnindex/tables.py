"""Helpers for unit-keyed indicator tables."""
import pandas as pd

from .errors import DuplicateUnitError, IncompleteIndicatorError, MissingIndicatorError

UNIT_ID = "unit_id"


def ensure_unit_index(df: pd.DataFrame, unit_id: str = UNIT_ID) -> pd.DataFrame:
    """Return a copy of df indexed by string unit ids.

    Accepts a frame with a `unit_id` column or one already indexed by it.
    """
    if unit_id in df.columns:
        out = df.set_index(unit_id)
    elif df.index.name == unit_id:
        out = df.copy()
    else:
        raise MissingIndicatorError([unit_id], message=f"unit identifier column '{unit_id}' not found")
    out.index = out.index.astype(str)
    out.index.name = unit_id
    dupes = out.index[out.index.duplicated()].unique()
    if len(dupes):
        raise DuplicateUnitError(dupes.tolist())
    return out


def require_columns(df: pd.DataFrame, columns, domain=None) -> pd.DataFrame:
    """Select numeric indicator columns, failing on absent or incomplete data."""
    columns = list(columns)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise MissingIndicatorError(missing, domain)
    X = df[columns].apply(pd.to_numeric, errors="coerce").astype(float)
    incomplete = X.isna().any(axis=1)
    if incomplete.any():
        bad_cols = X.columns[X.isna().any()].tolist()
        raise IncompleteIndicatorError(bad_cols, X.index[incomplete].tolist(), domain)
    return X

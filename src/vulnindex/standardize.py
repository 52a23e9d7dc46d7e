"""Z-score standardization of indicator columns."""
import logging
from dataclasses import dataclass, field
from typing import Tuple

import pandas as pd

from .errors import DegenerateColumnError
from .tables import require_columns

logger = logging.getLogger(__name__)

DEGENERATE_POLICIES = ("zero", "raise")


@dataclass(frozen=True)
class StandardizedTable:
    """Standardized indicators plus the moments used to produce them."""
    values: pd.DataFrame
    means: pd.Series
    stds: pd.Series
    degenerate: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def columns(self):
        return list(self.values.columns)

    @property
    def active_columns(self):
        """Columns that carry variance (not flagged as degenerate)."""
        return [c for c in self.values.columns if c not in self.degenerate]


def standardize(table: pd.DataFrame, columns, domain=None, on_degenerate="zero") -> StandardizedTable:
    """Standardize `columns` of a unit-indexed table to mean 0 and sample std 1.

    The unit identifier is the index and is never standardized. A constant
    column cannot be scaled: with on_degenerate="zero" it is written as zeros
    and flagged in `StandardizedTable.degenerate`; with "raise" a
    DegenerateColumnError is raised.
    """
    if on_degenerate not in DEGENERATE_POLICIES:
        raise ValueError(f"on_degenerate must be one of {DEGENERATE_POLICIES}, got {on_degenerate!r}")
    X = require_columns(table, columns, domain)

    means = X.mean()
    stds = X.std(ddof=1)
    degenerate = []
    out = pd.DataFrame(index=X.index)
    for col in X.columns:
        sd = stds[col]
        if X[col].nunique() <= 1 or pd.isna(sd) or sd == 0:
            if on_degenerate == "raise":
                raise DegenerateColumnError(col, domain)
            logger.warning("degenerate column %r in domain %s: constant over %d units, set to 0",
                           col, domain, len(X))
            degenerate.append(col)
            out[col] = 0.0
        else:
            out[col] = (X[col] - means[col]) / sd
    return StandardizedTable(values=out, means=means, stds=stds, degenerate=tuple(degenerate))

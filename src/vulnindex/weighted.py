"""Min-max normalization and fixed-weight indices."""
import logging

import numpy as np
import pandas as pd

from .errors import DegenerateRangeError, InvalidWeightsError
from .tables import require_columns

logger = logging.getLogger(__name__)

WEIGHT_TOL = 1e-6
RANGE_POLICIES = ("raise", "zero", "keep")
# raw indicators have no common scale, so a constant one cannot be kept as is
INDICATOR_RANGE_POLICIES = ("raise", "zero")


def minmax_normalize(series: pd.Series, domain=None, on_degenerate="raise") -> pd.Series:
    """Rescale to [0, 1] with (x - min) / (max - min).

    A column with max == min cannot be rescaled: "raise" raises
    DegenerateRangeError, "zero" returns zeros and "keep" returns the values
    unchanged (for inputs already on a 0-1 scale, such as domain indices).
    """
    if on_degenerate not in RANGE_POLICIES:
        raise ValueError(f"on_degenerate must be one of {RANGE_POLICIES}, got {on_degenerate!r}")
    lo, hi = series.min(), series.max()
    if hi == lo or pd.isna(hi) or pd.isna(lo):
        if on_degenerate == "raise":
            raise DegenerateRangeError(series.name, lo, domain)
        logger.warning("degenerate range for %r in domain %s (%s)", series.name, domain, on_degenerate)
        if on_degenerate == "keep":
            return series.astype(float)
        return pd.Series(0.0, index=series.index, name=series.name)
    return (series - lo) / (hi - lo)


def validate_weights(weights, names=None, domain=None):
    """Check weights are non-negative and sum to 1; return them as floats.

    When `names` is given the weights must cover exactly those names.
    """
    if not weights:
        raise InvalidWeightsError("no weights given", domain)
    try:
        weights = {k: float(v) for k, v in weights.items()}
    except (TypeError, ValueError) as e:
        raise InvalidWeightsError(f"weights must be numeric: {e}", domain) from e
    if names is not None:
        names = set(names)
        unknown = sorted(set(weights) - names)
        absent = sorted(names - set(weights))
        if unknown or absent:
            raise InvalidWeightsError(f"weights do not match inputs (unknown: {unknown}, missing: {absent})", domain)
    negative = sorted(k for k, w in weights.items() if w < 0 or not np.isfinite(w))
    if negative:
        raise InvalidWeightsError(f"weights must be finite and non-negative: {negative}", domain)
    total = sum(weights.values())
    if abs(total - 1.0) > WEIGHT_TOL:
        raise InvalidWeightsError(f"weights must sum to 1, got {total:.6f}", domain)
    return weights


def weighted_sum_index(table: pd.DataFrame, weights, inverted=(), domain=None, on_degenerate="raise") -> pd.Series:
    """Weighted sum of min-max normalized indicators.

    Indicators listed in `inverted` are those where a higher raw value means
    less vulnerable; they contribute 1 - normalized so every term points the
    same way.
    """
    if on_degenerate not in INDICATOR_RANGE_POLICIES:
        raise ValueError(f"on_degenerate must be one of {INDICATOR_RANGE_POLICIES}, got {on_degenerate!r}")
    weights = validate_weights(weights, domain=domain)
    inverted = set(inverted)
    stray = sorted(inverted - set(weights))
    if stray:
        raise InvalidWeightsError(f"inverted indicators without a weight: {stray}", domain)

    X = require_columns(table, list(weights), domain)
    index = pd.Series(0.0, index=X.index, name=domain)
    for col, w in weights.items():
        term = minmax_normalize(X[col], domain=domain, on_degenerate=on_degenerate)
        # a zero-range column contributes 0 whatever its orientation
        if col in inverted and X[col].max() != X[col].min():
            term = 1 - term
        index = index + w * term
    return index.rename(domain)

"""Blend domain indices into a composite index."""
import logging

import pandas as pd

from .errors import UnitMismatchError
from .weighted import minmax_normalize, validate_weights

logger = logging.getLogger(__name__)

COMPOSITE_COLUMN = "composite_index"


def check_alignment(indices):
    """Raise UnitMismatchError unless every index covers the same units."""
    names = list(indices)
    if not names:
        return
    reference = set(indices[names[0]].index)
    for name in names[1:]:
        units = set(indices[name].index)
        if units != reference:
            raise UnitMismatchError(name, missing=reference - units, extra=units - reference)


def composite_index(indices, weights, name=COMPOSITE_COLUMN, on_degenerate="raise") -> pd.Series:
    """Min-max normalize each domain index and combine them with `weights`.

    `indices` maps domain names to unit-indexed series that already point in
    the "higher is more vulnerable" direction.
    """
    weights = validate_weights(weights, names=indices.keys())
    check_alignment(indices)

    units = next(iter(indices.values())).index
    out = pd.Series(0.0, index=units, name=name)
    for domain, w in weights.items():
        normalized = minmax_normalize(indices[domain].rename(domain), domain=domain, on_degenerate=on_degenerate)
        out = out + w * normalized.reindex(units)
    logger.info("composite %s over %d units from %s", name, len(out), list(weights))
    return out.rename(name)

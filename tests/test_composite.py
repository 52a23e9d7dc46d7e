import numpy as np
import pandas as pd
import pytest

from vulnindex.composite import composite_index
from vulnindex.errors import DegenerateRangeError, InvalidWeightsError, UnitMismatchError

UNITS = pd.Index(["u1", "u2"], name="unit_id")
WEIGHTS = {"flood": 0.5, "social": 0.4, "infra": 0.1}


def indices(**values):
    return {name: pd.Series(v, index=UNITS[:len(v)], name=name, dtype=float) for name, v in values.items()}


def test_worked_example_keeps_constant_index():
    out = composite_index(indices(flood=[0, 1], social=[1, 0], infra=[0.5, 0.5]), WEIGHTS, on_degenerate="keep")
    assert out.tolist() == pytest.approx([0.45, 0.55])
    assert out.name == "composite_index"


def test_constant_index_raises_by_default():
    with pytest.raises(DegenerateRangeError) as exc:
        composite_index(indices(flood=[0, 1], social=[1, 0], infra=[0.5, 0.5]), WEIGHTS)
    assert exc.value.domain == "infra"


def test_constant_index_as_zero():
    out = composite_index(indices(flood=[0, 1], social=[1, 0], infra=[0.5, 0.5]), WEIGHTS, on_degenerate="zero")
    assert out.tolist() == pytest.approx([0.4, 0.5])


def test_inputs_are_rescaled():
    out = composite_index(indices(flood=[-3.0, 5.0], social=[20.0, 10.0], infra=[0.1, 0.9]), WEIGHTS)
    assert out.tolist() == pytest.approx([0.4, 0.6])


def test_range_and_monotonicity():
    rng = np.random.RandomState(3)
    units = pd.Index([f"u{i}" for i in range(30)], name="unit_id")
    base = {name: pd.Series(rng.normal(size=30), index=units) for name in WEIGHTS}
    out = composite_index(base, WEIGHTS)
    assert out.between(0, 1).all()

    # raising one unit's flood score (without moving the extremes) cannot lower its composite
    flood = base["flood"].copy()
    u = flood.drop([flood.idxmax(), flood.idxmin()]).index[0]
    flood[u] = (flood[u] + flood.max()) / 2
    bumped = composite_index({**base, "flood": flood}, WEIGHTS)
    assert bumped[u] >= out[u]
    others = units.drop(u)
    np.testing.assert_allclose(bumped[others], out[others])


def test_units_must_align():
    idx = indices(flood=[0, 1], social=[1, 0])
    idx["infra"] = pd.Series([0.1, 0.2, 0.3], index=["u1", "u2", "u9"])
    with pytest.raises(UnitMismatchError) as exc:
        composite_index(idx, WEIGHTS)
    assert exc.value.extra == ["u9"]


def test_missing_unit():
    idx = indices(flood=[0, 1], social=[1, 0], infra=[0.3])
    with pytest.raises(UnitMismatchError) as exc:
        composite_index(idx, WEIGHTS)
    assert exc.value.missing == ["u2"]


def test_weights_must_match_domains():
    with pytest.raises(InvalidWeightsError):
        composite_index(indices(flood=[0, 1], social=[1, 0]), WEIGHTS)

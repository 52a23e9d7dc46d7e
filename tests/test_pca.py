import numpy as np
import pandas as pd
import pytest

from vulnindex.errors import MissingIndicatorError, SingularMatrixError
from vulnindex.pca import fit_pca
from vulnindex.standardize import standardize

from conftest import FLOOD, SOCIAL


@pytest.fixture
def flood_pca(indexed_units):
    return fit_pca(standardize(indexed_units, FLOOD), domain="flood")


def test_variance_shares(flood_pca):
    ratio = flood_pca.explained_variance_ratio
    assert flood_pca.n_components == len(FLOOD)
    assert (ratio >= 0).all()
    assert ratio.sum() == pytest.approx(1.0)
    assert (np.diff(ratio.to_numpy()) <= 1e-12).all()
    # one latent factor drives all five indicators
    assert ratio.iloc[0] > 0.8


def test_eigenvalues_sum_to_indicator_count(flood_pca):
    # trace of a correlation matrix
    assert flood_pca.explained_variance.sum() == pytest.approx(len(FLOOD))


def test_scores_are_projections(indexed_units):
    std = standardize(indexed_units, FLOOD)
    result = fit_pca(std)
    expected = std.values[FLOOD].to_numpy() @ result.loadings.to_numpy()
    np.testing.assert_allclose(result.scores.to_numpy(), expected, atol=1e-10)


def test_round_trip(indexed_units):
    std = standardize(indexed_units, SOCIAL)
    result = fit_pca(std)
    pd.testing.assert_frame_equal(result.reconstruct()[SOCIAL], std.values[SOCIAL], atol=1e-9, check_exact=False)


def test_loadings_are_orthonormal(flood_pca):
    L = flood_pca.loadings.to_numpy()
    np.testing.assert_allclose(L.T @ L, np.eye(L.shape[1]), atol=1e-10)


def test_deterministic(indexed_units):
    std = standardize(indexed_units, FLOOD)
    a, b = fit_pca(std), fit_pca(std)
    pd.testing.assert_frame_equal(a.loadings, b.loadings)
    pd.testing.assert_frame_equal(a.scores, b.scores)


def test_column_subset(indexed_units):
    std = standardize(indexed_units, FLOOD)
    result = fit_pca(std, ["floodplain_pct", "impervious_pct"])
    assert list(result.loadings.index) == ["floodplain_pct", "impervious_pct"]
    assert result.n_components == 2


def test_degenerate_column_gets_zero_loadings(indexed_units):
    df = indexed_units.assign(rainfall_p95_mm=3.0)
    std = standardize(df, FLOOD)
    result = fit_pca(std)
    assert result.n_components == len(FLOOD) - 1
    assert (result.loadings.loc["rainfall_p95_mm"] == 0).all()
    assert result.explained_variance_ratio.sum() == pytest.approx(1.0)
    np.testing.assert_allclose(result.reconstruct()[FLOOD].to_numpy(), std.values[FLOOD].to_numpy(), atol=1e-9)


def test_duplicate_columns_are_singular(indexed_units):
    df = indexed_units.assign(floodplain_copy=indexed_units["floodplain_pct"])
    std = standardize(df, FLOOD + ["floodplain_copy"])
    with pytest.raises(SingularMatrixError) as exc:
        fit_pca(std, domain="flood")
    assert exc.value.domain == "flood"


def test_too_few_units():
    df = pd.DataFrame({"a": [1.0, 2.0, 4.0], "b": [2.0, 1.0, 0.0], "c": [5.0, 3.0, 3.5]},
                      index=pd.Index(["u1", "u2", "u3"], name="unit_id"))
    with pytest.raises(SingularMatrixError):
        fit_pca(standardize(df, ["a", "b", "c"]))


def test_all_columns_degenerate():
    df = pd.DataFrame({"a": [1.0, 1.0, 1.0], "b": [2.0, 2.0, 2.0]},
                      index=pd.Index(["u1", "u2", "u3"], name="unit_id"))
    with pytest.raises(SingularMatrixError):
        fit_pca(standardize(df, ["a", "b"]))


def test_unknown_column(indexed_units):
    std = standardize(indexed_units, FLOOD)
    with pytest.raises(MissingIndicatorError):
        fit_pca(std, ["poverty_rate"])


def test_component_accessor(flood_pca):
    pd.testing.assert_series_equal(flood_pca.component(1), flood_pca.scores["PC1"])
    with pytest.raises(IndexError):
        flood_pca.component(len(FLOOD) + 1)

"""Principal component analysis of standardized indicator tables.

The engine decomposes the covariance matrix of a StandardizedTable (which is
the correlation matrix of the raw indicators) with scikit-learn's PCA and
returns component scores, loadings and the share of variance explained by each
component. It does not choose an orientation for the components: see
`vulnindex.orientation` for the sign policy.
"""
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA

from .errors import MissingIndicatorError, SingularMatrixError
from .standardize import StandardizedTable

logger = logging.getLogger(__name__)

# eigenvalues below RANK_TOL * largest eigenvalue count as zero
RANK_TOL = 1e-10


def component_name(k: int) -> str:
    return f"PC{k}"


@dataclass(frozen=True)
class PCAResult:
    """Scores (units x components), loadings (indicators x components) and variance shares."""
    scores: pd.DataFrame
    loadings: pd.DataFrame
    explained_variance: pd.Series
    explained_variance_ratio: pd.Series

    @property
    def n_components(self) -> int:
        return self.scores.shape[1]

    @property
    def components(self):
        return list(self.scores.columns)

    def component(self, k: int = 1) -> pd.Series:
        """Scores of the k-th component (1-based)."""
        if not 1 <= k <= self.n_components:
            raise IndexError(f"component {k} out of range 1..{self.n_components}")
        return self.scores[component_name(k)]

    def reconstruct(self) -> pd.DataFrame:
        """Rebuild the standardized matrix from all scores and loadings."""
        return self.scores.dot(self.loadings.T)

    def negate(self, k: int) -> "PCAResult":
        """Return a copy with the k-th component's scores and loadings flipped together."""
        name = component_name(k)
        if name not in self.scores.columns:
            raise IndexError(f"component {k} out of range 1..{self.n_components}")
        scores = self.scores.copy()
        loadings = self.loadings.copy()
        scores[name] = -scores[name]
        loadings[name] = -loadings[name]
        return PCAResult(scores, loadings, self.explained_variance, self.explained_variance_ratio)


def fit_pca(standardized: StandardizedTable, columns=None, domain=None) -> PCAResult:
    """Run a full PCA on the chosen standardized columns.

    Degenerate (constant) columns do not take part in the decomposition and
    get zero loadings on every component. Raises SingularMatrixError when the
    covariance matrix of the remaining columns is rank deficient.
    """
    if columns is None:
        columns = standardized.columns
    columns = list(columns)
    missing = [c for c in columns if c not in standardized.values.columns]
    if missing:
        raise MissingIndicatorError(missing, domain)

    active = [c for c in columns if c not in standardized.degenerate]
    n_units = len(standardized.values)
    if n_units < 2:
        raise SingularMatrixError(f"need at least two units, got {n_units}", domain)
    if not active:
        raise SingularMatrixError("no indicator with non-zero variance", domain)
    if len(active) > n_units - 1:
        raise SingularMatrixError(
            f"{len(active)} indicators cannot be decomposed from {n_units} units", domain)

    X = standardized.values[active].to_numpy(dtype=float)
    pca = PCA(n_components=len(active), svd_solver="full")
    try:
        pca.fit(X)
    except (np.linalg.LinAlgError, ValueError) as e:
        raise SingularMatrixError(str(e), domain) from e

    eigenvalues = pca.explained_variance_
    if not np.all(np.isfinite(eigenvalues)) or eigenvalues[0] <= 0:
        raise SingularMatrixError("decomposition produced no usable eigenvalues", domain)
    rank = int(np.sum(eigenvalues > RANK_TOL * eigenvalues[0]))
    if rank < len(active):
        raise SingularMatrixError(
            f"rank {rank} < {len(active)} indicators (duplicate or collinear columns in {active})",
            domain)

    names = [component_name(k + 1) for k in range(len(active))]
    loadings = pd.DataFrame(pca.components_.T, index=active, columns=names)
    loadings = loadings.reindex(columns, fill_value=0.0)
    scores = pd.DataFrame(X @ pca.components_.T, index=standardized.values.index, columns=names)
    explained = pd.Series(eigenvalues, index=names, name="explained_variance")
    ratio = pd.Series(eigenvalues / eigenvalues.sum(), index=names, name="explained_variance_ratio")

    logger.info("PCA %s: %d components, PC1 explains %.1f%%", domain or "", len(names), 100 * ratio.iloc[0])
    return PCAResult(scores=scores, loadings=loadings, explained_variance=explained,
                     explained_variance_ratio=ratio)

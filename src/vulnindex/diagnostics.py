"""Reports that support the analyst's manual decisions.

Nothing here changes an index: correlation pairs inform which variables to
drop, the variance table and elbow ratio inform the retention policy.
"""
import numpy as np
import pandas as pd

from .pca import PCAResult
from .tables import require_columns


def correlation_report(table: pd.DataFrame, columns, threshold=0.8) -> pd.DataFrame:
    """Indicator pairs whose absolute Pearson correlation is at least `threshold`."""
    X = require_columns(table, columns)
    corr = X.corr()
    rows = []
    cols = list(corr.columns)
    for i, a in enumerate(cols):
        for b in cols[i + 1:]:
            r = corr.loc[a, b]
            if pd.notna(r) and abs(r) >= threshold:
                rows.append({"indicator_a": a, "indicator_b": b, "r": float(r)})
    out = pd.DataFrame(rows, columns=["indicator_a", "indicator_b", "r"])
    if out.empty:
        return out
    return out.reindex(out["r"].abs().sort_values(ascending=False).index).reset_index(drop=True)


def variance_table(result: PCAResult) -> pd.DataFrame:
    out = pd.DataFrame({
        "eigenvalue": result.explained_variance,
        "share": result.explained_variance_ratio,
    })
    out["cumulative_share"] = out["share"].cumsum()
    return out


def elbow_ratio(result: PCAResult) -> float:
    """Variance share of PC1 over PC2 (inf if there is no PC2 or it is empty)."""
    shares = result.explained_variance_ratio
    if len(shares) < 2 or shares.iloc[1] <= 0:
        return float("inf")
    return float(shares.iloc[0] / shares.iloc[1])


def domain_report(domain_result) -> dict:
    """JSON-serializable summary of how a domain index was built."""
    report = {
        "domain": domain_result.name,
        "method": domain_result.method,
        "policy": repr(domain_result.policy),
        "index_min": float(domain_result.index.min()),
        "index_max": float(domain_result.index.max()),
    }
    if domain_result.standardized is not None:
        report["degenerate_columns"] = list(domain_result.standardized.degenerate)
    if domain_result.pca is not None:
        pca = domain_result.pca
        ratio = elbow_ratio(pca)
        report["explained_variance_ratio"] = [float(v) for v in pca.explained_variance_ratio]
        report["elbow_ratio"] = ratio if np.isfinite(ratio) else None
        report["loadings"] = {
            ind: {comp: float(v) for comp, v in row.items()}
            for ind, row in pca.loadings.iterrows()
        }
    return report

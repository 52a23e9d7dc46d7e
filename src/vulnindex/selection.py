"""Component retention policies.

Whether a domain index comes from PCA or from a fixed weighted sum is an
analyst decision made by inspecting the variance explained per component (a
clear elbow after PC1 suggests TopK(1), an even spread suggests Reject). The
decision is recorded in the pipeline config and passed in here explicitly; the
selector never picks a policy on its own.
"""
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .errors import RetentionPolicyError
from .pca import PCAResult


class RetentionPolicy:
    """Base class for retention decisions."""


@dataclass(frozen=True)
class TopK(RetentionPolicy):
    """Keep the first k components.

    With k == 1 the index is the first component's score. For k > 1 the
    scores are summed, weighted by their variance shares when `weighted`.
    """
    k: int = 1
    weighted: bool = False


@dataclass(frozen=True)
class Reject(RetentionPolicy):
    """PCA is not informative for this domain; use the weighted-sum builder."""


@dataclass(frozen=True)
class Selection:
    policy: RetentionPolicy
    index: Optional[pd.Series] = None

    @property
    def rejected(self) -> bool:
        return isinstance(self.policy, Reject)


def parse_policy(spec) -> RetentionPolicy:
    """Build a policy from a config mapping like {"policy": "top_k", "k": 1}."""
    if isinstance(spec, RetentionPolicy):
        return spec
    if isinstance(spec, str):
        spec = {"policy": spec}
    if not isinstance(spec, dict) or "policy" not in spec:
        raise RetentionPolicyError(f"retention must name a policy, got {spec!r}")
    kind = str(spec["policy"]).lower().replace("-", "_")
    if kind in ("top_k", "topk"):
        k = spec.get("k", 1)
        if not isinstance(k, int) or isinstance(k, bool) or k < 1:
            raise RetentionPolicyError(f"top_k needs a positive integer k, got {k!r}")
        return TopK(k=k, weighted=bool(spec.get("weighted", False)))
    if kind == "reject":
        return Reject()
    raise RetentionPolicyError(f"unknown retention policy {spec['policy']!r}")


def select_components(result: PCAResult, policy: RetentionPolicy, domain=None) -> Selection:
    """Apply a recorded retention policy to a PCA result."""
    if policy is None:
        raise RetentionPolicyError("no retention policy recorded", domain)
    if isinstance(policy, Reject):
        return Selection(policy)
    if not isinstance(policy, TopK):
        raise RetentionPolicyError(f"unsupported retention policy {policy!r}", domain)
    if not 1 <= policy.k <= result.n_components:
        raise RetentionPolicyError(
            f"cannot keep {policy.k} components, PCA produced {result.n_components}", domain)

    kept = result.scores.iloc[:, :policy.k]
    if policy.k == 1:
        index = kept.iloc[:, 0]
    elif policy.weighted:
        shares = result.explained_variance_ratio.iloc[:policy.k]
        index = kept.mul(shares / shares.sum(), axis=1).sum(axis=1)
    else:
        index = kept.sum(axis=1)
    return Selection(policy, index.rename(domain))

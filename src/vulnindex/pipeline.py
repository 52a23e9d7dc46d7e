"""Run every domain through standardization, PCA and selection, then blend.

Each domain is independent of the others, so domains can be computed in a
thread pool; the composite is only computed once all of them have finished.
Results are collected in a ResultsAccumulator rather than by mutating a shared
table.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .composite import COMPOSITE_COLUMN, composite_index
from .errors import InvalidWeightsError, RetentionPolicyError, SingularMatrixError, UnitMismatchError, VulnerabilityIndexError
from .orientation import orient_component
from .pca import PCAResult, fit_pca
from .selection import Reject, RetentionPolicy, Selection, TopK, select_components
from .standardize import StandardizedTable, standardize
from .tables import UNIT_ID, ensure_unit_index
from .weighted import weighted_sum_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainSpec:
    """Analyst decisions for one domain.

    `weights` and `inverted` are only used when the policy is Reject.
    `positive_indicators` are indicators expected to load positively on the
    retained component; the component is flipped when they do not.
    """
    name: str
    indicators: Tuple[str, ...]
    policy: RetentionPolicy
    weights: Optional[Dict[str, float]] = None
    inverted: Tuple[str, ...] = ()
    positive_indicators: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PipelineConfig:
    domains: Tuple[DomainSpec, ...]
    composite_weights: Dict[str, float]
    unit_id: str = UNIT_ID
    composite_column: str = COMPOSITE_COLUMN
    parallel: bool = False
    on_degenerate_indicator: str = "raise"
    on_degenerate_index: str = "raise"

    @property
    def domain_names(self):
        return [d.name for d in self.domains]


@dataclass(frozen=True)
class DomainResult:
    name: str
    index: pd.Series
    method: str
    policy: RetentionPolicy
    standardized: Optional[StandardizedTable] = None
    pca: Optional[PCAResult] = None


class ResultsAccumulator:
    """Collects domain results for one run, keyed by domain name."""

    def __init__(self, table: pd.DataFrame):
        self.table = table
        self.results: Dict[str, DomainResult] = {}
        self.composite: Optional[pd.Series] = None

    def add(self, result: DomainResult):
        if result.name in self.results:
            raise ValueError(f"domain {result.name!r} already recorded")
        units = set(self.table.index)
        got = set(result.index.index)
        if got != units:
            raise UnitMismatchError(result.name, missing=units - got, extra=got - units, domain=result.name)
        self.results[result.name] = result

    def set_composite(self, composite: pd.Series):
        self.composite = composite

    @property
    def indices(self) -> Dict[str, pd.Series]:
        return {name: r.index for name, r in self.results.items()}

    def to_frame(self) -> pd.DataFrame:
        """Input table with one column per domain index and the composite."""
        out = self.table.copy()
        for name, r in self.results.items():
            out[name] = r.index.reindex(out.index)
        if self.composite is not None:
            out[self.composite.name] = self.composite.reindex(out.index)
        return out


@dataclass(frozen=True)
class PipelineResult:
    table: pd.DataFrame
    domains: Dict[str, DomainResult] = field(default_factory=dict)
    composite: Optional[pd.Series] = None


def build_domain_index(table: pd.DataFrame, spec: DomainSpec, on_degenerate_indicator="raise") -> DomainResult:
    """Standardize, decompose and select (or fall back to a weighted sum) for one domain."""
    if spec.policy is None:
        raise RetentionPolicyError("no retention policy recorded", spec.name)
    try:
        std = standardize(table, spec.indicators, domain=spec.name)
        if isinstance(spec.policy, Reject):
            # PCA only feeds the diagnostics here
            try:
                result = fit_pca(std, spec.indicators, domain=spec.name)
            except SingularMatrixError as e:
                logger.warning("domain %s: no PCA diagnostics (%s)", spec.name, e.reason)
                result = None
            selection = Selection(spec.policy)
        else:
            result = fit_pca(std, spec.indicators, domain=spec.name)
            if isinstance(spec.policy, TopK) and spec.positive_indicators:
                for k in range(1, min(spec.policy.k, result.n_components) + 1):
                    result = orient_component(result, k, spec.positive_indicators, domain=spec.name)
            selection = select_components(result, spec.policy, domain=spec.name)

        if selection.rejected:
            if not spec.weights:
                raise RetentionPolicyError("PCA rejected but no weighted-sum weights recorded", spec.name)
            outside = sorted((set(spec.weights) | set(spec.inverted)) - set(spec.indicators))
            if outside:
                raise InvalidWeightsError(f"weighted-sum indicators outside the domain: {outside}", spec.name)
            logger.info("domain %s: PCA rejected, using weighted sum of %s", spec.name, list(spec.weights))
            index = weighted_sum_index(table, spec.weights, inverted=spec.inverted,
                                       domain=spec.name, on_degenerate=on_degenerate_indicator)
            method = "weighted_sum"
        else:
            logger.info("domain %s: index from %s", spec.name, spec.policy)
            index = selection.index
            method = "pca"
    except VulnerabilityIndexError as e:
        raise e.with_domain(spec.name)
    return DomainResult(name=spec.name, index=index.rename(spec.name), method=method,
                        policy=spec.policy, standardized=std, pca=result)


def _run_domains(table, config) -> List[DomainResult]:
    if config.parallel and len(config.domains) > 1:
        with ThreadPoolExecutor(max_workers=len(config.domains)) as pool:
            futures = [pool.submit(build_domain_index, table, spec, config.on_degenerate_indicator)
                       for spec in config.domains]
            return [f.result() for f in futures]
    return [build_domain_index(table, spec, config.on_degenerate_indicator) for spec in config.domains]


def run_pipeline(df: pd.DataFrame, config: PipelineConfig) -> PipelineResult:
    """Compute every domain index and the composite for a unit table."""
    names = config.domain_names
    if len(set(names)) != len(names):
        raise ValueError(f"duplicate domain names in config: {names}")
    table = ensure_unit_index(df, config.unit_id)
    logger.info("running %d domains over %d units", len(names), len(table))

    acc = ResultsAccumulator(table)
    for result in _run_domains(table, config):
        acc.add(result)
    acc.set_composite(composite_index(acc.indices, config.composite_weights,
                                      name=config.composite_column,
                                      on_degenerate=config.on_degenerate_index))
    return PipelineResult(table=acc.to_frame(), domains=dict(acc.results), composite=acc.composite)

"""Composite vulnerability indices from PCA and weighted-sum domain indices."""
from .composite import composite_index
from .errors import (
    DegenerateColumnError,
    DegenerateRangeError,
    MissingIndicatorError,
    SingularMatrixError,
    UnitMismatchError,
    VulnerabilityIndexError,
)
from .orientation import orient_component
from .pca import PCAResult, fit_pca
from .pipeline import DomainSpec, PipelineConfig, ResultsAccumulator, run_pipeline
from .selection import Reject, TopK, select_components
from .standardize import StandardizedTable, standardize
from .weighted import minmax_normalize, weighted_sum_index

__all__ = [
    "composite_index",
    "DegenerateColumnError",
    "DegenerateRangeError",
    "DomainSpec",
    "fit_pca",
    "minmax_normalize",
    "MissingIndicatorError",
    "orient_component",
    "PCAResult",
    "PipelineConfig",
    "Reject",
    "ResultsAccumulator",
    "run_pipeline",
    "select_components",
    "SingularMatrixError",
    "standardize",
    "StandardizedTable",
    "TopK",
    "UnitMismatchError",
    "VulnerabilityIndexError",
    "weighted_sum_index",
]

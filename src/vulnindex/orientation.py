"""Sign policy for PCA components.

PCA components have no natural orientation. An index built from a component
is only meaningful when higher scores mean "more vulnerable", so the analyst
names the indicators that should load positively and the component is flipped
(scores and loadings together) when they do not.
"""
import logging

from .errors import MissingIndicatorError
from .pca import PCAResult, component_name

logger = logging.getLogger(__name__)


def orient_component(result: PCAResult, component: int, positive_indicators, domain=None) -> PCAResult:
    """Flip `component` if `positive_indicators` load negatively on it overall."""
    positive_indicators = list(positive_indicators)
    if not positive_indicators:
        return result
    missing = [c for c in positive_indicators if c not in result.loadings.index]
    if missing:
        raise MissingIndicatorError(missing, domain)

    name = component_name(component)
    if name not in result.loadings.columns:
        raise IndexError(f"component {component} out of range 1..{result.n_components}")
    signal = result.loadings.loc[positive_indicators, name].sum()
    if signal < 0:
        logger.info("flipping %s for domain %s (loading sum on %s = %.3f)",
                    name, domain, positive_indicators, signal)
        return result.negate(component)
    return result

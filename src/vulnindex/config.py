"""Paths and pipeline settings.

The analyst's decisions (indicator subsets, retention policy, orientation,
fallback weights and composite weights) are recorded in a YAML file,
config/pipeline.yaml by default.
"""
from pathlib import Path

import yaml

from .composite import COMPOSITE_COLUMN
from .errors import ConfigError, VulnerabilityIndexError
from .pipeline import DomainSpec, PipelineConfig
from .selection import parse_policy
from .tables import UNIT_ID
from .weighted import INDICATOR_RANGE_POLICIES, RANGE_POLICIES

BASE_DIR = Path(__file__).resolve().parents[2]
DATA_DIR = BASE_DIR / "data"
DEFAULT_CONFIG = BASE_DIR / "config" / "pipeline.yaml"


def _as_tuple(value, what):
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"{what} must be a list, got {type(value).__name__}")
    return tuple(str(v) for v in value)


def domain_from_dict(name, spec) -> DomainSpec:
    if not isinstance(spec, dict):
        raise ConfigError(f"domain {name!r} must be a mapping")
    indicators = _as_tuple(spec.get("indicators"), f"{name}.indicators")
    if not indicators:
        raise ConfigError(f"domain {name!r} has no indicators")
    if "retention" not in spec:
        raise ConfigError(f"domain {name!r} has no recorded retention policy")
    try:
        policy = parse_policy(spec["retention"])
    except VulnerabilityIndexError as e:
        raise ConfigError(e.message, name) from e
    weights = spec.get("weights")
    if weights is not None and not isinstance(weights, dict):
        raise ConfigError(f"domain {name!r} weights must be a mapping")
    inverted = _as_tuple(spec.get("inverted"), f"{name}.inverted")
    outside = sorted((set(weights or ()) | set(inverted)) - set(indicators))
    if outside:
        raise ConfigError(f"weights/inverted name indicators outside the domain: {outside}", name)
    return DomainSpec(
        name=str(name),
        indicators=indicators,
        policy=policy,
        weights=weights,
        inverted=inverted,
        positive_indicators=_as_tuple(spec.get("positive_indicators"), f"{name}.positive_indicators"),
    )


def _range_policy(data, key, allowed):
    value = data.get(key, "raise")
    if value not in allowed:
        raise ConfigError(f"{key} must be one of {allowed}, got {value!r}")
    return value


def config_from_dict(data) -> PipelineConfig:
    """Build a PipelineConfig from the parsed YAML mapping."""
    if not isinstance(data, dict):
        raise ConfigError("pipeline config must be a mapping")
    domains = data.get("domains")
    if not isinstance(domains, dict) or not domains:
        raise ConfigError("config needs a non-empty 'domains' mapping")
    composite = data.get("composite") or {}
    if not isinstance(composite, dict):
        raise ConfigError("'composite' must be a mapping")
    weights = composite.get("weights")
    if not isinstance(weights, dict) or not weights:
        raise ConfigError("config needs 'composite.weights'")
    return PipelineConfig(
        domains=tuple(domain_from_dict(name, spec) for name, spec in domains.items()),
        composite_weights=weights,
        unit_id=str(data.get("unit_id", UNIT_ID)),
        composite_column=str(composite.get("column", COMPOSITE_COLUMN)),
        parallel=bool(data.get("parallel", False)),
        on_degenerate_indicator=_range_policy(data, "on_degenerate_indicator", INDICATOR_RANGE_POLICIES),
        on_degenerate_index=_range_policy(data, "on_degenerate_index", RANGE_POLICIES),
    )


def load_config(path=None) -> PipelineConfig:
    path = Path(path) if path else DEFAULT_CONFIG
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"could not parse {path}: {e}") from e
    return config_from_dict(data)

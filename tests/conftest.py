import numpy as np
import pandas as pd
import pytest

from vulnindex.pipeline import DomainSpec, PipelineConfig
from vulnindex.selection import Reject, TopK

FLOOD = ["elevation_m", "dist_to_river_m", "floodplain_pct", "impervious_pct", "rainfall_p95_mm"]
SOCIAL = ["poverty_rate", "pct_age65p", "pct_uninsured", "pct_disability", "pct_no_vehicle"]
INFRA = ["hospital_travel_min", "road_density_km_km2", "pct_no_broadband", "shelter_capacity_per_1k"]
INFRA_WEIGHTS = {
    "hospital_travel_min": 0.35,
    "road_density_km_km2": 0.25,
    "pct_no_broadband": 0.2,
    "shelter_capacity_per_1k": 0.2,
}


def make_units(n=40, seed=7):
    """Synthetic tracts: flood and social indicators driven by one latent factor each."""
    rng = np.random.RandomState(seed)
    flood = rng.normal(size=n)
    social = rng.normal(size=n)
    noise = lambda scale: rng.normal(scale=scale, size=n)  # noqa: E731
    return pd.DataFrame({
        "unit_id": [f"T{i:03d}" for i in range(n)],
        "elevation_m": 50 - 10 * flood + noise(2),
        "dist_to_river_m": 500 - 100 * flood + noise(30),
        "floodplain_pct": 30 + 10 * flood + noise(2),
        "impervious_pct": 40 + 8 * flood + noise(3),
        "rainfall_p95_mm": 80 + 5 * flood + noise(2),
        "poverty_rate": 0.2 + 0.05 * social + noise(0.01),
        "pct_age65p": 0.15 + 0.03 * social + noise(0.01),
        "pct_uninsured": 0.1 + 0.04 * social + noise(0.01),
        "pct_disability": 0.12 + 0.02 * social + noise(0.01),
        "pct_no_vehicle": 0.08 + 0.03 * social + noise(0.01),
        "hospital_travel_min": rng.uniform(5, 60, size=n),
        "road_density_km_km2": rng.uniform(1, 12, size=n),
        "pct_no_broadband": rng.uniform(0.02, 0.4, size=n),
        "shelter_capacity_per_1k": rng.uniform(0, 20, size=n),
    })


@pytest.fixture
def units():
    return make_units()


@pytest.fixture
def indexed_units(units):
    return units.set_index("unit_id")


@pytest.fixture
def pipeline_config():
    return PipelineConfig(
        domains=(
            DomainSpec("flood", tuple(FLOOD), TopK(1), positive_indicators=("floodplain_pct", "impervious_pct")),
            DomainSpec("social_health", tuple(SOCIAL), TopK(1), positive_indicators=("poverty_rate",)),
            DomainSpec("infrastructure", tuple(INFRA), Reject(), weights=dict(INFRA_WEIGHTS),
                       inverted=("road_density_km_km2", "shelter_capacity_per_1k")),
        ),
        composite_weights={"flood": 0.5, "social_health": 0.4, "infrastructure": 0.1},
    )

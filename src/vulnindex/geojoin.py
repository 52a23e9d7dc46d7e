"""Attach index results to unit boundaries in a GeoJSON file."""
import json
import math
from pathlib import Path

import pandas as pd

from .tables import UNIT_ID


def _to_json_value(value):
    if isinstance(value, float) and math.isnan(value):
        return None
    if hasattr(value, "item"):
        value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return None
    return value


def join_results(geojson: dict, results: pd.DataFrame, columns, key=UNIT_ID):
    """Copy `columns` from results (indexed by unit id) into matching feature properties.

    Returns (geojson, unmatched_units): features without results keep their
    properties untouched, units without a feature are listed.
    """
    results = results.copy()
    results.index = results.index.astype(str)
    matched = set()
    for feat in geojson.get("features", []):
        props = feat.setdefault("properties", {})
        unit = props.get(key)
        if unit is None or str(unit) not in results.index:
            continue
        unit = str(unit)
        matched.add(unit)
        for col in columns:
            props[col] = _to_json_value(results.at[unit, col])
    unmatched = sorted(set(results.index) - matched)
    return geojson, unmatched


def write_enriched_geojson(boundaries_path, results: pd.DataFrame, columns, out_path, key=UNIT_ID):
    with open(boundaries_path, "r", encoding="utf-8") as f:
        geojson = json.load(f)
    geojson, unmatched = join_results(geojson, results, columns, key)
    if unmatched:
        print(f"{len(unmatched)} units have no boundary feature:", unmatched[:10])
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(geojson, f)
    print("Wrote enriched GeoJSON:", out_path)
    return out_path

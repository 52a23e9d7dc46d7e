"""Compute domain vulnerability indices and the composite index.

Reads a unit-keyed indicator table, runs every domain recorded in the pipeline
config and writes the augmented table, per-domain diagnostics and optionally
an enriched GeoJSON for mapping.
"""
import argparse
import json
import logging
from pathlib import Path

from .config import DATA_DIR, DEFAULT_CONFIG, load_config
from .diagnostics import domain_report
from .errors import VulnerabilityIndexError
from .extract import load_indicator_table
from .geojoin import write_enriched_geojson
from .pipeline import run_pipeline


def write_outputs(result, config, output, diagnostics=None):
    out = Path(output)
    out.parent.mkdir(parents=True, exist_ok=True)
    result.table.reset_index().to_csv(out, index=False)
    print("Saved indices to", out)
    if diagnostics:
        report = {
            "composite_weights": config.composite_weights,
            "domains": [domain_report(r) for r in result.domains.values()],
        }
        diag = Path(diagnostics)
        diag.parent.mkdir(parents=True, exist_ok=True)
        with open(diag, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)
        print("Saved diagnostics to", diag)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--input", default=str(DATA_DIR / "processed" / "indicators.parquet"))
    parser.add_argument("--config", default=str(DEFAULT_CONFIG), help="pipeline YAML")
    parser.add_argument("--output", default=str(DATA_DIR / "indices" / "indices.csv"))
    parser.add_argument("--diagnostics", default=str(DATA_DIR / "indices" / "diagnostics.json"),
                        help="per-domain variance explained and loadings (empty to skip)")
    parser.add_argument("--boundaries", help="GeoJSON with a unit_id property per feature")
    parser.add_argument("--geojson-output", default=str(DATA_DIR / "indices" / "indices.geojson"))
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args.config)
        df = load_indicator_table(args.input, config.unit_id)
        result = run_pipeline(df, config)
    except (VulnerabilityIndexError, KeyError, OSError) as e:
        raise SystemExit(f"Index computation failed: {e}")

    write_outputs(result, config, args.output, args.diagnostics)
    if args.boundaries:
        columns = config.domain_names + [config.composite_column]
        write_enriched_geojson(args.boundaries, result.table, columns, args.geojson_output, key=config.unit_id)

    top = result.composite.sort_values(ascending=False).head(5)
    print("\nTop 5 units by", config.composite_column)
    for unit, score in top.items():
        print(f"- {unit}: {score:.3f}")
    return result


if __name__ == "__main__":
    main()

"""
Command Line Interface
======================

Usage:
    lvgrid calculate --input case.json --output result.json
    lvgrid optimize --input case.json --csv nodes.csv
    lvgrid montecarlo --input case.json --iterations 1000 --seed 7
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from loguru import logger
from pydantic import ValidationError

from .catalogs import CatalogBundle, catalogs_from_mapping, get_profile, load_catalogs
from .config import load_config
from .exceptions import LvgridError
from .optimization import size_conductors
from .powerflow import calculate
from .simulation import run_monte_carlo


def load_case(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Case file not found: {path}")
    data = json.loads(p.read_text(encoding="utf-8"))
    for key in ("nodes", "params"):
        if key not in data:
            raise ValueError(f"Missing required field: {key}")
    return data


def resolve_catalogs(case: Dict[str, Any], catalogs_path: str | None) -> CatalogBundle:
    """Defaults, then the catalog file, then whatever the case itself carries."""
    bundle = load_catalogs(catalogs_path)
    inline = {k: case[k] for k in ("cables", "ips", "lighting", "profiles", "tables") if k in case}
    if inline:
        override = catalogs_from_mapping(inline)
        if "cables" in inline:
            bundle.cables = override.cables
        if "ips" in inline or "lighting" in inline:
            bundle.lighting = override.lighting
        bundle.profiles.update(override.profiles)
        bundle.tables.update(override.tables)
    return bundle


def _write_json(path: str, payload: Dict[str, Any]) -> None:
    Path(path).write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def _print_warnings(warnings) -> None:
    if warnings:
        print("\nWarnings:", file=sys.stderr)
        for w in warnings:
            print(f"- {w}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Radial LV network engine: load flow, conductor sizing and Monte Carlo risk."
    )
    parser.add_argument("command", choices=["calculate", "optimize", "montecarlo"])
    parser.add_argument("--input", "-i", required=True, help="Case JSON with nodes, params and optional catalogs.")
    parser.add_argument("--catalogs", help="YAML/JSON catalog file (cables, lighting, profiles, tables).")
    parser.add_argument("--config", help="YAML/JSON engine configuration file.")
    parser.add_argument("--output", "-o", default="lvgrid_output.json", help="Path to write the JSON result.")
    parser.add_argument("--csv", help="Optional per-node CSV export (calculate/optimize).")
    parser.add_argument("--iterations", type=int, default=500, help="Monte Carlo trials.")
    parser.add_argument("--seed", type=int, default=None, help="Monte Carlo RNG seed.")
    parser.add_argument("--workers", type=int, default=1, help="Monte Carlo worker processes.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")

    args = parser.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "INFO")
    logger.enable("lvgrid")

    try:
        case = load_case(args.input)
        bundle = resolve_catalogs(case, args.catalogs)
        config = load_config(args.config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2

    scenario_id = str(case.get("scenario_id", Path(args.input).stem))
    common = dict(config=config, standards=bundle.tables)

    try:
        if args.command == "calculate":
            result = calculate(
                scenario_id, case["nodes"], case["params"], bundle.cables, bundle.lighting,
                profiles=bundle.profiles, **common,
            )
            _write_json(args.output, result.to_dict())
            if args.csv:
                result.to_frame().to_csv(args.csv, index=False)

            limit = get_profile(case["params"].get("profile", ""), bundle.profiles).cqt_max
            k = result.kpis
            print(f"Total load: {k.total_load:.2f} kVA ({k.trafo_occupation:.1f}% of transformer)")
            print(f"Max voltage drop: {k.max_cqt:.2f}% (limit {limit:.1f}%)")
            print(f"Losses: {k.total_losses_w:.0f} W, {result.sustainability.annual_energy_loss_kwh:.0f} kWh/year")
            if result.gd_impact.total_installed_kva > 0:
                g = result.gd_impact
                print(f"Solar: {g.total_installed_kva:.1f} kVA, max rise {g.max_voltage_rise:.2f}%, "
                      f"reverse flow {'yes' if g.has_reverse_flow else 'no'}")
            _print_warnings(result.warnings)
            return 0 if result.validation.ok and not result.warnings and k.max_cqt <= limit else 1

        if args.command == "optimize":
            report = size_conductors(
                scenario_id, case["nodes"], case["params"], bundle.cables, bundle.lighting,
                profiles=bundle.profiles, **common,
            )
            payload = {
                "scenario_id": scenario_id,
                "nodes": [p.model_dump() for p in report.nodes],
                "iterations": report.iterations,
                "converged": report.converged,
                "upgrades": [
                    {"iteration": u.iteration, "node_id": u.node_id, "from": u.from_cable,
                     "to": u.to_cable, "reasons": list(u.reasons)}
                    for u in report.upgrades
                ],
                "violations": report.violations,
            }
            _write_json(args.output, payload)
            if args.csv:
                final = calculate(
                    scenario_id, report.nodes, case["params"], bundle.cables, bundle.lighting, **common
                )
                final.to_frame().to_csv(args.csv, index=False)

            print(f"Upgrades: {len(report.upgrades)} in {report.iterations} passes")
            if report.violations:
                print("\nStill violating:", file=sys.stderr)
                for node_id, reasons in report.violations.items():
                    print(f"- {node_id}: {', '.join(reasons)}", file=sys.stderr)
            return 0 if not report.violations else 1

        mc = run_monte_carlo(
            case["nodes"], case["params"], bundle.cables, bundle.lighting, args.iterations,
            profiles=bundle.profiles, seed=args.seed, workers=args.workers, **common,
        )
        result = calculate(
            scenario_id, case["nodes"], case["params"], bundle.cables, bundle.lighting,
            profiles=bundle.profiles, **common,
        )
        result.stochastic = mc
        _write_json(args.output, result.to_dict())
        print(f"Stability index: {mc.stability_index:.1f}% (failure risk {mc.failure_risk:.1f}%)")
        print(f"Max drop: mean {mc.avg_max_cqt:.2f}%, p95 {mc.p95_cqt:.2f}% (limit {mc.cqt_limit:.1f}%)")
        return 0 if mc.failures == 0 else 1

    except ValidationError as e:
        print("Input validation error:", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2
    except LvgridError as e:
        print(f"Engine error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())

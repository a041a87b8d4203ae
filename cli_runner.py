#!/usr/bin/env python
"""
CLI runner for headspace pCO2 tools.

Runs the headspace calculation without the MCP server, for scripted use and
for processing sample tables:

    python cli_runner.py sample --before 0 --after 80 --temp-insitu 20 \\
        --temp-equil 25 --alkalinity 1050 --volume-gas 30 --volume-water 30
    python cli_runner.py table samples.csv --output results.csv

Results are printed to stdout as JSON; logs go to stderr.
"""

import sys
import json
import argparse
import logging
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from tools.headspace_calculation import solve_batch, solve_sample, summarize_results
from utils.exceptions import HeadspaceError
from utils.headspace_defaults import DEFAULT_IMAG_TOL, STANDARD_PRESSURE_KPA
from utils.sample_table import read_sample_table, write_result_table

logger = logging.getLogger("headspace-cli")


def run_sample(args) -> dict:
    """Solve one sample from command-line values."""
    result = solve_sample(
        {
            "sample_id": args.sample_id,
            "pco2_before_ppmv": args.before,
            "pco2_after_ppmv": args.after,
            "temp_insitu_c": args.temp_insitu,
            "temp_equil_c": args.temp_equil,
            "alkalinity_ueq_l": args.alkalinity,
            "volume_gas_ml": args.volume_gas,
            "volume_water_ml": args.volume_water,
            "bar_pressure_kpa": args.pressure,
            "constants": args.constants,
            "salinity_psu": args.salinity,
        },
        imag_tol=args.imag_tol
    )
    return {"status": "success", "result": result.model_dump()}


def run_table(args) -> dict:
    """Solve every row of a CSV table."""
    records = read_sample_table(args.input)
    results = solve_batch(
        records,
        max_workers=args.workers,
        fail_fast=args.fail_fast,
        imag_tol=args.imag_tol
    )

    output = None
    if args.output:
        output = str(write_result_table(results, args.output))

    return {
        "status": "success",
        "summary": summarize_results(results).model_dump(),
        "results": [r.model_dump() for r in results],
        "output": output,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Headspace pCO2 calculator")
    parser.add_argument("--imag-tol", type=float, default=DEFAULT_IMAG_TOL,
                        help="Relative tolerance on polynomial root imaginary parts")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    sample = subparsers.add_parser("sample", help="Solve a single sample")
    sample.add_argument("--sample-id", default="")
    sample.add_argument("--before", type=float, required=True, help="Headspace pCO2 before equilibration, ppmv")
    sample.add_argument("--after", type=float, required=True, help="Headspace pCO2 after equilibration, ppmv")
    sample.add_argument("--temp-insitu", type=float, required=True, help="In-situ temperature, °C")
    sample.add_argument("--temp-equil", type=float, required=True, help="Equilibration temperature, °C")
    sample.add_argument("--alkalinity", type=float, required=True, help="Total alkalinity, µeq/L")
    sample.add_argument("--volume-gas", type=float, required=True, help="Headspace gas volume, mL")
    sample.add_argument("--volume-water", type=float, required=True, help="Water volume, mL")
    sample.add_argument("--pressure", type=float, default=STANDARD_PRESSURE_KPA, help="Barometric pressure, kPa")
    sample.add_argument("--constants", default="freshwater", help="freshwater | estuarine | marine (or 1/2/3)")
    sample.add_argument("--salinity", type=float, default=0.0, help="Salinity, PSU")
    sample.set_defaults(func=run_sample)

    table = subparsers.add_parser("table", help="Solve a CSV table of samples")
    table.add_argument("input", help="Input CSV path")
    table.add_argument("--output", "-o", help="Output CSV path")
    table.add_argument("--workers", type=int, default=None, help="Worker threads")
    table.add_argument("--fail-fast", action="store_true", help="Stop at the first failed sample")
    table.set_defaults(func=run_table)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )

    try:
        payload = args.func(args)
        exit_code = 0
    except (HeadspaceError, OSError) as e:
        logger.error(f"Headspace calculation failed: {e}")
        payload = {"status": "error", "error_type": type(e).__name__, "error": str(e)}
        exit_code = 1

    print(json.dumps(payload, indent=2))
    return exit_code


if __name__ == "__main__":
    sys.exit(main())

"""Sweep bandwidth, transmit power and duplex mode, and export a CSV summary."""

from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from nrsim.config import ScenarioConfig, TrafficProfile
from nrsim.sweep import SWEEP_FIELDS, bandwidth_grid, power_grid, run_sweep


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run NR parameter sweeps")
    parser.add_argument("--frequency", type=float, default=3.5e9)
    parser.add_argument("--bandwidth-min", type=float, default=10e6)
    parser.add_argument("--bandwidth-max", type=float, default=100e6)
    parser.add_argument("--bandwidth-points", type=int, default=10)
    parser.add_argument("--power-min", type=float, default=10.0)
    parser.add_argument("--power-max", type=float, default=40.0)
    parser.add_argument("--power-step", type=float, default=10.0)
    parser.add_argument(
        "--backend",
        choices=["synthetic", "analytic"],
        default="analytic",
    )
    parser.add_argument(
        "--link-rate",
        type=float,
        default=100e6,
        help="Synthetic link rate in bps for --backend=synthetic",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("outputs/sweep_summary.csv"),
        help="CSV output path",
    )
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper())

    rows = run_sweep(
        ScenarioConfig(frequency_hz=args.frequency),
        bandwidth_grid(args.bandwidth_min, args.bandwidth_max, args.bandwidth_points),
        power_grid(args.power_min, args.power_max, args.power_step),
        backend=args.backend,
        profile=TrafficProfile(link_rate_bps=args.link_rate),
    )

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with args.output.open("w", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=SWEEP_FIELDS)
        writer.writeheader()
        writer.writerows(rows)
    print(f"Wrote {len(rows)} rows to {args.output}")


if __name__ == "__main__":
    main()

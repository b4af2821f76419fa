"""Plot throughput and latency against bandwidth from run_sweep.py output."""

from __future__ import annotations

import argparse
import csv
from collections import defaultdict
from pathlib import Path

import matplotlib.pyplot as plt


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plot NR sweep summaries")
    parser.add_argument(
        "--input",
        type=Path,
        default=Path("outputs/sweep_summary.csv"),
        help="Input CSV file",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("outputs/sweep_plot.png"),
        help="Output image path",
    )
    return parser.parse_args()


def read_rows(path: Path) -> list[dict]:
    with path.open("r", newline="") as handle:
        return list(csv.DictReader(handle))


def main() -> None:
    args = parse_args()
    rows = read_rows(args.input)
    if not rows:
        raise SystemExit("No rows found in input CSV.")

    series = defaultdict(list)
    for row in rows:
        key = (row["duplex_mode"], float(row["tx_power_dbm"]))
        series[key].append(
            (
                float(row["bandwidth_hz"]) / 1e6,
                float(row["throughput_bps"]) / 1e6,
                float(row["latency_s"]) * 1000,
            )
        )

    fig, (ax1, ax2) = plt.subplots(nrows=2, figsize=(9, 7), sharex=True)
    for (duplex_mode, power), points in sorted(series.items()):
        points.sort()
        xs = [p[0] for p in points]
        label = f"{duplex_mode} {power:g} dBm"
        ax1.plot(xs, [p[1] for p in points], marker="o", label=label)
        ax2.plot(xs, [p[2] for p in points], marker="o", label=label)

    ax1.set_ylabel("Throughput (Mbps)")
    ax1.set_title("Throughput and latency vs bandwidth")
    ax1.grid(True, linestyle="--", alpha=0.4)
    ax1.legend(fontsize=8)
    ax2.set_xlabel("Bandwidth (MHz)")
    ax2.set_ylabel("Latency (ms)")
    ax2.grid(True, linestyle="--", alpha=0.4)

    fig.tight_layout()
    args.output.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(args.output)


if __name__ == "__main__":
    main()

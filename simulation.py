"""Run one NR gNB/UE scenario and report throughput and latency.

Flow counters come from one of several backends: a synthetic CBR link, a
FlowMonitor XML/CSV dump, or the external ns-3 ``nr-simulation`` program.
When no packet was delivered the closed-form estimate is reported instead.
The result is written as a JSON document to ``--outputPath``.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from nrsim.config import ScenarioConfig, TrafficProfile
from nrsim.results import write_result_document
from nrsim.simulator import format_result, run_backend


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="NR scenario throughput/latency driver")
    parser.add_argument("--frequency", type=float, default=3.5e9, help="Carrier frequency in Hz")
    parser.add_argument("--bandwidth", type=float, default=20e6, help="System bandwidth in Hz")
    parser.add_argument(
        "--duplexMode",
        dest="duplex_mode",
        choices=["TDD", "FDD"],
        type=str.upper,
        default="TDD",
        help="Duplex mode",
    )
    parser.add_argument(
        "--transmitPower", dest="tx_power", type=float, default=20.0, help="Transmit power in dBm"
    )
    parser.add_argument(
        "--outputPath",
        dest="output_path",
        type=Path,
        default=Path("simulation_output.json"),
        help="Path for output JSON file",
    )
    parser.add_argument(
        "--backend",
        choices=["synthetic", "flowmon", "ns3", "analytic"],
        default="synthetic",
    )
    parser.add_argument(
        "--flows",
        type=Path,
        default=None,
        help="FlowMonitor XML or CSV file for --backend=flowmon",
    )
    parser.add_argument(
        "--ns3-dir",
        type=Path,
        default=None,
        help="ns-3 source tree for --backend=ns3 (default ~/ns-3.43)",
    )
    parser.add_argument("--sim-time", type=float, default=2.0, help="Stop time in seconds")
    parser.add_argument(
        "--sample-time",
        type=float,
        action="append",
        default=None,
        help="Intermediate sampling time in seconds (repeatable)",
    )
    parser.add_argument("--packet-size", type=int, default=1500)
    parser.add_argument("--interval", type=float, default=0.001, help="Packet interval in seconds")
    parser.add_argument(
        "--link-rate",
        type=float,
        default=100e6,
        help="Synthetic link rate in bps (0 disables delivery)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ScenarioConfig(
        frequency_hz=args.frequency,
        bandwidth_hz=args.bandwidth,
        duplex_mode=args.duplex_mode,
        tx_power_dbm=args.tx_power,
    )
    profile = TrafficProfile(
        packet_size_bytes=args.packet_size,
        interval_s=args.interval,
        sim_time_s=args.sim_time,
        sample_times_s=tuple(args.sample_time) if args.sample_time else (1.0,),
        link_rate_bps=args.link_rate,
    )

    result = run_backend(
        args.backend,
        config,
        profile,
        flows_path=args.flows,
        ns3_dir=args.ns3_dir,
        output_path=args.output_path,
    )
    write_result_document(result, args.output_path)
    print(format_result(result))
    print(f"Results written to {args.output_path}")


if __name__ == "__main__":
    main()

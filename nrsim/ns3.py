"""Invocation of the external ns-3 ``nr-simulation`` program."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Tuple

from .config import ScenarioConfig
from .metrics import AggregateMetrics
from .results import load_result_document

logger = logging.getLogger(__name__)

NS3_PROGRAM = "nr-simulation"


class Ns3Error(RuntimeError):
    """The ns-3 program could not be run or produced no result."""


def _format_number(value: float) -> str:
    return f"{value:g}"


def build_ns3_command(config: ScenarioConfig, output_path: Path) -> List[str]:
    program = " ".join(
        [
            NS3_PROGRAM,
            f"--frequency={_format_number(config.frequency_hz)}",
            f"--bandwidth={_format_number(config.bandwidth_hz)}",
            f"--duplexMode={config.duplex_mode}",
            f"--transmitPower={_format_number(config.tx_power_dbm)}",
            f"--outputPath={output_path}",
        ]
    )
    return ["./ns3", "run", program]


def ns3_available(ns3_dir: Path | None) -> bool:
    return ns3_dir is not None and (ns3_dir / "ns3").is_file()


def run_ns3_scenario(
    config: ScenarioConfig,
    ns3_dir: Path,
    output_path: Path,
    timeout_s: float = 600.0,
) -> Tuple[ScenarioConfig, AggregateMetrics]:
    if not ns3_available(ns3_dir):
        raise Ns3Error(f"ns-3 launcher not found in {ns3_dir}")

    output_path = output_path.resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if output_path.exists():
        output_path.unlink()

    command = build_ns3_command(config, output_path)
    logger.info("Running ns-3: %s", " ".join(command))
    try:
        completed = subprocess.run(
            command,
            cwd=ns3_dir,
            capture_output=True,
            text=True,
            timeout=timeout_s,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise Ns3Error(f"ns-3 timed out after {timeout_s:.0f}s") from exc
    except OSError as exc:
        raise Ns3Error(f"Failed to start ns-3: {exc}") from exc

    if completed.returncode != 0:
        tail = (completed.stderr or "").strip().splitlines()[-5:]
        raise Ns3Error(
            f"ns-3 exited with status {completed.returncode}: " + " | ".join(tail)
        )
    if not output_path.exists():
        raise Ns3Error(f"ns-3 produced no output at {output_path}")

    try:
        return load_result_document(output_path)
    except ValueError as exc:
        raise Ns3Error(str(exc)) from exc

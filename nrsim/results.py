from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from .config import ScenarioConfig
from .flows import FlowStatsRecord
from .metrics import AggregateMetrics
from .types import ResultDocument


@dataclass
class ScenarioResult:
    """Final metrics of a single scenario run."""

    config: ScenarioConfig
    metrics: AggregateMetrics
    backend: str = "synthetic"
    fallback_used: bool = False
    samples: int = 0
    flows: List[FlowStatsRecord] = field(default_factory=list)

    @property
    def throughput_mbps(self) -> float:
        return self.metrics.throughput_bps / 1_000_000

    @property
    def latency_ms(self) -> float:
        return self.metrics.mean_latency_s * 1000


def to_document(result: ScenarioResult) -> ResultDocument:
    config = result.config
    return {
        "frequency": config.frequency_hz,
        "bandwidth": config.bandwidth_hz,
        "duplexMode": config.duplex_mode,
        "transmitPower": config.tx_power_dbm,
        "results": {
            "throughput": result.metrics.throughput_bps,
            "latency": result.metrics.mean_latency_s,
        },
    }


def write_result_document(result: ScenarioResult, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(to_document(result), handle, indent=2)
        handle.write("\n")
    return path


def parse_result_document(data: ResultDocument) -> Tuple[ScenarioConfig, AggregateMetrics]:
    try:
        config = ScenarioConfig(
            frequency_hz=float(data["frequency"]),
            bandwidth_hz=float(data["bandwidth"]),
            duplex_mode=str(data["duplexMode"]),
            tx_power_dbm=float(data["transmitPower"]),
        )
        results = data["results"]
        metrics = AggregateMetrics(
            throughput_bps=float(results["throughput"]),
            mean_latency_s=float(results["latency"]),
        )
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Result document is missing field {exc}") from exc
    return config, metrics


def load_result_document(path: Path) -> Tuple[ScenarioConfig, AggregateMetrics]:
    if not path.exists():
        raise FileNotFoundError(f"Result document not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid result document {path}: {exc}") from exc
    return parse_result_document(data)

from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Iterable, Sequence

import numpy as np

from .config import DEFAULT_FALLBACK_POLICY, FallbackPolicy, ScenarioConfig, TrafficProfile
from .simulator import run_backend
from .types import SweepRows

SWEEP_FIELDS = (
    "frequency_hz",
    "bandwidth_hz",
    "duplex_mode",
    "tx_power_dbm",
    "throughput_bps",
    "latency_s",
    "fallback_used",
)


def bandwidth_grid(start_hz: float, stop_hz: float, points: int) -> np.ndarray:
    if points < 1:
        raise ValueError("points must be positive")
    if start_hz <= 0 or stop_hz < start_hz:
        raise ValueError("bandwidth range must be positive and increasing")
    return np.linspace(start_hz, stop_hz, points)


def power_grid(start_dbm: float, stop_dbm: float, step_db: float) -> np.ndarray:
    if step_db <= 0:
        raise ValueError("step_db must be positive")
    if stop_dbm < start_dbm:
        raise ValueError("power range must be increasing")
    return np.arange(start_dbm, stop_dbm + step_db / 2, step_db)


def run_sweep(
    base: ScenarioConfig,
    bandwidths_hz: Iterable[float],
    powers_dbm: Iterable[float],
    duplex_modes: Sequence[str] = ("TDD", "FDD"),
    backend: str = "analytic",
    profile: TrafficProfile = TrafficProfile(),
    policy: FallbackPolicy = DEFAULT_FALLBACK_POLICY,
) -> SweepRows:
    rows: SweepRows = []
    for duplex_mode, bandwidth, power in itertools.product(
        duplex_modes, list(bandwidths_hz), list(powers_dbm)
    ):
        config = replace(
            base,
            duplex_mode=duplex_mode,
            bandwidth_hz=float(bandwidth),
            tx_power_dbm=float(power),
        )
        result = run_backend(backend, config, profile, policy=policy)
        rows.append(
            {
                "frequency_hz": config.frequency_hz,
                "bandwidth_hz": config.bandwidth_hz,
                "duplex_mode": config.duplex_mode,
                "tx_power_dbm": config.tx_power_dbm,
                "throughput_bps": result.metrics.throughput_bps,
                "latency_s": result.metrics.mean_latency_s,
                "fallback_used": result.fallback_used,
            }
        )
    return rows

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Protocol

from .config import DEFAULT_FALLBACK_POLICY, FallbackPolicy, ScenarioConfig, TrafficProfile
from .enums import Backend
from .flows import FlowStatsRecord, StaticFlowSource, load_flows, total_rx_bytes
from .metrics import AggregateMetrics, aggregate_flows, estimate_if_needed, needs_fallback
from .ns3 import Ns3Error, run_ns3_scenario
from .results import ScenarioResult
from .traffic import SyntheticFlowMonitor

logger = logging.getLogger(__name__)


class FlowSource(Protocol):
    def snapshot(self, now_s: float) -> List[FlowStatsRecord]:
        ...


def sampling_schedule(profile: TrafficProfile) -> List[float]:
    """Periodic sample points strictly before the stop time, then the stop time."""

    times = sorted(t for t in set(profile.sample_times_s) if t < profile.sim_time_s)
    times.append(profile.sim_time_s)
    return times


def run_scenario(
    config: ScenarioConfig,
    source: FlowSource,
    profile: TrafficProfile = TrafficProfile(),
    backend: str = Backend.SYNTHETIC.value,
    policy: FallbackPolicy = DEFAULT_FALLBACK_POLICY,
) -> ScenarioResult:
    logger.info(
        "NR scenario: frequency=%g Hz bandwidth=%g Hz duplex=%s tx_power=%g dBm",
        config.frequency_hz,
        config.bandwidth_hz,
        config.duplex_mode,
        config.tx_power_dbm,
    )

    metrics = AggregateMetrics()
    flows: List[FlowStatsRecord] = []
    schedule = sampling_schedule(profile)
    for now in schedule:
        flows = source.snapshot(now)
        metrics = aggregate_flows(flows, metrics)
        logger.debug(
            "t=%.3fs flows=%d rx_bytes=%d throughput=%.1f bps latency=%.6f s",
            now,
            len(flows),
            total_rx_bytes(flows),
            metrics.throughput_bps,
            metrics.mean_latency_s,
        )

    fallback_used = needs_fallback(metrics)
    if fallback_used:
        logger.warning("No usable flow data after %.3fs; using analytic estimate", profile.sim_time_s)
    metrics = estimate_if_needed(metrics, config, policy)

    logger.info(
        "Throughput: %.1f bps, latency: %.6f s", metrics.throughput_bps, metrics.mean_latency_s
    )
    return ScenarioResult(
        config=config,
        metrics=metrics,
        backend=backend,
        fallback_used=fallback_used,
        samples=len(schedule),
        flows=flows,
    )


def run_analytic(
    config: ScenarioConfig, policy: FallbackPolicy = DEFAULT_FALLBACK_POLICY
) -> ScenarioResult:
    metrics = estimate_if_needed(AggregateMetrics(), config, policy)
    return ScenarioResult(
        config=config,
        metrics=metrics,
        backend=Backend.ANALYTIC.value,
        fallback_used=True,
    )


def run_backend(
    backend: str,
    config: ScenarioConfig,
    profile: TrafficProfile = TrafficProfile(),
    flows_path: Path | None = None,
    ns3_dir: Path | None = None,
    output_path: Path | None = None,
    policy: FallbackPolicy = DEFAULT_FALLBACK_POLICY,
) -> ScenarioResult:
    try:
        kind = Backend(backend)
    except ValueError:
        raise ValueError(
            "Backend must be 'synthetic', 'flowmon', 'ns3', or 'analytic'"
        ) from None

    if kind is Backend.SYNTHETIC:
        return run_scenario(config, SyntheticFlowMonitor(profile), profile, kind.value, policy)
    if kind is Backend.FLOWMON:
        if flows_path is None:
            raise ValueError("flowmon backend requires a flows file")
        source = StaticFlowSource(load_flows(flows_path))
        return run_scenario(config, source, profile, kind.value, policy)
    if kind is Backend.NS3:
        try:
            _, metrics = run_ns3_scenario(
                config,
                ns3_dir or Path.home() / "ns-3.43",
                output_path or Path("outputs/simulation_output.json"),
            )
        except Ns3Error as exc:
            logger.warning("ns-3 run failed (%s); using analytic estimate", exc)
            result = run_analytic(config, policy)
            result.backend = kind.value
            return result
        return ScenarioResult(
            config=config,
            metrics=metrics,
            backend=kind.value,
            samples=1,
        )
    return run_analytic(config, policy)


def format_result(result: ScenarioResult) -> str:
    config = result.config
    parts = [
        f"Backend: {result.backend}",
        f"Frequency: {config.frequency_hz / 1e9:.3f} GHz, "
        f"Bandwidth: {config.bandwidth_hz / 1e6:.1f} MHz, "
        f"Duplex: {config.duplex_mode}, TxPower: {config.tx_power_dbm:.1f} dBm",
        f"Throughput: {result.throughput_mbps:.3f} Mbps, Latency: {result.latency_ms:.3f} ms",
    ]
    if result.fallback_used:
        parts.append("Source: analytic estimate")
    elif result.flows:
        lost = sum(flow.lost_packets for flow in result.flows)
        parts.append(f"Flows: {len(result.flows)}, LostPackets: {lost}")
    return " | ".join(parts)

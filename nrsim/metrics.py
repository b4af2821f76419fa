"""System-level throughput and latency derived from per-flow counters.

``aggregate_flows`` reduces a flow-monitor snapshot into an
``AggregateMetrics`` value. It is called once per sampling point and once
more after the run stops. ``estimate_if_needed`` then replaces an empty
measurement (throughput <= 0) with a closed-form estimate built from the
scenario's radio parameters.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from .config import DEFAULT_FALLBACK_POLICY, FallbackPolicy, ScenarioConfig
from .enums import DuplexMode
from .flows import FlowStatsRecord

logger = logging.getLogger(__name__)

# Per-flow rates are summed in kbit/s and converted back to bit/s once at the
# end. Reported values depend on this order of operations.
_KILO = 1000


@dataclass(frozen=True)
class AggregateMetrics:
    throughput_bps: float = 0.0
    mean_latency_s: float = 0.0


def flow_throughput_kbps(record: FlowStatsRecord) -> float:
    """Received rate of one flow in kbit/s, or 0.0 when no time elapsed."""

    elapsed = record.elapsed
    if elapsed <= 0:
        return 0.0
    return record.rx_bytes * 8.0 / elapsed / _KILO


def kbps_to_bps(total_kbps: float) -> float:
    return total_kbps * _KILO


def flow_latency_s(record: FlowStatsRecord) -> float:
    return record.delay_sum / record.rx_packets


def aggregate_flows(
    records: Sequence[FlowStatsRecord], current: AggregateMetrics
) -> AggregateMetrics:
    """Recompute throughput from ``records`` and fold their latencies into ``current``.

    Throughput is rebuilt from the snapshot on every call. Latency is a
    running average: each flow that received packets updates it as
    ``(previous + flow_latency) / 2`` in iteration order, so the result
    depends on the order of ``records``.
    """

    total_kbps = 0.0
    latency = current.mean_latency_s
    for record in records:
        if record.rx_bytes <= 0:
            continue
        total_kbps += flow_throughput_kbps(record)
        if record.rx_packets > 0:
            latency = (latency + flow_latency_s(record)) / 2.0

    return AggregateMetrics(throughput_bps=kbps_to_bps(total_kbps), mean_latency_s=latency)


def estimate_snr_db(tx_power_dbm: float, policy: FallbackPolicy = DEFAULT_FALLBACK_POLICY) -> float:
    return policy.base_snr_db + (tx_power_dbm - policy.reference_power_dbm) / 2


def spectral_efficiency(snr_db: float) -> float:
    """Shannon capacity in bit/s/Hz for an SNR given in dB."""

    return math.log2(1 + 10 ** (snr_db / 10))


def estimate_throughput_bps(
    config: ScenarioConfig, policy: FallbackPolicy = DEFAULT_FALLBACK_POLICY
) -> float:
    efficiency = spectral_efficiency(estimate_snr_db(config.tx_power_dbm, policy))
    duplex_efficiency = (
        policy.tdd_efficiency if config.duplex is DuplexMode.TDD else policy.fdd_efficiency
    )
    mimo_factor = (
        policy.mimo_factor_low_band
        if config.frequency_hz < policy.mimo_threshold_hz
        else policy.mimo_factor_high_band
    )
    return (
        config.bandwidth_hz
        * efficiency
        * duplex_efficiency
        * mimo_factor
        * policy.overhead_factor
    )


def estimate_latency_s(
    config: ScenarioConfig, policy: FallbackPolicy = DEFAULT_FALLBACK_POLICY
) -> float:
    switching = policy.tdd_switch_latency_s if config.duplex is DuplexMode.TDD else 0.0
    return (
        policy.base_latency_s
        + switching
        + (policy.reference_bandwidth_hz / config.bandwidth_hz) * policy.bandwidth_latency_s
    )


def needs_fallback(metrics: AggregateMetrics) -> bool:
    return metrics.throughput_bps <= 0


def estimate_if_needed(
    metrics: AggregateMetrics,
    config: ScenarioConfig,
    policy: FallbackPolicy = DEFAULT_FALLBACK_POLICY,
) -> AggregateMetrics:
    """Return ``metrics`` as is, or the analytic estimate when no throughput was measured."""

    if not needs_fallback(metrics):
        return metrics
    estimate = AggregateMetrics(
        throughput_bps=estimate_throughput_bps(config, policy),
        mean_latency_s=estimate_latency_s(config, policy),
    )
    logger.debug(
        "Analytic estimate for %s: throughput=%.3f bps latency=%.6f s",
        config,
        estimate.throughput_bps,
        estimate.mean_latency_s,
    )
    return estimate

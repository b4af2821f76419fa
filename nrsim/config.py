from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from .enums import DuplexMode


@dataclass(frozen=True)
class ScenarioConfig:
    """Radio parameters of one gNB/UE scenario."""

    frequency_hz: float = 3.5e9
    bandwidth_hz: float = 20e6
    duplex_mode: str = "TDD"
    tx_power_dbm: float = 20.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.frequency_hz) or self.frequency_hz <= 0:
            raise ValueError("frequency_hz must be positive and finite")
        if not math.isfinite(self.bandwidth_hz) or self.bandwidth_hz <= 0:
            raise ValueError("bandwidth_hz must be positive and finite")
        if not math.isfinite(self.tx_power_dbm):
            raise ValueError("tx_power_dbm must be finite")
        mode = str(self.duplex_mode).upper()
        if mode not in {m.value for m in DuplexMode}:
            raise ValueError("duplex_mode must be 'TDD' or 'FDD'")
        object.__setattr__(self, "duplex_mode", mode)

    @property
    def duplex(self) -> DuplexMode:
        return DuplexMode(self.duplex_mode)


@dataclass(frozen=True)
class FallbackPolicy:
    """Constants of the closed-form throughput/latency model."""

    base_snr_db: float = 10.0
    reference_power_dbm: float = 20.0
    tdd_efficiency: float = 0.8
    fdd_efficiency: float = 0.95
    mimo_threshold_hz: float = 6e9
    mimo_factor_low_band: float = 4.0
    mimo_factor_high_band: float = 8.0
    overhead_factor: float = 0.85
    base_latency_s: float = 0.001
    tdd_switch_latency_s: float = 0.0005
    reference_bandwidth_hz: float = 100e6
    bandwidth_latency_s: float = 0.0005


DEFAULT_FALLBACK_POLICY = FallbackPolicy()


@dataclass(frozen=True)
class TrafficProfile:
    """Downlink UDP traffic and sampling schedule for one run."""

    packet_size_bytes: int = 1500
    interval_s: float = 0.001
    max_packets: int = 1_000_000
    start_time_s: float = 0.5
    sim_time_s: float = 2.0
    sample_times_s: Tuple[float, ...] = (1.0,)
    link_rate_bps: float = 100e6
    propagation_delay_s: float = 0.0005
    queue_limit_packets: int = 1000

    def __post_init__(self) -> None:
        if self.packet_size_bytes <= 0:
            raise ValueError("packet_size_bytes must be positive")
        if self.interval_s <= 0:
            raise ValueError("interval_s must be positive")
        if self.max_packets < 0:
            raise ValueError("max_packets must be non-negative")
        if self.sim_time_s <= 0:
            raise ValueError("sim_time_s must be positive")
        if not 0 <= self.start_time_s <= self.sim_time_s:
            raise ValueError("start_time_s must be between 0 and sim_time_s")
        if any(t < 0 for t in self.sample_times_s):
            raise ValueError("sample_times_s must be non-negative")
        if self.link_rate_bps < 0:
            raise ValueError("link_rate_bps must be non-negative")
        if self.propagation_delay_s < 0:
            raise ValueError("propagation_delay_s must be non-negative")
        if self.queue_limit_packets < 1:
            raise ValueError("queue_limit_packets must be at least 1")

    def serialization_time(self) -> float:
        """Seconds to put one packet on the link."""

        if self.link_rate_bps == 0:
            return float("inf")
        return self.packet_size_bytes * 8 / self.link_rate_bps

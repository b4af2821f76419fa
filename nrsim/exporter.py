"""Prometheus gauges and counters for completed scenario runs."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, generate_latest

from .enums import DuplexMode
from .results import ScenarioResult


class ScenarioMetrics:
    """Per-duplex-mode metrics of the last run, on a private registry."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        labels = ["duplex_mode"]
        self.simulations = Counter(
            "ran_simulation", "Total number of RAN simulations run", labels, registry=self.registry
        )
        self.throughput = Gauge(
            "ran_throughput_bps", "RAN throughput in bits per second", labels, registry=self.registry
        )
        self.latency = Gauge(
            "ran_latency_seconds", "RAN latency in seconds", labels, registry=self.registry
        )
        self.frequency = Gauge(
            "ran_frequency_hz", "RAN frequency in Hz", labels, registry=self.registry
        )
        self.bandwidth = Gauge(
            "ran_bandwidth_hz", "RAN bandwidth in Hz", labels, registry=self.registry
        )
        self.transmit_power = Gauge(
            "ran_transmit_power_dbm", "RAN transmit power in dBm", labels, registry=self.registry
        )
        self.throughput_mbps = Gauge(
            "ran_throughput_mbps", "Last RAN throughput in Mbps", registry=self.registry
        )
        self.latency_ms = Gauge(
            "ran_latency_ms", "Last RAN latency in milliseconds", registry=self.registry
        )
        for mode in DuplexMode:
            for metric in (
                self.simulations,
                self.throughput,
                self.latency,
                self.frequency,
                self.bandwidth,
                self.transmit_power,
            ):
                metric.labels(duplex_mode=mode.value)

    def record(self, result: ScenarioResult) -> None:
        config = result.config
        mode = config.duplex_mode
        self.simulations.labels(duplex_mode=mode).inc()
        self.throughput.labels(duplex_mode=mode).set(result.metrics.throughput_bps)
        self.latency.labels(duplex_mode=mode).set(result.metrics.mean_latency_s)
        self.frequency.labels(duplex_mode=mode).set(config.frequency_hz)
        self.bandwidth.labels(duplex_mode=mode).set(config.bandwidth_hz)
        self.transmit_power.labels(duplex_mode=mode).set(config.tx_power_dbm)
        self.throughput_mbps.set(result.throughput_mbps)
        self.latency_ms.set(result.latency_ms)

    def render(self) -> bytes:
        return generate_latest(self.registry)

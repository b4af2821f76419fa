"""Synthetic stand-in for the radio simulator's flow monitor.

A single constant-bit-rate downlink flow is pushed through a FIFO link with a
bounded queue. Packet timings are computed once; ``snapshot`` then reports
the counters a flow monitor would hold at any simulated time.
"""

from __future__ import annotations

import heapq
import logging
import math
from dataclasses import dataclass
from typing import List

from .config import TrafficProfile
from .flows import FlowStatsRecord
from .types import FlowId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PacketTrace:
    tx_time: float
    rx_time: float  # inf when dropped or never delivered


def generate_packet_trace(profile: TrafficProfile) -> List[PacketTrace]:
    serialization = profile.serialization_time()
    in_flight: List[float] = []  # departure times of queued packets
    last_departure = 0.0
    trace: List[PacketTrace] = []

    for k in range(profile.max_packets):
        tx_time = profile.start_time_s + k * profile.interval_s
        if tx_time >= profile.sim_time_s:
            break
        while in_flight and in_flight[0] <= tx_time:
            heapq.heappop(in_flight)
        if len(in_flight) >= profile.queue_limit_packets:
            trace.append(PacketTrace(tx_time, math.inf))
            continue
        departure = max(tx_time, last_departure) + serialization
        last_departure = departure
        heapq.heappush(in_flight, departure)
        trace.append(PacketTrace(tx_time, departure + profile.propagation_delay_s))

    logger.debug(
        "Generated %d packets, %d undeliverable",
        len(trace),
        sum(1 for packet in trace if not math.isfinite(packet.rx_time)),
    )
    return trace


class SyntheticFlowMonitor:
    """Flow counters for a synthetic CBR flow, sampled at any simulated time."""

    def __init__(self, profile: TrafficProfile, flow_id: FlowId = 1) -> None:
        self.profile = profile
        self.flow_id = flow_id
        self.trace = generate_packet_trace(profile)

    def snapshot(self, now_s: float) -> List[FlowStatsRecord]:
        sent = [packet for packet in self.trace if packet.tx_time <= now_s]
        if not sent:
            return []
        received = [packet for packet in sent if packet.rx_time <= now_s]
        dropped = sum(1 for packet in sent if not math.isfinite(packet.rx_time))
        size = self.profile.packet_size_bytes
        return [
            FlowStatsRecord(
                flow_id=self.flow_id,
                tx_bytes=len(sent) * size,
                tx_packets=len(sent),
                rx_bytes=len(received) * size,
                rx_packets=len(received),
                lost_packets=dropped,
                delay_sum=sum(packet.rx_time - packet.tx_time for packet in received),
                time_first_tx_packet=sent[0].tx_time,
                time_last_rx_packet=max((p.rx_time for p in received), default=0.0),
            )
        ]

import math

import pytest

from nrsim.config import TrafficProfile
from nrsim.metrics import AggregateMetrics, aggregate_flows
from nrsim.traffic import SyntheticFlowMonitor, generate_packet_trace


class TestPacketTrace:
    def test_uncongested_link_delivers_everything(self):
        profile = TrafficProfile(max_packets=100, link_rate_bps=100e6)
        trace = generate_packet_trace(profile)
        assert len(trace) == 100
        for packet in trace:
            assert packet.rx_time - packet.tx_time == pytest.approx(0.00012 + 0.0005)

    def test_stops_at_sim_time(self):
        profile = TrafficProfile(interval_s=0.25, start_time_s=0.5, sim_time_s=1.6)
        trace = generate_packet_trace(profile)
        assert [p.tx_time for p in trace] == [0.5, 0.75, 1.0, 1.25, 1.5]

    def test_congested_link_drops_packets(self):
        profile = TrafficProfile(
            max_packets=20,
            link_rate_bps=6e6,
            queue_limit_packets=5,
            sim_time_s=10.0,
        )
        trace = generate_packet_trace(profile)
        dropped = [p for p in trace if not math.isfinite(p.rx_time)]
        assert len(trace) == 20
        assert dropped

    def test_dead_link_delivers_nothing(self):
        profile = TrafficProfile(max_packets=50, link_rate_bps=0, queue_limit_packets=10)
        trace = generate_packet_trace(profile)
        assert all(not math.isfinite(p.rx_time) for p in trace)


class TestSyntheticFlowMonitor:
    def test_no_flows_before_start(self):
        monitor = SyntheticFlowMonitor(TrafficProfile(max_packets=10))
        assert monitor.snapshot(0.4) == []

    def test_final_snapshot_counters(self):
        monitor = SyntheticFlowMonitor(TrafficProfile(max_packets=100))
        (record,) = monitor.snapshot(2.0)
        assert record.tx_packets == 100
        assert record.rx_packets == 100
        assert record.rx_bytes == 150000
        assert record.lost_packets == 0
        assert record.time_first_tx_packet == 0.5
        assert record.delay_sum / record.rx_packets == pytest.approx(0.00062)

    def test_partial_snapshot(self):
        profile = TrafficProfile(interval_s=0.25, start_time_s=0.5, sim_time_s=2.0)
        (record,) = SyntheticFlowMonitor(profile).snapshot(1.0)
        assert record.tx_packets == 3
        assert record.rx_packets == 2

    def test_losses_are_counted(self):
        profile = TrafficProfile(
            max_packets=20, link_rate_bps=6e6, queue_limit_packets=5, sim_time_s=10.0
        )
        (record,) = SyntheticFlowMonitor(profile).snapshot(10.0)
        assert record.lost_packets > 0
        assert record.rx_packets + record.lost_packets == 20

    def test_snapshot_feeds_aggregator(self):
        monitor = SyntheticFlowMonitor(TrafficProfile(max_packets=100))
        records = monitor.snapshot(2.0)
        metrics = aggregate_flows(records, AggregateMetrics())
        record = records[0]
        expected = record.rx_bytes * 8 / (record.time_last_rx_packet - 0.5)
        assert metrics.throughput_bps == pytest.approx(expected)
        assert metrics.mean_latency_s == pytest.approx(0.00031)

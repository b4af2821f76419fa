import json
import subprocess
from pathlib import Path

import pytest

from nrsim.config import ScenarioConfig, TrafficProfile
from nrsim.flows import FlowStatsRecord, StaticFlowSource
from nrsim.metrics import AggregateMetrics, estimate_if_needed
from nrsim.simulator import format_result, run_backend, run_scenario, sampling_schedule


class TestSamplingSchedule:
    def test_default_schedule(self):
        assert sampling_schedule(TrafficProfile()) == [1.0, 2.0]

    def test_samples_sorted_and_clipped(self):
        profile = TrafficProfile(sample_times_s=(1.5, 0.5, 2.0, 3.0, 0.5), sim_time_s=2.0)
        assert sampling_schedule(profile) == [0.5, 1.5, 2.0]

    def test_final_only(self):
        assert sampling_schedule(TrafficProfile(sample_times_s=())) == [2.0]


class TestRunScenario:
    def test_latency_folds_over_every_sample(self):
        record = FlowStatsRecord(
            rx_bytes=150000,
            rx_packets=100,
            delay_sum=0.1,
            time_first_tx_packet=0.0,
            time_last_rx_packet=1.0,
        )
        result = run_scenario(ScenarioConfig(), StaticFlowSource([record]), TrafficProfile())
        assert result.samples == 2
        assert result.fallback_used is False
        assert result.metrics.throughput_bps == pytest.approx(1_200_000)
        assert result.metrics.mean_latency_s == pytest.approx(((0 + 0.001) / 2 + 0.001) / 2)
        assert result.flows == [record]

    def test_empty_flows_use_fallback(self):
        config = ScenarioConfig(duplex_mode="FDD")
        result = run_scenario(config, StaticFlowSource([]))
        assert result.fallback_used is True
        assert result.metrics == estimate_if_needed(AggregateMetrics(), config)

    def test_fallback_logged(self, caplog):
        with caplog.at_level("WARNING", logger="nrsim.simulator"):
            run_scenario(ScenarioConfig(), StaticFlowSource([]))
        assert "analytic estimate" in caplog.text


class TestRunBackend:
    def test_synthetic_backend_measures(self):
        result = run_backend("synthetic", ScenarioConfig(), TrafficProfile(max_packets=200))
        assert result.backend == "synthetic"
        assert result.fallback_used is False
        assert result.metrics.throughput_bps > 0

    def test_synthetic_dead_link_falls_back(self):
        result = run_backend("synthetic", ScenarioConfig(), TrafficProfile(link_rate_bps=0))
        assert result.fallback_used is True
        assert result.metrics.mean_latency_s == pytest.approx(0.004)

    def test_analytic_backend(self):
        result = run_backend("analytic", ScenarioConfig())
        assert result.backend == "analytic"
        assert result.fallback_used is True

    def test_flowmon_backend(self, tmp_path: Path):
        path = tmp_path / "flows.csv"
        path.write_text(
            "flowId,rxBytes,rxPackets,delaySum,timeFirstTxPacket,timeLastRxPacket\n"
            "1,150000,100,0.1,0,1\n"
        )
        result = run_backend("flowmon", ScenarioConfig(), flows_path=path)
        assert result.metrics.throughput_bps == pytest.approx(1_200_000)

    def test_flowmon_requires_path(self):
        with pytest.raises(ValueError, match="requires a flows file"):
            run_backend("flowmon", ScenarioConfig())

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Backend must be"):
            run_backend("matlab", ScenarioConfig())

    def test_ns3_missing_falls_back(self, tmp_path: Path):
        result = run_backend("ns3", ScenarioConfig(), ns3_dir=tmp_path / "nowhere")
        assert result.backend == "ns3"
        assert result.fallback_used is True
        assert result.metrics.throughput_bps > 0

    def test_ns3_result_used(self, tmp_path: Path, monkeypatch):
        ns3_dir = tmp_path / "ns-3"
        ns3_dir.mkdir()
        (ns3_dir / "ns3").write_text("#!/bin/sh\n")
        output = tmp_path / "out.json"

        def fake_run(command, **kwargs):
            output.write_text(
                json.dumps(
                    {
                        "frequency": 3.5e9,
                        "bandwidth": 20e6,
                        "duplexMode": "TDD",
                        "transmitPower": 20,
                        "results": {"throughput": 9.5e6, "latency": 0.002},
                    }
                )
            )
            return subprocess.CompletedProcess(command, 0, "", "")

        monkeypatch.setattr(subprocess, "run", fake_run)
        result = run_backend("ns3", ScenarioConfig(), ns3_dir=ns3_dir, output_path=output)
        assert result.fallback_used is False
        assert result.metrics.throughput_bps == 9.5e6
        assert result.metrics.mean_latency_s == 0.002


class TestFormatResult:
    def test_measured_summary(self):
        result = run_backend("synthetic", ScenarioConfig(), TrafficProfile(max_packets=50))
        text = format_result(result)
        assert "Backend: synthetic" in text
        assert "Throughput:" in text
        assert "LostPackets: 0" in text

    def test_fallback_summary(self):
        text = format_result(run_backend("analytic", ScenarioConfig()))
        assert "Source: analytic estimate" in text
        assert "Latency: 4.000 ms" in text

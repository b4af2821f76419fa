import pytest

from nrsim.config import ScenarioConfig
from nrsim.sweep import SWEEP_FIELDS, bandwidth_grid, power_grid, run_sweep


class TestGrids:
    def test_bandwidth_grid(self):
        grid = bandwidth_grid(10e6, 100e6, 10)
        assert len(grid) == 10
        assert grid[0] == 10e6
        assert grid[-1] == 100e6

    def test_power_grid_includes_stop(self):
        assert list(power_grid(10.0, 40.0, 10.0)) == [10.0, 20.0, 30.0, 40.0]

    def test_invalid_grids(self):
        with pytest.raises(ValueError, match="points must be positive"):
            bandwidth_grid(10e6, 20e6, 0)
        with pytest.raises(ValueError, match="step_db must be positive"):
            power_grid(0.0, 10.0, 0.0)
        with pytest.raises(ValueError, match="power range must be increasing"):
            power_grid(40.0, 10.0, 10.0)


class TestRunSweep:
    def test_row_count_and_fields(self):
        rows = run_sweep(ScenarioConfig(), [20e6, 40e6], [20.0], duplex_modes=("TDD", "FDD"))
        assert len(rows) == 4
        assert tuple(rows[0]) == SWEEP_FIELDS

    def test_fdd_beats_tdd(self):
        rows = run_sweep(ScenarioConfig(), [20e6], [20.0])
        by_mode = {row["duplex_mode"]: row for row in rows}
        assert by_mode["FDD"]["throughput_bps"] > by_mode["TDD"]["throughput_bps"]
        assert by_mode["FDD"]["latency_s"] < by_mode["TDD"]["latency_s"]

    def test_wider_band_lowers_latency(self):
        rows = run_sweep(ScenarioConfig(), [20e6, 100e6], [20.0], duplex_modes=("TDD",))
        assert rows[1]["latency_s"] < rows[0]["latency_s"]
        assert rows[1]["throughput_bps"] == pytest.approx(rows[0]["throughput_bps"] * 5)

    def test_empty_power_list(self):
        assert run_sweep(ScenarioConfig(), [20e6], []) == []

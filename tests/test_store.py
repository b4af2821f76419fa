from pathlib import Path

import pytest

from nrsim.config import ScenarioConfig
from nrsim.simulator import run_backend
from nrsim.store import ScenarioStore


class TestScenarioStore:
    def test_add_and_get(self):
        store = ScenarioStore()
        record = store.add(run_backend("analytic", ScenarioConfig(duplex_mode="FDD")))
        assert store.get(record["id"]) == record
        assert record["duplexMode"] == "FDD"
        assert record["fallbackUsed"] is True
        assert set(record["simulationResult"]) == {"throughput", "latency"}

    def test_list_newest_first(self):
        store = ScenarioStore()
        first = store.add(run_backend("analytic", ScenarioConfig()))
        second = store.add(run_backend("analytic", ScenarioConfig()))
        first["createdAt"] = "2000-01-01T00:00:00+00:00"
        assert [r["id"] for r in store.list()] == [second["id"], first["id"]]
        assert store.latest() == second

    def test_unknown_id(self):
        with pytest.raises(KeyError):
            ScenarioStore().get("missing")

    def test_delete(self):
        store = ScenarioStore()
        record = store.add(run_backend("analytic", ScenarioConfig()))
        store.delete(record["id"])
        assert len(store) == 0
        assert store.latest() is None

    def test_counts_by_duplex(self):
        store = ScenarioStore()
        store.add(run_backend("analytic", ScenarioConfig(duplex_mode="TDD")))
        store.add(run_backend("analytic", ScenarioConfig(duplex_mode="TDD")))
        store.add(run_backend("analytic", ScenarioConfig(duplex_mode="FDD")))
        assert store.counts_by_duplex() == {"TDD": 2, "FDD": 1}

    def test_persists_to_file(self, tmp_path: Path):
        path = tmp_path / "scenarios.json"
        record = ScenarioStore(path).add(run_backend("analytic", ScenarioConfig()))
        reopened = ScenarioStore(path)
        assert reopened.get(record["id"]) == record

    def test_corrupt_file(self, tmp_path: Path):
        path = tmp_path / "scenarios.json"
        path.write_text("[{")
        with pytest.raises(ValueError, match="Corrupt scenario store"):
            ScenarioStore(path)

from __future__ import annotations

import json
import logging
import uuid
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from .results import ScenarioResult, to_document
from .types import StoreRecord

logger = logging.getLogger(__name__)


class ScenarioStore:
    """Saved scenario runs, optionally persisted to a JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._records: List[StoreRecord] = []
        if path is not None and path.exists():
            try:
                self._records = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                raise ValueError(f"Corrupt scenario store {path}: {exc}") from exc
            logger.info("Loaded %d scenario records from %s", len(self._records), path)

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._records, indent=2) + "\n", encoding="utf-8")

    def add(self, result: ScenarioResult) -> StoreRecord:
        document = to_document(result)
        record: StoreRecord = {
            "id": uuid.uuid4().hex,
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "frequency": document["frequency"],
            "bandwidth": document["bandwidth"],
            "duplexMode": document["duplexMode"],
            "transmitPower": document["transmitPower"],
            "simulationResult": document["results"],
            "backend": result.backend,
            "fallbackUsed": result.fallback_used,
        }
        self._records.append(record)
        self._save()
        return record

    def list(self) -> List[StoreRecord]:
        return sorted(self._records, key=lambda r: r["createdAt"], reverse=True)

    def get(self, record_id: str) -> StoreRecord:
        for record in self._records:
            if record["id"] == record_id:
                return record
        raise KeyError(record_id)

    def delete(self, record_id: str) -> None:
        record = self.get(record_id)
        self._records.remove(record)
        self._save()

    def latest(self) -> StoreRecord | None:
        records = self.list()
        return records[0] if records else None

    def counts_by_duplex(self) -> Dict[str, int]:
        counts = Counter(record["duplexMode"] for record in self._records)
        return {mode: counts.get(mode, 0) for mode in ("TDD", "FDD")}

    def __len__(self) -> int:
        return len(self._records)

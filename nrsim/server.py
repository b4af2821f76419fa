from __future__ import annotations

import json
import logging
import math
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any, Dict

from .config import ScenarioConfig, TrafficProfile
from .exporter import ScenarioMetrics
from .ns3 import ns3_available
from .simulator import run_backend
from .store import ScenarioStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("frequency", "bandwidth", "duplexMode", "transmitPower")
CONFIGS_PATH = "/api/configs"


def _clean(value: float) -> float | None:
    return value if math.isfinite(value) else None


def config_from_payload(data: Dict[str, Any]) -> ScenarioConfig:
    missing = [name for name in REQUIRED_FIELDS if data.get(name) in (None, "")]
    if missing:
        raise ValueError("Please provide all required fields: " + ", ".join(missing))
    try:
        return ScenarioConfig(
            frequency_hz=float(data["frequency"]),
            bandwidth_hz=float(data["bandwidth"]),
            duplex_mode=str(data["duplexMode"]),
            tx_power_dbm=float(data["transmitPower"]),
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(str(exc)) from exc


class ScenarioHandler(BaseHTTPRequestHandler):
    store: ScenarioStore | None = None
    metrics: ScenarioMetrics | None = None
    backend: str = "synthetic"
    profile: TrafficProfile = TrafficProfile()
    ns3_dir: Path | None = None
    output_path: Path = Path("outputs/simulation_output.json")

    def log_message(self, format: str, *args: Any) -> None:
        logger.info("%s - %s", self.address_string(), format % args)

    def _send_json(self, payload: Any, status: int = 200) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()
        self.wfile.write(body)

    def _send_metrics(self) -> None:
        if self.metrics is None:
            self._send_json({"error": "not_found"}, status=404)
            return
        body = self.metrics.render()
        self.send_response(200)
        self.send_header("Content-Type", self.metrics.content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _record_id(self) -> str | None:
        prefix = CONFIGS_PATH + "/"
        if self.path.startswith(prefix) and len(self.path) > len(prefix):
            return self.path[len(prefix):].strip("/")
        return None

    def do_OPTIONS(self) -> None:
        self.send_response(200)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Access-Control-Allow-Methods", "POST, GET, DELETE, OPTIONS")
        self.end_headers()

    def do_GET(self) -> None:
        if self.path == "/health":
            self._send_json({"status": "ok"})
            return
        if self.path == "/metrics":
            self._send_metrics()
            return
        if self.path == "/ns3-status":
            self._send_json(
                {
                    "backend": self.backend,
                    "ns3Dir": str(self.ns3_dir) if self.ns3_dir else None,
                    "available": ns3_available(self.ns3_dir),
                }
            )
            return
        if self.path == "/api/metrics/latest":
            latest = self.store.latest()
            self._send_json(
                {
                    "latest": latest,
                    "simulationCount": self.store.counts_by_duplex(),
                }
            )
            return
        if self.path == CONFIGS_PATH:
            self._send_json(self.store.list())
            return
        record_id = self._record_id()
        if record_id is None:
            self._send_json({"error": "not_found"}, status=404)
            return
        try:
            self._send_json(self.store.get(record_id))
        except KeyError:
            self._send_json({"message": "Configuration not found"}, status=404)

    def do_DELETE(self) -> None:
        record_id = self._record_id()
        if record_id is None:
            self._send_json({"error": "not_found"}, status=404)
            return
        try:
            self.store.delete(record_id)
        except KeyError:
            self._send_json({"message": "Configuration not found"}, status=404)
            return
        self._send_json({"message": "Configuration deleted", "id": record_id})

    def do_POST(self) -> None:
        if self.path != CONFIGS_PATH:
            self._send_json({"error": "not_found"}, status=404)
            return
        length = int(self.headers.get("Content-Length", "0"))
        raw = self.rfile.read(length).decode("utf-8")
        try:
            data = json.loads(raw or "{}")
        except json.JSONDecodeError:
            self._send_json({"error": "invalid_json"}, status=400)
            return
        if not isinstance(data, dict):
            self._send_json({"error": "invalid_json"}, status=400)
            return

        try:
            config = config_from_payload(data)
        except ValueError as exc:
            self._send_json({"message": str(exc)}, status=400)
            return

        try:
            result = run_backend(
                self.backend,
                config,
                self.profile,
                ns3_dir=self.ns3_dir,
                output_path=self.output_path,
            )
        except Exception as exc:
            logger.exception("Simulation failed for %s", config)
            self._send_json({"message": "Server error", "error": str(exc)}, status=500)
            return

        record = self.store.add(result)
        if self.metrics is not None:
            self.metrics.record(result)
        self._send_json(
            {
                "message": "RAN Config saved",
                "config": record,
                "simulationResult": {
                    "throughput": _clean(result.metrics.throughput_bps),
                    "latency": _clean(result.metrics.mean_latency_s),
                },
            },
            status=201,
        )


def build_server(
    host: str,
    port: int,
    store: ScenarioStore,
    backend: str = "synthetic",
    profile: TrafficProfile = TrafficProfile(),
    ns3_dir: Path | None = None,
    metrics: ScenarioMetrics | None = None,
) -> HTTPServer:
    handler = type(
        "BoundScenarioHandler",
        (ScenarioHandler,),
        {
            "store": store,
            "metrics": metrics or ScenarioMetrics(),
            "backend": backend,
            "profile": profile,
            "ns3_dir": ns3_dir,
        },
    )
    return HTTPServer((host, port), handler)

from __future__ import annotations

import csv
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .types import FlowId

logger = logging.getLogger(__name__)

_TIME_UNITS = {
    "fs": 1e-15,
    "ps": 1e-12,
    "ns": 1e-9,
    "us": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "min": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}
_TIME_RE = re.compile(r"^\s*([+-]?[0-9.]+(?:[eE][+-]?[0-9]+)?)\s*([a-z]*)\s*$")


@dataclass(frozen=True)
class FlowStatsRecord:
    """Counters for one unidirectional flow, as reported by a flow monitor."""

    flow_id: FlowId = 0
    tx_bytes: int = 0
    tx_packets: int = 0
    rx_bytes: int = 0
    rx_packets: int = 0
    lost_packets: int = 0
    delay_sum: float = 0.0
    time_first_tx_packet: float = 0.0
    time_last_rx_packet: float = 0.0

    @property
    def elapsed(self) -> float:
        return self.time_last_rx_packet - self.time_first_tx_packet


class StaticFlowSource:
    """Replays one fixed snapshot regardless of the sampling time."""

    def __init__(self, records: Iterable[FlowStatsRecord]) -> None:
        self.records = list(records)

    def snapshot(self, now_s: float) -> List[FlowStatsRecord]:
        return list(self.records)


def parse_ns3_time(value: str) -> float:
    """Convert an ns-3 time string (``+1.5e+09ns``, ``2ms``, ``3``) to seconds."""

    match = _TIME_RE.match(value)
    if not match:
        raise ValueError(f"Malformed time value: {value!r}")
    number, unit = match.groups()
    unit = unit or "s"
    if unit not in _TIME_UNITS:
        raise ValueError(f"Unknown time unit in {value!r}")
    return float(number) * _TIME_UNITS[unit]


def _int_attr(element: ET.Element, name: str) -> int:
    return int(element.get(name, "0"))


def load_flowmon_xml(path: Path) -> List[FlowStatsRecord]:
    """Read ``FlowStats/Flow`` entries from a FlowMonitor ``SerializeToXmlFile`` dump."""

    if not path.exists():
        raise FileNotFoundError(f"Flow monitor file not found: {path}")
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"Invalid flow monitor XML in {path}: {exc}") from exc

    records: List[FlowStatsRecord] = []
    for flow in root.findall(".//FlowStats/Flow"):
        records.append(
            FlowStatsRecord(
                flow_id=_int_attr(flow, "flowId"),
                tx_bytes=_int_attr(flow, "txBytes"),
                tx_packets=_int_attr(flow, "txPackets"),
                rx_bytes=_int_attr(flow, "rxBytes"),
                rx_packets=_int_attr(flow, "rxPackets"),
                lost_packets=_int_attr(flow, "lostPackets"),
                delay_sum=parse_ns3_time(flow.get("delaySum", "0ns")),
                time_first_tx_packet=parse_ns3_time(flow.get("timeFirstTxPacket", "0ns")),
                time_last_rx_packet=parse_ns3_time(flow.get("timeLastRxPacket", "0ns")),
            )
        )
    logger.debug("Loaded %d flows from %s", len(records), path)
    return records


def load_flow_csv(path: Path) -> List[FlowStatsRecord]:
    """Read flow counters from a CSV export with FlowMonitor column names.

    Time columns hold seconds, or ns-3 time strings with a unit suffix.
    """

    if not path.exists():
        raise FileNotFoundError(f"Flow CSV not found: {path}")

    def time_field(row: Dict[str, str], name: str) -> float:
        raw = (row.get(name) or "0").strip()
        return parse_ns3_time(raw)

    records: List[FlowStatsRecord] = []
    with path.open("r", newline="") as handle:
        reader = csv.DictReader(handle)
        for index, row in enumerate(reader):
            try:
                records.append(
                    FlowStatsRecord(
                        flow_id=int(row.get("flowId") or index + 1),
                        tx_bytes=int(row.get("txBytes") or 0),
                        tx_packets=int(row.get("txPackets") or 0),
                        rx_bytes=int(row.get("rxBytes") or 0),
                        rx_packets=int(row.get("rxPackets") or 0),
                        lost_packets=int(row.get("lostPackets") or 0),
                        delay_sum=time_field(row, "delaySum"),
                        time_first_tx_packet=time_field(row, "timeFirstTxPacket"),
                        time_last_rx_packet=time_field(row, "timeLastRxPacket"),
                    )
                )
            except ValueError as exc:
                raise ValueError(f"{path}: bad row {index + 1}: {exc}") from exc
    logger.debug("Loaded %d flows from %s", len(records), path)
    return records


def load_flows(path: Path) -> List[FlowStatsRecord]:
    suffix = path.suffix.lower()
    if suffix == ".xml":
        return load_flowmon_xml(path)
    if suffix == ".csv":
        return load_flow_csv(path)
    raise ValueError(f"Unsupported flow file type: {path.suffix or path.name}")


def total_rx_bytes(records: Sequence[FlowStatsRecord]) -> int:
    return sum(record.rx_bytes for record in records)

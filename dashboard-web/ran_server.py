from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from nrsim.store import ScenarioStore
from nrsim.server import build_server


def parse_args() -> argparse.Namespace:
    use_ns3 = os.environ.get("USE_NS3", "").lower() == "true"
    parser = argparse.ArgumentParser(description="RAN scenario HTTP API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "5000")))
    parser.add_argument(
        "--backend",
        choices=["synthetic", "ns3", "analytic"],
        default="ns3" if use_ns3 else "synthetic",
    )
    parser.add_argument("--ns3-dir", type=Path, default=None)
    parser.add_argument(
        "--store",
        type=Path,
        default=Path("outputs/scenarios.json"),
        help="JSON file holding saved scenario runs",
    )
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    server = build_server(
        args.host,
        args.port,
        ScenarioStore(args.store),
        backend=args.backend,
        ns3_dir=args.ns3_dir,
    )
    print(f"RAN scenario server running on http://localhost:{args.port} (backend={args.backend})")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    main()

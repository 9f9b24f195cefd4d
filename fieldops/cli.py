"""Development server launcher that prints LAN-reachable URLs."""
import argparse
from typing import List, Optional

import uvicorn

from fieldops.config import settings
from fieldops.utils.network import get_lan_ip


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fieldops-serve",
        description="Run the API server and show the URLs mobile devices can use.",
    )
    parser.add_argument("--host", default=settings.SERVE_HOST, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.SERVE_PORT, help="Port to listen on")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    return parser


def banner_lines(host: str, port: int, lan_ip: str) -> List[str]:
    lines = [
        f"{settings.APP_NAME} development server",
        "",
        f"  Local:   http://localhost:{port}{settings.API_PREFIX}",
        f"  Network: http://{lan_ip}:{port}{settings.API_PREFIX}",
    ]
    if host not in ("0.0.0.0", "::"):
        lines.append("")
        lines.append(f"  Bound to {host}; use --host 0.0.0.0 to accept LAN connections")
    lines.append("")
    lines.append("  Point the mobile client at the Network URL.")
    return lines


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    for line in banner_lines(args.host, args.port, get_lan_ip()):
        print(line)
    uvicorn.run(
        "fieldops.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()

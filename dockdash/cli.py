"""CLI for dockdash: dockdash serve, dockdash check."""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

import uvicorn
import yaml
from pydantic import ValidationError

from dockdash.config import load_config
from dockdash.docker_client import DockerClient
from dockdash.errors import EngineError


def _load(args: argparse.Namespace):
    if args.config is not None:
        config_path = Path(args.config).expanduser().resolve()
        if not config_path.is_file():
            print(f"Config file not found: {config_path}", file=sys.stderr)
            return None
        # The app re-reads its config on import in the uvicorn process
        os.environ["DOCKDASH_CONFIG_FILE"] = str(config_path)
    try:
        return load_config()
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return None


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the gateway with uvicorn."""
    config = _load(args)
    if config is None:
        return 1
    uvicorn.run(
        "dockdash.api:app",
        host=args.host or config.host,
        port=args.port or config.port,
        reload=args.reload,
        log_level=config.log_level.lower(),
    )
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Ping the Docker engine and print its version."""
    config = _load(args)
    if config is None:
        return 1
    try:
        client = DockerClient(base_url=config.docker_base_url, timeout=config.engine_timeout)
    except EngineError as e:
        print(f"Docker engine unreachable at {config.docker_base_url}: {e}", file=sys.stderr)
        return 1
    try:
        version = client.version()
    except EngineError as e:
        print(f"Docker engine error: {e}", file=sys.stderr)
        return 1
    finally:
        client.close()
    print(f"Docker {version.get('Version', '?')} (API {version.get('ApiVersion', '?')}) at {config.docker_base_url}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="dockdash",
        description="Dockdash: REST gateway for a web-based Docker management console.",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="PATH",
        help="Config file path (default: $DOCKDASH_CONFIG_FILE or ./config.yml)",
    )
    sub = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = sub.add_parser("serve", help="Run the gateway HTTP server")
    serve_parser.add_argument("--host", help="Listen address (overrides config)")
    serve_parser.add_argument("--port", type=int, help="Listen port (overrides config)")
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes (development)",
    )
    serve_parser.set_defaults(func=cmd_serve)

    check_parser = sub.add_parser("check", help="Check connectivity to the Docker engine")
    check_parser.set_defaults(func=cmd_check)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

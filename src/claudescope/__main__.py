import asyncio
import json
import signal
import sys

import structlog
from prometheus_client import start_http_server

from claudescope.cli import parse_args
from claudescope.config import Config
from claudescope.display import render_text, usage_to_dict
from claudescope.errors import DecodeError, OAuthError
from claudescope.fetcher import fetch_usage
from claudescope.logging import setup_logging
from claudescope.metrics import UsageMetrics
from claudescope.poller import UsagePoller

logger = structlog.get_logger()


def _parse_listen_address(addr: "str") -> "tuple[str, int]":
    """
    parses listen address in format ':9186' or '0.0.0.0:9186'.
    """
    if addr.startswith(":"):
        return ("0.0.0.0", int(addr[1:]))

    host, port = addr.rsplit(":", 1)
    return (host, int(port))


def run_once(config: "Config") -> "int":
    """
    fetches usage a single time and prints it. Returns the exit code.
    """
    try:
        usage = asyncio.run(fetch_usage())
    except OAuthError as exc:
        print(exc.message, file=sys.stderr)
        return 1
    except DecodeError as exc:
        print(f"Invalid usage payload from Claude API: {exc}", file=sys.stderr)
        return 1

    if config.output == "json":
        print(json.dumps(usage_to_dict(usage), indent=2))
    else:
        print(render_text(usage))
    return 0


def run_exporter(config: "Config") -> "None":
    host, port = _parse_listen_address(config.listen_address)
    start_http_server(port, addr=host)
    logger.info("metrics_server_started", host=host, port=port)

    async def _run() -> "None":
        poller = UsagePoller(UsageMetrics(), config.poll_interval)
        loop = asyncio.get_running_loop()
        # for SIGINT and SIGTERM, signal the poller
        # to stop gracefully
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, poller.stop)

        await poller.run()
        logger.info("shutdown_complete")

    asyncio.run(_run())


def main() -> "None":
    config = parse_args()
    setup_logging(config.log_level)

    if config.exporter_enabled:
        run_exporter(config)
        return

    raise SystemExit(run_once(config))


if __name__ == "__main__":
    main()

import argparse

from claudescope.config import Config


def parse_args(argv: "list[str] | None" = None) -> "Config":
    config = Config.from_env()

    parser = argparse.ArgumentParser(
        prog="claudescope",
        description="Show Claude subscription usage windows",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=config.listen_address,
        help="Serve Prometheus metrics on this address, e.g. :9186 "
        "(default: fetch once and exit)",
    )
    parser.add_argument(
        "--poll.interval",
        dest="poll_interval",
        type=int,
        default=config.poll_interval,
        help=f"Poll interval in seconds (default: {config.poll_interval})",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default=config.log_level,
        choices=["debug", "info", "warning", "error"],
        help=f"Log level (default: {config.log_level})",
    )
    parser.add_argument(
        "--output",
        dest="output",
        default=config.output,
        choices=["text", "json"],
        help="Output format for a single fetch (default: text)",
    )

    args = parser.parse_args(argv)
    config.listen_address = args.listen_address
    config.poll_interval = args.poll_interval
    config.log_level = args.log_level
    config.output = args.output
    return config

import logging
import sys

import structlog


def setup_logging(level: "str") -> "None":
    """
    maps string log level to logging module levels and configures
    structlog with a simple console renderer and timestamping.

    Logs go to stderr because one-shot mode prints the usage on
    stdout, and `claudescope --output json | jq` must receive nothing
    else. The default is WARNING for the same reason: a status-bar
    script calling claudescope once a minute should see a single
    line, not the debug trail of the credential lookup.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        stream=sys.stderr,
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

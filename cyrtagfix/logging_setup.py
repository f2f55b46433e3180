from __future__ import annotations
import logging, logging.handlers, sys
import structlog
from pathlib import Path


def setup_logging(level: str = "WARNING", log_file: str | Path | None = None, json: bool = False):
    level = level.upper()
    numeric = logging.getLevelName(level)
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")

    root = logging.getLogger()
    root.setLevel(numeric)
    root.handlers.clear()

    fmt = logging.Formatter("%(message)s")
    # stdout belongs to the progress output
    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(fmt)
    root.addHandler(stream)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        rot = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=25_000_000, backupCount=5, encoding="utf-8"
        )
        rot.setFormatter(fmt)
        root.addHandler(rot)

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        cache_logger_on_first_use=False,
    )
    return structlog.get_logger()

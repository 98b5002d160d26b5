"""structlog setup for the CLI: JSON lines or console output on stderr."""

import logging
import sys
from typing import TextIO

import structlog


# Third-party loggers that log every request URL at INFO
_CHATTY_LIBRARIES = ("httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Route all newsbrew events to ``output``.

    Command output (digests, NDJSON) goes to stdout, so logs default to
    stderr and never mix with it.

    Args:
        level: Minimum level emitted.
        output: Stream receiving log lines.
        json_format: One JSON object per line when True, human-readable
            console rendering otherwise.
    """
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer(sort_keys=True)
        if json_format
        else structlog.dev.ConsoleRenderer(colors=output.isatty())
    )
    structlog.configure(
        processors=[*_shared_processors(), renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        # CliRunner invokes the group repeatedly in one process
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=output, level=level)
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_run_context(run_id: str) -> None:
    """Attach ``run_id`` to every event logged from now on."""
    structlog.contextvars.bind_contextvars(run_id=run_id)


def clear_run_context() -> None:
    """Detach the run id bound by ``bind_run_context``."""
    structlog.contextvars.unbind_contextvars("run_id")

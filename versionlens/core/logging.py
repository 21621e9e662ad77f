"""Diagnostics for versionlens, rendered by structlog through stdlib logging.

Every module logs under ``versionlens.engine`` with dotted event names:

* ``parser.*`` — skipped entries (``parser.invalid_name``,
  ``parser.skip_unversioned``) at DEBUG, unreadable manifests
  (``parser.malformed``) at WARNING, parser crashes (``parser.failed``)
  with a traceback;
* ``registry.*`` — retried lookups (``registry.server_error``,
  ``registry.transport_error``) at WARNING;
* ``lens.*`` — failed lookups per package at WARNING, a per-file summary
  (``lens.done``) at INFO;
* ``version.unordered`` / ``resolver.unparseable_reference`` at DEBUG.

Everything goes to stderr, so ``scan --json`` output on stdout stays clean.
"""

from __future__ import annotations

import logging
import logging.config
import os

import structlog


def setup_logging(level: str | None = None) -> None:
    """Install the structlog pipeline and the stderr handler.

    The default level is WARNING, so a plain CLI run only reports retries,
    malformed manifests and failed lookups; ``-v`` passes ``"DEBUG"`` to
    also see every skipped entry.  *level* wins over the environment.

        VERSIONLENS_LOG_LEVEL  — level name (default: WARNING)
        VERSIONLENS_LOG_FORMAT — console | json (default: console)
    """
    log_level = (level or os.environ.get("VERSIONLENS_LOG_LEVEL", "WARNING")).upper()
    log_format = os.environ.get("VERSIONLENS_LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Diagnostics go to stderr so scan output on stdout stays machine-readable.
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": log_level,
            },
            "loggers": {
                "versionlens": {"level": log_level},
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
        }
    )

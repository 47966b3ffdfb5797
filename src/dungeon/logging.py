"""Structured logging for the dungeon server and engine."""

import hashlib
import sys
from pathlib import Path
from typing import Any, TextIO

import structlog

_LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def hash_fingerprint_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace a certificate fingerprint with a short hash of it."""
    fingerprint = event_dict.pop("fingerprint", None)
    if fingerprint and fingerprint != "unknown":
        event_dict["fingerprint_hash"] = hashlib.sha256(fingerprint.encode()).hexdigest()[:12]
    return event_dict


def _open_stream(log_file: Path | None) -> TextIO:
    if log_file is None:
        return sys.stdout
    return open(log_file, "a", encoding="utf-8")


def configure_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    json_logs: bool = False,
    hash_fingerprints: bool = True,
) -> None:
    """Configure structlog for the whole process.

    Console output is colourised when writing to a terminal; ``json_logs``
    switches to one JSON object per line with ISO timestamps.
    """
    stream = _open_stream(log_file)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso" if json_logs else "%Y-%m-%d %H:%M:%S"),
    ]
    if hash_fingerprints:
        processors.append(hash_fingerprint_processor)

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            _LEVELS.get(log_level.upper(), 20)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger for a module."""
    return structlog.get_logger(name)


def bind_player_context(fingerprint: str, player_id: int | None = None) -> None:
    """Tag the rest of this request's log events with the player.

    Engine modules log turns without knowing who is playing; the binding is
    merged into every event and the fingerprint hashed like any other.
    """
    structlog.contextvars.bind_contextvars(fingerprint=fingerprint, player_id=player_id)


def clear_player_context() -> None:
    structlog.contextvars.unbind_contextvars("fingerprint", "player_id")

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_configured = False


def configure_logging(level: str | int = "INFO", force: bool = False) -> None:
    global _configured
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved
    logging.basicConfig(level=level, format=_FORMAT, force=force)
    _configured = True


def ensure_logging_configured() -> None:
    """Configure INFO logging unless the caller (or a host app) already did."""
    if _configured or logging.getLogger().handlers:
        return
    configure_logging()

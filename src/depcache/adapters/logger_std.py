"""Standard logging adapter."""

import logging
import sys
from typing import Any

LOGGER_NAME = "depcache"


class StdLoggerAdapter:
    """Python stdlib logging implementation of LoggerPort."""

    def __init__(self, name: str = LOGGER_NAME, level: str = "INFO"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("[cache] %(levelname)s %(message)s"))
            self.logger.addHandler(handler)
            self.logger.propagate = False

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def log_operation(
        self,
        op: str,
        key: str,
        cache_type: str,
        sizes: dict[str, int],
        durations: dict[str, float],
        outcome: str,
    ) -> None:
        """Log one summary line per cache operation."""
        fields: dict[str, Any] = {"op": op, "key": key, "type": cache_type, "outcome": outcome}
        fields.update({f"{name}_bytes": size for name, size in sizes.items()})
        fields.update({f"{name}_s": round(value, 3) for name, value in durations.items()})
        self._log(logging.INFO, "operation", fields)

    def _log(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if not self.logger.isEnabledFor(level):
            return
        if fields:
            rendered = " ".join(f"{k}={v}" for k, v in fields.items())
            message = f"{message} {rendered}"
        self.logger.log(level, message)

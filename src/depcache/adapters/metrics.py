"""Metrics adapters."""

import logging


class NoopMetricsAdapter:
    """Metrics adapter that discards everything."""

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        pass

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        pass

    def timing(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        pass


class LoggingMetricsAdapter:
    """Metrics adapter that writes each data point to the debug log."""

    def __init__(self, name: str = "depcache.metrics"):
        self.logger = logging.getLogger(name)

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        self.logger.debug("counter %s +%d %s", name, value, tags or {})

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self.logger.debug("gauge %s=%s %s", name, value, tags or {})

    def timing(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self.logger.debug("timing %s=%.3fs %s", name, value, tags or {})

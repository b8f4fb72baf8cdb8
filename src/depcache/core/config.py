"""Centralized configuration for depcache."""

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

DEFAULT_PREFIX = "claude-sandbox-cache"
DEFAULT_REGION = "us-east-1"
DEFAULT_TIMEOUT = 300.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_METRICS_TYPES = {"noop", "logging"}


def parse_bool(value: str | None, default: bool) -> bool:
    """Parse a boolean environment value, falling back to default when unset."""
    if value is None or value.strip() == "":
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def _env(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None or value == "":
        return None
    return value


def _bool_env(environ: Mapping[str, str], name: str, default: bool, warnings: list[str]) -> bool:
    try:
        return parse_bool(environ.get(name), default)
    except ValueError:
        warnings.append(f"Ignoring invalid {name}={environ[name]!r}; using {str(default).lower()}")
        return default


def _timeout_env(environ: Mapping[str, str], warnings: list[str]) -> float:
    raw = _env(environ, "CACHE_TIMEOUT")
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        timeout = 0.0
    if not timeout > 0:
        warnings.append(f"Ignoring invalid CACHE_TIMEOUT={raw!r}; using {DEFAULT_TIMEOUT:g}")
        return DEFAULT_TIMEOUT
    return timeout


def _choice_env(
    environ: Mapping[str, str],
    name: str,
    choices: set[str],
    default: str,
    warnings: list[str],
    normalize: Callable[[str], str] = str.lower,
) -> str:
    raw = _env(environ, name)
    if raw is None:
        return default
    value = normalize(raw.strip())
    if value not in choices:
        warnings.append(f"Ignoring invalid {name}={raw!r}; using {default!r}")
        return default
    return value


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """All depcache configuration in one place.

    Environment variables (all optional; caching is disabled unless the
    bucket and both credential halves are present):
        CACHE_S3_BUCKET:        Bucket holding cache archives.
        CACHE_S3_PREFIX:        Key prefix. Default "claude-sandbox-cache".
        AWS_ACCESS_KEY_ID:      Access key id.
        AWS_SECRET_ACCESS_KEY:  Secret access key.
        AWS_SESSION_TOKEN:      Optional session token.
        AWS_REGION:             Region. Default "us-east-1".
        AWS_ENDPOINT_URL:       Custom endpoint for S3-compatible providers.
        CACHE_COMPRESSION:      Gzip archives. Default true.
        CACHE_VERBOSE:          Debug-level cache logging. Default false.
        CACHE_TIMEOUT:          Seconds allowed per network operation. Default 300.
        CACHE_LOG_LEVEL:        Logging level. Default "INFO" ("DEBUG" if verbose).
        CACHE_METRICS:          Metrics backend: "noop" (default) or "logging".
        CACHE_TEMP_DIR:         Directory for temporary archives.
    """

    bucket: str | None = None
    prefix: str = DEFAULT_PREFIX
    access_key_id: str | None = field(default=None, repr=False)
    secret_access_key: str | None = field(default=None, repr=False)
    session_token: str | None = field(default=None, repr=False)
    region: str = DEFAULT_REGION
    endpoint_url: str | None = None
    compression: bool = True
    verbose: bool = False
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"
    metrics_type: str = "noop"
    temp_dir: str | None = None

    # Malformed environment values replaced by defaults; logged at startup
    warnings: tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_enabled(self) -> bool:
        """True when a bucket and the minimum credential pair are configured."""
        return bool(self.bucket and self.access_key_id and self.secret_access_key)

    @property
    def archive_extension(self) -> str:
        return "tar.gz" if self.compression else "tar"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> "CacheConfig":
        """Build config from environment variables + explicit overrides.

        Never raises for malformed values: caching must not block an install,
        so bad settings fall back to their defaults and are recorded in
        ``warnings``.
        """
        if environ is None:
            environ = os.environ

        warnings: list[str] = []
        verbose = _bool_env(environ, "CACHE_VERBOSE", False, warnings)
        default_level = "DEBUG" if verbose else "INFO"
        values: dict[str, object] = {
            "bucket": _env(environ, "CACHE_S3_BUCKET"),
            "prefix": (_env(environ, "CACHE_S3_PREFIX") or DEFAULT_PREFIX).strip("/"),
            "access_key_id": _env(environ, "AWS_ACCESS_KEY_ID"),
            "secret_access_key": _env(environ, "AWS_SECRET_ACCESS_KEY"),
            "session_token": _env(environ, "AWS_SESSION_TOKEN"),
            "region": _env(environ, "AWS_REGION") or DEFAULT_REGION,
            "endpoint_url": _env(environ, "AWS_ENDPOINT_URL"),
            "compression": _bool_env(environ, "CACHE_COMPRESSION", True, warnings),
            "verbose": verbose,
            "timeout": _timeout_env(environ, warnings),
            "log_level": _choice_env(
                environ, "CACHE_LOG_LEVEL", _LOG_LEVELS, default_level, warnings, str.upper
            ),
            "metrics_type": _choice_env(environ, "CACHE_METRICS", _METRICS_TYPES, "noop", warnings),
            "temp_dir": _env(environ, "CACHE_TEMP_DIR"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["warnings"] = tuple(warnings)
        return cls(**values)  # type: ignore[arg-type]

"""Tests for CacheConfig."""

import itertools

import pytest

from depcache.core import CacheConfig
from depcache.core.config import parse_bool


@pytest.mark.parametrize(
    ("bucket", "access_key", "secret_key"),
    list(itertools.product([None, "value"], repeat=3)),
)
def test_enabled_requires_bucket_and_both_credentials(bucket, access_key, secret_key):
    config = CacheConfig(bucket=bucket, access_key_id=access_key, secret_access_key=secret_key)

    assert config.is_enabled is all((bucket, access_key, secret_key))


def test_from_env_defaults():
    config = CacheConfig.from_env({})

    assert config.bucket is None
    assert config.prefix == "claude-sandbox-cache"
    assert config.region == "us-east-1"
    assert config.compression is True
    assert config.verbose is False
    assert config.timeout == 300.0
    assert config.log_level == "INFO"
    assert config.metrics_type == "noop"
    assert not config.is_enabled


def test_from_env_reads_all_variables():
    config = CacheConfig.from_env(
        {
            "CACHE_S3_BUCKET": "deps",
            "CACHE_S3_PREFIX": "/ci-cache/",
            "AWS_ACCESS_KEY_ID": "AKIA",
            "AWS_SECRET_ACCESS_KEY": "secret",
            "AWS_REGION": "eu-west-1",
            "AWS_ENDPOINT_URL": "https://fra1.digitaloceanspaces.com",
            "CACHE_COMPRESSION": "false",
            "CACHE_VERBOSE": "true",
            "CACHE_TIMEOUT": "45",
        }
    )

    assert config.is_enabled
    assert config.prefix == "ci-cache"
    assert config.region == "eu-west-1"
    assert config.endpoint_url == "https://fra1.digitaloceanspaces.com"
    assert config.compression is False
    assert config.archive_extension == "tar"
    assert config.verbose is True
    assert config.log_level == "DEBUG"
    assert config.timeout == 45.0


def test_empty_strings_count_as_unset():
    config = CacheConfig.from_env(
        {"CACHE_S3_BUCKET": "deps", "AWS_ACCESS_KEY_ID": "", "AWS_SECRET_ACCESS_KEY": "secret"}
    )

    assert config.access_key_id is None
    assert not config.is_enabled


def test_overrides_win_over_environment():
    config = CacheConfig.from_env({"CACHE_S3_BUCKET": "from-env"}, bucket="explicit", log_level=None)

    assert config.bucket == "explicit"
    assert config.log_level == "INFO"


def test_config_is_immutable():
    config = CacheConfig()

    with pytest.raises(AttributeError):
        config.bucket = "changed"  # type: ignore[misc]


def test_credentials_hidden_from_repr():
    config = CacheConfig(bucket="b", access_key_id="AKIA", secret_access_key="topsecret")

    assert "topsecret" not in repr(config)
    assert "AKIA" not in repr(config)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("1", True), ("YES", True), ("off", False), ("0", False), ("", True), (None, True)],
)
def test_parse_bool(raw, expected):
    assert parse_bool(raw, True) is expected


def test_malformed_values_fall_back_to_defaults_with_warnings():
    config = CacheConfig.from_env(
        {
            "CACHE_COMPRESSION": "maybe",
            "CACHE_VERBOSE": "loud",
            "CACHE_TIMEOUT": "soon",
            "CACHE_LOG_LEVEL": "chatty",
            "CACHE_METRICS": "statsd",
        }
    )

    assert config.compression is True
    assert config.verbose is False
    assert config.timeout == 300.0
    assert config.log_level == "INFO"
    assert config.metrics_type == "noop"
    assert len(config.warnings) == 5
    assert any("CACHE_COMPRESSION" in w for w in config.warnings)


@pytest.mark.parametrize("raw", ["0", "-5", "nan"])
def test_non_positive_timeout_is_rejected(raw):
    config = CacheConfig.from_env({"CACHE_TIMEOUT": raw})

    assert config.timeout == 300.0
    assert config.warnings


def test_valid_environment_has_no_warnings():
    config = CacheConfig.from_env({"CACHE_LOG_LEVEL": "warning", "CACHE_METRICS": "Logging"})

    assert config.log_level == "WARNING"
    assert config.metrics_type == "logging"
    assert config.warnings == ()


def test_parse_bool_rejects_garbage():
    with pytest.raises(ValueError):
        parse_bool("maybe", True)

# pyright: reportUnknownMemberType=false
import dataclasses

import pytest

from callconf.networking.config import HttpClientConfig

TIMEOUT_FIELDS = (
    "timeout_seconds",
    "connect_timeout_seconds",
    "read_timeout_seconds",
)


def _with_timeout(name: str, value: float) -> HttpClientConfig:
    if name == "timeout_seconds":
        return HttpClientConfig(timeout_seconds=value)
    paired = {"connect_timeout_seconds": 1.0, "read_timeout_seconds": 1.0}
    paired[name] = value
    return HttpClientConfig(**paired)


def test_defaults_send_error_statuses_as_responses():
    config = HttpClientConfig()

    assert config.raise_for_status is False
    assert config.verify_tls is True
    assert config.user_agent is None
    assert dict(config.default_headers) == {}
    assert config.timeout_seconds is None


def test_raise_for_status_is_fixed_after_construction():
    config = HttpClientConfig(raise_for_status=True)

    assert config.raise_for_status is True
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.raise_for_status = False  # type: ignore[misc]


@pytest.mark.parametrize("name", TIMEOUT_FIELDS)
@pytest.mark.parametrize("value", [0, -0.5])
def test_non_positive_timeout_is_rejected_by_name(name, value):
    with pytest.raises(ValueError, match=name):
        _with_timeout(name, value)


@pytest.mark.parametrize("name", TIMEOUT_FIELDS)
def test_positive_timeout_is_accepted(name):
    config = _with_timeout(name, 2.5)

    assert getattr(config, name) == 2.5


def test_connect_and_read_timeouts_come_in_pairs():
    with pytest.raises(ValueError, match="set together"):
        HttpClientConfig(connect_timeout_seconds=1.0)
    with pytest.raises(ValueError, match="set together"):
        HttpClientConfig(read_timeout_seconds=2.0)


def test_pair_check_runs_before_positive_check():
    with pytest.raises(ValueError, match="set together"):
        HttpClientConfig(connect_timeout_seconds=-1.0)


def test_default_headers_are_frozen_copies():
    headers = {"X-Client": "callconf"}
    config = HttpClientConfig(default_headers=headers)
    headers["X-Client"] = "changed"

    assert config.default_headers["X-Client"] == "callconf"
    with pytest.raises(TypeError):
        config.default_headers["X-Client"] = "x"  # type: ignore[index]
    assert HttpClientConfig().default_headers is not (
        HttpClientConfig().default_headers
    )

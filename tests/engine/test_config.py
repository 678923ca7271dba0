import pytest

from rtlift.config import load_lift_config


def test_defaults_are_off() -> None:
    config = load_lift_config()
    assert not config.diagnostics
    assert not config.trace


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("yes", True), (" TRUE ", True), ("0", False), ("off", False), ("False", False), ("", False)],
)
def test_env_flags(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("RTLIFT_DIAGNOSTICS", raw)
    monkeypatch.setenv("RTLIFT_TRACE", raw)
    config = load_lift_config()
    assert config.diagnostics is expected
    assert config.trace is expected

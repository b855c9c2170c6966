from __future__ import annotations

import pytest

from annocurate.config import DEFAULT_WINDOW_SIZE, CurationConfig


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("ANNOCURATE_WINDOW_SIZE", "ANNOCURATE_SCRIPT_DIRECTION", "ANNOCURATE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    config = CurationConfig()
    assert config.window_size == DEFAULT_WINDOW_SIZE
    assert config.script_direction == "LTR"
    assert config.log_level == "INFO"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANNOCURATE_WINDOW_SIZE", "4")
    monkeypatch.setenv("ANNOCURATE_SCRIPT_DIRECTION", "rtl")
    config = CurationConfig()
    assert config.window_size == 4
    assert config.script_direction == "RTL"


@pytest.mark.parametrize("raw", ["ten", "0", "-3"])
def test_unusable_environment_falls_back(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("ANNOCURATE_WINDOW_SIZE", raw)
    monkeypatch.setenv("ANNOCURATE_SCRIPT_DIRECTION", "sideways")
    config = CurationConfig()
    assert config.window_size == DEFAULT_WINDOW_SIZE
    assert config.script_direction == "LTR"


def test_explicit_values_are_validated() -> None:
    with pytest.raises(ValueError):
        CurationConfig(window_size=0)
    with pytest.raises(ValueError):
        CurationConfig(script_direction="TTB")

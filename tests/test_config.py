import pytest

import config


def test_int_env_default(monkeypatch):
    monkeypatch.delenv("HASH_SIZE", raising=False)
    assert config._int_env("HASH_SIZE", 8, minimum=2) == 8


def test_int_env_value(monkeypatch):
    monkeypatch.setenv("HASH_SIZE", "16")
    assert config._int_env("HASH_SIZE", 8, minimum=2) == 16


@pytest.mark.parametrize("raw", ["1", "-4", "big"])
def test_int_env_invalid(monkeypatch, raw):
    monkeypatch.setenv("HASH_SIZE", raw)
    with pytest.raises(RuntimeError) as exc:
        config._int_env("HASH_SIZE", 8, minimum=2)
    assert "HASH_SIZE" in str(exc.value)


def test_hash_size_is_square():
    assert config.get_hash_size() == (config.HASH_SIZE, config.HASH_SIZE)

"""Tests for environment-driven configuration."""

import pytest

from stf_converter import config


class TestEnvInt:
    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv("STF_TEST_INT", raising=False)
        assert config._env_int("STF_TEST_INT", 7) == 7

    def test_blank_uses_default(self, monkeypatch):
        monkeypatch.setenv("STF_TEST_INT", "  ")
        assert config._env_int("STF_TEST_INT", 7) == 7

    @pytest.mark.parametrize("raw, expected", [("12", 12), ("0x10", 16), (" 3 ", 3)])
    def test_parses_integers(self, monkeypatch, raw, expected):
        monkeypatch.setenv("STF_TEST_INT", raw)
        assert config._env_int("STF_TEST_INT", 0) == expected

    def test_rejects_non_integer(self, monkeypatch):
        monkeypatch.setenv("STF_TEST_INT", "lots")
        with pytest.raises(ValueError, match="STF_TEST_INT must be an integer"):
            config._env_int("STF_TEST_INT", 0)


class TestDefaults:
    def test_extensions(self):
        assert config.STF_FILE_EXTENSIONS == {".stf"}
        assert config.TABLE_EXTENSIONS == {".json", ".csv"}

    def test_log_level_is_upper_case(self):
        assert config.LOG_LEVEL == config.LOG_LEVEL.upper()

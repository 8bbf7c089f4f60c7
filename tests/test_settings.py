import pytest

from settings import Settings, get_settings

_VARS = ("PRAYER_DEFAULT_METHOD", "PRAYER_ORANGE_MINUTES", "PRAYER_RED_MINUTES", "PRAYER_MAX_DAYS", "LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


class TestGetSettings:
    def test_defaults(self):
        """Test defaults when nothing is configured"""
        assert get_settings() == Settings()

    def test_reads_environment(self, monkeypatch):
        """Test that environment variables override the defaults"""
        monkeypatch.setenv("PRAYER_DEFAULT_METHOD", "13")
        monkeypatch.setenv("PRAYER_ORANGE_MINUTES", "45")
        monkeypatch.setenv("PRAYER_RED_MINUTES", "5")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = get_settings()

        assert settings.default_method == 13
        assert settings.orange_minutes == 45
        assert settings.red_minutes == 5
        assert settings.log_level == "DEBUG"

    def test_blank_value_uses_default(self, monkeypatch):
        """Test that an empty variable is treated as unset"""
        monkeypatch.setenv("PRAYER_MAX_DAYS", " ")
        assert get_settings().max_days == 31

    def test_malformed_integer_raises(self, monkeypatch):
        """Test that a non-integer value names the variable"""
        monkeypatch.setenv("PRAYER_RED_MINUTES", "ten")
        with pytest.raises(ValueError, match="PRAYER_RED_MINUTES must be an integer"):
            get_settings()

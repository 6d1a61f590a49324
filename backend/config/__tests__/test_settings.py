"""
Unit tests for settings parsing.

Run: python3 -m pytest config/__tests__/test_settings.py -v
"""
import pytest

from config.settings import Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:

    def test_allowed_origins_parsed(self):
        settings = make_settings(ALLOWED_ORIGINS="http://a.com, http://b.com ,")

        assert settings.get_allowed_origins() == ["http://a.com", "http://b.com"]

    def test_admin_emails_lowercased(self):
        settings = make_settings(ADMIN_EMAILS="Boss@Example.com, ops@example.com")

        assert settings.get_admin_emails() == ["boss@example.com", "ops@example.com"]

    def test_admin_emails_empty(self):
        assert make_settings(ADMIN_EMAILS="").get_admin_emails() == []

    @pytest.mark.parametrize("profile,expected", [
        ("dev", True),
        ("LOCAL", True),
        ("production", False),
        ("staging", False),
    ])
    def test_is_development(self, profile, expected):
        assert make_settings(APP_ENV=profile).is_development() is expected

    def test_credential_policy_defaults(self, monkeypatch):
        monkeypatch.delenv("BCRYPT_ROUNDS", raising=False)
        monkeypatch.delenv("MIN_PASSWORD_LENGTH", raising=False)

        settings = make_settings()

        assert settings.MIN_PASSWORD_LENGTH == 6
        assert settings.BCRYPT_ROUNDS == 12

    def test_default_profile_is_not_development(self, monkeypatch):
        monkeypatch.delenv("APP_ENV", raising=False)

        settings = make_settings()

        assert settings.APP_ENV == "production"
        assert settings.is_development() is False

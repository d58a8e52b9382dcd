"""
Tests unitaires configuration

Vérifie: chargement YAML, section optionnelle, cohérence des valeurs.
"""

import pytest
from pydantic import ValidationError
from zoneinfo import ZoneInfo

from studyhub_access.core import AccessCoreSettings, ConfigIntegrityError, load_settings


SECRET = "s" * 32


class TestLoadSettings:
    def test_load_fixture(self, fixtures_path):
        settings = load_settings(fixtures_path / "configs" / "access_core.yaml")

        assert settings.jwt_algorithm == "HS256"
        assert settings.access_token_ttl_seconds == 3600
        assert settings.refresh_token_ttl_seconds == 86400
        assert settings.login_user_limit == 5
        assert settings.timezone == ZoneInfo("Asia/Shanghai")

    def test_overrides_take_precedence(self, fixtures_path):
        settings = load_settings(
            fixtures_path / "configs" / "access_core.yaml",
            overrides={"login_ip_limit": 100},
        )

        assert settings.login_ip_limit == 100

    def test_flat_file_without_section(self, tmp_path):
        path = tmp_path / "flat.yaml"
        path.write_text(f"jwt_secret: {SECRET}\nkey_prefix: campus\n", encoding="utf-8")

        assert load_settings(path).key_prefix == "campus"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigIntegrityError):
            load_settings(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("access_core: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigIntegrityError):
            load_settings(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigIntegrityError):
            load_settings(path)

    def test_invalid_values_wrapped(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(f"jwt_secret: {SECRET}\nlogin_user_limit: 0\n", encoding="utf-8")

        with pytest.raises(ConfigIntegrityError):
            load_settings(path)


class TestSettingsValidation:
    def test_defaults(self):
        settings = AccessCoreSettings(jwt_secret=SECRET)

        assert settings.access_token_ttl_seconds == 3600
        assert settings.refresh_token_ttl_seconds == 86400
        assert settings.download_default_daily_limit == 20

    def test_access_must_be_shorter_than_refresh(self):
        with pytest.raises(ValidationError):
            AccessCoreSettings(jwt_secret=SECRET, access_token_ttl_seconds=86400)

    def test_hs256_requires_secret(self):
        with pytest.raises(ValidationError):
            AccessCoreSettings()

    def test_short_secret(self):
        with pytest.raises(ValidationError):
            AccessCoreSettings(jwt_secret="short")

    def test_es384_requires_key_path(self):
        with pytest.raises(ValidationError):
            AccessCoreSettings(jwt_algorithm="ES384")

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            AccessCoreSettings(jwt_secret=SECRET, server_timezone="Mars/Olympus")

    def test_prefix_without_separator(self):
        with pytest.raises(ValidationError):
            AccessCoreSettings(jwt_secret=SECRET, key_prefix="a:b")

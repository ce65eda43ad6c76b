import pytest

from address_reconcile.config import Settings


def test_settings_defaults():
    settings = Settings.from_env({})

    assert settings.db_dsn is None
    assert settings.match_max_distance == 0.005
    assert settings.country == "CZ"
    assert settings.tile_size == 1.0


def test_settings_read_prefixed_variables():
    settings = Settings.from_env(
        {
            "RECONCILE_DB_DSN": "postgresql://localhost/ruian",
            "RECONCILE_MATCH_MAX_DISTANCE": "0.001",
            "RECONCILE_LOG_LEVEL": "debug",
            "RECONCILE_HTTP_TIMEOUT": "60",
        }
    )

    assert settings.db_dsn == "postgresql://localhost/ruian"
    assert settings.match_max_distance == 0.001
    assert settings.log_level == "DEBUG"
    assert settings.http_timeout == 60


def test_settings_reject_invalid_numbers():
    with pytest.raises(ValueError, match="RECONCILE_TILE_SIZE"):
        Settings.from_env({"RECONCILE_TILE_SIZE": "wide"})

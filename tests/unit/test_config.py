"""
Unit tests for configuration selection.
"""

import pytest

from eulist.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
)


pytestmark = pytest.mark.unit


@pytest.mark.parametrize("env, expected", [
    ("development", DevelopmentConfig),
    ("testing", TestingConfig),
    ("production", ProductionConfig),
    ("unknown", DevelopmentConfig),
])
def test_get_config_by_name(env, expected):
    assert get_config(env) is expected


def test_get_config_falls_back_to_flask_env(monkeypatch):
    monkeypatch.setenv("FLASK_ENV", "production")

    assert get_config() is ProductionConfig


def test_config_carries_only_settings_the_app_reads():
    # Arrange
    config_class = get_config("testing")

    # Assert
    assert not hasattr(config_class, "SECRET_KEY")
    assert config_class.DATABASE_URL
    assert isinstance(config_class.PORT, int)

"""
Application configuration module.

This module defines configuration classes for different environments
(development, testing, production). Configuration values are loaded
from environment variables with sensible defaults. A ``.env`` file in
the working directory is loaded first so local development can keep
its connection string out of the shell profile.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _database_url(default: str) -> str:
    """Resolve the storage connection string, preferring ``MONGODB_URI``."""
    return os.environ.get("MONGODB_URI") or os.environ.get("DATABASE_URL", default)


class Config:
    """Base configuration with default settings."""

    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Either a mongodb:// URI or an SQLAlchemy URL; relative SQLite paths
    # resolve inside the Flask instance folder
    DATABASE_URL: str = _database_url("sqlite:///tasks.db")
    MONGO_DB_NAME: str = os.environ.get("MONGO_DB_NAME", "eulist")
    MONGO_TIMEOUT_MS: int = int(os.environ.get("MONGO_TIMEOUT_MS", "5000"))

    HOST: str = os.environ.get("HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("PORT", "3000"))
    CORS_ORIGINS: str = os.environ.get("CORS_ORIGINS", "*")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Testing environment configuration."""

    DEBUG: bool = True
    TESTING: bool = True

    # In-memory SQLite; Flask-SQLAlchemy shares one connection across threads
    DATABASE_URL: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("FLASK_ENV", "development")
    return config.get(env, config["default"])

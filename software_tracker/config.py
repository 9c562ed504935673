"""
Application configuration classes.

Each class represents a deployment environment.  The factory function
``create_app`` in ``software_tracker/__init__.py`` selects the
appropriate config based on the FLASK_ENV environment variable.

Database connection strings default to the ``mssql+pyodbc`` dialect
(SQL Server via ODBC Driver 18).  Any SQLAlchemy URL can be supplied
through ``DATABASE_URL``; the test configuration runs against an
in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
"""

import logging
import os

_logger = logging.getLogger(__name__)

# Sentinel for detecting an unset SECRET_KEY in production.
_DEFAULT_SECRET_KEY = "dev-secret-change-me"


class BaseConfig:
    """
    Shared configuration values inherited by all environments.

    Secrets and connection strings are loaded from environment variables
    so they never appear in source control.
    """

    # -- Flask core --------------------------------------------------------
    SECRET_KEY: str = os.environ.get("SECRET_KEY", _DEFAULT_SECRET_KEY)

    # Keep keys in the order the serializers build them.
    JSON_SORT_KEYS: bool = False

    # -- SQLAlchemy --------------------------------------------------------
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        (
            "mssql+pyodbc://@localhost\\SQLEXPRESS/SoftwareTrackerDev"
            "?driver=ODBC+Driver+18+for+SQL+Server"
            "&TrustServerCertificate=yes"
            "&Trusted_Connection=yes"
        ),
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ECHO: bool = False

    # -- API pagination ----------------------------------------------------
    # Page size used by list endpoints when ``page_size`` is omitted.
    API_DEFAULT_PAGE_SIZE: int = int(os.environ.get("API_DEFAULT_PAGE_SIZE", "10"))
    # Upper bound on ``page_size`` to keep list queries cheap.
    API_MAX_PAGE_SIZE: int = int(os.environ.get("API_MAX_PAGE_SIZE", "100"))

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def validate_production_secrets(cls, app_config: dict) -> None:
        """
        Verify that required secrets are set for production.

        Args:
            app_config: The ``app.config`` dict after loading the
                        config class.

        Raises:
            RuntimeError: If the secret key is still the insecure default.
        """
        if app_config.get("SECRET_KEY") == _DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "Production configuration errors:\n  - SECRET_KEY is still "
                "the insecure default. Generate one with: python -c "
                '"import secrets; print(secrets.token_hex(32))"'
            )

        if app_config.get("LOG_LEVEL", "").upper() == "DEBUG":
            _logger.warning(
                "LOG_LEVEL=DEBUG is not recommended in production; SQL "
                "statements may appear in logs. Consider INFO or WARNING."
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging, SQL echo enabled."""

    DEBUG: bool = True
    SQLALCHEMY_ECHO: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """
    Testing environment: uses a throwaway database.

    Defaults to in-memory SQLite so the suite needs no server.  Point
    ``TEST_DATABASE_URL`` at a SQL Server test database to run the same
    tests against the production dialect.
    """

    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL", "sqlite:///:memory:"
    )
    LOG_LEVEL: str = "DEBUG"


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    The application factory calls ``validate_production_secrets()`` at
    startup and refuses to launch if critical values are missing.
    """

    DEBUG: bool = False
    SQLALCHEMY_ECHO: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")

    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL",
        (
            "mssql+pyodbc://@localhost\\SQLEXPRESS/SoftwareTracker"
            "?driver=ODBC+Driver+18+for+SQL+Server"
            "&Encrypt=yes"
            "&Trusted_Connection=yes"
        ),
    )


# Lookup dict used by the application factory.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}

# config/base.py
import os


def _coerce_bool(value, default=False):
    """Convert environment-style truthy/falsey values to bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value_str = str(value).strip().lower()
    if value_str in {"1", "true", "yes", "on"}:
        return True
    if value_str in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_name_list(value):
    """
    Parse a comma-separated name list while keeping order and removing duplicates.

    Returns:
        tuple[str, ...]: Normalized identifiers.
    """
    if not value:
        return ()

    seen = set()
    names = []
    for raw_item in value.split(","):
        item = raw_item.strip().lower()
        if not item or item in seen:
            continue
        seen.add(item)
        names.append(item)
    return tuple(names)


_config_dir = os.path.dirname(os.path.abspath(__file__))


class Config:
    _flask_env = os.environ.get("FLASK_ENV", "development")

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    ENABLE_CONSOLE_LOGGING = _coerce_bool(os.environ.get("ENABLE_CONSOLE_LOGGING"), default=True)

    # Importer configuration
    IMPORTER_ENABLED = _coerce_bool(os.environ.get("IMPORTER_ENABLED"), default=True)
    IMPORTER_DISABLED = _parse_name_list(os.environ.get("IMPORTER_DISABLED", ""))
    IMPORTER_UVL_SOURCE = os.environ.get("IMPORTER_UVL_SOURCE")
    IMPORTER_TRADE_EVENTS_SOURCE = os.environ.get("IMPORTER_TRADE_EVENTS_SOURCE")
    try:
        IMPORTER_HTTP_TIMEOUT = float(os.environ.get("IMPORTER_HTTP_TIMEOUT", "30"))
    except ValueError:
        IMPORTER_HTTP_TIMEOUT = 30.0

    COUNTRY_MAPPINGS_PATH = os.environ.get(
        "COUNTRY_MAPPINGS_PATH",
        os.path.join(_config_dir, "country_mappings.yaml"),
    )

    CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL")
    CELERY_RESULT_BACKEND = os.environ.get("CELERY_RESULT_BACKEND")
    CELERY_SQLITE_PATH = os.environ.get("CELERY_SQLITE_PATH")
    CELERY_CONFIG = os.environ.get("CELERY_CONFIG")


class DevelopmentConfig(Config):
    DEBUG = True
    _project_root = os.path.dirname(_config_dir)
    instance_path = os.path.join(_project_root, "instance")

    if not os.path.exists(instance_path):
        os.makedirs(instance_path, exist_ok=True)

    # Use absolute path for SQLite - Windows needs forward slashes in URI
    db_path = os.path.join(instance_path, "index_dev.db").replace("\\", "/")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", f"sqlite:///{db_path}")
    SQLALCHEMY_ECHO = False
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": 5,
            }
        }


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key-for-testing-only"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ECHO = False
    LOG_LEVEL = "DEBUG"
    IMPORTER_ENABLED = True
    IMPORTER_DISABLED = ()
    CELERY_CONFIG = {"task_always_eager": True, "task_eager_propagates": True}


class ProductionConfig(Config):
    DEBUG = False
    uri = os.environ.get("DATABASE_URL")
    if uri and uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_ECHO = False

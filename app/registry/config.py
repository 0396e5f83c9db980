import os
from dataclasses import dataclass

APP_VERSION = "1.0.0"


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str

    api_prefix: str
    log_level: str
    auto_create_tables: bool


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name)
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    env = _getenv("ENV", "development")
    api_prefix = "/" + _getenv("API_PREFIX", "/api").strip("/")
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=env,
        database_url=_getenv("DATABASE_URL", "sqlite:///clientes.db"),
        api_prefix=api_prefix if api_prefix != "/" else "/api",
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        # Production schema is owned by alembic (scripts/release.py).
        auto_create_tables=_getenv_bool("AUTO_CREATE_TABLES", env.lower() not in ("prod", "production")),
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "APP_VERSION": APP_VERSION,
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "API_PREFIX": s.api_prefix,
        "LOG_LEVEL": s.log_level,
        "AUTO_CREATE_TABLES": s.auto_create_tables,
        # request body limit (1MB); customer payloads are tiny
        "MAX_CONTENT_LENGTH": 1 * 1024 * 1024,
    }

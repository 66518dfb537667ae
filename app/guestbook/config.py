import os
from dataclasses import dataclass

DEFAULT_JWT_SECRET = "default-secret-change-this"
DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "admin123"
DEFAULT_DATABASE_URL = "sqlite:///guestbook.db"


@dataclass(frozen=True)
class Settings:
    env: str
    database_url: str
    storage_mode: str

    jwt_secret: str
    admin_username: str
    admin_password: str
    admin_password_hash: str
    token_ttl_hours: int

    entries_page_size: int
    entries_max_limit: int
    newsletter_tag: str
    dashboard_workers: int
    auto_create_tables: bool
    log_level: str
    cors_origins: list[str]


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer (got {raw!r}).") from None
    if value < 1:
        raise RuntimeError(f"{name} must be >= 1 (got {value}).")
    return value


def normalize_database_url(url: str) -> str:
    # Hosted Postgres providers hand out postgres:// URLs; SQLAlchemy only accepts postgresql://
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def storage_mode_for_url(url: str) -> str:
    return "postgres" if url.startswith("postgres") else "sqlite"


def normalize_storage_mode(mode: str) -> str:
    mode = mode.strip().lower()
    return "postgres" if mode == "postgresql" else mode


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name).lower()
    if not raw:
        return default
    return raw not in ("0", "false", "no", "off")


def _getenv_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in _getenv(name, default).split(",") if item.strip()]


def load_settings() -> Settings:
    database_url = normalize_database_url(
        _getenv("DATABASE_URL")
        or _getenv("POSTGRES_URL")
        or _getenv("POSTGRES_PRISMA_URL")
        or DEFAULT_DATABASE_URL
    )
    return Settings(
        env=_getenv("ENV", "development"),
        database_url=database_url,
        storage_mode=normalize_storage_mode(_getenv("STORAGE_MODE", storage_mode_for_url(database_url))),
        jwt_secret=_getenv("JWT_SECRET", DEFAULT_JWT_SECRET),
        admin_username=_getenv("ADMIN_USERNAME", DEFAULT_ADMIN_USERNAME),
        # Passwords are not stripped: surrounding whitespace may be intentional.
        admin_password=os.environ.get("ADMIN_PASSWORD") or DEFAULT_ADMIN_PASSWORD,
        admin_password_hash=_getenv("ADMIN_PASSWORD_HASH"),
        token_ttl_hours=_getenv_int("TOKEN_TTL_HOURS", 24),
        entries_page_size=_getenv_int("ENTRIES_PAGE_SIZE", 20),
        entries_max_limit=_getenv_int("ENTRIES_MAX_LIMIT", 100),
        newsletter_tag=_getenv("NEWSLETTER_TAG", "Born to Run Exhibit"),
        dashboard_workers=_getenv_int("DASHBOARD_WORKERS", 6),
        auto_create_tables=_getenv_bool("AUTO_CREATE_TABLES", True),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_getenv_list("CORS_ORIGINS", "*"),
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "STORAGE_MODE": s.storage_mode,
        "JWT_SECRET": s.jwt_secret,
        "ADMIN_USERNAME": s.admin_username,
        "ADMIN_PASSWORD": s.admin_password,
        "ADMIN_PASSWORD_HASH": s.admin_password_hash,
        "TOKEN_TTL_HOURS": s.token_ttl_hours,
        "ENTRIES_PAGE_SIZE": s.entries_page_size,
        "ENTRIES_MAX_LIMIT": s.entries_max_limit,
        "NEWSLETTER_TAG": s.newsletter_tag,
        "DASHBOARD_WORKERS": s.dashboard_workers,
        "AUTO_CREATE_TABLES": s.auto_create_tables,
        "LOG_LEVEL": s.log_level,
        "CORS_ORIGINS": s.cors_origins,
    }


def insecure_defaults_in_use(config: dict) -> list[str]:
    """Names of security-relevant settings still on their development defaults."""
    found = []
    if config.get("JWT_SECRET") == DEFAULT_JWT_SECRET:
        found.append("JWT_SECRET")
    if not config.get("ADMIN_PASSWORD_HASH") and config.get("ADMIN_PASSWORD") == DEFAULT_ADMIN_PASSWORD:
        found.append("ADMIN_PASSWORD")
    return found

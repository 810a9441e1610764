import os
import logging
import threading


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ["true", "1", "yes", "on"]


class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE", "development")
        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

        # Database
        self.DATABASE_URL = os.environ.get("DATABASE_URL", None)
        self.POSTGRES_URL = os.environ.get("POSTGRES_URL", "localhost:5432")
        self.POSTGRES_USER = os.environ.get("POSTGRES_USER", "postgres")
        self.POSTGRES_PASSWORD = os.environ.get("POSTGRES_PASSWORD", "postgres_secret")
        self.POSTGRES_DB = os.environ.get("POSTGRES_DB", "lexpilot")

        # Session tokens
        self.JWT_SECRET = os.environ.get("JWT_SECRET", "change-this-secret-in-production")
        self.JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
        self.SESSION_TOKEN_TTL_MINUTES = int(os.environ.get("SESSION_TOKEN_TTL_MINUTES", "1440"))

        # Azure AD single sign-on
        self.AZURE_AD_TENANT_ID = os.environ.get("AZURE_AD_TENANT_ID", "")
        self.AZURE_AD_CLIENT_ID = os.environ.get("AZURE_AD_CLIENT_ID", "")

        # Route permission table
        self.ROUTE_TABLE_PATH = os.environ.get("ROUTE_TABLE_PATH", None)
        self.ROUTE_DEFAULT_ALLOW = _env_flag("ROUTE_DEFAULT_ALLOW", "true")

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_URL}/{self.POSTGRES_DB}"


settings = BackendSettings()


def configure_logging(level: str = None):
    """Configure root logging for CLI and server entry points."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

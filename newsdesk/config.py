"""
Configuration settings for Newsdesk Backend
"""

from pydantic_settings import BaseSettings
from typing import List


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in (value or "").split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Server Configuration
    APP_NAME: str = "Newsdesk Backend"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # Firebase Configuration
    FIREBASE_CREDENTIALS_PATH: str = "./firebase-credentials.json"
    # Support for raw JSON credentials (env var)
    FIREBASE_CREDENTIALS_JSON: str = ""
    FIREBASE_DATABASE_URL: str = ""
    FIREBASE_EMULATOR_HOST: str = ""
    DEV_MODE: bool = False

    # Datastore layout
    ARTICLES_PATH: str = "articoli"
    # Ordered oldest to newest; later paths win when the same uid appears twice
    LEGACY_USER_PATHS: str = "utenti,users,user"

    # Dashboard
    AUTH_LIST_USERS_LIMIT: int = 1000
    RECENT_USERS_LIMIT: int = 10
    # Synthetic placeholder users are only ever produced with this switched on
    DEMO_MODE: bool = False

    # Scheduled publication
    SCHEDULER_ENABLED: bool = True
    SCHEDULE_CHECK_INTERVAL_SECONDS: int = 60

    # Editors allowed into the admin area
    ADMIN_EMAILS: str = ""

    # Where provider action links send users back to
    APP_BASE_URL: str = "http://localhost:3000"

    # CORS Configuration
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:3001"

    @property
    def legacy_user_paths_list(self) -> List[str]:
        """Legacy profile roots in probe order"""
        return _split_csv(self.LEGACY_USER_PATHS)

    @property
    def admin_emails_list(self) -> List[str]:
        return [email.lower() for email in _split_csv(self.ADMIN_EMAILS)]

    @property
    def allowed_origins_list(self) -> List[str]:
        """Convert comma-separated origins to list"""
        origins = _split_csv(self.ALLOWED_ORIGINS)
        if self.DEBUG:
            for port in (3000, 3001, 5173):
                for host in ("localhost", "127.0.0.1"):
                    origin = f"http://{host}:{port}"
                    if origin not in origins:
                        origins.append(origin)
        return origins

    model_config = {"env_file": ".env",
                    "case_sensitive": True, "extra": "allow"}


# Global settings instance
settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    SECRET_KEY: str = "dev-secret-change"
    DEBUG: bool = False
    ALLOWED_HOSTS: list[str] = ["*"]

    # Database (sqlite file by default)
    DATABASE_ENGINE: str = "django.db.backends.sqlite3"
    DATABASE_NAME: str = "backoffice.sqlite3"

    LOG_LEVEL: str = "INFO"
    COMMISSION_POLICY: str = "ledger.services.commission.DatabaseCommissionPolicy"


env = EnvSettings()

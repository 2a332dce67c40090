from decimal import Decimal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration, read from the environment or a local .env file"""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Fallback to SQLite for local development
    DATABASE_URL: str = "sqlite:///./ledger_service/db/ledger_service.db"

    SECRET_KEY: str = "your_secret_key"
    JWT_ALGORITHM: str = "HS256"

    # Balances within [-epsilon, epsilon] are treated as settled
    BALANCE_EPSILON: Decimal = Decimal("0.01")
    DISPLAY_PRECISION: Decimal = Decimal("0.01")

    LOG_LEVEL: str = "INFO"


settings = Settings()

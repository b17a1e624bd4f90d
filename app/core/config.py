from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

DEFAULT_USD_TO_AED = 3.7


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"  # local|production; anything but production uses the Ziina sandbox
    APP_NAME: str = "Savana Blu API"
    # Comma-separated origins for CORS (e.g. https://savanablu.com). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480
    # pbkdf2_sha256 hash of the back office passcode (see app.core.security.hash_password)
    ADMIN_PASSCODE_HASH: str = ""

    REDIS_URL: str = "redis://localhost:6379/0"
    STORE_USE_REDIS: bool = True
    DATA_DIR: str = "./data"

    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "Savana Blu <hello@savanablu.com>"
    ADMIN_EMAIL: str = "hello@savanablu.com"

    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""

    APP_PUBLIC_URL: str = "http://localhost:3000"  # success/cancel URLs handed to Ziina

    # Ziina hosted payment page
    ZIINA_API_BASE: str = "https://api-v2.ziina.com/api"
    ZIINA_API_KEY: str = ""
    ZIINA_TIMEOUT: int = 25
    USD_TO_AED_RATE: float = DEFAULT_USD_TO_AED

    DEPOSIT_PERCENT: int = 20
    CONTACT_DUPLICATE_WINDOW_MINUTES: int = 5

    @field_validator("USD_TO_AED_RATE", mode="after")
    @classmethod
    def positive_fx_rate(cls, v: float) -> float:
        """A zero or negative rate in the environment falls back to the default."""
        if not v or v <= 0:
            return DEFAULT_USD_TO_AED
        return v

    @property
    def is_production(self) -> bool:
        return self.ENV.strip().lower() == "production"


settings = Settings()

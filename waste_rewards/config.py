from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Waste Rewards"
    SECRET_KEY: str = "a_very_secret_key"
    DATABASE_URL: str = "sqlite:///database.db"
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 14
    AUTH_COOKIE_NAME: str = "access_token"

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"
    VERIFICATION_TIMEOUT_SECONDS: float = 30.0
    VERIFICATION_CONFIDENCE_THRESHOLD: float = 0.7
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    REPORT_REWARD_POINTS: int = 10
    COLLECT_REWARD_POINTS: int = 10
    TRANSACTION_HISTORY_LIMIT: int = 10
    COLLECTION_TASKS_LIMIT: int = 20
    LEADERBOARD_LIMIT: int = 20


settings = Settings()

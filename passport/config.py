from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    SECRET_KEY: str = "a_very_secret_key"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    DATABASE_URL: str = "sqlite:///passport.db"
    SQL_ECHO: bool = False

    # Rows per INSERT statement when recording attendance in bulk
    ATTENDANCE_BATCH_SIZE: int = Field(default=100, gt=0)
    # True: a removal deducts points from every resolved user.
    # False: only from users whose attendance row was actually removed.
    REMOVAL_DEDUCTS_RESOLVED_USERS: bool = True

    LOG_LEVEL: str = "INFO"

settings = Settings()

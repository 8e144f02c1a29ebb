from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./feeledger.db", alias="DATABASE_URL")
    auto_create_tables: bool = Field(True, alias="AUTO_CREATE_TABLES")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    transaction_code_prefix: str = Field("UBA-PY", alias="TRANSACTION_CODE_PREFIX", max_length=20)
    arrears_policy: Literal["signed", "floor_at_zero"] = Field("signed", alias="ARREARS_POLICY")
    strict_category_billing: bool = Field(False, alias="STRICT_CATEGORY_BILLING")
    ledger_max_retries: int = Field(3, alias="LEDGER_MAX_RETRIES", ge=1)

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()

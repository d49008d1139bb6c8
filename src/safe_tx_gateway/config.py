from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TRANSACTION_SERVICE_URL = "https://safe-transaction-mainnet.safe.global"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # 基础配置
    app_env: str = Field(default="local", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")
    port: int = Field(default=8002, alias="PORT")

    # Safe Transaction Service
    transaction_service_url: str = Field(default=TRANSACTION_SERVICE_URL, alias="TRANSACTION_SERVICE_URL")
    info_request_timeout_s: float = Field(default=10.0, alias="INFO_REQUEST_TIMEOUT_S")
    # 单次 Token 查询的总预算，需容纳 3 次请求与重试间隔
    token_lookup_timeout_s: float = Field(default=35.0, alias="TOKEN_LOOKUP_TIMEOUT_S")

    # Redis（为空则不启用缓存）
    redis_url: str = Field(default="", alias="REDIS_URL")

    # 缓存 TTL
    token_info_cache_ttl_seconds: int = Field(default=86400, alias="TOKEN_INFO_CACHE_TTL_SECONDS")
    safe_info_cache_ttl_seconds: int = Field(default=10, alias="SAFE_INFO_CACHE_TTL_SECONDS")
    token_memo_max_entries: int = Field(default=1024, alias="TOKEN_MEMO_MAX_ENTRIES")

    # 批量富化并发数
    enrich_concurrency: int = Field(default=8, alias="ENRICH_CONCURRENCY")


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

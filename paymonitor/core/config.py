"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./paymonitor.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None
    busy_timeout_seconds: float = Field(default=15, gt=0)


class MonitorSettings(BaseModel):
    heartbeat_timeout_seconds: int = Field(default=180, gt=0)
    # 未携带 appid 的监控端消息归属的账号
    default_account_id: int = 1


class OrderSettings(BaseModel):
    close_timeout_minutes: int = Field(default=5, gt=0)
    inspect_timeout_minutes: int = Field(default=30, gt=0)
    reclaim_batch_limit: int = Field(default=100, gt=0)


class SchedulerSettings(BaseModel):
    enabled: bool = True
    interval_seconds: float = Field(default=60, gt=0)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Payment Monitor Server"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    monitor: MonitorSettings = MonitorSettings()
    orders: OrderSettings = OrderSettings()
    scheduler: SchedulerSettings = SchedulerSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def heartbeat_timeout(self) -> int:
        return self.monitor.heartbeat_timeout_seconds

    @property
    def default_account_id(self) -> int:
        return self.monitor.default_account_id


@lru_cache()
def get_settings() -> Settings:
    return Settings()

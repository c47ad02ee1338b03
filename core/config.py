"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class TosSettings(BaseModel):
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    region: str = "cn-beijing"
    endpoint: Optional[str] = None  # e.g. "tos-cn-beijing.volces.com"
    bucket: Optional[str] = None
    prefix: str = ""
    # URL options
    url: Optional[str] = None  # Public/CDN domain
    temporary_url: Optional[str] = None
    bucket_endpoint: bool = False
    # Visibility defaults
    default_visibility: str = "public"
    directory_visibility: str = "public"

    @field_validator("default_visibility", "directory_visibility")
    @classmethod
    def _check_visibility(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in ("public", "private"):
            raise ValueError(f"visibility 必须是 public 或 private，当前值: {v!r}")
        return v


class Settings(BaseSettings):
    """项目配置"""

    PROJECT_NAME: str = Field(default="flysystem-tos")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Optional[str] = Field(default=None, description="覆盖默认日志级别，如 DEBUG/INFO/WARNING")

    # 分组配置：TOS 采用嵌套模型，环境变量形如 TOS__BUCKET
    tos: TosSettings = Field(default_factory=TosSettings)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )


settings = Settings()

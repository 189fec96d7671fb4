"""
應用程式設定

使用 Pydantic BaseSettings 管理環境變數和配置
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    應用程式設定

    從環境變數和 .env 文件讀取設定，複合型別（dict / tuple）以 JSON 表示

    Attributes:
        log_level: 日誌級別 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        max_workers: 每次 fan-out 的最大並行呼叫數
        call_timeout: 單次遠端 worker 呼叫逾時（秒）
        fan_out_deadline: 整體 fan-out 期限（秒，None 表示不限）
        worker_registrations: worker 名稱 -> 基底 URL；空白時使用本機 worker
        tint_weights: tint 的 (R, G, B) 權重
        default_format: 來源格式不明時的輸出格式
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FANOUT_",
        case_sensitive=False,
    )

    # 日誌設定
    log_level: str = "INFO"

    # 派送設定
    max_workers: int = Field(default=8, ge=1)
    call_timeout: float = Field(default=30.0, gt=0)
    fan_out_deadline: float | None = None
    worker_registrations: dict[str, str] = Field(default_factory=dict)

    # 轉換設定
    tint_weights: tuple[float, float, float] = (0.0, 0.0, 0.9)
    default_format: str = "PNG"

    # 服務設定
    gateway_host: str = "0.0.0.0"
    gateway_port: int = 8080
    worker_host: str = "0.0.0.0"
    worker_port: int = 8081

    @field_validator("tint_weights")
    @classmethod
    def validate_tint_weights(
        cls, v: tuple[float, float, float]
    ) -> tuple[float, float, float]:
        for weight in v:
            if not 0.0 <= weight <= 1.0:
                raise ValueError(
                    f"tint_weights must be within [0.0, 1.0], got {weight}"
                )
        return v


# 創建全局設定實例
settings = AppSettings()

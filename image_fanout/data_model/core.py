"""
核心資料模型

使用 Pydantic 進行資料驗證和序列化，確保資料完整性
JSON 格式沿用 camelCase 欄位名稱，位元組以 base64 編碼
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransformName(StrEnum):
    """內建轉換名稱"""

    GRAYSCALE = "grayscale"
    SEPIA = "sepia"
    TINT = "tint"


# 遠端呼叫在期限內未完成時使用的錯誤類型
CANCELLED_ERROR_TYPE = "Cancelled"

_WIRE_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    ser_json_bytes="base64",
    val_json_bytes="base64",
)


class TransformedImage(BaseModel):
    """
    轉換後的圖片

    相等性為結構相等（名稱 + 轉換 + 位元組）

    Attributes:
        image_name: 原始圖片檔名
        transform_name: 套用的轉換名稱
        image_bytes: 轉換後的圖片位元組
    """

    model_config = _WIRE_CONFIG

    image_name: str
    transform_name: str
    image_bytes: bytes

    @property
    def succeeded(self) -> bool:
        """是否成功"""
        return True


class TransformFailure(BaseModel):
    """
    單一轉換失敗的紀錄

    Attributes:
        image_name: 原始圖片檔名
        transform_name: 失敗的轉換名稱
        error_type: 例外類別名稱，或 "Cancelled"
        message: 錯誤訊息
    """

    model_config = _WIRE_CONFIG

    image_name: str
    transform_name: str
    error_type: str
    message: str = ""

    @property
    def succeeded(self) -> bool:
        """是否成功"""
        return False

    @property
    def cancelled(self) -> bool:
        """是否因期限或取消而未完成"""
        return self.error_type == CANCELLED_ERROR_TYPE


TransformOutcome = TransformedImage | TransformFailure


class FanOutResult(BaseModel):
    """
    一次 fan-out 的彙整結果

    Attributes:
        requested: 呼叫端請求的轉換名稱（原始順序）
        images: 成功的轉換結果（完成順序）
        failures: 失敗的轉換紀錄
        unregistered: 請求了但目錄中沒有存活 worker 的名稱
    """

    model_config = ConfigDict(frozen=True)

    requested: tuple[str, ...] = Field(default_factory=tuple)
    images: tuple[TransformedImage, ...] = Field(default_factory=tuple)
    failures: tuple[TransformFailure, ...] = Field(default_factory=tuple)
    unregistered: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def dispatched(self) -> int:
        """實際送出的呼叫數"""
        return len(self.images) + len(self.failures)

    @property
    def success_rate(self) -> float:
        """成功率"""
        return len(self.images) / self.dispatched if self.dispatched > 0 else 0.0

    @property
    def is_complete_success(self) -> bool:
        """是否全部成功"""
        return not self.failures

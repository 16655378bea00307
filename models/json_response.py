from pydantic import BaseModel
from typing import Any, Optional


class JsonData(BaseModel):
    """通用响应数据模型"""
    code: int = 0
    data: Optional[Any] = None
    msg: Optional[str] = None

    @classmethod
    def success(cls, data: Any, msg: Optional[str] = None) -> "JsonData":
        """创建成功响应"""
        return cls(code=0, data=data, msg=msg)

    @classmethod
    def error(cls, msg: str = "error", code: int = -1, data: Any = None) -> "JsonData":
        """创建错误响应"""
        return cls(code=code, msg=msg, data=data)

"""Pydantic schemas used across the project."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

SUCCESS_CODE = 200


class HeartbeatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    t: str = Field(..., min_length=1)
    sign: str = Field(..., min_length=1)
    appid: Optional[str] = None


class PushRequest(HeartbeatRequest):
    type: str = Field(..., min_length=1)
    price: str = Field(..., min_length=1)


class ApiResponse(BaseModel):
    code: int = SUCCESS_CODE
    msg: str = "Success"
    data: Any = None

    @classmethod
    def success(cls, data: Any = None, msg: str = "Success") -> "ApiResponse":
        return cls(code=SUCCESS_CODE, msg=msg, data=data)

    @classmethod
    def error(cls, code: int, msg: str) -> "ApiResponse":
        return cls(code=code, msg=msg, data=None)


class PushResult(BaseModel):
    matched: bool
    order_code: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    scheduler_running: bool

"""
留存曲线参数模型

两类曲线族（带 kind 标签的联合类型）：
1. 幂函数: R(t) = a * t^(-b)
2. 指数衰减: R(t) = c + a * e^(-λt)

约定：t = 0（注册当天）留存率固定为 1.0，且任何 t 的结果都截断到 [0, 1]
"""

from typing import Annotated, Literal, Union
from pydantic import BaseModel, Field


class PowerCurve(BaseModel):
    """幂函数留存曲线 R(t) = a * t^(-b)"""
    kind: Literal["power"] = "power"
    a: float = Field(description="尺度参数 a")
    b: float = Field(description="衰减指数 b（越大衰减越快）")
    r_squared: float = Field(ge=0, le=1, description="对数空间拟合优度 R²")


class ExponentialCurve(BaseModel):
    """指数衰减留存曲线 R(t) = c + a * e^(-λt)"""
    kind: Literal["exponential"] = "exponential"
    a: float = Field(description="尺度参数 a")
    lam: float = Field(description="衰减速率 λ")
    c: float = Field(description="渐近线 c")
    r_squared: float = Field(ge=0, le=1, description="线性化空间拟合优度 R²")


RetentionCurveParams = Annotated[
    Union[PowerCurve, ExponentialCurve],
    Field(discriminator="kind"),
]

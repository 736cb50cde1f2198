"""
FastAPI 路由定义
"""

import logging
from typing import Dict, Literal
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..models.config import BaselineDataset, RetentionSeries, SimulationRequest, default_baseline
from ..models.params import RetentionCurveParams
from ..models.results import SimulationResult, ValidationResult
from ..core.retention import fit_retention_series, get_fitted_key_retentions
from ..core.simulator import forecast
from ..utils.validation import ForecastValidationError, validate_request

logger = logging.getLogger(__name__)

router = APIRouter()


class CurveFitRequest(BaseModel):
    """单条留存序列拟合请求"""
    series: RetentionSeries = Field(description="留存序列（百分比）")
    curve: Literal["power", "exponential"] = Field(default="power", description="曲线族")


class CurveFitResponse(BaseModel):
    """拟合结果"""
    params: RetentionCurveParams
    fitted_values: Dict[str, float] = Field(description="关键节点的拟合留存率")


@router.post("/predict", response_model=SimulationResult)
def predict(request: SimulationRequest) -> SimulationResult:
    """
    运行 DAU 增量预测

    Args:
        request: 模拟请求

    Returns:
        SimulationResult 对象
    """
    try:
        return forecast(request)

    except ForecastValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "请求校验失败",
                "errors": e.errors,
                "warnings": e.warnings,
            }
        )
    except Exception as e:
        logger.exception("预测失败")
        raise HTTPException(
            status_code=500,
            detail={"message": f"预测执行失败: {str(e)}"}
        )


@router.post("/validate", response_model=ValidationResult)
def validate(request: SimulationRequest) -> ValidationResult:
    """
    校验模拟请求

    仅校验请求有效性，不执行计算
    """
    return validate_request(request)


@router.get("/default-baseline", response_model=BaselineDataset)
def get_default_baseline() -> BaselineDataset:
    """获取默认基线数据"""
    return default_baseline()


@router.post("/fit-curve", response_model=CurveFitResponse)
def fit_curve(request: CurveFitRequest) -> CurveFitResponse:
    """拟合单条留存序列，返回曲线参数及关键节点拟合值"""
    params = fit_retention_series(request.series, request.curve)
    return CurveFitResponse(params=params, fitted_values=get_fitted_key_retentions(params))

"""
留存率拟合模块

拟合逻辑（6 个观测点 Day 1/7/14/28/360/720，闭式最小二乘）：
1. 幂函数 R(t) = a * t^(-b)：对 (ln t, ln R) 做线性回归
2. 指数衰减 R(t) = c + a * e^(-λt)：c 取最小观测值的 80%，再对 (t, ln(R - c)) 做线性回归

拟合优度 R² 在线性化空间中计算，且不小于 0
"""

import logging
from typing import Dict, Sequence, Tuple, Union
import numpy as np
from scipy.stats import linregress

from ..models.config import RetentionSeries
from ..models.params import PowerCurve, ExponentialCurve, RetentionCurveParams

logger = logging.getLogger(__name__)

# 取对数前的下限，避免 ln(0)
LOG_FLOOR = 0.001

# 指数曲线渐近线 = 最小观测留存 * 该系数
ASYMPTOTE_RATIO = 0.8

RetentionPoints = Sequence[Tuple[float, float]]


def _r_squared(actual: np.ndarray, predicted: np.ndarray) -> float:
    """线性化空间的 R²，截断到 [0, 1]"""
    ss_total = float(np.sum((actual - actual.mean()) ** 2))
    ss_residual = float(np.sum((actual - predicted) ** 2))
    if np.isclose(ss_total, 0.0):
        # 水平序列：残差为 0 即完美拟合
        return 1.0 if np.isclose(ss_residual, 0.0) else 0.0
    return float(np.clip(1.0 - ss_residual / ss_total, 0.0, 1.0))


def _split_points(points: RetentionPoints) -> Tuple[np.ndarray, np.ndarray]:
    days = np.array([p[0] for p in points], dtype=float)
    retentions = np.array([p[1] for p in points], dtype=float)
    return days, retentions


def fit_power_curve(points: RetentionPoints) -> PowerCurve:
    """
    拟合幂函数留存曲线

    Args:
        points: [(day, 留存比例 0-1)]，day 必须 >= 1

    Returns:
        PowerCurve: a, b 以及对数空间的 R²
    """
    days, retentions = _split_points(points)
    log_days = np.log(days)
    log_retentions = np.log(np.maximum(retentions, LOG_FLOOR))

    fit = linregress(log_days, log_retentions)
    b = -float(fit.slope)
    a = float(np.exp(fit.intercept))

    predicted = fit.intercept + fit.slope * log_days
    r_squared = _r_squared(log_retentions, predicted)

    logger.debug("幂函数拟合: a=%.4f b=%.4f R²=%.4f", a, b, r_squared)
    return PowerCurve(a=a, b=b, r_squared=r_squared)


def fit_exponential_curve(points: RetentionPoints) -> ExponentialCurve:
    """
    拟合指数衰减留存曲线

    两步估计：先固定渐近线 c，再线性化求 λ 与 a

    Args:
        points: [(day, 留存比例 0-1)]

    Returns:
        ExponentialCurve: a, λ, c 以及线性化空间的 R²
    """
    days, retentions = _split_points(points)
    c = max(0.0, float(retentions.min()) * ASYMPTOTE_RATIO)
    transformed = np.log(np.maximum(retentions - c, LOG_FLOOR))

    fit = linregress(days, transformed)
    lam = -float(fit.slope)
    a = float(np.exp(fit.intercept))

    with np.errstate(over="ignore", divide="ignore"):
        predicted = np.log(np.maximum(a * np.exp(-lam * days), LOG_FLOOR))
    r_squared = _r_squared(transformed, predicted)

    logger.debug("指数拟合: a=%.4f λ=%.6f c=%.4f R²=%.4f", a, lam, c, r_squared)
    return ExponentialCurve(a=a, lam=lam, c=c, r_squared=r_squared)


def fit_retention_series(series: RetentionSeries, kind: str) -> RetentionCurveParams:
    """按曲线族拟合一条百分比留存序列（百分比会先截断并转为比例）"""
    points = series.to_points()
    if kind == "power":
        return fit_power_curve(points)
    if kind == "exponential":
        return fit_exponential_curve(points)
    raise ValueError(f"不支持的曲线类型: {kind}")


def evaluate_retention_many(
    params: RetentionCurveParams, days: Union[Sequence[int], np.ndarray]
) -> np.ndarray:
    """
    批量计算第 day 天的留存率

    Day 0 = 注册当天，留存率固定为 100%；其余结果截断到 [0, 1]
    """
    days = np.asarray(days, dtype=float)
    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        if params.kind == "power":
            raw = params.a * np.power(days, -params.b)
        else:
            raw = params.c + params.a * np.exp(-params.lam * days)
    raw = np.nan_to_num(raw, nan=0.0, posinf=1.0, neginf=0.0)
    retention = np.clip(raw, 0.0, 1.0)
    return np.where(days == 0, 1.0, retention)


def evaluate_retention(params: RetentionCurveParams, day: int) -> float:
    """
    计算注册后第 day 天的留存率

    Args:
        params: 拟合得到的曲线参数
        day: 注册后天数（0 = 注册当天）

    Returns:
        留存率（0-1 之间）
    """
    if day == 0:
        return 1.0
    return float(evaluate_retention_many(params, [day])[0])


def get_fitted_key_retentions(params: RetentionCurveParams) -> Dict[str, float]:
    """
    获取关键节点的拟合留存率值

    Returns:
        包含 day1 ... day720 等关键节点的字典
    """
    key_days = (1, 7, 14, 28, 90, 180, 360, 720)
    values = evaluate_retention_many(params, key_days)
    return {f"day{day}": float(value) for day, value in zip(key_days, values)}

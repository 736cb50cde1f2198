"""
DAU 计算模块

新用户 DAU（按获客日 c 逐个 cohort 直接求和）：
DAU_new(t) = Σ_{c=from}^{to-1} DNU_c × R_new(t - c)

存量用户 DAU（不做 cohort 追踪，直接衰减）：
- 固定流失: DAU_initial × (1 - churn)^(t / 30)
- 拟合衰减: DAU_initial × (1 - a × e^(-b·t))
"""

from typing import Optional, Union
import numpy as np

from ..models.config import EngineSettings, ExistingUserModel
from ..models.params import RetentionCurveParams
from .retention import evaluate_retention_many

DailyRate = Union[float, np.ndarray]


def _cohort_ages(from_day: int, to_day: int, as_of_day: int) -> np.ndarray:
    """[from_day, to_day) 内各获客日在 as_of_day 的 cohort 年龄"""
    return as_of_day - np.arange(from_day, to_day)


def _clip_window(from_day: int, to_day: int, as_of_day: int) -> int:
    # 尚未获客的 cohort（获客日晚于 as_of_day）不计入
    return max(from_day, min(to_day, as_of_day + 1))


def _weighted_sum(daily_rate: DailyRate, retention: np.ndarray) -> float:
    rates = np.asarray(daily_rate, dtype=float)
    if rates.ndim > 0:
        rates = rates[: len(retention)]
    return float(np.sum(rates * retention))


def accumulate_new_users(
    daily_rate: DailyRate,
    from_day: int,
    to_day: int,
    as_of_day: int,
    curve: RetentionCurveParams,
) -> float:
    """
    计算 [from_day, to_day) 内获客的新用户在 as_of_day 的 DAU 贡献

    Args:
        daily_rate: 每日获客量（标量，或与获客日一一对应的数组）
        from_day: 第一个获客日（含）
        to_day: 最后一个获客日（不含）
        as_of_day: 观测日
        curve: 新用户留存曲线

    Returns:
        DAU 贡献（未取整）
    """
    to_day = _clip_window(from_day, to_day, as_of_day)
    if to_day <= from_day:
        return 0.0
    retention = evaluate_retention_many(curve, _cohort_ages(from_day, to_day, as_of_day))
    return _weighted_sum(daily_rate, retention)


def accumulate_retention_uplift(
    daily_rate: DailyRate,
    from_day: int,
    to_day: int,
    as_of_day: int,
    base: RetentionCurveParams,
    improved: RetentionCurveParams,
) -> float:
    """
    与 accumulate_new_users 相同的 cohort 求和，但每个 cohort 乘以留存提升量

    提升量 = max(0, R_improved(age) - R_base(age))
    """
    to_day = _clip_window(from_day, to_day, as_of_day)
    if to_day <= from_day:
        return 0.0
    ages = _cohort_ages(from_day, to_day, as_of_day)
    uplift = np.maximum(
        0.0, evaluate_retention_many(improved, ages) - evaluate_retention_many(base, ages)
    )
    return _weighted_sum(daily_rate, uplift)


def existing_user_retention(day: float, settings: Optional[EngineSettings] = None) -> float:
    """
    计算存量用户在模拟第 day 天的活跃率

    Args:
        day: 模拟天数（0 = 模拟开始）
        settings: 引擎设置，决定衰减模型

    Returns:
        活跃率（0-1 之间）
    """
    settings = settings or EngineSettings()
    if settings.existing_user_model == ExistingUserModel.FITTED_DECAY:
        retention = 1.0 - settings.decay_a * np.exp(-settings.decay_b * day)
    else:
        # 固定月流失率，即每日留存 (1 - churn)^(1/30)
        retention = np.power(1.0 - settings.monthly_churn, day / settings.days_per_month)

    return float(np.clip(retention, 0.0, 1.0))


def existing_user_dau(
    initial_population: float, day: float, settings: Optional[EngineSettings] = None
) -> float:
    """存量用户在模拟第 day 天的 DAU 贡献（未取整）"""
    return initial_population * existing_user_retention(day, settings)

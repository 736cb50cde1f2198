"""
主模拟器模块

按采样点循环执行：基线 DAU -> 留存举措增量 -> 拉新投放增量 -> 汇总统计

采样点：
- monthly: 每月第 15 天，即 (month - 1) * 30 + 15，共 12 个
- daily: 第 0 天起的每一天，默认 365 天
"""

import hashlib
import logging
import math
from typing import List

import numpy as np

from ..models.config import Granularity, SimulationRequest
from ..models.results import (
    CheckpointMetrics,
    CurveSet,
    ImpactBreakdown,
    ImpactSummary,
    SimulationResult,
)
from ..utils.validation import ForecastValidationError, validate_request
from .dau import accumulate_new_users, accumulate_retention_uplift, existing_user_dau
from .retention import evaluate_retention, fit_exponential_curve, fit_power_curve

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ImpactSimulator:
    """
    举措增量模拟器

    新用户使用幂函数曲线，存量用户使用指数衰减曲线；
    留存举措在基线百分比上叠加增益后重新拟合得到提升后的曲线
    """

    def __init__(self, request: SimulationRequest):
        self.request = request
        self.settings = request.settings
        baseline = request.baseline

        # 1. 按分群/平台过滤
        self.total_current_dau = baseline.total_for(
            "current_dau", request.segments, request.platforms
        )
        self.daily_acquisitions = baseline.total_for(
            "weekly_acquisitions", request.segments, request.platforms
        ) / 7
        self.exposure = request.exposure_rate / 100

        # 2. 拟合基线留存曲线
        new_series = baseline.retention_curves.new
        existing_series = baseline.retention_curves.existing
        self.base_new_curve = fit_power_curve(new_series.to_points())
        self.base_existing_curve = fit_exponential_curve(existing_series.to_points())

        # 3. 拟合提升后的留存曲线（未作用的人群沿用基线曲线）
        self.improved_new_curve = self.base_new_curve
        self.improved_existing_curve = self.base_existing_curve
        plan = request.retention
        if request.has_retention_initiative():
            gains = plan.gains()
            if plan.targets_new():
                self.improved_new_curve = fit_power_curve(
                    new_series.with_gains(gains).to_points()
                )
            if plan.targets_existing():
                self.improved_existing_curve = fit_exponential_curve(
                    existing_series.with_gains(gains).to_points()
                )
        self.launch_day = plan.months_to_start * self.settings.days_per_month

        # 4. 拉新投放窗口
        acquisition = request.acquisition
        self.campaign_start = acquisition.weeks_to_start * 7
        self.campaign_end = self.campaign_start + acquisition.duration * 7
        self.campaign_daily_target = acquisition.weekly_installs / 7
        self.ramp_days = min(self.settings.max_ramp_weeks, acquisition.duration) * 7
        self.campaign_active = (
            request.has_acquisition_initiative()
            and acquisition.weekly_installs > 0
            and acquisition.duration > 0
        )

    def checkpoint_days(self) -> List[int]:
        """所有采样点对应的模拟天数"""
        settings = self.settings
        if settings.granularity == Granularity.DAILY:
            return list(range(settings.daily_horizon_days))
        return [
            (month - 1) * settings.days_per_month + settings.checkpoint_offset
            for month in range(1, settings.horizon_months + 1)
        ]

    def campaign_rates(self, from_day: int, to_day: int) -> np.ndarray:
        """
        [from_day, to_day) 每个获客日的实际拉新量

        爬坡: target × min(1, (c - start) / (ramp_weeks × 7))
        """
        cohort_days = np.arange(from_day, to_day)
        if not self.settings.campaign_ramp:
            return np.full(len(cohort_days), self.campaign_daily_target)
        ramp_rate = np.minimum(1.0, (cohort_days - self.campaign_start) / self.ramp_days)
        return self.campaign_daily_target * ramp_rate

    def baseline_dau(self, day: int) -> float:
        """基线 DAU = 存量用户衰减 + [0, day) 获客的新用户 cohort"""
        existing = existing_user_dau(self.total_current_dau, day, self.settings)
        new = accumulate_new_users(self.daily_acquisitions, 0, day, day, self.base_new_curve)
        return existing + new

    def existing_user_uplift(self, day: int) -> float:
        """存量用户留存提升带来的增量：上线时的存量用户按曝光比例乘以留存提升量"""
        days_since_launch = day - self.launch_day
        if days_since_launch < 1:
            return 0.0
        launch_cohort = (
            existing_user_dau(self.total_current_dau, self.launch_day, self.settings)
            * self.exposure
        )
        uplift = max(
            0.0,
            evaluate_retention(self.improved_existing_curve, days_since_launch)
            - evaluate_retention(self.base_existing_curve, days_since_launch),
        )
        return launch_cohort * uplift

    def new_user_uplift(self, day: int) -> float:
        """上线后获客的新用户 cohort 的留存提升增量"""
        return accumulate_retention_uplift(
            self.daily_acquisitions * self.exposure,
            self.launch_day,
            day,
            day,
            self.base_new_curve,
            self.improved_new_curve,
        )

    def acquisition_dau(self, day: int) -> float:
        """拉新投放 cohort 的 DAU；投放结束后不再获客，但已有 cohort 继续按留存衰减"""
        if day < self.campaign_start:
            return 0.0
        last_cohort_day = min(day, self.campaign_end - 1)
        rates = self.campaign_rates(self.campaign_start, last_cohort_day + 1)
        return accumulate_new_users(
            rates, self.campaign_start, last_cohort_day + 1, day, self.base_new_curve
        )

    def simulate_checkpoint(self, day: int) -> CheckpointMetrics:
        """
        模拟单个采样点

        Returns:
            CheckpointMetrics 对象
        """
        request = self.request
        metrics = CheckpointMetrics(
            day=day,
            month=day // self.settings.days_per_month + 1,
            baseline=self.baseline_dau(day),
        )

        if request.has_retention_initiative() and day >= self.launch_day:
            if request.retention.targets_existing():
                metrics.existing_users = self.existing_user_uplift(day)
            if request.retention.targets_new():
                metrics.new_users = self.new_user_uplift(day)

        if self.campaign_active:
            metrics.new_acquisition = self.acquisition_dau(day)

        return metrics

    def get_curve_set(self) -> CurveSet:
        """获取四条拟合曲线"""
        return CurveSet(
            base_new_user=self.base_new_curve,
            improved_new_user=self.improved_new_curve,
            base_existing_user=self.base_existing_curve,
            improved_existing_user=self.improved_existing_curve,
        )


def forecast(request: SimulationRequest) -> SimulationResult:
    """
    运行 DAU 增量预测

    Args:
        request: 模拟请求

    Returns:
        SimulationResult 对象

    Raises:
        ForecastValidationError: 请求未通过校验（在模拟开始前抛出）
    """
    validation = validate_request(request)
    if not validation.valid:
        logger.warning("请求校验失败: %s", validation.errors)
        raise ForecastValidationError(validation.errors, validation.warnings)
    for warning in validation.warnings:
        logger.info("请求校验警告: %s", warning)

    simulator = ImpactSimulator(request)
    checkpoint_days = simulator.checkpoint_days()
    logger.debug(
        "开始模拟: initiative=%s granularity=%s checkpoints=%d",
        request.initiative_type.value,
        request.settings.granularity.value,
        len(checkpoint_days),
    )

    # 每个采样点代表的天数（月度快照 × 30 天，按日 × 1 天）
    if request.settings.granularity == Granularity.DAILY:
        days_per_checkpoint = 1
    else:
        days_per_checkpoint = request.settings.days_per_month

    baseline_series: List[int] = []
    with_initiative_series: List[int] = []
    incremental_series: List[int] = []

    # 汇总统计
    total_impact = 0.0
    breakdown = {"existing_users": 0.0, "new_users": 0.0, "new_acquisition": 0.0}
    peak_impact = 0.0
    peak_month = 0
    peak_lift_percent = 0.0

    for day in checkpoint_days:
        metrics = simulator.simulate_checkpoint(day)
        incremental = metrics.incremental

        baseline_value = _round_half_up(metrics.baseline)
        incremental_value = _round_half_up(incremental)
        baseline_series.append(baseline_value)
        incremental_series.append(incremental_value)
        with_initiative_series.append(baseline_value + incremental_value)

        # 严格大于：并列时保留最早的月份
        if incremental > peak_impact:
            peak_impact = incremental
            peak_month = metrics.month
            peak_lift_percent = (
                incremental / metrics.baseline * 100 if metrics.baseline > 0 else 0.0
            )

        total_impact += incremental * days_per_checkpoint
        breakdown["existing_users"] += metrics.existing_users * days_per_checkpoint
        breakdown["new_users"] += metrics.new_users * days_per_checkpoint
        breakdown["new_acquisition"] += metrics.new_acquisition * days_per_checkpoint

    result = SimulationResult(
        status="success",
        request_hash=hashlib.md5(request.model_dump_json().encode()).hexdigest()[:8],
        granularity=request.settings.granularity,
        checkpoint_days=checkpoint_days,
        baseline=baseline_series,
        with_initiative=with_initiative_series,
        incremental=incremental_series,
        summary=ImpactSummary(
            total_impact=_round_half_up(total_impact),
            peak_impact=_round_half_up(peak_impact),
            peak_month=peak_month,
            peak_lift_percent=math.floor(peak_lift_percent * 10 + 0.5) / 10,
            breakdown=ImpactBreakdown(
                existing_users=_round_half_up(breakdown["existing_users"]),
                new_users=_round_half_up(breakdown["new_users"]),
                new_acquisition=_round_half_up(breakdown["new_acquisition"]),
            ),
        ),
        retention_curves=simulator.get_curve_set(),
    )

    logger.info(
        "预测完成: total_impact=%d peak_impact=%d peak_month=%d",
        result.summary.total_impact,
        result.summary.peak_impact,
        result.summary.peak_month,
    )
    return result

"""
留存率模块测试
"""

import pytest
import numpy as np
from dau_impact.core.retention import (
    fit_power_curve,
    fit_exponential_curve,
    fit_retention_series,
    evaluate_retention,
    evaluate_retention_many,
    get_fitted_key_retentions,
)
from dau_impact.models.config import RETENTION_DAYS, RetentionSeries
from dau_impact.models.params import PowerCurve, ExponentialCurve


def _points(values):
    return list(zip(RETENTION_DAYS, values))


class TestPowerFitting:
    """幂函数拟合测试"""

    def test_fit_power_curve_basic(self):
        """测试典型新用户留存数据"""
        curve = fit_power_curve(_points([0.264, 0.175, 0.15, 0.13, 0.06, 0.03]))

        assert curve.kind == "power"
        assert 0 < curve.a < 1
        assert curve.b > 0, "b 应为正数（越大衰减越快）"
        assert 0 <= curve.r_squared <= 1

    def test_fit_power_curve_recovers_exact_params(self):
        """测试无噪声数据能还原参数"""
        values = [0.5 * day ** -0.3 for day in RETENTION_DAYS]

        curve = fit_power_curve(_points(values))

        assert curve.a == pytest.approx(0.5, rel=1e-6)
        assert curve.b == pytest.approx(0.3, rel=1e-6)
        assert curve.r_squared == pytest.approx(1.0)

    def test_flat_series(self):
        """测试水平序列：b ≈ 0，a ≈ 留存值"""
        curve = fit_power_curve(_points([0.3] * 6))

        assert abs(curve.b) < 1e-9
        assert curve.a == pytest.approx(0.3, abs=0.05)
        assert curve.r_squared == 1.0

    def test_zero_series(self):
        """测试全 0 序列不抛异常，按下限 0.001 取对数"""
        curve = fit_power_curve(_points([0.0] * 6))

        assert np.isfinite(curve.a)
        assert curve.a == pytest.approx(0.001)
        assert abs(curve.b) < 1e-9


class TestExponentialFitting:
    """指数衰减拟合测试"""

    def test_fit_exponential_curve_basic(self):
        """测试典型存量用户留存数据"""
        curve = fit_exponential_curve(_points([0.58, 0.518, 0.50, 0.48, 0.30, 0.20]))

        assert curve.kind == "exponential"
        assert curve.a > 0
        assert curve.lam > 0, "λ 应为正数（衰减）"
        assert 0 <= curve.r_squared <= 1

    def test_asymptote_below_minimum(self):
        """测试渐近线为最小观测值的 80%"""
        curve = fit_exponential_curve(_points([0.58, 0.518, 0.50, 0.48, 0.30, 0.20]))

        assert curve.c == pytest.approx(0.16)

    def test_zero_series(self):
        """测试全 0 序列"""
        curve = fit_exponential_curve(_points([0.0] * 6))

        assert curve.c == 0.0
        assert curve.a == pytest.approx(0.001)
        assert abs(curve.lam) < 1e-9

    def test_fit_retention_series_converts_percentages(self):
        """测试百分比序列先转换为比例再拟合"""
        series = RetentionSeries(d1=58, d7=51.8, d14=50, d28=48, d360=30, d720=20)

        curve = fit_retention_series(series, "exponential")

        assert curve.c == pytest.approx(0.16)

    def test_fit_retention_series_unknown_kind(self):
        series = RetentionSeries(d1=58, d7=51.8, d14=50, d28=48, d360=30, d720=20)
        with pytest.raises(ValueError):
            fit_retention_series(series, "logistic")


class TestEvaluation:
    """留存率计算测试"""

    @pytest.mark.parametrize("curve", [
        PowerCurve(a=0.5, b=0.3, r_squared=1.0),
        PowerCurve(a=3.0, b=-2.0, r_squared=0.0),
        ExponentialCurve(a=0.4, lam=0.01, c=0.1, r_squared=1.0),
        ExponentialCurve(a=-2.0, lam=-0.5, c=-1.0, r_squared=0.0),
    ])
    def test_day0_is_full_retention(self, curve):
        """测试 Day 0 留存率（应为 100%）"""
        assert evaluate_retention(curve, 0) == 1.0
        assert evaluate_retention_many(curve, [0])[0] == 1.0

    def test_power_formula(self):
        curve = PowerCurve(a=0.5, b=0.3, r_squared=1.0)
        assert evaluate_retention(curve, 7) == pytest.approx(0.5 * 7 ** -0.3)

    def test_exponential_formula(self):
        curve = ExponentialCurve(a=0.4, lam=0.01, c=0.1, r_squared=1.0)
        assert evaluate_retention(curve, 30) == pytest.approx(0.1 + 0.4 * np.exp(-0.3))

    @pytest.mark.parametrize("curve", [
        PowerCurve(a=5.0, b=0.1, r_squared=0.0),
        PowerCurve(a=0.5, b=-3.0, r_squared=0.0),
        ExponentialCurve(a=1.0, lam=-1.0, c=0.0, r_squared=0.0),
        ExponentialCurve(a=0.5, lam=0.01, c=-0.2, r_squared=0.0),
    ])
    @pytest.mark.parametrize("day", [1, 7, 365, 10000, 5000000])
    def test_clamped_to_unit_interval(self, curve, day):
        """测试任意参数、超大天数下结果都在 [0, 1]"""
        retention = evaluate_retention(curve, day)
        assert 0.0 <= retention <= 1.0

    def test_large_day_limits(self):
        """测试超大天数：幂函数趋于 0，指数趋于 c"""
        power = PowerCurve(a=0.5, b=0.3, r_squared=1.0)
        exponential = ExponentialCurve(a=0.4, lam=0.01, c=0.1, r_squared=1.0)

        assert evaluate_retention(power, 10 ** 7) < 0.01
        assert evaluate_retention(exponential, 10 ** 7) == pytest.approx(0.1)

    def test_many_matches_scalar(self):
        curve = PowerCurve(a=0.26, b=0.35, r_squared=0.98)
        days = np.arange(0, 400)

        batch = evaluate_retention_many(curve, days)

        for day in (0, 1, 15, 399):
            assert batch[day] == pytest.approx(evaluate_retention(curve, day))

    def test_monotonic_decay(self):
        """测试留存率单调递减"""
        curve = fit_power_curve(_points([0.264, 0.175, 0.15, 0.13, 0.06, 0.03]))

        values = evaluate_retention_many(curve, np.arange(0, 720))
        assert np.all(np.diff(values) <= 0)

    def test_fitted_key_retentions(self):
        curve = PowerCurve(a=0.5, b=0.3, r_squared=1.0)

        fitted = get_fitted_key_retentions(curve)

        assert set(fitted) == {
            "day1", "day7", "day14", "day28", "day90", "day180", "day360", "day720"
        }
        assert fitted["day1"] == pytest.approx(0.5)
        assert fitted["day1"] > fitted["day720"]


class TestRetentionSeries:
    """留存序列转换测试"""

    def test_to_points_clamps_percentages(self):
        series = RetentionSeries(d1=120, d7=-5, d14=50, d28=40, d360=10, d720=5)

        points = series.to_points()

        assert points[0] == (1, 1.0)
        assert points[1] == (7, 0.0)
        assert points[2] == (14, 0.5)

    def test_with_gains_caps_at_100(self):
        series = RetentionSeries(d1=98, d7=50, d14=40, d28=30, d360=10, d720=5)

        improved = series.with_gains({1: 5, 7: 2})

        assert improved.d1 == 100
        assert improved.d7 == 52
        assert improved.d720 == 5

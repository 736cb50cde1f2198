"""
测试公共夹具
"""

import pytest
from dau_impact.models.config import (
    BaselineDataset,
    RetentionCurves,
    RetentionSeries,
    SimulationRequest,
    default_baseline,
)


@pytest.fixture
def baseline() -> BaselineDataset:
    """默认基线数据"""
    return default_baseline()


@pytest.fixture
def pure_decay_baseline() -> BaselineDataset:
    """100 万存量用户、零新增的纯衰减场景"""
    return BaselineDataset(
        current_dau={
            "commercial_ios": 1000000,
            "commercial_android": 0,
            "consumer_ios": 0,
            "consumer_android": 0,
        },
        weekly_acquisitions={
            "commercial_ios": 0,
            "commercial_android": 0,
            "consumer_ios": 0,
            "consumer_android": 0,
        },
        retention_curves=RetentionCurves(
            existing=RetentionSeries(d1=95, d7=90, d14=85, d28=80, d360=50, d720=30),
            new=RetentionSeries(d1=50, d7=30, d14=25, d28=20, d360=10, d720=5),
        ),
    )


@pytest.fixture
def make_request(baseline):
    """按需覆盖字段构造 SimulationRequest"""
    def _make(**overrides) -> SimulationRequest:
        data = {"baseline": baseline}
        data.update(overrides)
        return SimulationRequest(**data)
    return _make

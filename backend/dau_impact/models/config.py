"""
API 输入配置模型

请求 = 举措参数 + 基线数据（显式传入，无全局默认状态）+ 引擎设置
"""

from enum import Enum
from typing import Dict, List, Tuple
from pydantic import BaseModel, Field, ValidationInfo, field_validator


# 六个留存观测点（天），严格递增
RETENTION_DAYS: Tuple[int, ...] = (1, 7, 14, 28, 360, 720)


class InitiativeType(str, Enum):
    NONE = "none"
    ACQUISITION = "acquisition"
    RETENTION = "retention"
    COMBINED = "combined"


class TargetUsers(str, Enum):
    NEW = "new"
    EXISTING = "existing"
    ALL = "all"


class ExistingUserModel(str, Enum):
    FIXED_CHURN = "fixed_churn"
    FITTED_DECAY = "fitted_decay"


class Granularity(str, Enum):
    MONTHLY = "monthly"
    DAILY = "daily"


class RetentionSeries(BaseModel):
    """留存率配置 - 6 个关键节点（百分比 0-100）"""
    d1: float = Field(description="次日留存率 (%)")
    d7: float = Field(description="7日留存率 (%)")
    d14: float = Field(description="14日留存率 (%)")
    d28: float = Field(description="28日留存率 (%)")
    d360: float = Field(description="360日留存率 (%)")
    d720: float = Field(description="720日留存率 (%)")

    def to_dict(self) -> Dict[int, float]:
        """返回留存率字典 {day: 百分比}"""
        return {day: getattr(self, f"d{day}") for day in RETENTION_DAYS}

    def to_points(self) -> List[Tuple[int, float]]:
        """返回 [(day, 留存比例)]，百分比先截断到 [0, 100] 再转为 0-1"""
        return [
            (day, min(100.0, max(0.0, pct)) / 100.0)
            for day, pct in self.to_dict().items()
        ]

    def with_gains(self, gains: Dict[int, float]) -> "RetentionSeries":
        """叠加各节点的百分点增益，结果上限 100"""
        return RetentionSeries(**{
            f"d{day}": min(100.0, pct + gains.get(day, 0.0))
            for day, pct in self.to_dict().items()
        })


class RetentionCurves(BaseModel):
    """存量用户 / 新用户两条留存序列"""
    existing: RetentionSeries
    new: RetentionSeries


class BaselineDataset(BaseModel):
    """基线数据：按 segment_platform 维度的 DAU、周新增及留存序列"""
    current_dau: Dict[str, float] = Field(description="当前 DAU，如 {'consumer_ios': 3180000}")
    weekly_acquisitions: Dict[str, float] = Field(description="每周新增用户数")
    retention_curves: RetentionCurves = Field(description="留存序列")

    @field_validator("current_dau", "weekly_acquisitions")
    @classmethod
    def validate_counts(cls, v: Dict[str, float]) -> Dict[str, float]:
        """校验用户数非负"""
        for key, value in v.items():
            if value < 0:
                raise ValueError(f"{key} 的用户数不能为负数: {value}")
        return v

    def total_for(self, field_name: str, segments: List[str], platforms: List[str]) -> float:
        """按 segment/platform 过滤后求和"""
        values = getattr(self, field_name)
        total = 0.0
        # key 按 f"{segment}_{platform}" 拼接，分群名可含下划线
        for segment in dict.fromkeys(segments):
            for platform in dict.fromkeys(platforms):
                total += values.get(f"{segment}_{platform}", 0.0)
        return total


class AcquisitionPlan(BaseModel):
    """拉新投放计划"""
    weekly_installs: float = Field(ge=0, default=0, description="目标每周安装量")
    weeks_to_start: int = Field(ge=0, default=0, description="距离投放开始的周数")
    duration: int = Field(ge=0, default=0, description="投放持续周数")


class RetentionPlan(BaseModel):
    """留存提升计划（增益为百分点）"""
    target_users: TargetUsers = Field(default=TargetUsers.ALL, description="作用人群")
    months_to_start: int = Field(ge=0, default=0, description="距离上线的月数")
    d1_gain: float = Field(default=0, description="次日留存增益 (pp)")
    d7_gain: float = Field(default=0, description="7日留存增益 (pp)")
    d14_gain: float = Field(default=0, description="14日留存增益 (pp)")
    d28_gain: float = Field(default=0, description="28日留存增益 (pp)")
    d360_gain: float = Field(default=0, description="360日留存增益 (pp)")
    d720_gain: float = Field(default=0, description="720日留存增益 (pp)")

    def gains(self) -> Dict[int, float]:
        """返回增益字典 {day: 百分点}"""
        return {day: getattr(self, f"d{day}_gain") for day in RETENTION_DAYS}

    def targets_new(self) -> bool:
        return self.target_users in (TargetUsers.NEW, TargetUsers.ALL)

    def targets_existing(self) -> bool:
        return self.target_users in (TargetUsers.EXISTING, TargetUsers.ALL)


class EngineSettings(BaseModel):
    """引擎设置：存量用户衰减模型、拉新爬坡、采样粒度"""
    existing_user_model: ExistingUserModel = Field(
        default=ExistingUserModel.FIXED_CHURN, description="存量用户衰减模型"
    )
    monthly_churn: float = Field(ge=0, lt=1, default=0.05, description="固定流失模型的月流失率")
    decay_a: float = Field(default=0.0217, description="拟合衰减模型 1 - a*e^(-b*t) 的 a")
    decay_b: float = Field(default=0.0131, description="拟合衰减模型 1 - a*e^(-b*t) 的 b")
    campaign_ramp: bool = Field(default=True, description="拉新投放是否逐步爬坡")
    max_ramp_weeks: int = Field(ge=1, default=4, description="爬坡期上限（周）")
    granularity: Granularity = Field(default=Granularity.MONTHLY, description="采样粒度")
    horizon_months: int = Field(ge=1, le=36, default=12, description="预测月数")
    days_per_month: int = Field(ge=1, default=30, description="每月天数")
    checkpoint_offset: int = Field(ge=0, default=15, description="月度快照在当月的第几天")
    daily_horizon_days: int = Field(ge=1, default=365, description="按日采样时的模拟天数")

    @field_validator("checkpoint_offset")
    @classmethod
    def validate_offset(cls, v: int, info: ValidationInfo) -> int:
        days_per_month = info.data.get("days_per_month", 30)
        if v >= days_per_month:
            raise ValueError(f"快照偏移 {v} 必须小于每月天数 {days_per_month}")
        return v


class SimulationRequest(BaseModel):
    """模拟请求 - API 输入主结构"""
    initiative_type: InitiativeType = Field(default=InitiativeType.NONE, description="举措类型")
    acquisition: AcquisitionPlan = Field(default_factory=AcquisitionPlan, description="拉新计划")
    retention: RetentionPlan = Field(default_factory=RetentionPlan, description="留存计划")
    segments: List[str] = Field(default_factory=lambda: ["commercial", "consumer"], description="包含的用户分群")
    platforms: List[str] = Field(default_factory=lambda: ["ios", "android"], description="包含的平台")
    exposure_rate: float = Field(ge=0, le=100, default=100, description="曝光比例 (%)")
    baseline: BaselineDataset = Field(description="基线数据")
    settings: EngineSettings = Field(default_factory=EngineSettings, description="引擎设置")

    def has_retention_initiative(self) -> bool:
        return self.initiative_type in (InitiativeType.RETENTION, InitiativeType.COMBINED)

    def has_acquisition_initiative(self) -> bool:
        return self.initiative_type in (InitiativeType.ACQUISITION, InitiativeType.COMBINED)


def default_baseline() -> BaselineDataset:
    """
    默认基线数据

    每次调用返回新对象，调用方可自由修改
    """
    return BaselineDataset(
        current_dau={
            "commercial_ios": 3550000,
            "commercial_android": 2780000,
            "consumer_ios": 3180000,
            "consumer_android": 8300000,
        },
        weekly_acquisitions={
            "commercial_ios": 317000,
            "commercial_android": 334000,
            "consumer_ios": 300000,
            "consumer_android": 987000,
        },
        retention_curves=RetentionCurves(
            existing=RetentionSeries(d1=58, d7=51.8, d14=50, d28=48, d360=30, d720=20),
            new=RetentionSeries(d1=26.4, d7=17.5, d14=15, d28=13, d360=6, d720=3),
        ),
    )

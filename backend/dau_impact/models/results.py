"""
API 输出结果模型
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from .config import Granularity
from .params import RetentionCurveParams


class ImpactBreakdown(BaseModel):
    """增量归因（DAU-天）"""
    existing_users: int = Field(description="存量用户留存提升带来的增量")
    new_users: int = Field(description="新用户留存提升带来的增量")
    new_acquisition: int = Field(description="拉新投放带来的增量")


class ImpactSummary(BaseModel):
    """汇总信息"""
    total_impact: int = Field(description="预测期内总增量（DAU-天）")
    peak_impact: int = Field(description="增量 DAU 峰值")
    peak_month: int = Field(description="峰值所在月份（1 起，0 表示无正增量）")
    peak_lift_percent: float = Field(description="峰值相对当月基线的提升 (%)")
    breakdown: ImpactBreakdown = Field(description="增量归因")


class CurveSet(BaseModel):
    """基线与提升后的四条留存曲线"""
    base_new_user: RetentionCurveParams
    improved_new_user: RetentionCurveParams
    base_existing_user: RetentionCurveParams
    improved_existing_user: RetentionCurveParams


class SimulationResult(BaseModel):
    """模拟结果 - API 输出主结构"""
    status: str = Field(default="success", description="状态")
    request_hash: Optional[str] = Field(default=None, description="请求哈希值")
    granularity: Granularity = Field(description="采样粒度")
    checkpoint_days: List[int] = Field(description="每个采样点对应的模拟天数")

    baseline: List[int] = Field(description="基线 DAU")
    with_initiative: List[int] = Field(description="叠加举措后的 DAU")
    incremental: List[int] = Field(description="增量 DAU")

    summary: ImpactSummary = Field(description="汇总信息")
    retention_curves: CurveSet = Field(description="拟合的留存曲线")


class ValidationResult(BaseModel):
    """参数校验结果"""
    valid: bool = Field(description="是否有效")
    errors: List[str] = Field(default_factory=list, description="错误列表")
    warnings: List[str] = Field(default_factory=list, description="警告列表")


class CheckpointMetrics(BaseModel):
    """单个采样点指标（用于内部计算，均未取整）"""
    day: int
    month: int
    baseline: float
    existing_users: float = 0.0
    new_users: float = 0.0
    new_acquisition: float = 0.0

    @property
    def incremental(self) -> float:
        return self.existing_users + self.new_users + self.new_acquisition

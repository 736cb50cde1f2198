"""
参数校验工具

模拟开始前完成全部校验，校验失败不会产生任何部分结果
"""

from typing import List, Optional
from ..models.config import RETENTION_DAYS, SimulationRequest
from ..models.results import ValidationResult


class ForecastValidationError(ValueError):
    """请求未通过校验"""

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__("; ".join(self.errors))


def validate_request(request: SimulationRequest) -> ValidationResult:
    """
    校验模拟请求

    Returns:
        ValidationResult 对象
    """
    errors: List[str] = []
    warnings: List[str] = []
    baseline = request.baseline
    settings = request.settings

    # 1. 校验维度 key 格式（segment_platform）；过滤条件不会引用这类 key，只给警告
    for field_name in ("current_dau", "weekly_acquisitions"):
        for key in getattr(baseline, field_name):
            segment, sep, platform = key.partition("_")
            if not sep or not segment or not platform:
                warnings.append(f"baseline.{field_name}: key '{key}' 不符合 segment_platform 格式，将被忽略")

    # 2. 校验过滤条件引用的 key 都存在
    if not request.segments:
        warnings.append("segments: 未选择任何用户分群，预测结果将全部为 0")
    if not request.platforms:
        warnings.append("platforms: 未选择任何平台，预测结果将全部为 0")
    for segment in request.segments:
        for platform in request.platforms:
            key = f"{segment}_{platform}"
            if key not in baseline.current_dau:
                errors.append(f"baseline.current_dau: 缺少 '{key}'")
            if key not in baseline.weekly_acquisitions:
                errors.append(f"baseline.weekly_acquisitions: 缺少 '{key}'")

    # 3. 校验留存序列
    for name in ("existing", "new"):
        series = getattr(baseline.retention_curves, name).to_dict()
        values = [series[day] for day in RETENTION_DAYS]
        if any(v < 0 or v > 100 for v in values):
            warnings.append(f"{name} 留存序列存在超出 0-100 的值，将被截断")
        if any(later > earlier for earlier, later in zip(values, values[1:])):
            warnings.append(f"{name} 留存序列不是单调递减，这通常不正常")

    # 4. 校验举措参数
    horizon_days = settings.horizon_months * settings.days_per_month
    if request.has_retention_initiative():
        if request.retention.months_to_start >= settings.horizon_months:
            warnings.append("留存举措上线时间超出预测期，增量将为 0")
        if request.exposure_rate == 0:
            warnings.append("曝光比例为 0，留存举措不会产生增量")
        if all(gain == 0 for gain in request.retention.gains().values()):
            warnings.append("留存增益全部为 0，留存举措不会产生增量")

    if request.has_acquisition_initiative():
        acquisition = request.acquisition
        if acquisition.weekly_installs <= 0 or acquisition.duration <= 0:
            warnings.append("拉新投放量或持续周数为 0，拉新举措不会产生增量")
        if acquisition.weeks_to_start * 7 >= horizon_days:
            warnings.append("拉新投放开始时间超出预测期，增量将为 0")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )

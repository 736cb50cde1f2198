"""
DAU 增量预测引擎

forecast(request) 是唯一入口：纯函数，不做任何持久化或缓存
"""

from .core.simulator import forecast
from .models.config import SimulationRequest, default_baseline
from .models.results import SimulationResult
from .utils.validation import ForecastValidationError

__version__ = "1.0.0"

__all__ = [
    "forecast",
    "SimulationRequest",
    "SimulationResult",
    "ForecastValidationError",
    "default_baseline",
]

from .retention import (
    fit_power_curve,
    fit_exponential_curve,
    fit_retention_series,
    evaluate_retention,
    evaluate_retention_many,
)
from .dau import accumulate_new_users, accumulate_retention_uplift, existing_user_dau
from .simulator import ImpactSimulator, forecast

__all__ = [
    "fit_power_curve",
    "fit_exponential_curve",
    "fit_retention_series",
    "evaluate_retention",
    "evaluate_retention_many",
    "accumulate_new_users",
    "accumulate_retention_uplift",
    "existing_user_dau",
    "ImpactSimulator",
    "forecast",
]

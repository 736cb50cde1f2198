from .params import PowerCurve, ExponentialCurve, RetentionCurveParams
from .config import (
    RETENTION_DAYS,
    InitiativeType,
    TargetUsers,
    ExistingUserModel,
    Granularity,
    RetentionSeries,
    RetentionCurves,
    BaselineDataset,
    AcquisitionPlan,
    RetentionPlan,
    EngineSettings,
    SimulationRequest,
    default_baseline,
)
from .results import (
    ImpactBreakdown,
    ImpactSummary,
    CurveSet,
    SimulationResult,
    ValidationResult,
    CheckpointMetrics,
)

__all__ = [
    "PowerCurve",
    "ExponentialCurve",
    "RetentionCurveParams",
    "RETENTION_DAYS",
    "InitiativeType",
    "TargetUsers",
    "ExistingUserModel",
    "Granularity",
    "RetentionSeries",
    "RetentionCurves",
    "BaselineDataset",
    "AcquisitionPlan",
    "RetentionPlan",
    "EngineSettings",
    "SimulationRequest",
    "default_baseline",
    "ImpactBreakdown",
    "ImpactSummary",
    "CurveSet",
    "SimulationResult",
    "ValidationResult",
    "CheckpointMetrics",
]

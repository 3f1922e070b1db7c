from .base import FieldDefinition, FormModel
from .form import PlanFormModel
from .plan import (
    BASIS_POINTS,
    MONTHS_PER_YEAR,
    REFERENCE_SCALE,
    SETTLEMENT_SCALE,
    Plan,
    PlanParameters,
    Savings,
    Totals,
)

__all__ = [
    "BASIS_POINTS",
    "MONTHS_PER_YEAR",
    "REFERENCE_SCALE",
    "SETTLEMENT_SCALE",
    "FieldDefinition",
    "FormModel",
    "Plan",
    "PlanFormModel",
    "PlanParameters",
    "Savings",
    "Totals",
]

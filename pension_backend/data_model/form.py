from __future__ import annotations

from typing import List

from .base import FieldDefinition, FormModel
from .plan import BASIS_POINTS


def _plan_presets() -> List[dict[str, float | int | str]]:
    return [
        {"Preset": "Default", "expectedYieldRate": 500, "inflationRate": 200},
        {"Preset": "Conservative", "expectedYieldRate": 300, "inflationRate": 254},
        {"Preset": "Zero real return", "expectedYieldRate": 254, "inflationRate": 254},
    ]


class PlanFormModel(FormModel):
    def __init__(self) -> None:
        fields = [
            FieldDefinition(
                "lifeExpectancyYears",
                "Years of payouts",
                default=20,
                min_value=1,
                max_value=100,
                step=1,
                unit="years",
            ),
            FieldDefinition(
                "monthlySpending",
                "Monthly spending (today's money)",
                default=5000.0,
                min_value=0.01,
                step=100.0,
                unit="USD",
            ),
            FieldDefinition("retirementAge", "Retirement age", default=65, min_value=1, max_value=120, step=1),
            FieldDefinition("currentAge", "Current age", default=30, min_value=1, max_value=119, step=1),
            FieldDefinition(
                "expectedYieldRate",
                "Expected yield",
                default=500,
                min_value=0,
                max_value=BASIS_POINTS,
                step=10,
                unit="bp",
                help="10000 bp = 100%",
            ),
            FieldDefinition(
                "inflationRate",
                "Inflation",
                default=200,
                min_value=0,
                max_value=BASIS_POINTS,
                step=10,
                unit="bp",
            ),
            FieldDefinition(
                "Preset",
                "Assumption preset",
                kind="select",
                default="Default",
                options=[row["Preset"] for row in _plan_presets()],
            ),
        ]
        super().__init__("plan", fields, _plan_presets())

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import pandas as pd


@dataclass
class FieldDefinition:
    """Lightweight schema descriptor for one plan input on a client form."""

    field: str
    label: str
    kind: str = "number"  # number | select
    default: Any = 0
    options: List[str] | None = None
    min_value: float | None = None
    max_value: float | None = None
    step: float | None = None
    unit: str | None = None
    help: str | None = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "label": self.label,
            "kind": self.kind,
            "default": self.default,
            "options": self.options or [],
            "min": self.min_value,
            "max": self.max_value,
            "step": self.step,
            "unit": self.unit,
            "help": self.help,
        }


@dataclass
class FormModel:
    """Container for a form schema plus preset rows."""

    name: str
    fields: List[FieldDefinition]
    presets: List[dict[str, Any]] = field(default_factory=list)

    def defaults(self) -> Dict[str, Any]:
        return {item.field: item.default for item in self.fields}

    def create_preset_df(self) -> pd.DataFrame:
        if self.presets:
            return pd.DataFrame([{**self.defaults(), **row} for row in self.presets])
        return pd.DataFrame([self.defaults()])

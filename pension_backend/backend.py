"""REST backend for retirement funding plans."""

from __future__ import annotations

import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

from flask import Flask, jsonify, request

from pension_backend.data_model import REFERENCE_SCALE, PlanFormModel, PlanParameters
from pension_backend.data_model.plan import REFERENCE_DECIMALS, SETTLEMENT_DECIMALS
from pension_backend.engine import EngineError, RetirementEngine, build_engine
from pension_backend.engine import errors
from pension_backend.engine.schedule import AMOUNT_COLUMNS
from pension_backend.settings import (
    DEFAULT_INFLATION_RATE_BPS,
    DEFAULT_YIELD_RATE_BPS,
    EngineSettings,
    configure_logging,
)

logger = logging.getLogger(__name__)

app = Flask(__name__)

engine: RetirementEngine | None = None

PLAN_FORM = PlanFormModel()

ERROR_STATUS = {
    errors.InvalidParameters: 400,
    errors.ZeroAmount: 400,
    errors.NoActivePlan: 404,
    errors.PaymentsAlreadyStarted: 409,
    errors.PlanStillActive: 409,
    errors.NothingToReclaim: 409,
    errors.NotArmed: 409,
    errors.NoPaymentsRemaining: 409,
    errors.NoFundsAvailable: 409,
    errors.ReentrantCall: 409,
    errors.TooEarly: 425,
    errors.TransferFailed: 502,
    errors.RateUnavailable: 503,
}


def get_engine() -> RetirementEngine:
    global engine
    if engine is None:
        engine = build_engine()
    return engine


def _extract_payload_value(payload: dict, *keys: str, default=None):
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def to_reference_units(value: Any) -> int:
    """Whole-currency amount (``"5000.25"`` or ``5000.25``) to reference units."""
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise errors.InvalidParameters(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise errors.InvalidParameters(f"Invalid amount: {value!r}")
    return int(amount * REFERENCE_SCALE)


def parse_base_units(value: Any) -> int:
    """Base-unit amounts travel as integer strings to survive JSON clients."""
    if isinstance(value, bool) or isinstance(value, float):
        raise errors.InvalidParameters("Amounts must be integers in base units.")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise errors.InvalidParameters(f"Invalid amount: {value!r}") from exc


def parse_plan_parameters(payload: dict) -> PlanParameters:
    try:
        return PlanParameters(
            life_expectancy_years=int(_extract_payload_value(payload, "lifeExpectancyYears", "life_expectancy_years")),
            monthly_spending=to_reference_units(
                _extract_payload_value(payload, "monthlySpending", "monthly_spending", default=0)
            ),
            retirement_age=int(_extract_payload_value(payload, "retirementAge", "retirement_age")),
            current_age=int(_extract_payload_value(payload, "currentAge", "current_age")),
            expected_yield_rate=int(
                _extract_payload_value(
                    payload, "expectedYieldRate", "yieldRate", "expected_yield_rate", default=DEFAULT_YIELD_RATE_BPS
                )
            ),
            inflation_rate=int(
                _extract_payload_value(payload, "inflationRate", "inflation_rate", default=DEFAULT_INFLATION_RATE_BPS)
            ),
        )
    except (TypeError, ValueError) as exc:
        raise errors.InvalidParameters("Invalid plan parameters.") from exc


def _is_nan(value: Any) -> bool:
    try:
        return not math.isfinite(value)
    except (TypeError, ValueError, OverflowError):
        return False


def _sanitize_records(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    clean_rows: List[Dict[str, Any]] = []
    for row in records:
        clean_rows.append({key: (None if _is_nan(value) else value) for key, value in row.items()})
    return clean_rows


@app.errorhandler(EngineError)
def handle_engine_error(exc: EngineError):
    status = ERROR_STATUS.get(type(exc), 400)
    return jsonify({"error": str(exc), "code": exc.code}), status


@app.after_request
def apply_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,OPTIONS"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    return response


@app.get("/api/health")
def healthcheck():
    return jsonify({"status": "ok"})


@app.get("/api/schema")
def get_schema():
    payload = {
        "plan": {
            "name": PLAN_FORM.name,
            "fields": [item.to_payload() for item in PLAN_FORM.fields],
            "defaults": PLAN_FORM.defaults(),
            "presets": _sanitize_records(PLAN_FORM.create_preset_df().to_dict("records")),
        },
        "freqOptions": [
            {"label": "Monthly", "value": "M"},
            {"label": "Quarterly", "value": "Q"},
            {"label": "Yearly", "value": "Y"},
        ],
    }
    return jsonify(payload)


@app.post("/api/quote")
def quote_plan():
    payload = request.get_json(silent=True) or {}
    params = parse_plan_parameters(payload)
    return jsonify(get_engine().quote(params).to_dict())


@app.get("/api/rates")
def get_rates():
    """Current price plus optional conversions of ``?reference=`` and ``?settlement=`` base-unit amounts."""
    eng = get_engine()
    payload: Dict[str, Any] = {
        "price": str(eng.current_price()),
        "referenceDecimals": REFERENCE_DECIMALS,
        "settlementDecimals": SETTLEMENT_DECIMALS,
    }
    if request.args.get("reference") is not None:
        reference = parse_base_units(request.args["reference"])
        payload["toSettlement"] = {"reference": str(reference), "settlement": str(eng.to_settlement_units(reference))}
    if request.args.get("settlement") is not None:
        settlement = parse_base_units(request.args["settlement"])
        payload["toReference"] = {"settlement": str(settlement), "reference": str(eng.to_reference_units(settlement))}
    return jsonify(payload)


@app.get("/api/totals")
def get_totals():
    return jsonify(get_engine().totals().to_dict())


@app.get("/api/plans/<identity>")
def get_plan(identity: str):
    dashboard = get_engine().dashboard(identity)
    if not dashboard:
        return jsonify({"error": "Plan not found."}), 404
    return jsonify(dashboard)


@app.post("/api/plans/<identity>")
def create_plan(identity: str):
    payload = request.get_json(silent=True) or {}
    savings = get_engine().create_plan(identity, parse_plan_parameters(payload))
    return jsonify({"message": "Plan created.", "savings": savings.to_dict()}), 201


@app.put("/api/plans/<identity>")
def update_plan(identity: str):
    payload = request.get_json(silent=True) or {}
    savings = get_engine().update_plan(identity, parse_plan_parameters(payload))
    return jsonify({"message": "Plan updated.", "savings": savings.to_dict()})


@app.post("/api/plans/<identity>/deactivate")
def deactivate_plan(identity: str):
    plan = get_engine().deactivate_plan(identity)
    return jsonify({"message": "Plan deactivated.", "plan": plan.to_dict()})


@app.post("/api/plans/<identity>/contributions")
def contribute(identity: str):
    payload = request.get_json(silent=True) or {}
    amount = parse_base_units(_extract_payload_value(payload, "amount", "value", default=0))
    savings = get_engine().contribute(identity, amount)
    return jsonify({"message": "Funds deposited.", "savings": savings.to_dict()})


@app.post("/api/plans/<identity>/reclaim")
def reclaim(identity: str):
    amount = get_engine().reclaim(identity)
    return jsonify({"message": "Funds withdrawn.", "amount": str(amount)})


@app.post("/api/plans/<identity>/disburse")
def disburse(identity: str):
    """Keeper endpoint: anyone may trigger the due payment, which always goes to ``identity``."""
    amount = get_engine().disburse(identity)
    savings = get_engine().get_savings(identity)
    return jsonify({"message": "Payment sent.", "amount": str(amount), "savings": savings.to_dict()})


@app.get("/api/plans/<identity>/schedule")
def get_schedule(identity: str):
    freq = (request.args.get("freq", "M") or "M").upper()
    if freq not in {"M", "Q", "Y"}:
        return jsonify({"error": "freq must be one of M, Q, Y."}), 400
    eng = get_engine()
    if eng.get_plan(identity) is None:
        return jsonify({"error": "Plan not found."}), 404
    schedule = eng.schedule(identity, freq=freq)
    records = _sanitize_records(schedule.to_dict(orient="records"))
    for row in records:
        for col in AMOUNT_COLUMNS:
            if col in row and row[col] is not None:
                row[col] = str(row[col])
    return jsonify({"identity": identity, "freq": freq, "data": records})


if __name__ == "__main__":
    settings = EngineSettings.from_env()
    configure_logging(settings.log_level)
    engine = build_engine(settings)
    app.run(debug=False, port=settings.port)

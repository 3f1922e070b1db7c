"""Error kinds raised by the funding and payout engine.

Every error is a synchronous rejection: when one of these is raised the
engine's durable state is exactly what it was before the call.
"""
from __future__ import annotations


class EngineError(Exception):
    code = "engine_error"
    default_message = "Operation rejected."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidParameters(EngineError):
    code = "invalid_parameters"
    default_message = "Invalid retirement plan parameters."


class NoActivePlan(EngineError):
    code = "no_active_plan"
    default_message = "No active retirement plan found."


class PaymentsAlreadyStarted(EngineError):
    code = "payments_already_started"
    default_message = "Payments have already started."


class ZeroAmount(EngineError):
    code = "zero_amount"
    default_message = "Must deposit some funds."


class NothingToReclaim(EngineError):
    code = "nothing_to_reclaim"
    default_message = "No funds to withdraw."


class NotArmed(EngineError):
    code = "not_armed"
    default_message = "Payments not started."


class NoPaymentsRemaining(EngineError):
    code = "no_payments_remaining"
    default_message = "All payments completed."


class TooEarly(EngineError):
    code = "too_early"
    default_message = "Too early for next payment."


class NoFundsAvailable(EngineError):
    code = "no_funds_available"
    default_message = "No funds available for payment."


class RateUnavailable(EngineError):
    code = "rate_unavailable"
    default_message = "No fresh exchange rate available."


class TransferFailed(EngineError):
    code = "transfer_failed"
    default_message = "Value transfer failed."


class ReentrantCall(EngineError):
    code = "reentrant_call"
    default_message = "Reentrant call rejected."


class PlanStillActive(EngineError):
    code = "plan_still_active"
    default_message = "Plan must be deactivated first."

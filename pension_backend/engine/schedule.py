import pandas as pd

from ..data_model.plan import Plan, Savings
from .valuation import periodic_payment

AMOUNT_COLUMNS = ["Payment", "CumulativePaid", "RemainingBalance"]


def _build_projection_state(plan: Plan, savings: Savings, now: int, interval: int) -> dict:
    if savings.payments_started:
        # Armed plans pay from what is actually held.
        balance = savings.available
        first_due = max(savings.last_payment_time + interval, now)
        paid = savings.total_paid_out
        month_offset = plan.params.total_payments - savings.payments_remaining
    else:
        # Unarmed plans are projected as if funded to target right now.
        balance = max(savings.total_deposited, savings.target_amount)
        first_due = now
        paid = 0
        month_offset = 0
    return {
        "balance": balance,
        "due": first_due,
        "paid": paid,
        "month_offset": month_offset,
        "remaining": savings.payments_remaining,
        "payment": periodic_payment(savings.target_amount, plan.params),
    }


def project_payouts(plan: Plan, savings: Savings, now: int, interval: int, identity: str = "") -> pd.DataFrame:
    """Project the disbursements still to come as one row per payment.

    Amounts are settlement units stored as Python ints (object columns) so no
    precision is lost; the projection stops early if the balance runs out.
    """
    state = _build_projection_state(plan, savings, now, interval)
    records = []
    for n in range(state["remaining"]):
        amount = min(state["payment"], state["balance"])
        if amount <= 0:
            break
        state["balance"] -= amount
        state["paid"] += amount
        due = state["due"] + n * interval
        stamp = pd.Timestamp(due, unit="s", tz="UTC")
        records.append(
            {
                "Identity": identity,
                "MonthIndex": state["month_offset"] + n,
                "DueTime": due,
                "Month": f"{stamp.year}-{stamp.month:02d}",
                "CalendarYear": stamp.year,
                "MonthInYear": stamp.month,
                "Payment": amount,
                "CumulativePaid": state["paid"],
                "RemainingBalance": state["balance"],
                "PaymentsRemaining": state["remaining"] - n - 1,
            }
        )
    df = pd.DataFrame(records)
    if df.empty:
        return df
    return df.astype({col: object for col in AMOUNT_COLUMNS})

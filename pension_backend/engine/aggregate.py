import pandas as pd

REQUIRED_COLUMNS = {"Identity", "MonthIndex", "CalendarYear", "MonthInYear", "Payment"}

SNAPSHOT_COLUMNS = ["DueTime", "Month", "CalendarYear", "MonthInYear", "CumulativePaid", "RemainingBalance",
                    "PaymentsRemaining"]


def _prepare(df: pd.DataFrame) -> pd.DataFrame:
    missing = REQUIRED_COLUMNS.difference(df.columns)
    if missing:
        raise KeyError(f"Missing required columns: {', '.join(sorted(missing))}")
    return df.sort_values(["Identity", "MonthIndex"]).copy()


def _roll_up(df: pd.DataFrame) -> pd.DataFrame:
    grouped = df.groupby(["Identity", "PeriodValue"], as_index=False, sort=True)
    agg = {col: "last" for col in SNAPSHOT_COLUMNS + ["Period"] if col in df.columns}
    agg["Payment"] = lambda s: sum(int(v) for v in s)
    agg["MonthIndex"] = "count"
    out = grouped.agg(agg).rename(columns={"MonthIndex": "PaymentCount"})
    return out


def aggregate_period(df: pd.DataFrame, freq: str = "M") -> pd.DataFrame:
    """Aggregate a projected payout schedule to monthly/quarterly/yearly rows.

    Payments are summed per period; balances are taken from the last payment
    in the period.
    """
    if df.empty:
        return df

    freq = (freq or "M").upper()
    df = _prepare(df)

    if freq == "Q":
        quarter = ((df["MonthInYear"] - 1) // 3 + 1).astype(int)
        df["PeriodValue"] = df["CalendarYear"] * 4 + quarter
        df["Period"] = df["CalendarYear"].astype(str) + " Q" + quarter.astype(str)
        return _roll_up(df)

    if freq == "Y":
        df["PeriodValue"] = df["CalendarYear"]
        df["Period"] = df["CalendarYear"].astype(str)
        return _roll_up(df)

    df["PeriodValue"] = df["MonthIndex"]
    df["Period"] = df.get("Month", df["MonthIndex"].astype(str))
    return df

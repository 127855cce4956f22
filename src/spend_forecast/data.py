from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence, Union

import pandas as pd

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: Sequence[str] = ("date", "amount", "type", "category")
OPTIONAL_COLUMNS: Sequence[str] = ("subcategory", "account")
EXCLUDED_CATEGORIES: Sequence[str] = ("In-pocket",)


class TransactionType(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER_IN = "Transfer-In"
    TRANSFER_OUT = "Transfer-Out"


@dataclass(frozen=True)
class Transaction:
    date: Union[date, datetime]
    amount: float
    type: TransactionType
    category: str
    subcategory: str = ""
    account: str = ""


TransactionsLike = Union[pd.DataFrame, Iterable[Union[Transaction, dict]]]


def _type_label(value) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value).strip()


def prepare_transactions(records: Optional[TransactionsLike]) -> pd.DataFrame:
    """Normalize transaction records into a frame; the input is never modified."""
    columns = list(REQUIRED_COLUMNS) + list(OPTIONAL_COLUMNS)
    if records is None:
        return pd.DataFrame(columns=columns)

    if isinstance(records, pd.DataFrame):
        df = records.copy()
    else:
        rows = [asdict(r) if is_dataclass(r) else dict(r) for r in records]
        if not rows:
            return pd.DataFrame(columns=columns)
        df = pd.DataFrame.from_records(rows)

    if df.empty:
        return df.reindex(columns=columns)

    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"Transactions missing required columns: {sorted(missing)}")

    for column in OPTIONAL_COLUMNS:
        if column not in df.columns:
            df[column] = ""

    before = len(df)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").astype(float)
    df = df.dropna(subset=["date", "amount"]).copy()
    dropped = before - len(df)
    if dropped:
        logger.debug("Dropped %d transactions without a usable date or amount", dropped)

    df["type"] = df["type"].map(_type_label)
    df["category"] = df["category"].fillna("").astype(str).str.strip()
    df["subcategory"] = df["subcategory"].fillna("").astype(str)
    df["account"] = df["account"].fillna("").astype(str)

    return df[columns].sort_values("date", kind="stable").reset_index(drop=True)


def expense_transactions(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    mask = (df["type"] == TransactionType.EXPENSE.value) & ~df["category"].isin(EXCLUDED_CATEGORIES)
    return df[mask]


def month_key(value) -> str:
    ts = pd.Timestamp(value)
    return f"{ts.year:04d}-{ts.month:02d}"


def monthly_totals(df: pd.DataFrame, category: Optional[str] = None) -> Dict[str, float]:
    """Return ``{'YYYY-MM': total}`` of absolute expense amounts, oldest month first."""
    expenses = expense_transactions(df)
    if category is not None and not expenses.empty:
        expenses = expenses[expenses["category"] == category]
    if expenses.empty:
        return {}

    keys = expenses["date"].dt.strftime("%Y-%m")
    totals = expenses["amount"].abs().groupby(keys).sum().sort_index()
    return {str(month): float(total) for month, total in totals.items()}


def monthly_category_frame(df: pd.DataFrame, fill_value: float = 0.0) -> pd.DataFrame:
    """Long monthly frame (``category``, ``ds``, ``y``) with gap months filled per category."""
    expenses = expense_transactions(df)
    if expenses.empty:
        return pd.DataFrame(columns=["category", "ds", "y"])

    grouped = (
        expenses.assign(
            ds=expenses["date"].dt.to_period("M").dt.to_timestamp(),
            y=expenses["amount"].abs(),
        )
        .groupby(["category", "ds"])["y"]
        .sum()
        .reset_index()
    )

    monthly_frames = []
    for category, group in grouped.groupby("category"):
        prepared = group.sort_values("ds").set_index("ds")[["y"]].asfreq("MS", fill_value=fill_value)
        prepared = prepared.reset_index()
        prepared["category"] = category
        monthly_frames.append(prepared)

    monthly = pd.concat(monthly_frames, ignore_index=True)
    monthly = monthly[["category", "ds", "y"]]
    return monthly.sort_values(["category", "ds"]).reset_index(drop=True)

# breakdown.py — line items, waterfall steps and exports built from a CalculationResult
import io
from dataclasses import asdict, dataclass
from typing import Dict, List, Literal

import numpy as np
import pandas as pd

from mrr_gap.calculator import (
    ASSUMED_TRANSACTIONS,
    EU_UK_VAT_RATE,
    ROLLING_RESERVE_RATE,
    US_SALES_TAX_RATE,
    CalculationResult,
    CalculatorInput,
    processor_display_name,
    processor_fee_description,
)

LineCategory = Literal["fee", "loss", "hold", "tax"]
StepCategory = Literal["revenue", "fee", "hold", "tax"]

CATEGORY_LABELS: Dict[str, str] = {
    "revenue": "Your Money",
    "fee": "Fee/Loss",
    "loss": "Fee/Loss",
    "hold": "Temporary Hold",
    "tax": "Tax (Not Yours)",
}

@dataclass
class LineItem:
    key: str
    name: str
    amount: float
    percentage: float
    category: LineCategory
    description: str

@dataclass
class WaterfallStep:
    name: str
    value: float
    category: StepCategory
    start: float
    end: float

# ---------- Line items ----------

def _pct_of_mrr(amount: float, mrr: float) -> float:
    return (amount / mrr * 100) if mrr > 0 else 0.0

def line_items(result: CalculationResult, processor: str) -> List[LineItem]:
    """Non-zero deductions in display order, each with its share of MRR."""
    d = result.deductions
    rows = [
        ("processor_fees", f"{processor_display_name(processor)} Fees", d.processor_fees, "fee",
         f"Transaction processing fees: {processor_fee_description(processor)}"),
        ("refunds", "Refunds", d.refunds, "loss",
         "Money returned to customers who cancelled"),
        ("chargebacks", "Chargebacks", d.chargebacks, "loss",
         "Disputed transactions reversed by the bank"),
        ("rolling_reserve", "Rolling Reserve", d.rolling_reserve, "hold",
         f"{ROLLING_RESERVE_RATE:.0%} held back on new Stripe accounts, released later"),
        ("vat_collected", "VAT Collected (EU/UK)", d.vat_collected, "tax",
         f"{EU_UK_VAT_RATE:.0%} VAT on EU/UK sales, never your revenue"),
        ("us_sales_tax", "US Sales Tax", d.us_sales_tax, "tax",
         f"Average {US_SALES_TAX_RATE:.0%} sales tax on US transactions"),
    ]
    return [
        LineItem(key, name, amount, _pct_of_mrr(amount, result.mrr), category, description)
        for key, name, amount, category, description in rows
        if amount > 0
    ]

# ---------- Waterfall ----------

_STEP_ORDER = [
    ("Processor Fees", "processor_fees", "fee"),
    ("Refunds", "refunds", "fee"),
    ("Chargebacks", "chargebacks", "fee"),
    ("Rolling Reserve", "rolling_reserve", "hold"),
    ("VAT Collected", "vat_collected", "tax"),
    ("US Sales Tax", "us_sales_tax", "tax"),
]

def waterfall_steps(result: CalculationResult) -> List[WaterfallStep]:
    """MRR, then each non-zero deduction hanging off the running total, then Net to Bank."""
    active = [
        (name, getattr(result.deductions, field), category)
        for name, field, category in _STEP_ORDER
        if getattr(result.deductions, field) > 0
    ]
    values = np.array([value for _, value, _ in active], dtype=float)
    starts = result.mrr - np.cumsum(values)
    ends = starts + values

    steps = [WaterfallStep("MRR", result.mrr, "revenue", 0.0, result.mrr)]
    for (name, value, category), start, end in zip(active, starts, ends):
        steps.append(WaterfallStep(name, value, category, float(start), float(end)))
    steps.append(WaterfallStep("Net to Bank", result.net_to_bank, "revenue", 0.0, result.net_to_bank))
    return steps

# ---------- Table + Exports ----------

def breakdown_frame(result: CalculationResult, processor: str) -> pd.DataFrame:
    items = line_items(result, processor)
    df = pd.DataFrame([{
        "Item": item.name,
        "Category": CATEGORY_LABELS[item.category],
        "Amount": round(item.amount),
        "% of MRR": round(item.percentage, 1),
    } for item in items], columns=["Item", "Category", "Amount", "% of MRR"])
    totals = pd.DataFrame([
        {"Item": "Total Deductions", "Category": "", "Amount": round(result.total_gap),
         "% of MRR": round(result.gap_percent, 1)},
        {"Item": "Net to Bank", "Category": CATEGORY_LABELS["revenue"], "Amount": round(result.net_to_bank),
         "% of MRR": round(_pct_of_mrr(result.net_to_bank, result.mrr), 1)},
    ])
    return pd.concat([df, totals] if items else [totals], ignore_index=True)

def to_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")

def to_xlsx_bytes(df: pd.DataFrame, sheet_name: str = "Breakdown") -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    buf.seek(0)
    return buf.getvalue()

def inputs_payload(inputs: CalculatorInput) -> Dict[str, object]:
    payload = asdict(inputs)
    payload["assumed_transactions"] = ASSUMED_TRANSACTIONS
    return payload

# ---------- Educational copy ----------

@dataclass
class Topic:
    title: str
    content: str
    key_point: str

TOPICS: List[Topic] = [
    Topic(
        "Payment Processing Fees",
        "Every time a customer pays you, your payment processor takes a cut. This ranges from "
        "2.9% + $0.30 per transaction (Stripe) to 5% flat (Paddle, Lemon Squeezy). The fees cover "
        "fraud protection, currency conversion and the infrastructure behind online payments.",
        "This is the cost of doing business online: unavoidable but predictable.",
    ),
    Topic(
        "Refunds",
        "When customers request refunds the money leaves your account, and most processors keep "
        "their fee, so a $100 refund can cost you $103. SaaS refund rates usually sit at 2-5% "
        "depending on pricing model and customer segment.",
        "Better onboarding and a clear value proposition upfront lower refunds.",
    ),
    Topic(
        "Chargebacks",
        "A chargeback happens when a customer disputes a transaction with their bank. You lose the "
        "money and pay a $15-25 dispute fee on top. Too many chargebacks (over 1%) can get your "
        "merchant account terminated.",
        "Clear billing descriptors and easy cancellation reduce disputes.",
    ),
    Topic(
        "Rolling Reserves",
        "New businesses on Stripe may see 10% of revenue held in reserve for several months as "
        "protection against refunds and chargebacks. The money is released after the holding period.",
        "This is temporary: the reserve comes back to you.",
    ),
    Topic(
        "VAT & Sales Tax",
        "Tax collected on sales was never yours. Charge an EU customer $100 plus 20% VAT and the "
        "extra $20 goes straight to the government; you only pass it through.",
        "Tax-inclusive pricing inflates MRR, so track net revenue instead.",
    ),
]

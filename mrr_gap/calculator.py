# calculator.py — MRR vs Bank Deposit gap calculation
# ---------------------------------------------------------------------------------------------
# Maps a handful of business inputs (MRR, processor, refund/chargeback rates, sales geography)
# to the deductions between reported MRR and the cash that actually lands in the bank.
# Aggregate percentage assumptions only; no transaction-level data.
# ---------------------------------------------------------------------------------------------

import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Literal, Optional, Tuple

logger = logging.getLogger(__name__)

Processor = Literal["stripe", "paypal", "paddle", "lemon_squeezy", "other"]

PROCESSORS: Tuple[str, ...] = ("stripe", "paypal", "paddle", "lemon_squeezy", "other")

# ---------- Assumptions ----------

# Flat per-transaction fees are approximated from aggregate MRR with a fixed monthly count.
ASSUMED_TRANSACTIONS = 100

EU_UK_VAT_RATE = 0.20
US_SALES_TAX_RATE = 0.08
# Held on new Stripe accounts (< 6 months old)
ROLLING_RESERVE_RATE = 0.10

# processor -> (percentage of volume, flat fee per transaction in USD)
FEE_SCHEDULE: Dict[str, Tuple[float, float]] = {
    "stripe": (0.029, 0.30),
    "paypal": (0.0349, 0.49),
    "paddle": (0.05, 0.0),
    "lemon_squeezy": (0.05, 0.0),
    "other": (0.03, 0.0),
}

DISPLAY_NAMES: Dict[str, str] = {
    "stripe": "Stripe",
    "paypal": "PayPal",
    "paddle": "Paddle",
    "lemon_squeezy": "Lemon Squeezy",
    "other": "Other",
}

FEE_DESCRIPTIONS: Dict[str, str] = {
    "stripe": "2.9% + $0.30 per transaction",
    "paypal": "3.49% + $0.49 per transaction",
    "paddle": "5% flat rate (includes tax handling)",
    "lemon_squeezy": "5% flat rate",
    "other": "~3% average industry rate",
}

# ---------- Data model ----------

@dataclass(frozen=True)
class CalculatorInput:
    mrr: float
    processor: Processor
    refund_rate: float
    chargeback_rate: float
    eu_uk_sales_percent: float
    us_sales_percent: float
    is_new_stripe_account: bool = False

@dataclass(frozen=True)
class DeductionBreakdown:
    processor_fees: float
    refunds: float
    chargebacks: float
    rolling_reserve: float
    vat_collected: float
    us_sales_tax: float

    @property
    def total(self) -> float:
        return (
            self.processor_fees
            + self.refunds
            + self.chargebacks
            + self.rolling_reserve
            + self.vat_collected
            + self.us_sales_tax
        )

@dataclass(frozen=True)
class CalculationResult:
    mrr: float
    deductions: DeductionBreakdown
    net_to_bank: float
    total_gap: float
    gap_percent: float

# ---------- Calculation ----------

def processor_fees(mrr: float, processor: str) -> float:
    """Percentage of volume plus the flat fee over ASSUMED_TRANSACTIONS.

    Unrecognized processors are charged the "other" rate. No revenue means no
    transactions, so the flat component only applies when mrr > 0.
    """
    pct, flat = FEE_SCHEDULE.get(processor, FEE_SCHEDULE["other"])
    transactions = ASSUMED_TRANSACTIONS if mrr > 0 else 0
    return mrr * pct + flat * transactions

def calculate(inputs: CalculatorInput) -> CalculationResult:
    mrr = inputs.mrr
    rolling_reserve = 0.0
    if inputs.processor == "stripe" and inputs.is_new_stripe_account:
        rolling_reserve = mrr * ROLLING_RESERVE_RATE

    deductions = DeductionBreakdown(
        processor_fees=processor_fees(mrr, inputs.processor),
        refunds=mrr * (inputs.refund_rate / 100),
        chargebacks=mrr * (inputs.chargeback_rate / 100),
        rolling_reserve=rolling_reserve,
        # Pass-through taxes: collected for governments, never the seller's revenue
        vat_collected=(inputs.eu_uk_sales_percent / 100) * mrr * EU_UK_VAT_RATE,
        us_sales_tax=(inputs.us_sales_percent / 100) * mrr * US_SALES_TAX_RATE,
    )

    net_to_bank = mrr - deductions.total
    total_gap = mrr - net_to_bank
    gap_percent = (total_gap / mrr * 100) if mrr > 0 else 0.0

    logger.debug(
        "calculated gap: mrr=%s processor=%s net_to_bank=%.2f gap_percent=%.2f",
        mrr, inputs.processor, net_to_bank, gap_percent,
    )
    return CalculationResult(mrr, deductions, net_to_bank, total_gap, gap_percent)

def zero_result() -> CalculationResult:
    """Result shown while MRR is empty or no processor has been picked."""
    return CalculationResult(
        mrr=0.0,
        deductions=DeductionBreakdown(0.0, 0.0, 0.0, 0.0, 0.0, 0.0),
        net_to_bank=0.0,
        total_gap=0.0,
        gap_percent=0.0,
    )

def calculate_or_zero(
    mrr: Optional[float],
    processor: Optional[str],
    refund_rate: float,
    chargeback_rate: float,
    eu_uk_sales_percent: float,
    us_sales_percent: float,
    is_new_stripe_account: bool = False,
) -> CalculationResult:
    if mrr is None or processor is None:
        logger.debug("incomplete inputs (mrr=%s, processor=%s); using zero result", mrr, processor)
        return zero_result()
    return calculate(CalculatorInput(
        mrr=float(mrr),
        processor=processor,
        refund_rate=refund_rate,
        chargeback_rate=chargeback_rate,
        eu_uk_sales_percent=eu_uk_sales_percent,
        us_sales_percent=us_sales_percent,
        is_new_stripe_account=is_new_stripe_account,
    ))

# ---------- Display helpers ----------

def processor_display_name(processor: str) -> str:
    return DISPLAY_NAMES[processor]

def processor_fee_description(processor: str) -> str:
    return FEE_DESCRIPTIONS[processor]

def parse_fee_description(description: str) -> Tuple[float, float]:
    """Read (percentage of volume, flat fee) back out of a fee description."""
    pct = re.search(r"([\d.]+)%", description)
    flat = re.search(r"\$([\d.]+)", description)
    return (
        float(pct.group(1)) / 100 if pct else 0.0,
        float(flat.group(1)) if flat else 0.0,
    )

def format_currency(amount: Optional[float]) -> str:
    if amount is None or (isinstance(amount, float) and (math.isnan(amount) or math.isinf(amount))):
        return "—"
    whole = int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(whole):,}"

def format_percent(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"

# ---------- Unit Tests (in-app self-check) ----------

def run_unit_tests():
    def inputs(**overrides) -> CalculatorInput:
        base = dict(mrr=10000.0, processor="stripe", refund_rate=2.0, chargeback_rate=0.5,
                    eu_uk_sales_percent=30.0, us_sales_percent=50.0, is_new_stripe_account=False)
        base.update(overrides)
        return CalculatorInput(**base)

    r1 = calculate(inputs())
    assert abs(r1.deductions.processor_fees - 320) < 1e-6 and abs(r1.total_gap - 1570) < 1e-6
    assert abs(r1.net_to_bank - 8430) < 1e-6 and abs(r1.gap_percent - 15.7) < 1e-9
    r2 = calculate(inputs(is_new_stripe_account=True))
    assert abs(r2.deductions.rolling_reserve - 1000) < 1e-6 and abs(r2.net_to_bank - 7430) < 1e-6
    r4 = calculate(inputs(mrr=5000.0, processor="paddle", refund_rate=0.0, chargeback_rate=0.0,
                          eu_uk_sales_percent=0.0, us_sales_percent=0.0))
    assert abs(r4.deductions.processor_fees - 250) < 1e-6 and abs(r4.gap_percent - 5) < 1e-9
    r5 = calculate(inputs(mrr=20000.0, processor="paypal", refund_rate=10.0, chargeback_rate=5.0,
                          eu_uk_sales_percent=100.0, us_sales_percent=0.0))
    assert abs(r5.total_gap - 7747) < 1e-6 and abs(r5.net_to_bank - 12253) < 1e-6
    for p in PROCESSORS:
        assert calculate(inputs(mrr=0.0, processor=p, is_new_stripe_account=True)) == zero_result()
        pct, flat = parse_fee_description(processor_fee_description(p))
        assert (abs(pct - FEE_SCHEDULE[p][0]) < 1e-12 and abs(flat - FEE_SCHEDULE[p][1]) < 1e-12), p
    return "All unit tests passed ✅"

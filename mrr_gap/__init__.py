"""MRR vs Bank Deposit gap calculator."""

from mrr_gap.calculator import (
    ASSUMED_TRANSACTIONS,
    PROCESSORS,
    CalculationResult,
    CalculatorInput,
    DeductionBreakdown,
    Processor,
    calculate,
    calculate_or_zero,
    format_currency,
    format_percent,
    processor_display_name,
    processor_fee_description,
    zero_result,
)

__all__ = [
    "ASSUMED_TRANSACTIONS",
    "PROCESSORS",
    "CalculationResult",
    "CalculatorInput",
    "DeductionBreakdown",
    "Processor",
    "calculate",
    "calculate_or_zero",
    "format_currency",
    "format_percent",
    "processor_display_name",
    "processor_fee_description",
    "zero_result",
]

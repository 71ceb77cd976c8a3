"""Unit tests for the gap calculation and its display helpers"""

import dataclasses

import pytest

from mrr_gap.calculator import (
    ASSUMED_TRANSACTIONS,
    FEE_SCHEDULE,
    PROCESSORS,
    calculate,
    calculate_or_zero,
    format_currency,
    format_percent,
    parse_fee_description,
    processor_display_name,
    processor_fee_description,
    processor_fees,
    run_unit_tests,
    zero_result,
)


def _deduction_sum(result):
    return sum(dataclasses.astuple(result.deductions))


# ---------- Scenarios ----------

def test_stripe_established_account(make_input):
    result = calculate(make_input())
    d = result.deductions

    assert d.processor_fees == pytest.approx(320)
    assert d.refunds == pytest.approx(200)
    assert d.chargebacks == pytest.approx(50)
    assert d.rolling_reserve == 0
    assert d.vat_collected == pytest.approx(600)
    assert d.us_sales_tax == pytest.approx(400)
    assert result.total_gap == pytest.approx(1570)
    assert result.net_to_bank == pytest.approx(8430)
    assert result.gap_percent == pytest.approx(15.7)
    assert format_currency(result.net_to_bank) == "$8,430"


def test_stripe_new_account_holds_reserve(make_input):
    result = calculate(make_input(is_new_stripe_account=True))

    assert result.deductions.rolling_reserve == pytest.approx(1000)
    assert result.total_gap == pytest.approx(2570)
    assert result.net_to_bank == pytest.approx(7430)
    assert result.gap_percent == pytest.approx(25.7)


@pytest.mark.parametrize("processor", PROCESSORS)
def test_zero_mrr_gives_zero_result(make_input, processor):
    result = calculate(make_input(mrr=0.0, processor=processor, is_new_stripe_account=True))

    assert result == zero_result()
    assert _deduction_sum(result) == 0
    assert result.net_to_bank == 0
    assert result.total_gap == 0
    assert result.gap_percent == 0


def test_paddle_flat_rate(make_input):
    result = calculate(make_input(mrr=5000.0, processor="paddle", refund_rate=0.0, chargeback_rate=0.0,
                                  eu_uk_sales_percent=0.0, us_sales_percent=0.0))

    assert result.deductions.processor_fees == pytest.approx(250)
    assert _deduction_sum(result) - result.deductions.processor_fees == 0
    assert result.net_to_bank == pytest.approx(4750)
    assert result.gap_percent == pytest.approx(5)


def test_paypal_at_slider_maximums(make_input):
    result = calculate(make_input(mrr=20000.0, processor="paypal", refund_rate=10.0, chargeback_rate=5.0,
                                  eu_uk_sales_percent=100.0, us_sales_percent=0.0))
    d = result.deductions

    assert d.processor_fees == pytest.approx(747)
    assert d.refunds == pytest.approx(2000)
    assert d.chargebacks == pytest.approx(1000)
    assert d.vat_collected == pytest.approx(4000)
    assert d.us_sales_tax == 0
    assert result.total_gap == pytest.approx(7747)
    assert result.net_to_bank == pytest.approx(12253)


# ---------- Properties ----------

CASES = [
    dict(),
    dict(mrr=1.0, processor="paypal"),
    dict(mrr=250_000.0, processor="lemon_squeezy", refund_rate=7.5, chargeback_rate=3.3),
    dict(mrr=42.0, processor="other", eu_uk_sales_percent=80.0, us_sales_percent=80.0),
    dict(mrr=900.0, processor="stripe", is_new_stripe_account=True, refund_rate=10.0, chargeback_rate=5.0,
         eu_uk_sales_percent=100.0, us_sales_percent=100.0),
]


@pytest.mark.parametrize("overrides", CASES)
def test_totals_are_consistent(make_input, overrides):
    result = calculate(make_input(**overrides))

    assert result.total_gap == pytest.approx(_deduction_sum(result))
    assert result.total_gap == pytest.approx(result.deductions.total)
    assert result.net_to_bank + result.total_gap == pytest.approx(result.mrr)


@pytest.mark.parametrize("overrides", CASES)
def test_calculate_is_deterministic(make_input, overrides):
    inputs = make_input(**overrides)
    assert calculate(inputs) == calculate(inputs)


@pytest.mark.parametrize("processor", ["paypal", "paddle", "lemon_squeezy", "other"])
def test_rolling_reserve_only_for_new_stripe_accounts(make_input, processor):
    assert calculate(make_input(processor=processor, is_new_stripe_account=True)).deductions.rolling_reserve == 0
    assert calculate(make_input(is_new_stripe_account=False)).deductions.rolling_reserve == 0
    assert calculate(make_input(mrr=3333.0, is_new_stripe_account=True)).deductions.rolling_reserve == pytest.approx(333.3)


def test_taxes_grow_with_sales_share(make_input):
    shares = [0.0, 5.0, 25.0, 50.0, 95.0, 100.0]
    vat = [calculate(make_input(eu_uk_sales_percent=s)).deductions.vat_collected for s in shares]
    us = [calculate(make_input(us_sales_percent=s)).deductions.us_sales_tax for s in shares]

    assert vat == sorted(vat)
    assert us == sorted(us)


def test_geography_shares_are_not_normalized(make_input):
    result = calculate(make_input(eu_uk_sales_percent=100.0, us_sales_percent=100.0))

    assert result.deductions.vat_collected == pytest.approx(2000)
    assert result.deductions.us_sales_tax == pytest.approx(800)


def test_out_of_range_values_are_not_rejected(make_input):
    result = calculate(make_input(mrr=100.0, refund_rate=150.0))

    assert result.net_to_bank < 0
    assert result.gap_percent > 100


def test_unknown_processor_uses_other_rate(make_input):
    result = calculate(make_input(processor="square"))

    assert result.deductions.processor_fees == pytest.approx(300)
    with pytest.raises(KeyError):
        processor_display_name("square")


def test_flat_fee_uses_assumed_transaction_count():
    assert ASSUMED_TRANSACTIONS == 100
    assert processor_fees(1000.0, "stripe") == pytest.approx(1000 * 0.029 + 0.30 * 100)
    assert processor_fees(1000.0, "paypal") == pytest.approx(1000 * 0.0349 + 0.49 * 100)


# ---------- Caller-side zero substitution ----------

def test_calculate_or_zero_without_mrr():
    assert calculate_or_zero(None, "stripe", 2.0, 0.5, 30.0, 50.0) == zero_result()


def test_calculate_or_zero_without_processor():
    assert calculate_or_zero(10000.0, None, 2.0, 0.5, 30.0, 50.0) == zero_result()


def test_calculate_or_zero_with_full_inputs(make_input):
    result = calculate_or_zero(10000, "stripe", 2.0, 0.5, 30.0, 50.0, True)
    assert result == calculate(make_input(is_new_stripe_account=True))


# ---------- Display helpers ----------

@pytest.mark.parametrize("processor, name", [
    ("stripe", "Stripe"),
    ("paypal", "PayPal"),
    ("paddle", "Paddle"),
    ("lemon_squeezy", "Lemon Squeezy"),
    ("other", "Other"),
])
def test_processor_display_name(processor, name):
    assert processor_display_name(processor) == name


@pytest.mark.parametrize("processor", PROCESSORS)
def test_fee_description_matches_fee_schedule(processor):
    pct, flat = parse_fee_description(processor_fee_description(processor))

    assert pct == pytest.approx(FEE_SCHEDULE[processor][0])
    assert flat == pytest.approx(FEE_SCHEDULE[processor][1])


def test_stripe_description_text():
    assert processor_fee_description("stripe") == "2.9% + $0.30 per transaction"


@pytest.mark.parametrize("amount, expected", [
    (0, "$0"),
    (8430.0, "$8,430"),
    (1234567.4, "$1,234,567"),
    (2.5, "$3"),
    (319.5, "$320"),
    (-30.0, "-$30"),
    (-1234.6, "-$1,235"),
    (-0.4, "-$0"),
    (None, "—"),
    (float("nan"), "—"),
    (float("inf"), "—"),
])
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_percent():
    assert format_percent(15.7) == "15.7%"
    assert format_percent(5) == "5.0%"
    assert format_percent(25.6789, decimals=2) == "25.68%"
    assert format_percent(0, decimals=0) == "0%"


def test_in_app_self_check_passes():
    assert run_unit_tests() == "All unit tests passed ✅"

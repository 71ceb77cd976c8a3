# app.py — Streamlit "MRR vs Bank Account" Calculator
# ---------------------------------------------------------------------------------------------
# README — How to run
# 1) pip install -e .
# 2) streamlit run app.py
#
# What it shows:
# - Reported MRR vs the cash that actually reaches the bank after processor fees, refunds,
#   chargebacks, a rolling reserve (new Stripe accounts) and pass-through VAT / US sales tax.
# - Waterfall chart, line-item breakdown, CSV/XLSX/JSON/PNG exports.
# - Sidebar defaults come from MRR_GAP_* environment variables (see mrr_gap/settings.py).
#   MRR_GAP_DEFAULT_MRR=none and MRR_GAP_DEFAULT_PROCESSOR=none start with empty inputs.
# ---------------------------------------------------------------------------------------------

import json
import logging

import matplotlib.pyplot as plt
import streamlit as st

from mrr_gap.breakdown import (
    TOPICS,
    breakdown_frame,
    inputs_payload,
    line_items,
    to_csv_bytes,
    to_xlsx_bytes,
    waterfall_steps,
)
from mrr_gap.calculator import (
    ASSUMED_TRANSACTIONS,
    EU_UK_VAT_RATE,
    PROCESSORS,
    US_SALES_TAX_RATE,
    CalculatorInput,
    calculate_or_zero,
    format_currency,
    format_percent,
    processor_display_name,
    processor_fee_description,
    run_unit_tests,
)
from mrr_gap.charts import build_slide_image, draw_waterfall
from mrr_gap.logging_conf import setup_logging
from mrr_gap.settings import get_settings

settings = get_settings()
setup_logging(settings.log_level, settings.log_file)
logger = logging.getLogger("mrr_gap.app")

st.set_page_config(page_title=settings.page_title, layout="wide")

if "started" not in st.session_state:
    st.session_state.started = True
    logger.info("session started: default processor=%s, default mrr=%s", settings.default_processor, settings.default_mrr)

# ---------- Inputs ----------

with st.sidebar:
    st.header("Inputs")
    mrr = st.number_input("Monthly Recurring Revenue (US$)", min_value=0.0, max_value=10_000_000.0,
                          value=settings.default_mrr, step=1_000.0, format="%.0f", placeholder="Enter MRR")
    default_index = None if settings.default_processor is None else PROCESSORS.index(settings.default_processor)
    processor = st.selectbox("Payment processor", PROCESSORS, index=default_index,
                             format_func=processor_display_name, placeholder="Select a processor")
    if processor is not None:
        st.caption(f"Fees: {processor_fee_description(processor)}")

    st.markdown("---")
    refund_rate = st.slider("Refund rate %", min_value=0.0, max_value=10.0,
                            value=settings.default_refund_rate, step=0.5)
    chargeback_rate = st.slider("Chargeback rate %", min_value=0.0, max_value=5.0,
                                value=settings.default_chargeback_rate, step=0.1)

    st.markdown("---")
    st.markdown("**Sales geography**")
    eu_uk_sales_percent = st.slider("EU/UK sales %", min_value=0.0, max_value=100.0,
                                    value=settings.default_eu_uk_sales_percent, step=5.0)
    us_sales_percent = st.slider("US sales %", min_value=0.0, max_value=100.0,
                                 value=settings.default_us_sales_percent, step=5.0)
    st.caption("EU/UK and US shares are independent and do not need to add up to 100%.")

    is_new_stripe_account = False
    if processor == "stripe":
        is_new_stripe_account = st.checkbox("New Stripe account (< 6 months)",
                                            value=settings.default_new_stripe_account)

    st.markdown("---")
    if st.button("Run unit tests"):
        try: st.success(run_unit_tests())
        except AssertionError as e: st.error(f"Unit tests failed: {e}")

result = calculate_or_zero(mrr, processor, refund_rate, chargeback_rate,
                           eu_uk_sales_percent, us_sales_percent, is_new_stripe_account)

# ---------- Summary cards ----------

st.title(settings.page_title)
c = st.columns([1,1,1,1])
c[0].metric("Reported MRR", format_currency(result.mrr), help="Gross revenue")
c[1].metric("Net to Bank", format_currency(result.net_to_bank), help="Actual deposit")
c[2].metric("Total Deductions", format_currency(result.total_gap), help="Fees & taxes")
c[3].metric("Gap Rate", format_percent(result.gap_percent), help="Share of MRR that never reaches the bank")

# ---------- Waterfall + Line items ----------

left, right = st.columns([3,2])
with left:
    st.markdown("#### From MRR to Bank Deposit")
    fig_w, ax = plt.subplots(figsize=(7,4), dpi=150)
    draw_waterfall(ax, waterfall_steps(result))
    st.pyplot(fig_w, width="stretch")
    st.caption("Green is your money, red fees and losses, orange temporary holds, gray taxes that were never yours.")
    plt.close(fig_w)

with right:
    st.markdown("#### Detailed Breakdown")
    items = [] if processor is None else line_items(result, processor)
    if not items:
        st.info("Enter MRR and select a processor to see breakdown")
    for item in items:
        tag = {"hold": " · Temporary", "tax": " · Not your revenue"}.get(item.category, "")
        st.markdown(f"**{item.name}**{tag}  \n-{format_currency(item.amount)} ({format_percent(item.percentage)})")
        st.progress(min(item.percentage * 3, 100.0) / 100.0)
        st.caption(item.description)
    st.markdown("---")
    st.markdown(f"**Total deductions** -{format_currency(result.total_gap)}  \n"
                f"**Net to bank** {format_currency(result.net_to_bank)}")

# ---------- Understanding the gap ----------

st.markdown("### Understanding the MRR-to-Bank Gap")
st.caption("A gap between reported MRR and bank deposits is normal; most SaaS businesses see 15-35% "
           "depending on processor, geography and refund rates.")
for topic in TOPICS:
    with st.expander(topic.title):
        st.write(topic.content)
        st.markdown(f"**{topic.key_point}**")

# ---------- Exports ----------

if processor is not None and mrr is not None:
    st.markdown("### Export")
    df = breakdown_frame(result, processor)
    st.dataframe(df, width="stretch")

    inputs = CalculatorInput(mrr, processor, refund_rate, chargeback_rate,
                             eu_uk_sales_percent, us_sales_percent, is_new_stripe_account)
    inputs_json = json.dumps(inputs_payload(inputs), indent=2).encode("utf-8")

    e = st.columns([1,1,1,1])
    e[0].download_button("Export CSV (Breakdown)", data=to_csv_bytes(df), file_name="mrr_gap_breakdown.csv", mime="text/csv")
    e[1].download_button("Export XLSX (Breakdown)", data=to_xlsx_bytes(df), file_name="mrr_gap_breakdown.xlsx",
                         mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")
    e[2].download_button("Export JSON (Inputs)", data=inputs_json, file_name="mrr_gap_inputs.json", mime="application/json")
    e[3].download_button("Download PNG (Dashboard 1920×1080)", data=build_slide_image(result, processor),
                         file_name="mrr_gap_dashboard.png", mime="image/png")
    logger.debug("rendered result: processor=%s net_to_bank=%.2f", processor, result.net_to_bank)

st.caption(f"Estimates use aggregate assumptions ({ASSUMED_TRANSACTIONS} transactions a month, "
           f"{EU_UK_VAT_RATE:.0%} VAT, {US_SALES_TAX_RATE:.0%} US sales tax); for illustration only.")

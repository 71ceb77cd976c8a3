# charts.py — matplotlib waterfall chart and PNG dashboard export
import io
from typing import List

import matplotlib.pyplot as plt
from matplotlib.patches import Patch

from mrr_gap.breakdown import CATEGORY_LABELS, WaterfallStep, line_items, waterfall_steps
from mrr_gap.calculator import (
    CalculationResult,
    format_currency,
    format_percent,
    processor_display_name,
)

COLORS = {
    "revenue": "#10b981",  # your money
    "fee": "#ef4444",
    "hold": "#f97316",
    "tax": "#6b7280",
}

def draw_waterfall(ax, steps: List[WaterfallStep]):
    """Floating-bar waterfall: MRR down through each deduction to Net to Bank."""
    ax.set_title("MRR → Bank Deposit")
    xs = list(range(len(steps)))
    bottoms = [min(s.start, s.end) for s in steps]
    heights = [abs(s.end - s.start) for s in steps]
    colors = [COLORS[s.category] for s in steps]
    ax.bar(xs, heights, bottom=bottoms, color=colors, width=0.6)

    # Connector lines between consecutive bars
    for i in range(len(steps) - 1):
        level = steps[i].start if steps[i].category != "revenue" else steps[i].end
        ax.plot([i + 0.3, i + 0.7], [level, level], color="#94a3b8", linewidth=1, linestyle=":")

    top = max([s.end for s in steps] + [0.0])
    for x, s in zip(xs, steps):
        label = format_currency(s.value) if s.category == "revenue" else f"-{format_currency(s.value)}"
        ax.text(x, max(s.start, s.end) + top * 0.01, label, ha="center", va="bottom", fontsize=8)

    ax.set_xticks(xs, [s.name for s in steps], rotation=30, ha="right")
    ax.set_ylabel("US$")
    ax.grid(True, axis="y", alpha=0.2)
    ax.axhline(0, color="#94a3b8", linewidth=0.8)

    # One legend entry per category present
    seen = []
    for s in steps:
        if s.category not in seen:
            seen.append(s.category)
    handles = [Patch(color=COLORS[c], label=CATEGORY_LABELS[c]) for c in seen]
    ax.legend(handles=handles, loc="upper right", fontsize=8)

def build_slide_image(
    result: CalculationResult,
    processor: str,
    width_px: int = 1920,
    height_px: int = 1080,
) -> bytes:
    fig_w = width_px / 100; fig_h = height_px / 100
    fig = plt.figure(figsize=(fig_w, fig_h), dpi=100); fig.patch.set_facecolor("white")

    # Title
    ax_title = plt.axes([0, 0.89, 1, 0.1]); ax_title.axis("off")
    ax_title.text(0.02, 0.65, "MRR vs Bank Account (Export)", fontsize=28, fontweight="bold", va="center")
    ax_title.text(0.02, 0.15, f"Reported MRR {format_currency(result.mrr)} • Processor {processor_display_name(processor)}",
                  fontsize=16, va="center")

    # Cards row
    ax_cards = plt.axes([0.03, 0.64, 0.94, 0.22]); ax_cards.axis("off")
    def card(ax, x, y, w, h, title, big, foot):
        ax.add_patch(plt.Rectangle((x, y), w, h, fill=False, linewidth=1.5))
        ax.text(x + 0.04*w, y + 0.72*h, title, fontsize=14, fontweight="bold", va="top")
        ax.text(x + 0.04*w, y + 0.45*h, big, fontsize=30, fontweight="bold", va="top")
        ax.text(x + 0.04*w, y + 0.12*h, foot, fontsize=12, va="top")

    card(ax_cards, 0.00, 0.05, 0.23, 0.9, "Reported MRR", format_currency(result.mrr), "Gross revenue")
    card(ax_cards, 0.255, 0.05, 0.23, 0.9, "Net to Bank", format_currency(result.net_to_bank), "Actual deposit")
    card(ax_cards, 0.51, 0.05, 0.23, 0.9, "Total Deductions", format_currency(result.total_gap), "Fees & Taxes")
    card(ax_cards, 0.765, 0.05, 0.23, 0.9, "Gap Rate", format_percent(result.gap_percent), "Revenue lost")

    # Waterfall
    ax_fall = plt.axes([0.06, 0.1, 0.5, 0.45])
    draw_waterfall(ax_fall, waterfall_steps(result))

    # Line items
    ax_items = plt.axes([0.62, 0.1, 0.35, 0.45]); ax_items.axis("off")
    ax_items.set_title("Detailed Breakdown", loc="left", fontsize=14, fontweight="bold")
    items = line_items(result, processor)
    if not items:
        ax_items.text(0.0, 0.9, "Enter MRR and select a processor to see breakdown", fontsize=12, va="top")
    for i, item in enumerate(items):
        y = 0.9 - i * 0.13
        ax_items.text(0.0, y, item.name, fontsize=12, va="top")
        ax_items.text(0.65, y, f"-{format_currency(item.amount)}", fontsize=12, va="top", ha="right")
        ax_items.text(1.0, y, format_percent(item.percentage), fontsize=12, va="top", ha="right")

    buf = io.BytesIO(); fig.savefig(buf, format="png", dpi=100, bbox_inches="tight"); plt.close(fig); buf.seek(0)
    return buf.getvalue()

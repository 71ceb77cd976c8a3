import matplotlib

matplotlib.use("Agg")

import pytest

from mrr_gap.calculator import CalculatorInput


@pytest.fixture
def make_input():
    """Build a CalculatorInput from the default sidebar values, overriding as needed."""
    def _make(**overrides):
        base = dict(mrr=10000.0, processor="stripe", refund_rate=2.0, chargeback_rate=0.5,
                    eu_uk_sales_percent=30.0, us_sales_percent=50.0, is_new_stripe_account=False)
        base.update(overrides)
        return CalculatorInput(**base)
    return _make

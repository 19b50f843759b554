from datetime import date, datetime

import pytest

from analytics.engine import assess_budget_health
from gst_core.models import Budget, BudgetPeriod, BudgetStatus, Receipt

MID_OCTOBER = date(2025, 10, 15)


def _budget(amount=1000, period=BudgetPeriod.MONTHLY, start=date(2025, 10, 1)):
    return Budget(id="b", household_id="h", name="Groceries", amount=amount, period=period,
                  start_date=start)


def _spent(total):
    return [Receipt(id="r", household_id="h", store_name="ICA", total_amount=total,
                    purchase_date=date(2025, 10, 5))]


def test_low_spend_is_excellent():
    h = assess_budget_health(_budget(), _spent(50), MID_OCTOBER)
    assert h.status == BudgetStatus.EXCELLENT
    assert h.recommendations == ["Great job staying under budget!"]
    assert h.projected_overspend == 0
    # Oct 1 00:00 .. Oct 31 end of day -> 31 days, 14 elapsed
    assert h.days_remaining == 17
    assert h.daily_budget_remaining == pytest.approx(950 / 17)
    assert h.spent_percentage == pytest.approx(5)
    assert h.progress_percentage == pytest.approx(14 / 31 * 100)


def test_overspend_is_critical():
    h = assess_budget_health(_budget(), _spent(1200), MID_OCTOBER)
    assert h.status == BudgetStatus.CRITICAL
    assert h.projected_overspend == pytest.approx(1200 / 14 * 31 - 1000)
    assert h.recommendations == [
        f"Reduce daily spending to {-200 / 17:.2f} or less",
        f"On track to exceed budget by {1200 / 14 * 31 - 1000:.2f}",
    ]


def test_on_pace_is_good():
    h = assess_budget_health(_budget(), _spent(450), MID_OCTOBER)
    assert h.status == BudgetStatus.GOOD
    assert h.recommendations == []


def test_ahead_of_pace_is_warning():
    h = assess_budget_health(_budget(), _spent(700), MID_OCTOBER)
    assert h.status == BudgetStatus.WARNING
    assert h.recommendations[0].startswith("Reduce daily spending to ")
    assert h.recommendations[1].startswith("On track to exceed budget by ")


def test_after_period_end_no_days_remain():
    h = assess_budget_health(_budget(), _spent(500), datetime(2025, 11, 20))
    assert h.days_remaining == 0
    assert h.daily_budget_remaining == 0


def test_at_period_start_nothing_elapsed():
    h = assess_budget_health(_budget(), [], date(2025, 10, 1))
    assert h.projected_overspend == 0
    assert h.progress_percentage == 0
    assert h.status == BudgetStatus.GOOD


def test_weekly_window_runs_sunday_to_saturday():
    # Wed 2025-10-08 -> window Sun 10-05 .. Sat 10-11
    h = assess_budget_health(
        _budget(amount=700, period=BudgetPeriod.WEEKLY, start=date(2025, 10, 8)),
        _spent(100),
        date(2025, 10, 8),
    )
    assert h.days_remaining == 4


def test_zero_budget_does_not_raise():
    h = assess_budget_health(_budget(amount=0), _spent(10), MID_OCTOBER)
    assert h.status == BudgetStatus.CRITICAL
    h = assess_budget_health(_budget(amount=0), [], MID_OCTOBER)
    assert h.spent_percentage == 0

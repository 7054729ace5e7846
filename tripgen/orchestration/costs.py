"""Daily incidental expense estimate."""

import math

DAILY_EXPENSE_FLOOR = 50
INCIDENTAL_SHARE = 0.3
BASELINE_DAYS = 7


def estimate_daily_expenses(budget: float) -> int:
    """Estimate daily incidentals as 30% of the budget spread over a 7-day baseline.

    The baseline does not depend on the actual trip length. Rounds half up
    and never returns less than DAILY_EXPENSE_FLOOR.
    """
    estimate = math.floor(budget * INCIDENTAL_SHARE / BASELINE_DAYS + 0.5)
    return max(DAILY_EXPENSE_FLOOR, estimate)

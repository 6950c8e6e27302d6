# ABOUTME: Deterministic time-budget splitting for connection attempts
# ABOUTME: All values are integer milliseconds
import math

# Floor applied to the total request before splitting
MIN_TOTAL_MS = 500

# Floor applied to every individual phase
MIN_PHASE_MS = 250

# Percentage of the total given to the first of two transport candidates
FIRST_ATTEMPT_PERCENT = 60


def split_timeout(total_ms: float, parts: int) -> list[int]:
    """Split a time budget into sequential phase budgets.

    ABOUTME: Total is floored at MIN_TOTAL_MS, each part at MIN_PHASE_MS
    ABOUTME: First element absorbs the rounding remainder so the sum is exact

    When the clamped total is smaller than parts * MIN_PHASE_MS the per-part
    floor wins and the sum exceeds the request.

    Args:
        total_ms: Requested total budget in milliseconds
        parts: Number of sequential phases (values below 1 count as 1)

    Returns:
        List of `parts` positive integer budgets

    Examples:
        >>> split_timeout(1001, 2)
        [501, 500]
        >>> split_timeout(100, 2)
        [250, 250]
    """
    clamped = max(MIN_TOTAL_MS, math.floor(total_ms))
    count = max(1, math.floor(parts))
    base = max(MIN_PHASE_MS, clamped // count)
    budgets = [base] * count
    budgets[0] += clamped - base * count
    return [max(MIN_PHASE_MS, budget) for budget in budgets]


def attempt_budgets(total_ms: float, attempts: int) -> list[int]:
    """Budget each outer transport attempt.

    A single candidate gets the whole budget. Two candidates share it 60/40,
    since a first transport that does not work usually fails immediately.
    Any other count is split evenly.

    Examples:
        >>> attempt_budgets(10000, 2)
        [6000, 4000]
    """
    total = math.floor(total_ms)
    if attempts <= 1:
        return [total]
    if attempts == 2:
        first = total * FIRST_ATTEMPT_PERCENT // 100
        return [max(MIN_TOTAL_MS, first), max(MIN_TOTAL_MS, total - first)]
    return [max(MIN_TOTAL_MS, total // attempts)] * attempts

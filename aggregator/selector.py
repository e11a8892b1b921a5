"""
Best-quote selection over a set of per-venue results.
"""
from typing import Optional, Sequence

from .types import AdapterResult, BestQuoteSelection


def calculate_savings_percent(best: int, worst: int) -> int:
    """
    Whole-percent gap between the best and worst output amounts.

    ((best - worst) * 10000 // worst) // 100, integer arithmetic only;
    a worst amount of zero yields 0 instead of dividing by zero.
    """
    if worst <= 0:
        return 0
    return ((best - worst) * 10000 // worst) // 100


def select_best_quote(results: Sequence[AdapterResult]) -> Optional[BestQuoteSelection]:
    """
    Pick the successful result with the highest output amount.

    Returns None when no venue produced a usable quote. Ties go to the
    earliest-registered venue (the sort is stable and results arrive in
    registration order).
    """
    successful = [r for r in results if r.success and r.output_amount is not None]
    if not successful:
        return None

    ranked = sorted(successful, key=lambda r: r.output_amount, reverse=True)
    best = ranked[0]
    worst = ranked[-1]

    savings = 0
    if len(ranked) > 1:
        savings = calculate_savings_percent(best.output_amount, worst.output_amount)

    return BestQuoteSelection(
        chosen=best,
        savings_percent=savings,
        compared_against=len(ranked),
    )

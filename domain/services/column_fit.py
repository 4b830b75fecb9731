from __future__ import annotations

import math
from collections.abc import Sequence

FIT_TOLERANCE = 0.5


def fit_column_widths(base_widths: Sequence[float], target_width: float) -> list[float]:
    """Stretch sibling column widths so that they fill ``target_width`` exactly.

    Widths that already cover the target (within ``FIT_TOLERANCE``) are returned
    unchanged, as are empty or zero-total column sets.
    """
    widths = list(base_widths)
    if not widths:
        return []
    base_total = sum(widths)
    if base_total <= 0 or target_width <= 0:
        return widths
    if base_total >= target_width - FIT_TOLERANCE:
        return widths

    fitted: list[float] = [math.floor(width / base_total * target_width) for width in widths]
    remainder = target_width - sum(fitted)
    index = 0
    while remainder > 0:
        fitted[index % len(fitted)] += 1
        remainder -= 1
        index += 1
    used = sum(fitted)
    if used != target_width:
        fitted[-1] += target_width - used
    return fitted

from __future__ import annotations

import math


def cents_to_dollars(cents: int | float | None) -> float | None:
    if cents is None or (isinstance(cents, float) and math.isnan(cents)):
        return None
    return round(cents / 100, 2)


def dollars_to_cents(dollars: int | float | None) -> int | None:
    if dollars is None or (isinstance(dollars, float) and math.isnan(dollars)):
        return None
    return int(round(dollars * 100))

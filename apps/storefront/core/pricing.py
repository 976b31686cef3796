"""Display price helpers shared by the cart, the catalog pipeline and the views.

Catalog prices arrive as display strings such as ``"₹1,999"``. These helpers
turn them into numbers for arithmetic and back into rupee strings using the
Indian digit grouping (``₹1,00,000``) with no decimal places.
"""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext

CURRENCY_SYMBOL = "₹"

_NON_NUMERIC = re.compile(r"[^0-9.\-]+")


def parse_price(display: object) -> float:
    """Strip everything but digits, ``.`` and ``-`` and parse the rest.

    Returns ``nan`` when nothing parseable is left; callers that do
    arithmetic should fall back to :func:`price_value`.
    """
    cleaned = _NON_NUMERIC.sub("", str(display))
    if not cleaned:
        return math.nan
    try:
        return float(cleaned)
    except ValueError:
        return math.nan


def price_value(display: object, default: float = 0.0) -> float:
    """Like :func:`parse_price` but never returns ``nan``."""
    value = parse_price(display)
    return default if math.isnan(value) else value


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_price(value: float) -> str:
    """Render ``value`` as a whole-rupee string, e.g. ``1999.5 -> "₹2,000"``."""
    if value is None or math.isnan(value) or math.isinf(value):
        value = 0
    exact = Decimal(str(value))
    with localcontext() as ctx:
        # quantize needs a digit of precision for every integer place
        ctx.prec = max(ctx.prec, exact.adjusted() + 2)
        rounded = exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(str(abs(int(rounded))))}"

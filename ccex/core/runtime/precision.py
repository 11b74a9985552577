# -*- coding: utf-8 -*-
# ccex/core/runtime/precision.py
# Per-pair decimal precision and truncating formatter.

import threading
from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

from ccex.core.kernel.errors import PrecisionUnknown
from ccex.core.kernel.models import Precisions, ZERO_PRECISIONS
from ccex.core.runtime.logger import get_logger

MAX_PRECISION = 18


def precision_of(literal):
    """
    Count the fractional digits of a numeric literal as written by the venue.

    '0.10000' -> 5, '12' -> 0, '1e-05' -> 5
    """
    text = str(literal).strip()
    if 'e' in text.lower():
        try:
            exponent = Decimal(text).as_tuple().exponent
        except InvalidOperation:
            return 0
        return max(0, -exponent)
    if '.' not in text:
        return 0
    return len(text.split('.', 1)[1])


def floor_format(value, precision):
    """
    Render `value` with exactly `precision` fractional digits, truncating toward
    zero. Never rounds up and never uses exponent notation.

    floor_format(12345.6789, 2) -> '12345.67'
    """
    if precision < 0:
        raise ValueError("precision must be >= 0")
    if isinstance(value, float):
        number = Decimal(repr(value))
    else:
        number = Decimal(str(value))
    with localcontext() as ctx:
        ctx.prec = 60
        truncated = number.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_DOWN)
    if truncated == 0:
        truncated = abs(truncated)
    return format(truncated, 'f')


def valid_precisions(price_precision, amount_precision):
    """Return Precisions when both values are in [0, 18], else None."""
    try:
        price_precision = int(price_precision)
        amount_precision = int(amount_precision)
    except (TypeError, ValueError):
        return None
    for p in (price_precision, amount_precision):
        if p < 0 or p > MAX_PRECISION:
            return None
    return Precisions(price_precision, amount_precision)


class PrecisionRegistry(object):
    """
    Lazily loaded {trading: {settlement: Precisions}} map.

    `loader` is called once, on first lookup; a loader failure propagates and
    the next lookup tries again.
    """

    def __init__(self, venue, loader):
        self.venue = venue
        self._loader = loader
        self._map = None
        self._lock = threading.Lock()
        self.logger = get_logger('precision.' + venue)

    def _table(self):
        with self._lock:
            if self._map is None:
                table = {}
                for trading, row in (self._loader() or {}).items():
                    for settlement, precisions in row.items():
                        if precisions is not None:
                            table.setdefault(trading, {})[settlement] = precisions
                self._map = table
                self.logger.debug("loaded precisions for %d assets", len(table))
            return self._map

    def precise(self, trading, settlement):
        if trading == settlement:
            return ZERO_PRECISIONS
        table = self._table()
        try:
            return table[trading][settlement]
        except KeyError:
            raise PrecisionUnknown("no precision for %s/%s" % (trading, settlement),
                                   venue=self.venue, operation='precise') from None

    def invalidate(self):
        with self._lock:
            self._map = None

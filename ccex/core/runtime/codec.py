# -*- coding: utf-8 -*-
# ccex/core/runtime/codec.py
# Symbol codec: (trading, settlement) <-> venue symbol.

from ccex.core.kernel.errors import UnknownPair
from ccex.core.kernel.models import CurrencyPair


class SymbolCodec(object):
    """
    Formats and parses venue symbols.

    Args:
        venue: venue name for error messages
        delimiter: '' for concatenated symbols such as 'ETHBTC', otherwise the
                   separator ('_', '-')
        lower: emit lower-case symbols
        settlement_first: venue writes SETTLEMENT<delim>TRADING (Poloniex)
        settlements: iterable of settlement codes, or a zero-argument callable
                     returning one; required to split concatenated symbols
    """

    def __init__(self, venue, delimiter='', lower=False, settlement_first=False, settlements=None):
        self.venue = venue
        self.delimiter = delimiter
        self.lower = lower
        self.settlement_first = settlement_first
        self._settlements = settlements

    def format(self, trading, settlement):
        first, second = (settlement, trading) if self.settlement_first else (trading, settlement)
        symbol = first + self.delimiter + second
        return symbol.lower() if self.lower else symbol.upper()

    def parse(self, symbol):
        """Return CurrencyPair(trading, settlement); UnknownPair when it cannot be split."""
        if not symbol:
            raise UnknownPair("empty symbol", venue=self.venue)
        text = symbol.upper()
        if self.delimiter:
            parts = text.split(self.delimiter.upper())
            if len(parts) != 2 or not parts[0] or not parts[1]:
                raise UnknownPair("cannot split symbol %s" % symbol, venue=self.venue)
            first, second = parts
        else:
            first, second = self._split_by_suffix(text, symbol)
        if self.settlement_first:
            return CurrencyPair(second, first)
        return CurrencyPair(first, second)

    def _split_by_suffix(self, text, symbol):
        # longest settlement that leaves a non-empty trading part
        best = None
        for settlement in self.settlements():
            code = settlement.upper()
            if len(code) < len(text) and text.endswith(code):
                if best is None or len(code) > len(best):
                    best = code
        if best is None:
            raise UnknownPair("no settlement matches symbol %s" % symbol, venue=self.venue)
        return text[:-len(best)], best

    def settlements(self):
        source = self._settlements
        if source is None:
            return []
        if callable(source):
            source = source()
        return list(source)

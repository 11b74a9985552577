# -*- coding: utf-8 -*-
# ccex/core/kernel/models.py
# Plain value types shared by every driver.

from collections import namedtuple
from enum import Enum

from ccex.core.kernel.errors import InsufficientDepth


class OrderType(Enum):
    """ASK is a buy-side intent, BID a sell-side intent."""
    ASK = 0
    BID = 1


CurrencyPair = namedtuple('CurrencyPair', ['trading', 'settlement'])

Precisions = namedtuple('Precisions', ['price_precision', 'amount_precision'])

TradeFee = namedtuple('TradeFee', ['maker_fee', 'taker_fee'])

Asset = namedtuple('Asset', ['name', 'symbol'])

BoardBar = namedtuple('BoardBar', ['type', 'price', 'amount'])


class OrderBookTick(namedtuple('OrderBookTick', ['best_ask_price', 'best_bid_price',
                                                 'best_ask_amount', 'best_bid_amount'])):
    __slots__ = ()

    def __new__(cls, best_ask_price, best_bid_price, best_ask_amount=0.0, best_bid_amount=0.0):
        return super(OrderBookTick, cls).__new__(cls, best_ask_price, best_bid_price,
                                                 best_ask_amount, best_bid_amount)


ZERO_PRECISIONS = Precisions(0, 0)


class Balance(object):
    def __init__(self, available=0.0, on_orders=0.0):
        self.available = available
        self.on_orders = on_orders

    def __eq__(self, other):
        if not isinstance(other, Balance):
            return NotImplemented
        return self.available == other.available and self.on_orders == other.on_orders

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self):
        return "Balance(available=%r, on_orders=%r)" % (self.available, self.on_orders)


class Order(object):
    def __init__(self, exchange_order_id, order_type, trading, settlement, price, amount):
        self.exchange_order_id = exchange_order_id
        self.type = order_type
        self.trading = trading
        self.settlement = settlement
        self.price = price
        self.amount = amount

    def __eq__(self, other):
        if not isinstance(other, Order):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self):
        return ("Order(id=%r, type=%s, %s/%s, price=%r, amount=%r)"
                % (self.exchange_order_id, self.type.name, self.trading,
                   self.settlement, self.price, self.amount))


class Board(object):
    """
    Order book snapshot.

    Asks are kept ascending by price, bids descending; levels with a
    non-positive price or amount are dropped on construction.
    """

    def __init__(self, asks=None, bids=None):
        self.asks = sorted(
            (BoardBar(OrderType.ASK, float(p), float(a)) for p, a in _levels(asks) if p > 0 and a > 0),
            key=lambda bar: bar.price)
        self.bids = sorted(
            (BoardBar(OrderType.BID, float(p), float(a)) for p, a in _levels(bids) if p > 0 and a > 0),
            key=lambda bar: bar.price, reverse=True)

    def best_bid_price(self):
        return self.bids[0].price if self.bids else 0.0

    def best_ask_price(self):
        return self.asks[0].price if self.asks else 0.0

    def best_bid_amount(self):
        return self.bids[0].amount if self.bids else 0.0

    def best_ask_amount(self):
        return self.asks[0].amount if self.asks else 0.0

    def average_bid_rate(self, amount):
        """Volume-weighted price received when selling `amount` into the bids."""
        return _average_rate(self.bids, amount)

    def average_ask_rate(self, amount):
        """Volume-weighted price paid when buying `amount` from the asks."""
        return _average_rate(self.asks, amount)

    def __repr__(self):
        return "Board(asks=%d levels, bids=%d levels)" % (len(self.asks), len(self.bids))


def _levels(rows):
    for row in rows or ():
        if isinstance(row, BoardBar):
            yield row.price, row.amount
        else:
            yield float(row[0]), float(row[1])


def _average_rate(bars, amount):
    if amount <= 0:
        raise ValueError("amount must be positive")
    rest = amount
    cost = 0.0
    for bar in bars:
        if rest <= bar.amount:
            cost += rest * bar.price
            return cost / amount
        cost += bar.amount * bar.price
        rest -= bar.amount
    raise InsufficientDepth("there is not enough board orders for amount %s" % amount)

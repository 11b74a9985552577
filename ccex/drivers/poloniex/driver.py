# -*- coding: utf-8 -*-
# ccex/drivers/poloniex/driver.py
# Poloniex driver. Pair keys are settlement first ('BTC_ETH' is ETH priced
# in BTC); every private call is a POST to /tradingApi with a `command`.

from ccex.core.kernel.errors import AuthFailure, UnknownPair
from ccex.core.kernel.models import Balance, Board, Order, OrderType, TradeFee
from ccex.core.runtime.base import PrivateDriver, PublicDriver, field, to_float
from ccex.core.runtime.precision import floor_format, precision_of, valid_precisions
from ccex.core.runtime.signing import PoloniexSigner

TRADING_API = '/tradingApi'
BOARD_DEPTH = 100
# returnOpenOrders reports the book side, not the side that was sent
OPEN_ORDER_TYPES = {'sell': OrderType.ASK, 'buy': OrderType.BID}


def _raise_for_error(driver, payload, method, path):
    if isinstance(payload, dict) and payload.get('error'):
        message = str(payload['error'])
        if 'API key' in message or 'Nonce' in message:
            raise AuthFailure(message, venue=driver.venue, operation=method, path=path)
        raise driver._venue_error(message, method, path, payload)
    return payload


def _is_set(value):
    return str(value) == '1'


class PoloniexPublic(PublicDriver):
    venue = 'poloniex'
    base_url = 'https://poloniex.com'
    symbol_delimiter = '_'
    settlement_first = True

    def _check(self, payload, method, path):
        return _raise_for_error(self, payload, method, path)

    def _command(self, command, **params):
        params['command'] = command
        return self._get('/public', params)

    def _tickers(self):
        for key, row in self._command('returnTicker').items():
            if row.get('last') is None or row.get('baseVolume') is None:
                continue
            try:
                pair = self.codec.parse(key)
            except UnknownPair:
                continue
            yield pair, row

    def _fetch_precisions(self):
        table = {}
        for pair, row in self._tickers():
            amount_literal = row.get('quoteVolume', row['baseVolume'])
            table.setdefault(pair.trading, {})[pair.settlement] = valid_precisions(
                precision_of(row['last']), precision_of(amount_literal))
        return table

    def _fetch_market(self):
        builder = self.new_builder()
        for pair, row in self._tickers():
            builder.add(pair.trading, pair.settlement,
                        to_float(row['last'], 'last', self.venue),
                        to_float(row['baseVolume'], 'baseVolume', self.venue),
                        to_float(row.get('lowestAsk') or 0), to_float(row.get('highestBid') or 0))
        return builder.build()

    def _fetch_board(self, trading, settlement):
        payload = self._command('returnOrderBook', currencyPair=self.symbol(trading, settlement),
                                depth=BOARD_DEPTH)
        return Board(asks=[row[:2] for row in field(payload, 'asks', venue=self.venue)],
                     bids=[row[:2] for row in field(payload, 'bids', venue=self.venue)])

    def currencies(self):
        return self._command('returnCurrencies')

    def _fetch_frozen(self):
        return [asset for asset, row in self.currencies().items()
                if _is_set(row.get('frozen')) or _is_set(row.get('delisted')) or _is_set(row.get('disabled'))]


class PoloniexPrivate(PrivateDriver):
    venue = 'poloniex'
    public_class = PoloniexPublic
    signer_class = PoloniexSigner
    buy_side = 'buy'
    sell_side = 'sell'

    def _check(self, payload, method, path):
        return _raise_for_error(self, payload, method, path)

    def _command(self, command, **params):
        params['command'] = command
        return self._call('POST', TRADING_API, params)

    def trade_fee_rate(self, trading, settlement):
        payload = self._command('returnFeeInfo')
        return TradeFee(to_float(field(payload, 'makerFee', venue=self.venue), 'makerFee', self.venue),
                        to_float(field(payload, 'takerFee', venue=self.venue), 'takerFee', self.venue))

    def trade_fee_rates(self):
        # account wide; one call covers every pair
        fee = self.trade_fee_rate(None, None)
        rates = {}
        for pair in self.public.currency_pairs():
            rates.setdefault(pair.trading, {})[pair.settlement] = fee
        return rates

    def transfer_fee(self):
        return {asset: to_float(row['txFee'], 'txFee', self.venue)
                for asset, row in self.public.currencies().items() if row.get('txFee') is not None}

    def balances(self):
        return {asset: to_float(value, asset, self.venue)
                for asset, value in self._command('returnBalances').items()}

    def complete_balances(self):
        balances = {}
        for asset, row in self._command('returnCompleteBalances').items():
            balances[asset] = Balance(to_float(row.get('available', 0), 'available', self.venue),
                                      to_float(row.get('onOrders', 0), 'onOrders', self.venue))
        return balances

    def order(self, trading, settlement, order_type, price, amount):
        price_text, amount_text = self.format_order(trading, settlement, price, amount)
        payload = self._command(self.side(order_type), currencyPair=self.symbol(trading, settlement),
                                rate=price_text, amount=amount_text)
        order_id = str(field(payload, 'orderNumber', venue=self.venue))
        if not order_id.isdigit() or int(order_id) <= 0:
            raise self._venue_error("invalid order number %s" % order_id, 'POST', TRADING_API, payload)
        return order_id

    def _cancel(self, order_id, trading, settlement, order_type):
        payload = self._command('cancelOrder', orderNumber=order_id)
        if not _is_set(payload.get('success')):
            raise self._venue_error("cancel order failed", 'POST', TRADING_API, payload)

    def active_orders(self):
        orders = []
        for key, rows in self._command('returnOpenOrders', currencyPair='all').items():
            if not rows:
                continue
            try:
                pair = self.public.codec.parse(key)
            except UnknownPair:
                continue
            for row in rows:
                order_type = OPEN_ORDER_TYPES.get(row.get('type'))
                if order_type is None:
                    continue
                orders.append(Order(str(row['orderNumber']), order_type, pair.trading, pair.settlement,
                                    to_float(row.get('rate', 0)), to_float(row.get('amount', 0))))
        return orders

    def transfer(self, asset, address, amount, additional_fee=0.0):
        payload = self._command('withdraw', currency=asset, address=address, amount=floor_format(amount, 8))
        if not payload.get('response'):
            raise self._venue_error("invalid withdraw response", 'POST', TRADING_API, payload)

    def address(self, asset):
        payload = self._command('returnDepositAddresses')
        return str(field(payload, asset, venue=self.venue))

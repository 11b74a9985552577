# -*- coding: utf-8 -*-
# ccex/drivers/hitbtc/driver.py
# HitBTC API v2 driver. Symbols are concatenated ('ETHBTC') and split by
# settlement suffix.

from ccex.core.kernel.errors import AuthFailure, UnknownPair
from ccex.core.kernel.models import Balance, Board, CurrencyPair, Order, TradeFee
from ccex.core.runtime.base import PrivateDriver, PublicDriver, error_payload, field, to_float
from ccex.core.runtime.precision import floor_format, precision_of, valid_precisions
from ccex.core.runtime.signing import BasicAuthSigner

AUTH_ERROR_CODES = (1001, 1002, 1003, 1004)
ORDER_NOT_FOUND = 20002
CLOSED_STATUSES = ('filled', 'canceled', 'expired')


def _raise_for_error(driver, payload, method, path):
    if isinstance(payload, dict) and isinstance(payload.get('error'), dict):
        error = payload['error']
        message = str(error.get('message', 'error'))
        if error.get('code') in AUTH_ERROR_CODES:
            raise AuthFailure(message, venue=driver.venue, operation=method, path=path)
        raise driver._venue_error(message, method, path, payload)
    return payload


class HitbtcPublic(PublicDriver):
    venue = 'hitbtc'
    base_url = 'https://api.hitbtc.com'

    def _check(self, payload, method, path):
        return _raise_for_error(self, payload, method, path)

    def symbols(self):
        """Raw /api/2/public/symbol rows."""
        return self._get('/api/2/public/symbol')

    def _fetch_pairs(self):
        return [CurrencyPair(row['baseCurrency'], row['quoteCurrency']) for row in self.symbols()]

    def _tickers(self):
        for row in self._get('/api/2/public/ticker'):
            if row.get('last') is None or row.get('volume') is None:
                continue
            try:
                pair = self.codec.parse(row['symbol'])
            except UnknownPair:
                continue
            yield pair, row

    def _fetch_precisions(self):
        table = {}
        for pair, row in self._tickers():
            table.setdefault(pair.trading, {})[pair.settlement] = valid_precisions(
                precision_of(row['last']), precision_of(row['volume']))
        return table

    def _fetch_market(self):
        builder = self.new_builder()
        for pair, row in self._tickers():
            builder.add(pair.trading, pair.settlement,
                        to_float(row['last'], 'last', self.venue),
                        to_float(row['volume'], 'volume', self.venue),
                        to_float(row.get('ask') or 0), to_float(row.get('bid') or 0))
        return builder.build()

    def _fetch_board(self, trading, settlement):
        payload = self._get('/api/2/public/orderbook/' + self.symbol(trading, settlement))
        return Board(asks=[(level['price'], level['size']) for level in payload.get('ask', [])],
                     bids=[(level['price'], level['size']) for level in payload.get('bid', [])])

    def currencies(self):
        return self._get('/api/2/public/currency')

    def _fetch_frozen(self):
        return [row['id'] for row in self.currencies()
                if row.get('payinEnabled') is False or row.get('payoutEnabled') is False]


class HitbtcPrivate(PrivateDriver):
    venue = 'hitbtc'
    public_class = HitbtcPublic
    signer_class = BasicAuthSigner
    buy_side = 'buy'
    sell_side = 'sell'

    def _check(self, payload, method, path):
        return _raise_for_error(self, payload, method, path)

    def trade_fee_rates(self):
        rates = {}
        for row in self.public.symbols():
            rates.setdefault(row['baseCurrency'], {})[row['quoteCurrency']] = TradeFee(
                to_float(row.get('provideLiquidityRate', 0), 'provideLiquidityRate', self.venue),
                to_float(row.get('takeLiquidityRate', 0), 'takeLiquidityRate', self.venue))
        return rates

    def trade_fee_rate(self, trading, settlement):
        try:
            return self.trade_fee_rates()[trading][settlement]
        except KeyError:
            raise UnknownPair("no fee for %s/%s" % (trading, settlement),
                              venue=self.venue, operation='trade_fee_rate') from None

    def transfer_fee(self):
        return {row['id']: to_float(row['payoutFee'], 'payoutFee', self.venue)
                for row in self.public.currencies() if row.get('payoutFee') is not None}

    def complete_balances(self):
        balances = {}
        for row in self._call('GET', '/api/2/trading/balance'):
            balances[row['currency']] = Balance(to_float(row.get('available', 0)),
                                                to_float(row.get('reserved', 0)))
        return balances

    def order(self, trading, settlement, order_type, price, amount):
        price_text, amount_text = self.format_order(trading, settlement, price, amount)
        params = {
            'symbol': self.symbol(trading, settlement),
            'side': self.side(order_type),
            'type': 'limit',
            'quantity': amount_text,
            'price': price_text,
        }
        payload = self._call('POST', '/api/2/order', params)
        return str(field(payload, 'clientOrderId', venue=self.venue))

    def _cancel(self, order_id, trading, settlement, order_type):
        self._call('DELETE', '/api/2/order/' + order_id)

    def _already_absent(self, error):
        payload = error_payload(error)
        return field(payload, 'error', 'code', default=None) == ORDER_NOT_FOUND

    def is_order_filled(self, order_id, trading=None, settlement=None):
        rows = self._call('GET', '/api/2/history/order', {'clientOrderId': order_id})
        return any(row.get('status') in CLOSED_STATUSES for row in rows)

    def active_orders(self):
        orders = []
        for row in self._call('GET', '/api/2/order'):
            try:
                pair = self.public.codec.parse(row['symbol'])
            except UnknownPair:
                continue
            orders.append(Order(str(row['clientOrderId']), self.order_type_of(row.get('side')),
                                pair.trading, pair.settlement,
                                to_float(row.get('price', 0)), to_float(row.get('quantity', 0))))
        return orders

    def transfer(self, asset, address, amount, additional_fee=0.0):
        params = {'currency': asset, 'amount': floor_format(amount, 8), 'address': address}
        if additional_fee:
            params['networkFee'] = floor_format(additional_fee, 8)
        payload = self._call('POST', '/api/2/account/crypto/withdraw', params)
        if not field(payload, 'id', default=None):
            raise self._venue_error("withdraw not accepted", 'POST',
                                    '/api/2/account/crypto/withdraw', payload)

    def address(self, asset):
        payload = self._call('GET', '/api/2/account/crypto/address/' + asset)
        return str(field(payload, 'address', venue=self.venue))

# -*- coding: utf-8 -*-
# ccex/drivers/kucoin/driver.py
# KuCoin v1 driver.

from ccex.core.kernel.errors import AuthFailure
from ccex.core.kernel.models import Balance, Board, CurrencyPair, Order, TradeFee
from ccex.core.runtime.base import PrivateDriver, PublicDriver, field, to_float
from ccex.core.runtime.precision import floor_format, valid_precisions
from ccex.core.runtime.signing import KucoinSigner

SETTLEMENTS = ['BTC', 'ETH', 'NEO', 'USDT', 'KCS']
USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/70.0.3538.77 Safari/537.36'
BALANCE_PAGE_SIZE = 20
BALANCE_MAX_PAGE = 19
ORDER_ID_INDEX = 5


def raise_for_success(driver, payload, method, path):
    if isinstance(payload, dict) and payload.get('success') is False:
        message = "%s: %s" % (payload.get('code'), payload.get('msg', ''))
        if payload.get('code') == 'UNAUTH':
            raise AuthFailure(message, venue=driver.venue, operation=method, path=path)
        raise driver._venue_error(message, method, path, payload)
    return payload


class KucoinPublic(PublicDriver):
    venue = 'kucoin'
    base_url = 'https://api.kucoin.com'
    symbol_delimiter = '-'
    default_headers = {'User-Agent': USER_AGENT}

    def _check(self, payload, method, path):
        return raise_for_success(self, payload, method, path)

    def settlements(self):
        return list(SETTLEMENTS)

    def ticks(self):
        """Raw /v1/open/tick rows."""
        return field(self._get('/v1/open/tick'), 'data', venue=self.venue)

    def coins(self):
        """Raw /v1/market/open/coins rows."""
        return field(self._get('/v1/market/open/coins'), 'data', venue=self.venue)

    def _fetch_pairs(self):
        return [CurrencyPair(row['coinType'], row['coinTypePair']) for row in self.ticks()]

    def _fetch_precisions(self):
        coin_precision = {row['coin']: row.get('tradePrecision') for row in self.coins()}
        table = {}
        for row in self.ticks():
            trading, settlement = row['coinType'], row['coinTypePair']
            table.setdefault(trading, {})[settlement] = valid_precisions(
                coin_precision.get(settlement), coin_precision.get(trading))
        return table

    def _fetch_market(self):
        builder = self.new_builder()
        for row in self.ticks():
            if row.get('lastDealPrice') is None:
                continue
            builder.add(row['coinType'], row['coinTypePair'],
                        to_float(row['lastDealPrice'], 'lastDealPrice', self.venue),
                        to_float(row.get('vol', 0), 'vol', self.venue),
                        to_float(row.get('sell') or 0), to_float(row.get('buy') or 0))
        return builder.build()

    def _fetch_board(self, trading, settlement):
        payload = self._get('/v1/open/orders', {'symbol': self.symbol(trading, settlement), 'group': 1})
        data = field(payload, 'data', venue=self.venue)
        return Board(asks=[row[:2] for row in data.get('SELL') or []],
                     bids=[row[:2] for row in data.get('BUY') or []])

    def _fetch_frozen(self):
        return [row['coin'] for row in self.coins()
                if row.get('enableWithdraw') is False or row.get('enableDeposit') is False]


class KucoinPrivate(PrivateDriver):
    venue = 'kucoin'
    public_class = KucoinPublic
    signer_class = KucoinSigner

    def _check(self, payload, method, path):
        return raise_for_success(self, payload, method, path)

    def trade_fee_rates(self):
        rates = {}
        for row in self.public.ticks():
            rate = to_float(row.get('feeRate', 0), 'feeRate', self.venue)
            rates.setdefault(row['coinType'], {})[row['coinTypePair']] = TradeFee(rate, rate)
        return rates

    def trade_fee_rate(self, trading, settlement):
        return field(self.trade_fee_rates(), trading, settlement, venue=self.venue)

    def transfer_fee(self):
        return {row['coin'].upper(): to_float(row['withdrawMinFee'], 'withdrawMinFee', self.venue)
                for row in self.public.coins() if row.get('withdrawMinFee') is not None}

    def complete_balances(self):
        balances = {}
        for page in range(1, BALANCE_MAX_PAGE + 1):
            payload = self._call('GET', '/v1/account/balances', {'limit': BALANCE_PAGE_SIZE, 'page': page})
            rows = field(payload, 'data', 'datas', venue=self.venue)
            for row in rows:
                total = to_float(row.get('balance', 0), 'balance', self.venue)
                freeze = to_float(row.get('freezeBalance', 0), 'freezeBalance', self.venue)
                balances[row['coinType']] = Balance(total - freeze, freeze)
            if len(rows) < BALANCE_PAGE_SIZE:
                break
        return balances

    def complete_balance(self, asset):
        payload = self._call('GET', '/v1/account/%s/balance' % asset, {'coin': asset})
        data = field(payload, 'data', venue=self.venue)
        total = to_float(data.get('balance', 0), 'balance', self.venue)
        freeze = to_float(data.get('freezeBalance', 0), 'freezeBalance', self.venue)
        return Balance(total - freeze, freeze)

    def order(self, trading, settlement, order_type, price, amount):
        price_text, amount_text = self.format_order(trading, settlement, price, amount)
        params = {
            'type': self.side(order_type),
            'price': price_text,
            'amount': amount_text,
            'symbol': self.symbol(trading, settlement),
        }
        payload = self._call('POST', '/v1/order', params)
        return str(field(payload, 'data', 'orderOid', venue=self.venue))

    def _cancel(self, order_id, trading, settlement, order_type):
        self.require_pair(trading, settlement)
        params = {'symbol': self.symbol(trading, settlement), 'orderOid': order_id}
        if order_type is not None:
            params['type'] = self.side(order_type)
        self._call('POST', '/v1/cancel-order', params)

    def _active_orders(self, pair):
        payload = self._call('GET', '/v1/order/active', {'symbol': self.symbol(pair.trading, pair.settlement)})
        data = field(payload, 'data', venue=self.venue)
        orders = []
        for side in (self.buy_side, self.sell_side):
            for row in data.get(side) or []:
                orders.append(Order(str(row[ORDER_ID_INDEX]), self.order_type_of(side),
                                    pair.trading, pair.settlement, to_float(row[2]), to_float(row[3])))
        return orders

    def active_orders(self):
        # only pairs touching an asset with funds on hold can have open orders
        held = set(asset for asset, balance in self.complete_balances().items() if balance.on_orders > 0)
        orders = []
        for pair in self.public.currency_pairs():
            if pair.trading in held or pair.settlement in held:
                orders.extend(self._active_orders(pair))
        return orders

    def is_order_filled(self, order_id, trading=None, settlement=None):
        if trading and settlement:
            orders = self._active_orders(CurrencyPair(trading, settlement))
        else:
            orders = self.active_orders()
        return all(order.exchange_order_id != order_id for order in orders)

    def transfer(self, asset, address, amount, additional_fee=0.0):
        params = {'coin': asset, 'address': address, 'amount': floor_format(amount, 8)}
        self._call('POST', '/v1/account/%s/withdraw/apply' % asset, params)

    def address(self, asset):
        payload = self._call('GET', '/v1/account/%s/wallet/address' % asset)
        return str(field(payload, 'data', 'address', venue=self.venue))

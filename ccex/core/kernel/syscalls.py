# -*- coding: utf-8 -*-
# ccex/core/kernel/syscalls.py
# Venue-neutral capability contracts.
# Plain base classes with NotImplementedError; drivers override what they support.

from ccex.core.kernel.models import OrderType


class PublicSyscalls(object):
    # ---- Ref-data / meta ----
    def currency_pairs(self):
        """Return a list of CurrencyPair for every pair listed by the venue"""
        raise NotImplementedError

    def settlements(self):
        """Return the deduplicated settlement assets, e.g. ['BTC', 'USDT']"""
        raise NotImplementedError

    def frozen_currency(self):
        """Return asset codes whose deposit or withdrawal is currently disabled"""
        raise NotImplementedError

    def precise(self, trading, settlement):
        """Return Precisions(price_precision, amount_precision) for one pair
           :param trading: traded asset, e.g. 'ETH'
           :param settlement: pricing asset, e.g. 'BTC'
        """
        raise NotImplementedError

    # ---- Market data ----
    def rate(self, trading, settlement):
        """Return last trade price (float); 1 when trading == settlement"""
        raise NotImplementedError

    def volume(self, trading, settlement):
        """Return 24h volume (float)"""
        raise NotImplementedError

    def rate_map(self):
        """Return {trading: {settlement: rate}} from the current snapshot"""
        raise NotImplementedError

    def volume_map(self):
        """Return {trading: {settlement: volume}} from the current snapshot"""
        raise NotImplementedError

    def order_book_tick(self, trading, settlement):
        """Return the OrderBookTick of one pair from the current snapshot"""
        raise NotImplementedError

    def order_book_tick_map(self):
        """Return {trading: {settlement: OrderBookTick}} from the current snapshot"""
        raise NotImplementedError

    def board(self, trading, settlement):
        """Return a Board (asks ascending, bids descending)
           :param trading: traded asset
           :param settlement: pricing asset
        """
        raise NotImplementedError


class PrivateSyscalls(object):
    # ---- Fees ----
    def trade_fee_rate(self, trading, settlement):
        """Return TradeFee(maker_fee, taker_fee) for one pair"""
        raise NotImplementedError

    def trade_fee_rates(self):
        """Return {trading: {settlement: TradeFee}}"""
        raise NotImplementedError

    def transfer_fee(self):
        """Return {asset: withdrawal fee}"""
        raise NotImplementedError

    # ---- Account ----
    def balances(self):
        """Return {asset: available}"""
        raise NotImplementedError

    def complete_balances(self):
        """Return {asset: Balance(available, on_orders)}"""
        raise NotImplementedError

    def complete_balance(self, asset):
        """Return the Balance of one asset (zero balance when unlisted)"""
        raise NotImplementedError

    # ---- Trading ----
    def order(self, trading, settlement, order_type, price, amount):
        """Place a limit order, return the venue order id
           :param trading: traded asset
           :param settlement: pricing asset
           :param order_type: OrderType.ASK (buy) or OrderType.BID (sell)
           :param price: limit price, floored to the pair's price precision
           :param amount: quantity, floored to the pair's amount precision
        """
        raise NotImplementedError

    def cancel_order(self, order_id, trading=None, settlement=None, order_type=None):
        """Cancel an order. An order that is already gone is not an error
           :param order_id: venue order id returned by order()
           :param trading: pair context, required by some venues
           :param settlement: pair context, required by some venues
           :param order_type: side context, required by some venues
        """
        raise NotImplementedError

    def is_order_filled(self, order_id, trading=None, settlement=None):
        """Return True when the order is no longer open"""
        raise NotImplementedError

    def active_orders(self):
        """Return a list of open Order records"""
        raise NotImplementedError

    # ---- Funds ----
    def transfer(self, asset, address, amount, additional_fee=0.0):
        """Request a withdrawal; returns once the venue accepted it
           :param asset: asset code, e.g. 'BTC'
           :param address: destination address
           :param amount: amount to withdraw
           :param additional_fee: extra fee for venues that take one
        """
        raise NotImplementedError

    def address(self, asset):
        """Return the deposit address of an asset"""
        raise NotImplementedError

    # ---- Convenience methods ----
    def buy(self, trading, settlement, price, amount):
        """Convenience method for a buy-side limit order (OrderType.ASK)"""
        return self.order(trading, settlement, OrderType.ASK, price, amount)

    def sell(self, trading, settlement, price, amount):
        """Convenience method for a sell-side limit order (OrderType.BID)"""
        return self.order(trading, settlement, OrderType.BID, price, amount)

#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# scripts/ccex_probe.py
# Print rate / volume / board top for one venue and pair, and optionally the
# account balances configured in configs/account.yaml.
#
#   python scripts/ccex_probe.py binance ETH BTC
#   python scripts/ccex_probe.py poloniex ETH BTC --balances --account main

import argparse
import sys
import time

from ccex import CcexError, new_private_client, new_public_client
from ccex.core.runtime.logger import configure_logging, get_logger
from configs.account_reader import AccountReader
from configs.config_reader import ConfigReader


def _timed(fn, *args):
    start = time.time()
    result = fn(*args)
    return result, int((time.time() - start) * 1000)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Probe a venue through ccex")
    parser.add_argument('venue', help="venue name, e.g. binance")
    parser.add_argument('trading', help="trading asset, e.g. ETH")
    parser.add_argument('settlement', help="settlement asset, e.g. BTC")
    parser.add_argument('--balances', action='store_true', help="also print account balances")
    parser.add_argument('--account', default='main', help="account name in account.yaml")
    parser.add_argument('--config-dir', default=None, help="directory holding ccex.yaml / account.yaml")
    parser.add_argument('--log-dir', default=None, help="write logs here instead of logging.log_dir in ccex.yaml")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logger = get_logger('probe')

    reader = ConfigReader(args.config_dir)
    try:
        configure_logging(reader.get_logging(), log_dir=args.log_dir)
        settings = reader.get_venue_settings(args.venue)
    except FileNotFoundError:
        configure_logging({}, log_dir=args.log_dir)
        settings = {}

    trading, settlement = args.trading.upper(), args.settlement.upper()
    try:
        public = new_public_client(args.venue, **settings)
        rate, ms = _timed(public.rate, trading, settlement)
        print(f"{args.venue} {trading}/{settlement} rate: {rate} ({ms}ms)")
        print(f"{args.venue} {trading}/{settlement} volume: {public.volume(trading, settlement)}")
        tick = public.order_book_tick(trading, settlement)
        age = time.time() - public.market.last_updated
        print(f"tick: ask {tick.best_ask_price} x {tick.best_ask_amount}, "
              f"bid {tick.best_bid_price} x {tick.best_bid_amount} (snapshot {age:.1f}s old)")
        board, ms = _timed(public.board, trading, settlement)
        print(f"board: best ask {board.best_ask_price()} x {board.best_ask_amount()}, "
              f"best bid {board.best_bid_price()} x {board.best_bid_amount()} ({ms}ms)")

        if args.balances:
            key_fn, secret_fn = AccountReader(args.config_dir).key_functions(args.venue, args.account)
            private = new_private_client(args.venue, key_fn, secret_fn, public=public)
            for asset, balance in sorted(private.complete_balances().items()):
                if balance.available or balance.on_orders:
                    print(f"  {asset}: available {balance.available}, on orders {balance.on_orders}")
    except CcexError as e:
        logger.error(f"probe failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
